# -*- coding: utf-8 -*-
"""
Caption Provider 基礎類別

Provider 是單一 VLM 後端的包裝：組 request、送出、解串流。
命名規範: vlm_來源_local或api.py

每個 Provider 只在以下幾點不同：
- request 內容 (build_payload)
- 認證 header (build_headers)
- 串流格式 (stream_mode，None 表示不串流)
- 回應文字欄位 (extract_text / extract_fragment)
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterator, List, Optional

import requests

from tagmeister.core.dataclasses import ModelInfo, ProviderConfig, ProviderKind
from tagmeister.core.errors import (
    ConfigurationError,
    ProviderError,
    ResponseFormatError,
    error_for_status,
)
from tagmeister.core.settings import get_prompt_text
from tagmeister.utils.parsing import COMMA_JOIN
from tagmeister.utils.stream_decoder import StreamDecoder, StreamMode


DEFAULT_MAX_TOKENS = 300


class BaseCaptionProvider(ABC):
    """
    Caption Provider 抽象基礎類別

    子類別實作 build_payload / build_headers / endpoint_url / extract_text，
    stream_caption 與 generate_caption 由基礎類別提供。
    每次呼叫只送出一個 HTTP request。
    """

    # Metadata (子類別需覆寫)
    kind: ProviderKind = ProviderKind.OPENAI
    display_name: str = "Base Provider"
    punctuation_mode: str = COMMA_JOIN
    stream_mode: Optional[StreamMode] = None
    default_config: Dict = {}

    def __init__(self,
                 config: Optional[ProviderConfig] = None,
                 session: Optional[requests.Session] = None,
                 max_tokens: int = DEFAULT_MAX_TOKENS,
                 timeout: Optional[float] = None):
        """
        Args:
            config: 連線資訊 (API Key 或 base_url)，多個 Provider 可共用
            session: requests.Session，測試時可替換
            max_tokens: 回應長度上限
            timeout: 單一 request 逾時秒數，None 表示不設
        """
        self.config = config or ProviderConfig(kind=self.kind)
        if not self.config.base_url and self.default_config.get("base_url"):
            self.config.base_url = self.default_config["base_url"]
        self.session = session or requests.Session()
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.on_stream_error: Callable[[str], None] = self._print_stream_error

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider 唯一識別名 (system name)"""
        pass

    @classmethod
    def is_available(cls) -> bool:
        return True

    @property
    def base_url(self) -> str:
        return (self.config.base_url or "").rstrip("/")

    # ============================================================
    # 子類別實作
    # ============================================================

    @abstractmethod
    def endpoint_url(self) -> str:
        pass

    @abstractmethod
    def build_headers(self) -> Dict[str, str]:
        pass

    @abstractmethod
    def build_payload(self, image_path: str, model_id: str, prompt: str, stream: bool) -> Dict:
        """組出 request JSON (圖片在這裡編碼)"""
        pass

    @abstractmethod
    def extract_text(self, data: Dict) -> Optional[str]:
        """非串流回應的文字欄位"""
        pass

    def extract_fragment(self, record: Dict) -> Optional[str]:
        """串流記錄的文字欄位"""
        return None

    # ============================================================
    # 連線檢查 (本機伺服器覆寫)
    # ============================================================

    def check_connection(self) -> bool:
        return self.config.has_credentials()

    def fetch_models(self) -> List[ModelInfo]:
        return list(self.config.models)

    # ============================================================
    # 生成
    # ============================================================

    def ensure_credentials(self):
        if self.config.has_credentials():
            return
        if self.kind.is_local:
            raise ConfigurationError(f"{self.display_name} server URL is not configured.")
        raise ConfigurationError(f"{self.display_name} API key is not set.")

    def stream_caption(self, image_path: str, model_id: str, prompt_style, stream: bool = True) -> Iterator[str]:
        """
        逐段產生 caption 文字。

        不支援串流的 Provider 只會 yield 一次完整文字。
        提早關閉 generator 會一併關閉 HTTP 回應。
        """
        self.ensure_credentials()
        prompt = get_prompt_text(prompt_style)
        use_stream = bool(stream and self.stream_mode is not None)
        payload = self.build_payload(image_path, model_id, prompt, use_stream)

        with self._post(payload, use_stream) as response:
            self._check_status(response)
            if use_stream:
                decoder = StreamDecoder(self.stream_mode, self.extract_fragment, on_error=self.on_stream_error)
                try:
                    for fragment in decoder.iter_fragments(response.iter_content(chunk_size=None)):
                        yield fragment
                except requests.RequestException as e:
                    raise ProviderError(f"{self.display_name} stream interrupted: {e}") from e
            else:
                text = self.extract_text(self._read_json(response))
                if not isinstance(text, str):
                    raise ResponseFormatError(f"No text content in {self.display_name} response")
                yield text

    def generate_caption(self, image_path: str, model_id: str, prompt_style,
                         on_chunk: Optional[Callable[[str], None]] = None) -> str:
        """
        生成單張圖片的 caption。

        有 on_chunk 時使用串流，片段依到達順序送出；
        回傳值等於所有片段相接。
        """
        parts = []
        fragments = self.stream_caption(image_path, model_id, prompt_style, stream=on_chunk is not None)
        try:
            for fragment in fragments:
                parts.append(fragment)
                if on_chunk:
                    on_chunk(fragment)
        finally:
            fragments.close()
        return "".join(parts)

    # ============================================================
    # 內部方法
    # ============================================================

    def _post(self, payload: Dict, stream: bool):
        url = self.endpoint_url()
        try:
            return self.session.post(
                url,
                json=payload,
                headers=self.build_headers(),
                stream=stream,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"{self.display_name} request failed: {e}") from e

    def _check_status(self, response):
        status = response.status_code
        if 200 <= status < 300:
            return
        try:
            body = response.text
        except requests.RequestException:
            body = ""
        raise error_for_status(status, body, self.display_name)

    def _read_json(self, response) -> Dict:
        try:
            data = response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Invalid JSON from {self.display_name}: {e}") from e
        if not isinstance(data, dict):
            raise ResponseFormatError(f"Unexpected {self.display_name} response: {data!r}")
        return data

    def _print_stream_error(self, message: str):
        print(f"[{self.display_name}] {message}")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name='{self.name}'>"
