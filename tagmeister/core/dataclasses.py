# -*- coding: utf-8 -*-
"""
核心資料結構

定義應用程式使用的核心 dataclass：
- ImageFile: 資料夾掃描得到的圖片 (不可變)
- CaptionStore: 圖片路徑 → 目前 caption
- ProcessingState: 批次進度與中止旗標
- ProviderConfig: 每個 Provider 的連線資訊
- Settings: 應用程式設定
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, List, Iterator
from pathlib import Path


class PromptStyle(Enum):
    """提示詞風格 (value 為 UI 顯示的名稱)"""
    NATURAL_LANGUAGE = "FLUX (Natural Language)"
    BOORU_TAGS = "SDXL (Booru Tags)"

    @classmethod
    def from_value(cls, value) -> "PromptStyle":
        """接受 enum、顯示名稱或成員名稱，其餘一律視為自然語言"""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for style in cls:
            if text == style.value or text.upper() == style.name:
                return style
        return cls.NATURAL_LANGUAGE


class ProviderKind(Enum):
    """Provider 種類"""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    LMSTUDIO = "lmstudio"
    OLLAMA = "ollama"

    @property
    def is_local(self) -> bool:
        return self in (ProviderKind.LMSTUDIO, ProviderKind.OLLAMA)


class BatchState(Enum):
    """BatchController 狀態"""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


@dataclass(frozen=True)
class ImageFile:
    """
    圖片檔案

    資料夾掃描時建立，路徑即為唯一識別。
    """
    path: str
    display_name: str

    @classmethod
    def from_path(cls, path: str) -> "ImageFile":
        return cls(path=path, display_name=Path(path).name)

    @property
    def stem(self) -> str:
        """不含副檔名的檔案名稱"""
        return Path(self.path).stem


@dataclass(frozen=True)
class DirectoryEntry:
    """資料夾列表的單一項目"""
    name: str
    path: str
    is_dir: bool
    size: int = 0


@dataclass(frozen=True)
class ModelInfo:
    """本機伺服器回報的模型"""
    id: str
    name: str


@dataclass
class EncodedImage:
    """base64 圖片與其 media type"""
    base64: str
    media_type: str


class CaptionStore:
    """
    圖片路徑 → caption 文字

    BatchController 生成時與使用者編輯時都會修改；
    儲存時寫入每張圖片的 .txt sidecar。
    """

    def __init__(self, captions: Optional[Dict[str, str]] = None):
        self._captions: Dict[str, str] = dict(captions or {})

    def get(self, path: str, default: str = "") -> str:
        return self._captions.get(path, default)

    def set(self, path: str, caption: str):
        self._captions[path] = caption

    def append(self, path: str, fragment: str) -> str:
        """串流時把片段接在草稿後面，回傳目前草稿"""
        draft = self._captions.get(path, "") + fragment
        self._captions[path] = draft
        return draft

    def clear(self):
        self._captions.clear()

    def as_dict(self) -> Dict[str, str]:
        return dict(self._captions)

    def __contains__(self, path) -> bool:
        return path in self._captions

    def __len__(self) -> int:
        return len(self._captions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._captions)


@dataclass
class ProcessingState:
    """
    批次處理狀態

    批次開始時建立 (active=True)，每完成一張圖更新一次，
    結束時 active=False。
    """
    active: bool = False
    processed_count: int = 0
    total: int = 0
    interrupt_requested: bool = False

    def begin(self, total: int):
        self.active = True
        self.processed_count = 0
        self.total = total
        self.interrupt_requested = False

    def finish(self):
        self.active = False
        self.interrupt_requested = False


@dataclass
class ProviderConfig:
    """
    Provider 連線資訊

    雲端 Provider 使用 api_key，本機伺服器使用 base_url，
    並快取連線狀態與模型列表。
    """
    kind: ProviderKind
    api_key: str = ""
    base_url: str = ""
    available: bool = False
    models: List[ModelInfo] = field(default_factory=list)

    def has_credentials(self) -> bool:
        if self.kind.is_local:
            return bool(self.base_url.strip())
        return bool(self.api_key.strip())


@dataclass
class BatchResult:
    """一次批次執行的結果"""
    state: BatchState
    processed_count: int = 0
    total: int = 0
    processed_paths: List[str] = field(default_factory=list)
    error: Optional[Exception] = None
    error_message: Optional[str] = None


@dataclass
class Settings:
    """
    應用程式設定

    包含所有設定項，可從設定檔載入或儲存。
    """
    # Provider 憑證 / 端點
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    lmstudio_base_url: str = "http://localhost:1234/v1"
    ollama_base_url: str = "http://localhost:11434"

    # 生成設定
    selected_model: str = "gpt-4o-mini"
    prompt_style: PromptStyle = PromptStyle.NATURAL_LANGUAGE
    max_tokens: int = 300
    request_timeout: Optional[float] = None

    # Caption 組合
    prefix_text: str = ""
    suffix_text: str = ""

    # UI 設定
    last_open_dir: str = ""

    @classmethod
    def from_dict(cls, cfg: Dict) -> "Settings":
        """從設定 dict 建立 (型別轉換在 settings 模組)"""
        from tagmeister.core.settings import _coerce_float, _coerce_int

        cfg = cfg or {}
        defaults = cls()
        timeout = cfg.get("request_timeout")
        if timeout in (None, ""):
            timeout = None
        else:
            # 0 或負數視為不設逾時
            timeout = _coerce_float(timeout, 0.0)
            if timeout <= 0:
                timeout = None
        return cls(
            openai_api_key=str(cfg.get("openai_api_key") or ""),
            anthropic_api_key=str(cfg.get("anthropic_api_key") or ""),
            lmstudio_base_url=str(cfg.get("lmstudio_base_url") or defaults.lmstudio_base_url),
            ollama_base_url=str(cfg.get("ollama_base_url") or defaults.ollama_base_url),
            selected_model=str(cfg.get("selected_model") or defaults.selected_model),
            prompt_style=PromptStyle.from_value(cfg.get("prompt_style")),
            max_tokens=_coerce_int(cfg.get("max_tokens"), defaults.max_tokens),
            request_timeout=timeout,
            prefix_text=str(cfg.get("prefix_text") or ""),
            suffix_text=str(cfg.get("suffix_text") or ""),
            last_open_dir=str(cfg.get("last_open_dir") or ""),
        )

    def to_dict(self) -> Dict:
        return {
            "openai_api_key": self.openai_api_key,
            "anthropic_api_key": self.anthropic_api_key,
            "lmstudio_base_url": self.lmstudio_base_url,
            "ollama_base_url": self.ollama_base_url,
            "selected_model": self.selected_model,
            "prompt_style": self.prompt_style.value,
            "max_tokens": self.max_tokens,
            "request_timeout": self.request_timeout,
            "prefix_text": self.prefix_text,
            "suffix_text": self.suffix_text,
            "last_open_dir": self.last_open_dir,
        }
