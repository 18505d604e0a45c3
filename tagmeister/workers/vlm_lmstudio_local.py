# -*- coding: utf-8 -*-
"""
VLM LM Studio Local Provider

本機 LM Studio 伺服器 (OpenAI 相容 API)。
生成走 requests + SSE；模型列表使用 openai client。
"""
from typing import Dict, List, Optional

import openai
from openai import OpenAI

from tagmeister.core.dataclasses import ModelInfo, ProviderKind
from tagmeister.utils.image_processing import read_image_as_base64
from tagmeister.utils.parsing import STRIP_FINAL_PERIOD
from tagmeister.utils.stream_decoder import StreamMode, extract_chat_delta
from tagmeister.workers.base import BaseCaptionProvider
from tagmeister.workers.vlm_openai_api import build_chat_messages, extract_chat_message


# LM Studio 不檢查，但 OpenAI 相容 client 需要
PLACEHOLDER_API_KEY = "lm-studio"


class VLMLMStudioLocalProvider(BaseCaptionProvider):
    """LM Studio (OpenAI 相容)"""

    kind = ProviderKind.LMSTUDIO
    display_name = "LM Studio"
    punctuation_mode = STRIP_FINAL_PERIOD
    stream_mode = StreamMode.SSE
    default_config = {
        "base_url": "http://localhost:1234/v1",
    }

    @property
    def name(self) -> str:
        return "vlm_lmstudio_local"

    def endpoint_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {PLACEHOLDER_API_KEY}",
        }

    def build_payload(self, image_path: str, model_id: str, prompt: str, stream: bool) -> Dict:
        return {
            "model": model_id,
            "messages": build_chat_messages(prompt, read_image_as_base64(image_path)),
            "max_tokens": self.max_tokens,
            "stream": stream,
        }

    def extract_text(self, data: Dict) -> Optional[str]:
        return extract_chat_message(data)

    def extract_fragment(self, record: Dict) -> Optional[str]:
        return extract_chat_delta(record)

    # ============================================================
    # 連線檢查
    # ============================================================

    def fetch_models(self) -> List[ModelInfo]:
        """
        GET {base_url}/models

        有回報模型才算可用；連線失敗時清空列表。
        """
        kwargs = {"base_url": self.base_url, "api_key": PLACEHOLDER_API_KEY, "max_retries": 0}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        try:
            client = OpenAI(**kwargs)
            models = [
                ModelInfo(id=m.id, name=getattr(m, "name", None) or m.id)
                for m in client.models.list()
            ]
        except openai.OpenAIError as e:
            print(f"[LMStudio] 無法取得模型列表: {e}")
            models = []

        self.config.models = models
        self.config.available = len(models) > 0
        return models

    def check_connection(self) -> bool:
        self.fetch_models()
        return self.config.available
