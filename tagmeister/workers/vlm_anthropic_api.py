# -*- coding: utf-8 -*-
"""
VLM Anthropic API Provider

使用 Anthropic messages API (claude-3-5-sonnet 等)。
不串流：有 on_chunk 時一次送出完整文字。
"""
from typing import Dict, Optional

from tagmeister.core.dataclasses import ProviderKind
from tagmeister.utils.image_processing import read_image_as_base64_with_type
from tagmeister.utils.parsing import COMMA_JOIN
from tagmeister.workers.base import BaseCaptionProvider


ANTHROPIC_VERSION = "2023-06-01"


class VLMAnthropicAPIProvider(BaseCaptionProvider):
    """Anthropic messages API"""

    kind = ProviderKind.ANTHROPIC
    display_name = "Anthropic"
    punctuation_mode = COMMA_JOIN
    stream_mode = None
    default_config = {
        "base_url": "https://api.anthropic.com/v1",
    }

    @property
    def name(self) -> str:
        return "vlm_anthropic_api"

    def endpoint_url(self) -> str:
        return f"{self.base_url}/messages"

    def build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_payload(self, image_path: str, model_id: str, prompt: str, stream: bool) -> Dict:
        encoded = read_image_as_base64_with_type(image_path)
        return {
            "model": model_id,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": encoded.media_type,
                                "data": encoded.base64,
                            },
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
            "max_tokens": self.max_tokens,
            "stream": False,
        }

    def extract_text(self, data: Dict) -> Optional[str]:
        """content 中第一個 type == "text" 的項目"""
        for item in data.get("content") or []:
            if isinstance(item, dict) and item.get("type") == "text":
                return item.get("text")
        return None
