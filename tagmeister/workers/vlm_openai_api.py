# -*- coding: utf-8 -*-
"""
VLM OpenAI API Provider

使用 OpenAI chat completions API (gpt-4o, gpt-4o-mini 等)。
串流為 SSE 格式。
"""
from typing import Dict, Optional

from tagmeister.core.dataclasses import ProviderKind
from tagmeister.utils.image_processing import read_image_as_base64
from tagmeister.utils.parsing import COMMA_JOIN
from tagmeister.utils.stream_decoder import StreamMode, extract_chat_delta
from tagmeister.workers.base import BaseCaptionProvider


def build_chat_messages(prompt: str, image_b64: str) -> list:
    """OpenAI 相容格式: [文字, 圖片 data URL]"""
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:image/jpeg;base64,{image_b64}"},
                },
            ],
        }
    ]


def extract_chat_message(data: Dict) -> Optional[str]:
    """choices[0].message.content"""
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None


class VLMOpenAIAPIProvider(BaseCaptionProvider):
    """OpenAI chat completions"""

    kind = ProviderKind.OPENAI
    display_name = "OpenAI"
    punctuation_mode = COMMA_JOIN
    stream_mode = StreamMode.SSE
    default_config = {
        "base_url": "https://api.openai.com/v1",
    }

    @property
    def name(self) -> str:
        return "vlm_openai_api"

    def endpoint_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
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
