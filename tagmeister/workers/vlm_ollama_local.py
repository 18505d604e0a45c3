# -*- coding: utf-8 -*-
"""
VLM Ollama Local Provider

本機 Ollama 伺服器 (/api/generate)，串流為逐行 JSON。
"""
from typing import Dict, List, Optional

import requests

from tagmeister.core.dataclasses import ModelInfo, ProviderKind
from tagmeister.utils.image_processing import read_image_as_base64
from tagmeister.utils.parsing import STRIP_FINAL_PERIOD
from tagmeister.utils.stream_decoder import StreamMode, extract_generate_response
from tagmeister.workers.base import BaseCaptionProvider


class VLMOllamaLocalProvider(BaseCaptionProvider):
    """Ollama generate API"""

    kind = ProviderKind.OLLAMA
    display_name = "Ollama"
    punctuation_mode = STRIP_FINAL_PERIOD
    stream_mode = StreamMode.NDJSON
    default_config = {
        "base_url": "http://localhost:11434",
    }

    @property
    def name(self) -> str:
        return "vlm_ollama_local"

    def endpoint_url(self) -> str:
        return f"{self.base_url}/api/generate"

    def build_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def build_payload(self, image_path: str, model_id: str, prompt: str, stream: bool) -> Dict:
        return {
            "model": model_id,
            "prompt": prompt,
            "stream": stream,
            "images": [read_image_as_base64(image_path)],
        }

    def extract_text(self, data: Dict) -> Optional[str]:
        return data.get("response")

    def extract_fragment(self, record: Dict) -> Optional[str]:
        return extract_generate_response(record)

    # ============================================================
    # 連線檢查
    # ============================================================

    def fetch_models(self) -> List[ModelInfo]:
        """
        GET {base_url}/api/tags

        伺服器有回應就算可用 (即使沒有任何模型)。
        """
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=self.timeout)
            response.raise_for_status()
            data = response.json() or {}
        except (requests.RequestException, ValueError) as e:
            print(f"[Ollama] 無法取得模型列表: {e}")
            self.config.models = []
            self.config.available = False
            return []

        models = [
            ModelInfo(id=m["name"], name=m["name"])
            for m in data.get("models") or []
            if isinstance(m, dict) and m.get("name")
        ]
        self.config.models = models
        self.config.available = True
        return models

    def check_connection(self) -> bool:
        self.fetch_models()
        return self.config.available
