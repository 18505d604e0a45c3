# -*- coding: utf-8 -*-
"""
共用 fixtures：假的 HTTP session / response、假的 Provider、測試圖片
"""
import os
import sys
import json

import pytest
import requests
from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tagmeister.core.dataclasses import ProviderConfig, ProviderKind, Settings
from tagmeister.utils.parsing import COMMA_JOIN
from tagmeister.workers.registry import ProviderRouter


class FakeResponse:
    """requests.Response 的最小替身"""

    def __init__(self, status_code=200, body=b"", chunks=None, json_data=None):
        self.status_code = status_code
        self._body = body if isinstance(body, bytes) else body.encode("utf-8")
        self._chunks = list(chunks) if chunks is not None else [self._body]
        self._json = json_data
        self.closed = False
        self.chunks_read = 0

    @property
    def text(self):
        return self._body.decode("utf-8")

    def json(self):
        if self._json is not None:
            return self._json
        return json.loads(self.text)

    def iter_content(self, chunk_size=None):
        for chunk in self._chunks:
            self.chunks_read += 1
            yield chunk

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class FakeSession:
    """依序回傳預先準備的 response (或拋出例外)"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


class FakeProvider:
    """
    依路徑回傳固定結果的 Provider

    results: path → caption 字串或要拋出的例外
    """

    kind = ProviderKind.OPENAI
    display_name = "OpenAI"
    punctuation_mode = COMMA_JOIN

    def __init__(self, results, kind=ProviderKind.OPENAI, display_name="OpenAI"):
        self.results = results
        self.kind = kind
        self.display_name = display_name
        self.config = ProviderConfig(kind, api_key="sk-test", base_url="http://localhost:1")
        self.config.available = True
        self.calls = []

    def check_connection(self):
        return self.config.available

    def generate_caption(self, image_path, model_id, prompt_style, on_chunk=None):
        self.calls.append((image_path, model_id, prompt_style))
        result = self.results[image_path]
        if isinstance(result, Exception):
            if on_chunk:
                on_chunk("partial")
            raise result
        if on_chunk:
            words = result.split(" ")
            for i, word in enumerate(words):
                on_chunk(word if i == 0 else " " + word)
        return result


def sse_body(*fragments, done=True) -> bytes:
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": f}}]}, ensure_ascii=False)
        for f in fragments
    ]
    if done:
        lines.append("data: [DONE]")
    return ("\n".join(lines) + "\n").encode("utf-8")


def ndjson_body(*fragments) -> bytes:
    lines = [json.dumps({"response": f, "done": False}) for f in fragments]
    lines.append(json.dumps({"response": "", "done": True}))
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def make_image(tmp_path):
    """在 tmp_path 建立測試圖片，回傳路徑"""
    def _make(name="image.png", size=(256, 256), fmt=None, color=(200, 30, 30)):
        path = tmp_path / name
        Image.new("RGB", size, color).save(path, format=fmt)
        return str(path)
    return _make


@pytest.fixture
def image_paths(make_image):
    """五張 png 測試圖片"""
    return [make_image(f"img{i}.png") for i in range(1, 6)]


@pytest.fixture
def make_router():
    def _make(provider, settings=None):
        return ProviderRouter(settings or Settings(), providers={provider.kind: provider})
    return _make
