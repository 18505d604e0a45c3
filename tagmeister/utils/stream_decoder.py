# -*- coding: utf-8 -*-
"""
串流解碼模組

把 HTTP 回應的 byte chunk 逐步解成文字片段，支援兩種格式：
- SSE: 每筆記錄為 "data: {json}"，以 "data: [DONE]" 結束
- NDJSON: 每行一個 JSON 物件，物件帶 done=true 表示結束

chunk 邊界可以落在任何位置 (包含一行的中間、多位元組字元的中間)，
未完成的最後一行會保留到下一個 chunk。
"""
import codecs
import json
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional


SSE_PREFIX = "data: "
SSE_DONE = "[DONE]"


class StreamMode(Enum):
    SSE = "sse"
    NDJSON = "ndjson"


class DecoderState(Enum):
    AWAITING_CHUNK = "awaiting_chunk"
    DECODING_BUFFER = "decoding_buffer"
    EMITTING_FRAGMENTS = "emitting_fragments"
    CLOSED = "closed"


def extract_chat_delta(record) -> Optional[str]:
    """OpenAI 相容串流: choices[0].delta.content"""
    try:
        return record["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


def extract_generate_response(record) -> Optional[str]:
    """Ollama /api/generate 串流: response"""
    if isinstance(record, dict):
        return record.get("response")
    return None


def _print_notice(message: str):
    print(f"[StreamDecoder] {message}")


class StreamDecoder:
    """
    串流解碼器

    一個實例只服務一個請求；請求結束 (成功或失敗) 後即丟棄。

    Args:
        mode: StreamMode.SSE 或 StreamMode.NDJSON
        extract: 從一筆解析後的記錄取出文字片段 (沒有則回傳 None)
        on_error: 軟性錯誤 (單筆記錄無法解析) 的通知管道
    """

    def __init__(self,
                 mode: StreamMode,
                 extract: Callable[[dict], Optional[str]],
                 on_error: Optional[Callable[[str], None]] = None):
        self.mode = mode
        self.extract = extract
        self.on_error = on_error or _print_notice
        self.state = DecoderState.AWAITING_CHUNK
        self.done = False
        self.errors: List[str] = []
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def buffer(self) -> str:
        """目前尚未完成的最後一行"""
        return self._buffer

    def feed(self, chunk: bytes) -> List[str]:
        """加入一個 chunk，回傳這次解出的片段 (依到達順序)"""
        if self.state == DecoderState.CLOSED:
            return []
        if not chunk:
            return []

        self.state = DecoderState.DECODING_BUFFER
        self._buffer += self._decoder.decode(chunk)
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()

        self.state = DecoderState.EMITTING_FRAGMENTS
        fragments = []
        for line in lines:
            if self.done:
                break
            fragment = self._parse_record(line)
            if fragment:
                fragments.append(fragment)

        self.state = DecoderState.AWAITING_CHUNK
        return fragments

    def close(self) -> List[str]:
        """傳輸結束：把剩下的 buffer 當成最後一筆記錄解析"""
        if self.state == DecoderState.CLOSED:
            return []

        self._buffer += self._decoder.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        fragments = []
        if remaining.strip() and not self.done:
            fragment = self._parse_record(remaining)
            if fragment:
                fragments.append(fragment)

        self.state = DecoderState.CLOSED
        return fragments

    def iter_fragments(self, chunks: Iterable[bytes]) -> Iterator[str]:
        """
        逐 chunk 解碼並 yield 片段。

        串流已表示結束 ([DONE] 或 done=true) 時不再讀取後續 chunk。
        """
        for chunk in chunks:
            for fragment in self.feed(chunk):
                yield fragment
            if self.done:
                break
        for fragment in self.close():
            yield fragment

    # ============================================================
    # 內部方法
    # ============================================================

    def _parse_record(self, line: str) -> Optional[str]:
        line = line.rstrip("\r")
        if not line.strip():
            return None
        if self.mode == StreamMode.SSE:
            return self._parse_sse(line)
        return self._parse_ndjson(line)

    def _parse_sse(self, line: str) -> Optional[str]:
        if not line.startswith(SSE_PREFIX):
            return None
        payload = line[len(SSE_PREFIX):]
        if payload.strip() == SSE_DONE:
            self.done = True
            return None
        try:
            record = json.loads(payload)
        except ValueError as e:
            self._soft_error(f"Error parsing SSE JSON: {e}")
            return None
        return self._extract(record)

    def _parse_ndjson(self, line: str) -> Optional[str]:
        try:
            record = json.loads(line)
        except ValueError as e:
            self._soft_error(f"Error parsing JSON line: {e}")
            return None
        fragment = self._extract(record)
        if isinstance(record, dict) and record.get("done"):
            self.done = True
        return fragment

    def _extract(self, record) -> Optional[str]:
        fragment = self.extract(record)
        if isinstance(fragment, str) and fragment:
            return fragment
        return None

    def _soft_error(self, message: str):
        self.errors.append(message)
        self.on_error(message)
