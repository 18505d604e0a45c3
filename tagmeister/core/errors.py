# -*- coding: utf-8 -*-
"""
錯誤類別與使用者訊息

Provider 與 StreamDecoder 一律拋出 CaptionError 子類別，
由 BatchController 統一轉換成單一的使用者訊息。
"""
import json
from typing import Optional


class CaptionError(Exception):
    """所有 caption 流程錯誤的基礎類別"""


class ConfigurationError(CaptionError):
    """缺少 API Key 或端點"""


class NoSelectionError(CaptionError):
    """批次開始時沒有選取任何圖片"""


class ImageReadError(CaptionError):
    """圖片無法讀取、解碼或尺寸不符"""


class ResponseFormatError(CaptionError):
    """回應缺少預期的文字欄位"""


class ProviderError(CaptionError):
    """
    HTTP 非 2xx 或傳輸失敗

    status 為 None 表示連線層失敗 (沒有 HTTP 回應)。
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body or ""


class AuthenticationError(ProviderError):
    """HTTP 401"""


class RateLimitError(ProviderError):
    """HTTP 429"""


class BadRequestError(ProviderError):
    """HTTP 400，detail 為伺服器提供的訊息"""

    def __init__(self, message: str, status: Optional[int] = 400, body: str = "", detail: Optional[str] = None):
        super().__init__(message, status=status, body=body)
        self.detail = detail


def extract_server_message(body: str) -> Optional[str]:
    """
    從錯誤回應取出伺服器訊息。

    支援 {"error": {"message": ...}} (OpenAI / Anthropic)、
    {"error": "..."} (Ollama) 與 {"message": ...}；
    不是 JSON 時回傳去除空白後的原文。
    """
    text = (body or "").strip()
    if not text:
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
        if data.get("message"):
            return str(data["message"])
    return text


def error_for_status(status: int, body: str, provider_name: str) -> ProviderError:
    """依 HTTP 狀態碼建立對應的錯誤"""
    if status == 401:
        return AuthenticationError(
            f"{provider_name} API authentication failed: {status} {body}", status=status, body=body
        )
    if status == 429:
        return RateLimitError(
            f"{provider_name} API rate limit exceeded: {status} {body}", status=status, body=body
        )
    if status == 400:
        detail = extract_server_message(body)
        return BadRequestError(
            f"{provider_name} API bad request: {status} {detail or body}",
            status=status, body=body, detail=detail,
        )
    return ProviderError(f"{provider_name} API request failed: {status} {body}", status=status, body=body)


def format_error_message(error: BaseException, provider_name: str) -> str:
    """
    把錯誤轉成單一的使用者訊息

    - 429 → 稍後再試
    - 401 → API Key 無效
    - 400 → 盡量帶出伺服器訊息
    - 其他 → "Error: <message>"
    """
    if isinstance(error, RateLimitError):
        return f"{provider_name} API rate limit exceeded. Please try again later."
    if isinstance(error, AuthenticationError):
        return f"Invalid API key. Please check your {provider_name} API key."
    if isinstance(error, BadRequestError):
        if error.detail:
            return f"Bad request: {error.detail}"
        return f"Bad request to {provider_name} API. Please try again."
    return f"Error: {error}"
