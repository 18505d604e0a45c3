# -*- coding: utf-8 -*-
"""
圖片編碼模組

讀取圖片原始位元組並轉成 base64，送出前先用 Pillow 驗證可解碼與尺寸。
"""
import os
import base64

from PIL import Image, UnidentifiedImageError

from tagmeister.core.dataclasses import EncodedImage
from tagmeister.core.errors import ImageReadError


MIN_IMAGE_SIDE = 200
MAX_IMAGE_SIDE = 8000


def media_type_from_extension(path: str) -> str:
    """.jpg / .jpeg → image/jpeg，其餘一律 image/png"""
    ext = os.path.splitext(path)[1].lower()
    if ext in (".jpg", ".jpeg"):
        return "image/jpeg"
    return "image/png"


def validate_image(path: str) -> str:
    """
    驗證圖片可解碼且尺寸在 200..8000 px 之間。
    回傳 Pillow 偵測到的格式名稱 (例如 "JPEG")，無法判斷時為空字串。
    """
    if not os.path.exists(path):
        raise ImageReadError(f"File not found: {path}")
    try:
        with Image.open(path) as img:
            fmt = img.format or ""
            img.load()
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageReadError(f"Failed to decode image: {e}") from e

    if width > MAX_IMAGE_SIDE or height > MAX_IMAGE_SIDE:
        raise ImageReadError(
            f"Image dimensions too large: {width}x{height} (max {MAX_IMAGE_SIDE}x{MAX_IMAGE_SIDE} px)"
        )
    if width < MIN_IMAGE_SIDE or height < MIN_IMAGE_SIDE:
        raise ImageReadError(
            f"Image dimensions too small: {width}x{height} (min {MIN_IMAGE_SIDE}x{MIN_IMAGE_SIDE} px)"
        )
    return fmt


def _read_bytes_b64(path: str) -> str:
    # 保留原始格式，不重新編碼
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ImageReadError(f"Failed to read file: {e}") from e
    return base64.b64encode(data).decode("ascii")


def read_image_as_base64(path: str) -> str:
    """驗證後回傳 base64 字串"""
    validate_image(path)
    return _read_bytes_b64(path)


def read_image_as_base64_with_type(path: str) -> EncodedImage:
    """驗證後回傳 base64 與 media type (依偵測格式，否則依副檔名)"""
    fmt = validate_image(path)
    media_type = Image.MIME.get(fmt.upper()) if fmt else None
    return EncodedImage(
        base64=_read_bytes_b64(path),
        media_type=media_type or media_type_from_extension(path),
    )
