# -*- coding: utf-8 -*-
"""
Sidecar 文字檔操作模組

每張圖片的 caption 存在同名的 .txt (例如 cat.png → cat.txt)。
"""
import os
from typing import Dict, Optional


def caption_path_for(image_path: str) -> str:
    """取得圖片對應的 caption .txt 路徑"""
    return os.path.splitext(image_path)[0] + ".txt"


def load_caption(image_path: str) -> Optional[str]:
    """讀取圖片的 caption，沒有檔案或讀取失敗時回傳 None"""
    p = caption_path_for(image_path)
    if not os.path.exists(p):
        return None
    try:
        with open(p, "r", encoding="utf-8") as f:
            return f.read().strip()
    except (OSError, UnicodeDecodeError) as e:
        print(f"[Sidecar] 載入失敗 {p}: {e}")
        return None


def save_caption(image_path: str, caption: str) -> bool:
    """寫入單一 caption，成功回傳 True"""
    p = caption_path_for(image_path)
    try:
        with open(p, "w", encoding="utf-8") as f:
            f.write(caption)
        return True
    except OSError as e:
        print(f"[Sidecar] 儲存失敗 {p}: {e}")
        return False


def save_captions(captions: Dict[str, str]) -> int:
    """
    批次寫入 caption，回傳實際寫入的檔案數。
    圖片本身不存在時跳過。
    """
    written = 0
    for image_path, caption in captions.items():
        if not os.path.exists(image_path):
            print(f"[Sidecar] 找不到圖片，略過: {image_path}")
            continue
        if save_caption(image_path, caption):
            written += 1
    return written
