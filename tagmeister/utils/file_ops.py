# -*- coding: utf-8 -*-
"""
檔案操作模組

資料夾列表、圖片篩選與 caption 載入。
"""
import os
from typing import Dict, Iterable, List

from natsort import natsorted, ns

from tagmeister.core.dataclasses import DirectoryEntry, ImageFile
from tagmeister.utils.sidecar import load_caption


IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def is_image_file(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in IMAGE_EXTENSIONS


def list_directory(dir_path: str) -> List[DirectoryEntry]:
    """
    列出資料夾內容。
    資料夾排在前面，其餘依名稱自然排序 (不分大小寫)。
    """
    if not os.path.isdir(dir_path):
        raise FileNotFoundError(f"Directory not found: {dir_path}")

    entries = []
    with os.scandir(dir_path) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir()
                size = 0 if is_dir else entry.stat().st_size
            except OSError as e:
                print(f"[FileOps] 無法讀取 {entry.path}: {e}")
                continue
            entries.append(DirectoryEntry(name=entry.name, path=entry.path, is_dir=is_dir, size=size))

    dirs = natsorted([e for e in entries if e.is_dir], key=lambda e: e.name, alg=ns.IGNORECASE)
    files = natsorted([e for e in entries if not e.is_dir], key=lambda e: e.name, alg=ns.IGNORECASE)
    return dirs + files


def list_image_files(dir_path: str) -> List[ImageFile]:
    """只保留 jpg / jpeg / png"""
    return [
        ImageFile(path=e.path, display_name=e.name)
        for e in list_directory(dir_path)
        if not e.is_dir and is_image_file(e.name)
    ]


def load_captions(images: Iterable[ImageFile]) -> Dict[str, str]:
    """讀取每張圖片現有的 caption (沒有 .txt 的視為空字串)"""
    captions = {}
    for image in images:
        captions[image.path] = load_caption(image.path) or ""
    return captions
