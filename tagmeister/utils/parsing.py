# -*- coding: utf-8 -*-
"""
Caption 文字處理模組

模型輸出 → 標點整理 → 去尾逗號 → 接上前綴 / 後綴。
全部為純函數。
"""

# 標點處理模式
COMMA_JOIN = "comma_join"
STRIP_FINAL_PERIOD = "strip_final_period"


def normalize_punctuation(raw: str) -> str:
    """
    把句點分隔的句子轉成逗號連接。

    "A cat. A dog. A bird." → "A cat, A dog, A bird"
    """
    if not raw:
        return ""
    segments = [seg.strip() for seg in raw.split(".")]
    # 結尾句點留下的空段落不算一句
    while len(segments) > 1 and not segments[-1]:
        segments.pop()
    return ", ".join(segments).strip()


def strip_final_period(raw: str) -> str:
    """只移除最後一個句點 (本機模型使用)"""
    text = (raw or "").strip()
    if text.endswith("."):
        text = text[:-1].strip()
    return text


def strip_trailing_comma(text: str) -> str:
    """移除結尾的一個逗號"""
    text = (text or "").strip()
    if text.endswith(","):
        text = text[:-1].strip()
    return text


def _strip_prefix_joint(prefix: str) -> str:
    p = prefix.strip()
    while p.endswith(","):
        p = p[:-1].rstrip()
    return p


def _strip_suffix_joint(suffix: str) -> str:
    s = suffix.strip()
    while s.startswith(","):
        s = s[1:].lstrip()
    # 後綴也是結尾，不留逗號
    while s.endswith(","):
        s = s[:-1].rstrip()
    return s


def compose(processed: str, prefix: str = "", suffix: str = "") -> str:
    """
    接上使用者的前綴 / 後綴 (先前綴再後綴)

    compose("A cat", "best quality,", "") → "best quality, A cat"
    compose("A cat", "", "4k, ")          → "A cat, 4k"
    """
    result = processed
    if (prefix or "").strip():
        result = f"{_strip_prefix_joint(prefix)}, {result}"
    if (suffix or "").strip():
        result = f"{result}, {_strip_suffix_joint(suffix)}"
    return result


def process_caption(raw: str, mode: str = COMMA_JOIN, prefix: str = "", suffix: str = "") -> str:
    """完整流程：標點 → 去尾逗號 → 前綴 / 後綴"""
    if mode == STRIP_FINAL_PERIOD:
        text = strip_final_period(raw)
    else:
        text = normalize_punctuation(raw)
    return compose(strip_trailing_comma(text), prefix, suffix)
