# -*- coding: utf-8 -*-
"""
Tagmeister - Providers 模組

Provider 是單一 VLM 後端的包裝。
命名規範: vlm_來源_local或api.py
"""
from tagmeister.workers.base import BaseCaptionProvider
