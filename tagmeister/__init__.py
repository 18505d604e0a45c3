# -*- coding: utf-8 -*-
"""
Tagmeister - 圖片批次 caption 工具

多種 VLM Provider (OpenAI / Anthropic / LM Studio / Ollama) 的 caption 生成流程。
"""
__version__ = "0.3.0"
