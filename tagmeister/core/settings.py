# -*- coding: utf-8 -*-
"""
應用程式設定模組

提供提示詞模板、設定的載入、儲存和輔助函數。
"""
import os
import json
import shutil

from tagmeister.core.dataclasses import PromptStyle, Settings


# --------------------------
# Prompt Templates
# --------------------------
NATURAL_LANGUAGE_PROMPT = """Describe this image in one concise paragraph, starting immediately with the primary subject (e.g., 'Watch,' 'Landscape,' 'Person'). Focus on key elements, their relationships, and notable details. Be specific and direct, avoiding any introductory phrases like 'The image shows' or 'I can see.' Prioritize the most important aspects and describe them factually. Identify the main subject quickly and accurately, noting its dominant characteristics such as size, color, shape, or position. For multiple elements, describe their spatial relationships. Include relevant details about composition, color schemes, lighting, and textures. Mention any actions, movements, functions, or unique features of objects, and appearances or behaviors of people or animals. Include any visible text, logos, or recognizable symbols. Describe what you see literally, without interpreting the image's style (e.g., don't use terms like 'stylized,' 'illustration,' or mention artistic techniques). Treat every subject as a real object or scene, not as a representation. Use varied and precise vocabulary to create a vivid description while maintaining a neutral tone. Avoid subjective interpretations unless crucial to understanding the image's content."""

BOORU_TAGS_PROMPT = """Generate a list of tags for this image in the style of Booru image boards and SDXL prompts. Focus on describing the visual elements, subjects, objects, settings, colors, lighting, composition, artistic style, and other relevant attributes. Format the output as a comma-separated list of tags without numbering or bullet points. Be specific and detailed, but keep each tag concise (1-3 words typically). Include tags for the main subject, background elements, colors, lighting, composition, style, medium, and any notable features. Do not include explanatory text or categorization headers - just provide the raw comma-separated tag list. Make sure to include mostly single-word tags, you can use some double-word tags if needed but mostly single word if possible."""

PROMPT_TEMPLATES = {
    PromptStyle.NATURAL_LANGUAGE: NATURAL_LANGUAGE_PROMPT,
    PromptStyle.BOORU_TAGS: BOORU_TAGS_PROMPT,
}


def get_prompt_text(style) -> str:
    """取得提示詞 (所有 Provider 共用同一份文字)"""
    return PROMPT_TEMPLATES[PromptStyle.from_value(style)]


# --------------------------
# App Settings (persisted)
# --------------------------
APP_SETTINGS_FILE = "app_settings.json"


def app_settings_path(path: str = None) -> str:
    """設定檔路徑，未指定時為目前工作目錄下的 app_settings.json"""
    return path or os.path.join(os.getcwd(), APP_SETTINGS_FILE)


DEFAULT_APP_SETTINGS = {
    # Cloud providers
    "openai_api_key": os.getenv("OPENAI_API_KEY", ""),
    "anthropic_api_key": os.getenv("ANTHROPIC_API_KEY", ""),

    # Local servers
    "lmstudio_base_url": "http://localhost:1234/v1",
    "ollama_base_url": "http://localhost:11434",

    # Generation
    "selected_model": "gpt-4o-mini",
    "prompt_style": PromptStyle.NATURAL_LANGUAGE.value,
    "max_tokens": 300,
    "request_timeout": None,

    # Caption composition
    "prefix_text": "",
    "suffix_text": "",

    # UI
    "last_open_dir": "",
}


def load_app_settings(path: str = None) -> dict:
    """載入應用程式設定"""
    settings_file = app_settings_path(path)
    cfg = dict(DEFAULT_APP_SETTINGS)
    if not os.path.exists(settings_file):
        return cfg
    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            data = json.load(f) or {}
        if isinstance(data, dict):
            cfg.update(data)
    except json.JSONDecodeError as e:
        print(f"[Settings] JSON decode failed: {e}")
        # Backup corrupted file
        backup_path = settings_file + ".bak"
        try:
            shutil.copy2(settings_file, backup_path)
            print(f"[Settings] Corrupted settings backed up to {backup_path}")
        except OSError as copy_err:
            print(f"[Settings] backup failed: {copy_err}")
    except OSError as e:
        print(f"[Settings] load failed: {e}")
    return cfg


def save_app_settings(cfg: dict, path: str = None) -> bool:
    """儲存應用程式設定"""
    settings_file = app_settings_path(path)
    try:
        safe = dict(DEFAULT_APP_SETTINGS)
        safe.update(cfg or {})
        with open(settings_file, "w", encoding="utf-8") as f:
            json.dump(safe, f, ensure_ascii=False, indent=2)
        return True
    except (OSError, TypeError) as e:
        print(f"[Settings] save failed: {e}")
        return False


def load_settings(path: str = None) -> Settings:
    """載入設定並轉為 Settings dataclass"""
    return Settings.from_dict(load_app_settings(path))


# --------------------------
# Type Coercion Helpers
# --------------------------
def _coerce_float(v, default=0.0):
    """將值轉換為浮點數"""
    try:
        return float(v)
    except (TypeError, ValueError):
        return float(default)


def _coerce_int(v, default=0):
    """將值轉換為整數"""
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)
