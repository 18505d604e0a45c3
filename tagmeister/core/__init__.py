# -*- coding: utf-8 -*-
"""
Tagmeister - 核心模組
"""
from tagmeister.core.dataclasses import (
    PromptStyle,
    ProviderKind,
    BatchState,
    ImageFile,
    DirectoryEntry,
    ModelInfo,
    EncodedImage,
    CaptionStore,
    ProcessingState,
    ProviderConfig,
    BatchResult,
    Settings,
)

from tagmeister.core.errors import (
    CaptionError,
    ConfigurationError,
    NoSelectionError,
    ImageReadError,
    ResponseFormatError,
    ProviderError,
    AuthenticationError,
    RateLimitError,
    BadRequestError,
    format_error_message,
)

from tagmeister.core.settings import (
    DEFAULT_APP_SETTINGS,
    NATURAL_LANGUAGE_PROMPT,
    BOORU_TAGS_PROMPT,
    get_prompt_text,
    load_app_settings,
    save_app_settings,
    load_settings,
)
