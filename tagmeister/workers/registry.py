# -*- coding: utf-8 -*-
"""
Provider Registry / Router

負責自動發現所有 Provider，並依模型識別字串選出對應的 Provider。

模型識別字串:
- "claude*"         → Anthropic
- "lmstudio:<id>"   → LM Studio (去掉前綴)
- "ollama:<id>"     → Ollama (去掉前綴與結尾的 ":latest")
- 其他               → OpenAI
"""
import inspect
import pkgutil
import importlib
from typing import Dict, List, Optional, Tuple, Type

from tagmeister.core.dataclasses import ProviderConfig, ProviderKind, Settings
from tagmeister.core.errors import ConfigurationError
from tagmeister.workers.base import BaseCaptionProvider


LMSTUDIO_PREFIX = "lmstudio:"
OLLAMA_PREFIX = "ollama:"
OLLAMA_LATEST_SUFFIX = ":latest"

# 固定的雲端模型 (識別字串, 顯示名稱)
CLOUD_MODELS = [
    ("gpt-4o-mini", "OpenAI: gpt-4o-mini"),
    ("gpt-4o", "OpenAI: gpt-4o"),
    ("claude-3-7-sonnet-20250219", "Anthropic: Claude 3.7 Sonnet"),
]


class ProviderRegistry:
    """ProviderKind → Provider 類別"""

    _providers: Dict[ProviderKind, Type[BaseCaptionProvider]] = {}

    @classmethod
    def add_provider(cls, provider_cls: Type[BaseCaptionProvider]):
        cls._providers[provider_cls.kind] = provider_cls

    @classmethod
    def get_provider_class(cls, kind: ProviderKind) -> Optional[Type[BaseCaptionProvider]]:
        if not cls._providers:
            cls.scan_providers()
        return cls._providers.get(kind)

    @classmethod
    def get_providers(cls) -> List[Dict]:
        """回傳所有 Provider 的元數據 (用於 UI 列表)"""
        if not cls._providers:
            cls.scan_providers()
        return [
            {"kind": kind, "display_name": provider_cls.display_name}
            for kind, provider_cls in cls._providers.items()
        ]

    @classmethod
    def scan_providers(cls):
        """掃描 tagmeister.workers 下的所有模組並自動註冊"""
        import tagmeister.workers as workers_pkg

        prefix = workers_pkg.__name__ + "."
        for _, name, _ in pkgutil.iter_modules(workers_pkg.__path__, prefix):
            try:
                module = importlib.import_module(name)
            except ImportError as e:
                print(f"[ProviderRegistry] Failed to import {name}: {e}")
                continue
            for _, item in inspect.getmembers(module, inspect.isclass):
                if (issubclass(item, BaseCaptionProvider)
                        and not inspect.isabstract(item)
                        and item.is_available()):
                    cls.add_provider(item)


def resolve_model(model_identifier: str) -> Tuple[ProviderKind, str]:
    """模型識別字串 → (ProviderKind, 送給 API 的 model id)"""
    ident = (model_identifier or "").strip()
    if ident.startswith("claude"):
        return ProviderKind.ANTHROPIC, ident
    if ident.startswith(LMSTUDIO_PREFIX):
        return ProviderKind.LMSTUDIO, ident[len(LMSTUDIO_PREFIX):]
    if ident.startswith(OLLAMA_PREFIX):
        model_id = ident[len(OLLAMA_PREFIX):]
        if model_id.endswith(OLLAMA_LATEST_SUFFIX):
            model_id = model_id[:-len(OLLAMA_LATEST_SUFFIX)]
        return ProviderKind.OLLAMA, model_id
    return ProviderKind.OPENAI, ident


def configs_from_settings(settings: Settings) -> Dict[ProviderKind, ProviderConfig]:
    return {
        ProviderKind.OPENAI: ProviderConfig(ProviderKind.OPENAI, api_key=settings.openai_api_key),
        ProviderKind.ANTHROPIC: ProviderConfig(ProviderKind.ANTHROPIC, api_key=settings.anthropic_api_key),
        ProviderKind.LMSTUDIO: ProviderConfig(ProviderKind.LMSTUDIO, base_url=settings.lmstudio_base_url),
        ProviderKind.OLLAMA: ProviderConfig(ProviderKind.OLLAMA, base_url=settings.ollama_base_url),
    }


class ProviderRouter:
    """
    模型識別字串 → Provider 實例

    每種 ProviderKind 只建立一個實例；ProviderConfig 為長期存在的連線資訊，
    連線檢查會直接更新它。
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 session=None,
                 providers: Optional[Dict[ProviderKind, BaseCaptionProvider]] = None):
        """
        Args:
            settings: 提供 API Key / base_url / max_tokens / request_timeout
            session: 共用的 requests.Session
            providers: 直接指定 Provider 實例 (測試用)
        """
        self.settings = settings or Settings()
        self.session = session
        self.configs = configs_from_settings(self.settings)
        self._instances: Dict[ProviderKind, BaseCaptionProvider] = dict(providers or {})

    def provider_for(self, kind: ProviderKind) -> BaseCaptionProvider:
        provider = self._instances.get(kind)
        if provider is None:
            provider_cls = ProviderRegistry.get_provider_class(kind)
            if provider_cls is None:
                raise ConfigurationError(f"No provider registered for {kind.value}")
            provider = provider_cls(
                config=self.configs[kind],
                session=self.session,
                max_tokens=self.settings.max_tokens,
                timeout=self.settings.request_timeout,
            )
            self._instances[kind] = provider
        return provider

    def route(self, model_identifier: str) -> Tuple[BaseCaptionProvider, str]:
        """回傳 (Provider, model id)"""
        kind, model_id = resolve_model(model_identifier)
        return self.provider_for(kind), model_id

    def ensure_ready(self, provider: BaseCaptionProvider):
        """
        確認 Provider 可以開始生成，否則拋出 ConfigurationError。

        本機伺服器若尚未確認可用，先檢查一次連線。
        """
        if not provider.config.has_credentials():
            if provider.kind.is_local:
                raise ConfigurationError(f"{provider.display_name} server URL is not configured.")
            raise ConfigurationError(
                f"{provider.display_name} API key is required. Please set it in settings."
            )
        if provider.kind.is_local and not provider.config.available:
            if not provider.check_connection():
                raise ConfigurationError(
                    f"{provider.display_name} server is not available at {provider.config.base_url}"
                )

    def refresh_local_providers(self) -> Dict[ProviderKind, bool]:
        """檢查所有本機伺服器，回傳各自是否可用"""
        result = {}
        for kind in (ProviderKind.LMSTUDIO, ProviderKind.OLLAMA):
            provider = self.provider_for(kind)
            result[kind] = provider.check_connection()
            print(f"[Router] {provider.display_name}: "
                  f"{'available' if result[kind] else 'unavailable'} ({len(provider.config.models)} models)")
        return result

    def available_models(self) -> List[Tuple[str, str]]:
        """可選的 (模型識別字串, 顯示名稱)，包含已發現的本機模型"""
        models = list(CLOUD_MODELS)
        lmstudio = self.configs[ProviderKind.LMSTUDIO]
        if lmstudio.available:
            models.extend((f"{LMSTUDIO_PREFIX}{m.id}", f"LM Studio: {m.name}") for m in lmstudio.models)
        ollama = self.configs[ProviderKind.OLLAMA]
        if ollama.available:
            models.extend((f"{OLLAMA_PREFIX}{m.id}", f"Ollama: {m.name}") for m in ollama.models)
        return models
