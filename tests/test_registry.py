# -*- coding: utf-8 -*-
"""
ProviderRegistry / ProviderRouter 測試
"""
import pytest

from tagmeister.core.dataclasses import ModelInfo, ProviderKind, Settings
from tagmeister.core.errors import ConfigurationError
from tagmeister.workers.registry import (
    CLOUD_MODELS,
    ProviderRegistry,
    ProviderRouter,
    resolve_model,
)
from tagmeister.workers.vlm_anthropic_api import VLMAnthropicAPIProvider
from tagmeister.workers.vlm_lmstudio_local import VLMLMStudioLocalProvider
from tagmeister.workers.vlm_ollama_local import VLMOllamaLocalProvider
from tagmeister.workers.vlm_openai_api import VLMOpenAIAPIProvider
from conftest import FakeProvider


class TestResolveModel:

    @pytest.mark.parametrize("identifier, kind, model_id", [
        ("gpt-4o-mini", ProviderKind.OPENAI, "gpt-4o-mini"),
        ("gpt-4o", ProviderKind.OPENAI, "gpt-4o"),
        ("claude-3-7-sonnet-20250219", ProviderKind.ANTHROPIC, "claude-3-7-sonnet-20250219"),
        ("lmstudio:qwen2-vl-7b", ProviderKind.LMSTUDIO, "qwen2-vl-7b"),
        ("ollama:llava:latest", ProviderKind.OLLAMA, "llava"),
        ("ollama:llava:13b", ProviderKind.OLLAMA, "llava:13b"),
        ("something-else", ProviderKind.OPENAI, "something-else"),
    ])
    def test_resolve(self, identifier, kind, model_id):
        assert resolve_model(identifier) == (kind, model_id)


class TestRegistry:

    def test_scan_finds_all_four(self):
        ProviderRegistry.scan_providers()
        assert ProviderRegistry.get_provider_class(ProviderKind.OPENAI) is VLMOpenAIAPIProvider
        assert ProviderRegistry.get_provider_class(ProviderKind.ANTHROPIC) is VLMAnthropicAPIProvider
        assert ProviderRegistry.get_provider_class(ProviderKind.LMSTUDIO) is VLMLMStudioLocalProvider
        assert ProviderRegistry.get_provider_class(ProviderKind.OLLAMA) is VLMOllamaLocalProvider

    def test_display_names(self):
        names = {p["display_name"] for p in ProviderRegistry.get_providers()}
        assert names == {"OpenAI", "Anthropic", "LM Studio", "Ollama"}


class TestRouter:

    def test_route_builds_provider_from_settings(self):
        settings = Settings(anthropic_api_key="sk-ant", max_tokens=123, request_timeout=30.0)
        router = ProviderRouter(settings)
        provider, model_id = router.route("claude-3-7-sonnet-20250219")
        assert isinstance(provider, VLMAnthropicAPIProvider)
        assert model_id == "claude-3-7-sonnet-20250219"
        assert provider.config.api_key == "sk-ant"
        assert provider.max_tokens == 123
        assert provider.timeout == 30.0

    def test_one_instance_per_kind(self):
        router = ProviderRouter(Settings())
        first, _ = router.route("gpt-4o")
        second, _ = router.route("gpt-4o-mini")
        assert first is second

    def test_local_base_url_from_settings(self):
        router = ProviderRouter(Settings(ollama_base_url="http://gpu-box:11434/"))
        provider, model_id = router.route("ollama:llava")
        assert provider.endpoint_url() == "http://gpu-box:11434/api/generate"
        assert model_id == "llava"

    def test_ensure_ready_requires_key(self):
        router = ProviderRouter(Settings(openai_api_key=""))
        provider, _ = router.route("gpt-4o")
        with pytest.raises(ConfigurationError):
            router.ensure_ready(provider)

    def test_ensure_ready_checks_local_server_once(self):
        fake = FakeProvider({}, kind=ProviderKind.LMSTUDIO, display_name="LM Studio")
        fake.config.available = False
        checks = []

        def check_connection():
            checks.append(1)
            fake.config.available = True
            return True

        fake.check_connection = check_connection
        router = ProviderRouter(Settings(), providers={ProviderKind.LMSTUDIO: fake})

        router.ensure_ready(fake)
        router.ensure_ready(fake)
        assert checks == [1]

    def test_available_models_include_discovered(self):
        router = ProviderRouter(Settings())
        lmstudio = router.configs[ProviderKind.LMSTUDIO]
        lmstudio.available = True
        lmstudio.models = [ModelInfo("qwen2-vl", "Qwen2 VL")]
        ollama = router.configs[ProviderKind.OLLAMA]
        ollama.available = False
        ollama.models = [ModelInfo("llava:latest", "llava:latest")]

        models = router.available_models()

        assert models[:len(CLOUD_MODELS)] == CLOUD_MODELS
        assert ("lmstudio:qwen2-vl", "LM Studio: Qwen2 VL") in models
        assert not any(ident.startswith("ollama:") for ident, _ in models)
