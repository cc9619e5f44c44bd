import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from conftest import FakeProvider, backend_error

from translate_i18n_ai.errors import BackendError, BackendErrorCategory, ConfigurationError
from translate_i18n_ai.llm import (
    LLMProviderType,
    create_llm_provider,
    create_llm_provider_with_fallback,
)
from translate_i18n_ai.llm import claude_code
from translate_i18n_ai.llm.base import LLMResponse, split_system_prompt
from translate_i18n_ai.llm.claude_code import ClaudeCodeProvider, classify_sdk_error
from translate_i18n_ai.llm.factory import get_default_model_for_provider
from translate_i18n_ai.llm.fallback import FallbackLLMProvider
from translate_i18n_ai.llm.openrouter import OpenRouterProvider, classify_openai_error

REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


def status_error(cls, status):
    return cls("failure", response=httpx.Response(status, request=REQUEST), body=None)


def completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=5),
    )


class TestFactory:
    def test_openrouter_requires_api_key(self):
        with pytest.raises(ConfigurationError):
            create_llm_provider("openrouter")

    @pytest.mark.parametrize("key", ["", "  ", "changeme", "sk-or-your-api-key-here"])
    def test_placeholder_keys_are_rejected(self, key):
        with pytest.raises(ConfigurationError):
            create_llm_provider(LLMProviderType.OPENROUTER, api_key=key)

    def test_openrouter_resolves_model_alias(self):
        provider = create_llm_provider("openrouter", api_key="sk-or-test", model="fast")

        assert isinstance(provider, OpenRouterProvider)
        assert provider.name == "openrouter"
        assert provider.model == "anthropic/claude-3-haiku"

    def test_claude_code_needs_no_key(self):
        provider = create_llm_provider("claude_code", model="quality")

        assert isinstance(provider, ClaudeCodeProvider)
        assert provider.model == "opus"

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError, match="Invalid provider type"):
            create_llm_provider("deepl")

    def test_fallback_validates_both_providers(self):
        with pytest.raises(ConfigurationError):
            create_llm_provider_with_fallback("claude-code", "openrouter")

        provider = create_llm_provider_with_fallback(
            "claude-code", "openrouter", fallback_api_key="sk-or-test"
        )
        assert isinstance(provider, FallbackLLMProvider)
        assert provider.name == "claude-code+openrouter"

    def test_default_models(self):
        assert get_default_model_for_provider("openrouter") == "anthropic/claude-sonnet-4.5"
        assert get_default_model_for_provider("claude-code") == "sonnet"


class TestClassifyOpenAIError:
    @pytest.mark.parametrize(
        "error, category, code",
        [
            (status_error(openai.AuthenticationError, 401), "authentication", "INVALID_API_KEY"),
            (status_error(openai.PermissionDeniedError, 403), "authentication", "INVALID_API_KEY"),
            (status_error(openai.RateLimitError, 429), "rate_limit", "RATE_LIMITED"),
            (status_error(openai.BadRequestError, 400), "invalid_request", "INVALID_REQUEST"),
            (status_error(openai.InternalServerError, 503), "server", "SERVER_ERROR"),
            (status_error(openai.ConflictError, 409), "invalid_request", "HTTP_409"),
            (openai.APIConnectionError(request=REQUEST), "network", "NETWORK_ERROR"),
            (openai.APITimeoutError(request=REQUEST), "network", "NETWORK_ERROR"),
        ],
    )
    def test_categories(self, error, category, code):
        classified = classify_openai_error(error)

        assert classified.status_category is BackendErrorCategory(category)
        assert classified.code == code
        assert classified.__cause__ is error

    def test_transient_categories(self):
        assert BackendErrorCategory.RATE_LIMIT.transient
        assert BackendErrorCategory.SERVER.transient
        assert not BackendErrorCategory.AUTHENTICATION.transient
        assert not BackendErrorCategory.MALFORMED_RESPONSE.transient


class TestOpenRouterProvider:
    @pytest.fixture
    def provider(self, monkeypatch):
        monkeypatch.setattr("translate_i18n_ai.llm.openrouter.asyncio.sleep", AsyncMock())
        provider = OpenRouterProvider(api_key="sk-or-test", max_retries=3)
        provider._client = MagicMock()
        return provider

    @pytest.mark.asyncio
    async def test_returns_response(self, provider):
        provider._client.chat.completions.create = AsyncMock(return_value=completion(' ["Hola"] '))

        response = await provider.chat("system", "user")

        assert response.content == '["Hola"]'
        assert response.input_tokens == 12
        assert response.output_tokens == 5
        assert response.metadata["attempt"] == 1

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self, provider):
        provider._client.chat.completions.create = AsyncMock(
            side_effect=[status_error(openai.RateLimitError, 429), completion("[]")]
        )

        response = await provider.chat("system", "user")

        assert response.metadata["attempt"] == 2
        assert provider._client.chat.completions.create.await_count == 2

    @pytest.mark.asyncio
    async def test_does_not_retry_authentication_errors(self, provider):
        provider._client.chat.completions.create = AsyncMock(
            side_effect=status_error(openai.AuthenticationError, 401)
        )

        with pytest.raises(BackendError) as excinfo:
            await provider.chat("system", "user")

        assert excinfo.value.code == "INVALID_API_KEY"
        assert provider._client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, provider):
        provider._client.chat.completions.create = AsyncMock(
            side_effect=status_error(openai.InternalServerError, 500)
        )

        with pytest.raises(BackendError) as excinfo:
            await provider.chat("system", "user")

        assert excinfo.value.status_category is BackendErrorCategory.SERVER
        assert provider._client.chat.completions.create.await_count == 3


class TestFallbackProvider:
    @pytest.mark.asyncio
    async def test_primary_success(self):
        provider = FallbackLLMProvider(FakeProvider(["a"], "one"), FakeProvider([], "two"))

        response = await provider.chat("s", "u")

        assert response.content == "a"
        assert response.metadata["provider_used"] == "primary"
        assert provider.get_stats()["primary_requests"] == 1

    @pytest.mark.asyncio
    async def test_switches_to_fallback(self, caplog):
        primary = FakeProvider([backend_error("primary down")], "one")
        provider = FallbackLLMProvider(primary, FakeProvider(["b"], "two"))

        response = await provider.chat("s", "u")

        assert response.content == "b"
        assert response.metadata["provider_used"] == "fallback"
        assert response.metadata["primary_error"] == "primary down"
        stats = provider.get_stats()
        assert stats["primary_failures"] == 1
        assert stats["fallback_rate"] == 1.0
        assert "switching to fallback" in caplog.text

    @pytest.mark.asyncio
    async def test_both_fail(self):
        primary_error = backend_error("primary down")
        fallback_error = backend_error("fallback down", BackendErrorCategory.AUTHENTICATION)
        provider = FallbackLLMProvider(
            FakeProvider([primary_error], "one"), FakeProvider([fallback_error], "two")
        )

        with pytest.raises(BackendError) as excinfo:
            await provider.chat("s", "u")

        assert excinfo.value is fallback_error
        assert excinfo.value.__cause__ is primary_error


class TestProviderInterface:
    @pytest.mark.asyncio
    async def test_chat_sends_one_prompt_pair_and_logs_the_batch(self, caplog):
        caplog.set_level(logging.DEBUG, logger="translate_i18n_ai")
        provider = FakeProvider(["ok"])

        response = await provider.chat("rules", "items", target_locale="es", batch_size=3)

        assert response.content == "ok"
        [call] = provider.calls
        assert call["messages"] == [
            {"role": "system", "content": "rules"},
            {"role": "user", "content": "items"},
        ]
        assert "fake/fake-model translated 3 strings to es" in caplog.text

    def test_split_system_prompt(self):
        system, prompt = split_system_prompt(
            [
                {"role": "system", "content": "rules"},
                {"role": "user", "content": "first"},
                {"role": "assistant", "content": "ignored"},
                {"role": "user", "content": "second"},
            ]
        )

        assert system == "rules"
        assert prompt == "first\n\nsecond"

    def test_total_tokens(self):
        assert LLMResponse("x", input_tokens=12, output_tokens=5).total_tokens == 17


class TestClaudeCode:
    @pytest.mark.parametrize(
        "message, category",
        [
            ("Not authenticated, please login", BackendErrorCategory.AUTHENTICATION),
            ("Usage limit reached for this period", BackendErrorCategory.RATE_LIMIT),
            ("socket closed", BackendErrorCategory.UNKNOWN),
        ],
    )
    def test_classify_sdk_error(self, message, category):
        error = classify_sdk_error(RuntimeError(message))

        assert isinstance(error, BackendError)
        assert error.status_category is category

    def test_missing_cli_is_a_configuration_error(self):
        error = classify_sdk_error(RuntimeError("Claude Code CLI not found"))

        assert isinstance(error, ConfigurationError)

    @pytest.mark.asyncio
    async def test_missing_sdk_fails_before_any_request(self, monkeypatch):
        monkeypatch.setattr(claude_code, "sdk_installed", lambda: False)

        with pytest.raises(ConfigurationError, match="not installed"):
            await ClaudeCodeProvider().chat("rules", "items")
