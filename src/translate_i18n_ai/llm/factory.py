"""
LLM provider factory.

Creates the appropriate LLM provider based on configuration. Missing
credentials are reported here, before any content is processed.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from translate_i18n_ai.errors import ConfigurationError
from translate_i18n_ai.llm.base import LLMProvider

# Placeholder values shipped in example .env files.
_PLACEHOLDER_KEYS = {"sk-or-your-api-key-here", "your_api_key_here", "changeme"}


class LLMProviderType(str, Enum):
    """Available LLM provider types."""

    OPENROUTER = "openrouter"
    CLAUDE_CODE = "claude-code"


def _normalize(provider_type: LLMProviderType | str) -> LLMProviderType:
    if isinstance(provider_type, LLMProviderType):
        return provider_type
    normalized = str(provider_type).lower().replace("_", "-")
    try:
        return LLMProviderType(normalized)
    except ValueError:
        valid = [p.value for p in LLMProviderType]
        raise ConfigurationError(
            f"Invalid provider type: {provider_type}. Valid options: {valid}"
        ) from None


def create_llm_provider(
    provider_type: LLMProviderType | str,
    *,
    api_key: str | None = None,
    model: str = "default",
    **kwargs: Any,
) -> LLMProvider:
    """
    Create an LLM provider instance.

    Args:
        provider_type: Type of provider to create (openrouter or claude-code).
        api_key: API key (required for openrouter, ignored for claude-code).
        model: Model name or alias.
        **kwargs: Additional provider-specific options (timeout, max_retries).

    Returns:
        LLMProvider instance.

    Raises:
        ConfigurationError: If provider_type is invalid or the API key is missing.

    Examples:
        provider = create_llm_provider("openrouter", api_key="sk-or-...", model="fast")
        provider = create_llm_provider("claude-code", model="sonnet")
    """
    provider_type = _normalize(provider_type)

    if provider_type == LLMProviderType.OPENROUTER:
        if not api_key or not api_key.strip() or api_key.strip() in _PLACEHOLDER_KEYS:
            raise ConfigurationError(
                "OpenRouter provider requires an API key (set OPENROUTER_API_KEY)"
            )

        from translate_i18n_ai.llm.openrouter import OpenRouterProvider

        return OpenRouterProvider(api_key=api_key, model=model, **kwargs)

    from translate_i18n_ai.llm.claude_code import ClaudeCodeProvider

    return ClaudeCodeProvider(model=model, **kwargs)


def get_default_model_for_provider(provider_type: LLMProviderType | str) -> str:
    """Default model alias for a provider type."""
    defaults = {
        LLMProviderType.OPENROUTER: "anthropic/claude-sonnet-4.5",
        LLMProviderType.CLAUDE_CODE: "sonnet",
    }
    return defaults[_normalize(provider_type)]


def create_llm_provider_with_fallback(
    primary_provider: LLMProviderType | str,
    fallback_provider: LLMProviderType | str,
    *,
    primary_api_key: str | None = None,
    fallback_api_key: str | None = None,
    primary_model: str = "default",
    fallback_model: str = "default",
    **kwargs: Any,
) -> LLMProvider:
    """
    Create an LLM provider with automatic fallback support.

    Both providers are validated up front, so a missing fallback key fails at
    construction rather than on the first failed request.

    Example:
        provider = create_llm_provider_with_fallback(
            primary_provider="claude-code",
            fallback_provider="openrouter",
            fallback_api_key="sk-or-...",
        )
    """
    from translate_i18n_ai.llm.fallback import FallbackLLMProvider

    primary = create_llm_provider(
        primary_provider, api_key=primary_api_key, model=primary_model, **kwargs
    )
    fallback = create_llm_provider(
        fallback_provider, api_key=fallback_api_key, model=fallback_model, **kwargs
    )
    return FallbackLLMProvider(primary=primary, fallback=fallback)
