"""
Caller-facing translator.

Wraps provider creation, the LLM backend and the pipeline behind three calls
mirroring the hosted service: ``translate_json``, ``translate_text`` and
``translate_i18next``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from translate_i18n_ai.config import Settings
from translate_i18n_ai.errors import ConfigurationError
from translate_i18n_ai.llm import LLMProviderType, create_llm_provider, create_llm_provider_with_fallback
from translate_i18n_ai.llm.base import LLMProvider
from translate_i18n_ai.translation.backend import LLMTranslationBackend, TranslationBackend
from translate_i18n_ai.translation.models import TranslationOptions, TranslationResult
from translate_i18n_ai.translation.pipeline import TranslationPipeline, is_text_content

# Applied by translate_i18next above translator defaults, below caller options.
I18NEXT_DEFAULTS: dict[str, Any] = {
    "preserve_placeholders": True,
    "enable_pluralization": True,
    "detect_namespaces": True,
}


class I18nTranslator:
    """
    Translates JSON/i18n resources and plain text.

    Provider configuration is validated on construction: a missing API key
    raises ConfigurationError before any content is touched.
    """

    def __init__(
        self,
        *,
        provider: LLMProviderType | str = LLMProviderType.OPENROUTER,
        api_key: str | None = None,
        model: str = "default",
        fallback_provider: LLMProviderType | str | None = None,
        fallback_model: str = "default",
        temperature: float = 0.3,
        max_tokens: int = 8192,
        timeout: float = 120.0,
        max_retries: int = 3,
        max_concurrent_locales: int = 4,
        source_locale: str = "en",
        defaults: TranslationOptions | Mapping[str, Any] | None = None,
        backend: TranslationBackend | None = None,
    ):
        """
        Initialize translator.

        Args:
            provider: LLM provider type ("openrouter" or "claude-code").
            api_key: OpenRouter API key (required when any provider is openrouter).
            model: Model key or full model name.
            fallback_provider: Optional provider used when the primary fails.
            fallback_model: Model for the fallback provider.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens per batch.
            timeout: Request timeout in seconds.
            max_retries: Retry attempts for transient failures.
            max_concurrent_locales: Target locales translated in parallel.
            source_locale: Default source locale.
            defaults: Default pipeline options merged under per-call options.
            backend: Ready-made backend; skips provider creation when given.
        """
        self.source_locale = source_locale
        self._defaults = TranslationOptions.coerce(defaults)
        self._provider: LLMProvider | None = None

        if backend is None:
            options: dict[str, Any] = {"timeout": timeout, "max_retries": max_retries}
            if fallback_provider:
                self._provider = create_llm_provider_with_fallback(
                    provider,
                    fallback_provider,
                    primary_api_key=api_key,
                    fallback_api_key=api_key,
                    primary_model=model,
                    fallback_model=fallback_model,
                    **options,
                )
            else:
                self._provider = create_llm_provider(provider, api_key=api_key, model=model, **options)
            backend = LLMTranslationBackend(
                self._provider, temperature=temperature, max_tokens=max_tokens
            )

        self._pipeline = TranslationPipeline(backend, max_concurrent_locales=max_concurrent_locales)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> I18nTranslator:
        """Build a translator from loaded settings."""
        cfg = settings.translation
        params: dict[str, Any] = {
            "provider": cfg.provider.value,
            "api_key": cfg.openrouter_api_key or None,
            "model": cfg.default_model,
            "fallback_provider": cfg.fallback_provider.value if cfg.fallback_provider else None,
            "fallback_model": cfg.fallback_model or "default",
            "temperature": cfg.temperature,
            "max_tokens": cfg.max_tokens_per_request,
            "timeout": cfg.timeout_seconds,
            "max_retries": cfg.max_retries,
            "max_concurrent_locales": cfg.max_concurrent_locales,
            "source_locale": cfg.source_language,
            "defaults": settings.defaults.model_dump(),
        }
        params.update(kwargs)
        return cls(**params)

    @property
    def provider(self) -> LLMProvider | None:
        return self._provider

    @property
    def pipeline(self) -> TranslationPipeline:
        return self._pipeline

    async def translate(
        self,
        content: Any,
        target_languages: str | Sequence[str],
        *,
        source_language: str | None = None,
        options: TranslationOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> TranslationResult:
        """Translate content with the translator defaults merged under ``options``."""
        return await self._pipeline.translate(
            content,
            source_language or self.source_locale,
            target_languages,
            self.resolve_options(options, overrides),
        )

    def resolve_options(
        self, *layers: TranslationOptions | Mapping[str, Any] | None
    ) -> TranslationOptions:
        """
        Merge option layers over the translator defaults.

        Later layers win, and each layer only contributes the fields it sets.
        """
        merged = self._defaults.model_dump()
        for layer in layers:
            if layer:
                merged.update(TranslationOptions.coerce(layer).model_dump(exclude_unset=True))
        return TranslationOptions.coerce(merged)

    async def translate_json(
        self,
        content: Mapping[str, Any] | list[Any],
        target_languages: str | Sequence[str],
        **kwargs: Any,
    ) -> TranslationResult:
        """Translate a nested JSON tree."""
        if not isinstance(content, Mapping | list):
            raise ConfigurationError("translate_json expects a JSON object or array")
        return await self.translate(content, target_languages, **kwargs)

    async def translate_text(
        self,
        content: str | list[str],
        target_languages: str | Sequence[str],
        **kwargs: Any,
    ) -> TranslationResult:
        """Translate a string or a list of strings."""
        if not is_text_content(content):
            raise ConfigurationError("translate_text expects a string or a list of strings")
        return await self.translate(content, target_languages, **kwargs)

    async def translate_i18next(
        self,
        content: Mapping[str, Any],
        target_languages: str | Sequence[str],
        *,
        source_language: str | None = None,
        options: TranslationOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> TranslationResult:
        """
        Translate an i18next resource.

        Placeholders, plurals and the namespace report default to on; explicit
        ``options`` or keyword overrides still turn them off.
        """
        if not isinstance(content, Mapping):
            raise ConfigurationError("translate_i18next expects a JSON object")
        return await self._pipeline.translate(
            content,
            source_language or self.source_locale,
            target_languages,
            self.resolve_options(I18NEXT_DEFAULTS, options, overrides),
        )

    def translate_sync(self, content: Any, target_languages: str | Sequence[str], **kwargs: Any) -> TranslationResult:
        """Blocking wrapper around ``translate`` for scripts without an event loop."""
        return asyncio.run(self.translate(content, target_languages, **kwargs))
