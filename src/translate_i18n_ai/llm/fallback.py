"""
Fallback LLM provider wrapper.

Automatically retries failed requests with a fallback provider.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from translate_i18n_ai.errors import BackendError
from translate_i18n_ai.llm.base import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class FallbackLLMProvider(LLMProvider):
    """
    LLM provider wrapper with automatic fallback.

    Attempts requests with the primary provider first. If the primary raises a
    BackendError, the same request is sent to the fallback provider.
    """

    def __init__(self, primary: LLMProvider, fallback: LLMProvider):
        self._primary = primary
        self._fallback = fallback

        self._primary_requests = 0
        self._fallback_requests = 0
        self._primary_failures = 0

    @property
    def name(self) -> str:
        return f"{self._primary.name}+{self._fallback.name}"

    @property
    def model(self) -> str:
        return self._primary.model

    @property
    def primary_provider(self) -> LLMProvider:
        return self._primary

    @property
    def fallback_provider(self) -> LLMProvider:
        return self._fallback

    def get_stats(self) -> dict[str, Any]:
        """
        Get usage statistics.

        Returns:
            Dictionary with request counts and failure rates.
        """
        total_requests = self._primary_requests + self._fallback_requests
        return {
            "total_requests": total_requests,
            "primary_requests": self._primary_requests,
            "fallback_requests": self._fallback_requests,
            "primary_failures": self._primary_failures,
            "fallback_rate": (
                self._fallback_requests / total_requests if total_requests > 0 else 0.0
            ),
        }

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a completion with automatic fallback.

        Raises:
            BackendError: If both primary and fallback providers fail. The
                fallback's error is raised, chained to the primary's.
        """
        start_time = time.perf_counter()

        try:
            response = await self._primary.complete(
                messages, temperature=temperature, max_tokens=max_tokens, **kwargs
            )
        except BackendError as e:
            primary_error = e
            self._primary_failures += 1
            logger.warning(
                "Primary provider %s (%s) failed, switching to fallback %s: %s",
                self._primary.name,
                self._primary.model,
                self._fallback.name,
                primary_error,
            )
        else:
            self._primary_requests += 1
            response.metadata["provider_used"] = "primary"
            return response

        try:
            response = await self._fallback.complete(
                messages, temperature=temperature, max_tokens=max_tokens, **kwargs
            )
        except BackendError as fallback_error:
            logger.error(
                "Both providers failed (primary %s: %s; fallback %s: %s)",
                self._primary.name,
                primary_error,
                self._fallback.name,
                fallback_error,
            )
            raise fallback_error from primary_error

        self._fallback_requests += 1
        response.metadata["provider_used"] = "fallback"
        response.metadata["primary_error"] = str(primary_error)
        logger.info(
            "Fallback provider %s (%s) succeeded after %.0fms",
            self._fallback.name,
            self._fallback.model,
            (time.perf_counter() - start_time) * 1000,
        )
        return response
