"""
OpenRouter LLM provider.

Uses the OpenAI-compatible API via OpenRouter to access multiple LLM providers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import openai
from openai import AsyncOpenAI

from translate_i18n_ai.errors import BackendError, BackendErrorCategory
from translate_i18n_ai.llm.base import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


def classify_openai_error(error: Exception) -> BackendError:
    """Map an OpenAI SDK exception onto a BackendError with a status category."""
    if isinstance(error, openai.AuthenticationError | openai.PermissionDeniedError):
        category, code = BackendErrorCategory.AUTHENTICATION, "INVALID_API_KEY"
    elif isinstance(error, openai.RateLimitError):
        category, code = BackendErrorCategory.RATE_LIMIT, "RATE_LIMITED"
    elif isinstance(error, openai.APITimeoutError | openai.APIConnectionError):
        category, code = BackendErrorCategory.NETWORK, "NETWORK_ERROR"
    elif isinstance(error, openai.BadRequestError | openai.UnprocessableEntityError):
        category, code = BackendErrorCategory.INVALID_REQUEST, "INVALID_REQUEST"
    elif isinstance(error, openai.InternalServerError):
        category, code = BackendErrorCategory.SERVER, "SERVER_ERROR"
    elif isinstance(error, openai.APIStatusError):
        category = (
            BackendErrorCategory.SERVER
            if error.status_code >= 500
            else BackendErrorCategory.INVALID_REQUEST
        )
        code = f"HTTP_{error.status_code}"
    else:
        category, code = BackendErrorCategory.UNKNOWN, None

    message = getattr(error, "message", None) or str(error) or type(error).__name__
    backend_error = BackendError(message, status_category=category, code=code)
    backend_error.__cause__ = error
    return backend_error


class OpenRouterProvider(LLMProvider):
    """
    OpenRouter LLM provider.

    Uses OpenRouter's unified API to access Claude, GPT, Gemini, DeepSeek, etc.
    Requires an OpenRouter API key and charges per token.
    """

    # Model aliases for convenience
    MODELS = {
        "default": "anthropic/claude-sonnet-4.5",
        "fast": "anthropic/claude-3-haiku",
        "quality": "anthropic/claude-3-opus",
        "deepseek": "deepseek/deepseek-chat",
        "gemini": "google/gemini-pro-1.5",
    }

    def __init__(
        self,
        api_key: str,
        model: str = "default",
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 120.0,
        max_retries: int = 3,
    ):
        """
        Initialize OpenRouter provider.

        Args:
            api_key: OpenRouter API key.
            model: Model key (from MODELS) or full model name.
            base_url: API base URL.
            timeout: Request timeout in seconds.
            max_retries: Attempts for transient failures (rate limits, network, 5xx).
        """
        self._model_name = self.MODELS.get(model, model)
        self._max_retries = max(1, max_retries)

        # Retries are handled here so they can be limited to transient errors.
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return "openrouter"

    @property
    def model(self) -> str:
        return self._model_name

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a completion via OpenRouter.

        Raises:
            BackendError: When the request fails for good; transient failures
                are retried with exponential backoff first.
        """
        start_time = time.perf_counter()

        for attempt in range(self._max_retries):
            try:
                response = await self._client.chat.completions.create(
                    model=self._model_name,
                    messages=messages,  # type: ignore[arg-type]
                    temperature=temperature,
                    max_tokens=max_tokens,
                    **kwargs,
                )
            except openai.OpenAIError as e:
                error = classify_openai_error(e)
                if not error.status_category.transient or attempt == self._max_retries - 1:
                    raise error from e
                delay = 2**attempt
                logger.warning(
                    "OpenRouter request failed (%s), retrying in %ss (attempt %d/%d)",
                    error.status_category.value,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                await asyncio.sleep(delay)
                continue

            latency_ms = (time.perf_counter() - start_time) * 1000
            content = response.choices[0].message.content or ""
            usage = response.usage

            return LLMResponse(
                content=content.strip(),
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
                model=self._model_name,
                latency_ms=latency_ms,
                metadata={
                    "provider": "openrouter",
                    "finish_reason": response.choices[0].finish_reason,
                    "attempt": attempt + 1,
                },
            )

        raise BackendError("OpenRouter request failed after retries")
