"""
LLM provider interface.

``LLMTranslationBackend`` sends exactly one system/user prompt pair per
locale batch through ``LLMProvider.chat``. Concrete providers only implement
``complete``; batch labelling and usage logging live here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

Message = dict[str, str]


@dataclass
class LLMResponse:
    """Reply text and usage accounting for one request."""

    content: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def prompt_messages(system_prompt: str, user_prompt: str) -> list[Message]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def split_system_prompt(messages: list[Message]) -> tuple[str | None, str]:
    """
    Separate the system message from the user turns.

    For transports that take a single prompt string. User turns are joined
    with blank lines; the last system message wins.
    """
    system_prompt = None
    user_parts = []
    for message in messages:
        role = message.get("role", "user")
        if role == "system":
            system_prompt = message.get("content", "")
        elif role == "user":
            user_parts.append(message.get("content", ""))
    return system_prompt, "\n\n".join(user_parts)


class LLMProvider(ABC):
    """
    A chat model reachable through one transport.

    Providers own authentication, timeouts and retries, and raise
    ``BackendError`` once a request has failed for good.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        ...

    @property
    def label(self) -> str:
        return f"{self.name}/{self.model}"

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Send ``messages`` and return the model's reply.

        Raises:
            BackendError: If the request cannot be completed.
        """
        ...

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        target_locale: str | None = None,
        batch_size: int = 0,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Send one translation batch as a system + user prompt pair.

        Args:
            system_prompt: Localisation rules for the batch.
            user_prompt: The items to translate.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens for the whole batch.
            target_locale: Locale the batch is written in, for logging.
            batch_size: Number of strings in the batch, for logging.
            **kwargs: Provider-specific options passed to ``complete``.
        """
        response = await self.complete(
            prompt_messages(system_prompt, user_prompt),
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        logger.debug(
            "%s translated %d strings to %s in %.0fms (%d in / %d out tokens)",
            self.label,
            batch_size,
            target_locale or "?",
            response.latency_ms,
            response.input_tokens,
            response.output_tokens,
        )
        return response
