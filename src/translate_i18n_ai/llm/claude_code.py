"""
Claude Code LLM provider.

Runs translation batches through the Claude Agent SDK, which reuses the
logged-in Claude Code CLI session instead of an API key. Install with
``pip install translate-i18n-ai[claude-code]``.
"""

from __future__ import annotations

import importlib.util
import time
from typing import Any

from translate_i18n_ai.errors import BackendError, BackendErrorCategory, ConfigurationError
from translate_i18n_ai.llm.base import LLMProvider, LLMResponse, Message, split_system_prompt

MODELS = {
    "default": "sonnet",
    "fast": "haiku",
    "quality": "opus",
    "sonnet": "sonnet",
    "opus": "opus",
    "haiku": "haiku",
}


def sdk_installed() -> bool:
    return importlib.util.find_spec("claude_agent_sdk") is not None


def classify_sdk_error(error: Exception) -> BackendError | ConfigurationError:
    """Map an SDK failure to the error a caller can act on."""
    text = str(error).lower()
    if "not authenticated" in text or "login" in text:
        return BackendError(
            "Claude Code not authenticated. Run 'claude login' to authenticate.",
            status_category=BackendErrorCategory.AUTHENTICATION,
            code="NOT_AUTHENTICATED",
        )
    if "rate limit" in text or "usage limit" in text:
        return BackendError(
            f"Claude Code usage limit reached: {error}",
            status_category=BackendErrorCategory.RATE_LIMIT,
            code="RATE_LIMITED",
        )
    if "cli not found" in text or "command not found" in text:
        return ConfigurationError(
            "Claude Code CLI not found. Install with: npm install -g @anthropic-ai/claude-code"
        )
    return BackendError(str(error), status_category=BackendErrorCategory.UNKNOWN)


class ClaudeCodeProvider(LLMProvider):
    """
    Provider backed by a Claude Pro/Max subscription.

    Each batch is a single-turn query with tools disabled, so the model can
    only answer with text.
    """

    MODELS = MODELS

    def __init__(
        self,
        model: str = "default",
        max_turns: int = 1,
        timeout: float = 120.0,
        max_retries: int = 1,
    ):
        """
        Args:
            model: Model key (sonnet, opus, haiku) or alias (default, fast, quality).
            max_turns: Conversation turns per batch.
            timeout: Accepted for factory symmetry; the CLI enforces its own.
            max_retries: Accepted for factory symmetry; the SDK handles retries.
        """
        self._model_name = MODELS.get(model, model)
        self._max_turns = max_turns
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "claude-code"

    @property
    def model(self) -> str:
        return self._model_name

    async def complete(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Run one batch through the SDK.

        ``temperature`` and ``max_tokens`` are not exposed by the SDK and are
        ignored.
        """
        if not sdk_installed():
            raise ConfigurationError(
                "Claude Agent SDK not installed. Install with: "
                "pip install translate-i18n-ai[claude-code]"
            )

        from claude_agent_sdk import ClaudeAgentOptions, query

        system_prompt, prompt = split_system_prompt(messages)
        options = ClaudeAgentOptions(
            system_prompt=system_prompt,
            model=self._model_name,
            max_turns=self._max_turns,
            allowed_tools=[],
        )

        start_time = time.perf_counter()
        text_blocks: list[str] = []
        input_tokens = output_tokens = 0
        try:
            async for message in query(prompt=prompt, options=options):
                for block in getattr(message, "content", None) or ():
                    text = getattr(block, "text", None)
                    if text:
                        text_blocks.append(text)
                usage = getattr(message, "usage", None)
                if isinstance(usage, dict):
                    input_tokens = usage.get("input_tokens", input_tokens)
                    output_tokens = usage.get("output_tokens", output_tokens)
        except Exception as e:
            raise classify_sdk_error(e) from e

        return LLMResponse(
            content="".join(text_blocks).strip(),
            model=f"claude-code/{self._model_name}",
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            metadata={"provider": "claude-code", "subscription_based": True},
        )
