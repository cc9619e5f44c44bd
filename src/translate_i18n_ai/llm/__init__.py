"""
LLM provider abstraction layer.

Supports multiple LLM backends:
- OpenRouter (default): Pay-per-token via OpenRouter API
- Claude Code: Use an existing Claude Pro/Max subscription via Claude Agent SDK
"""

from translate_i18n_ai.llm.base import LLMProvider, LLMResponse
from translate_i18n_ai.llm.factory import (
    LLMProviderType,
    create_llm_provider,
    create_llm_provider_with_fallback,
)

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LLMProviderType",
    "create_llm_provider",
    "create_llm_provider_with_fallback",
]
