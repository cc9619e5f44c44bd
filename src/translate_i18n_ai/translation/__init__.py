"""
Translation pipeline for translate-i18n-ai.

Provides:
- Batch translation of JSON/i18n trees into several locales
- Pluggable backends (LLM-backed by default)
- Skip reports, structural warnings and namespace detection
"""

from translate_i18n_ai.translation.backend import (
    BatchRequest,
    LLMTranslationBackend,
    TranslationBackend,
)
from translate_i18n_ai.translation.models import (
    SkippedKeys,
    TextTranslation,
    TranslationOptions,
    TranslationResult,
    TranslationWarning,
    WarningKind,
)
from translate_i18n_ai.translation.pipeline import TranslationPipeline
from translate_i18n_ai.translation.translator import I18nTranslator

__all__ = [
    "I18nTranslator",
    "TranslationPipeline",
    "TranslationBackend",
    "LLMTranslationBackend",
    "BatchRequest",
    "TranslationOptions",
    "TranslationResult",
    "TranslationWarning",
    "WarningKind",
    "SkippedKeys",
    "TextTranslation",
]
