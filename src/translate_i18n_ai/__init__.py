"""
translate-i18n-ai: AI-powered translation of JSON and i18n resource files.

This package provides tools for:
- Translating nested JSON trees into many locales in one call
- Protecting {{interpolation}} and ICU placeholders from the translator
- Expanding i18next plural families to each language's CLDR categories
- Skipping keys by exact path or glob pattern
"""

__version__ = "0.1.0"
__author__ = "yharby"

from translate_i18n_ai.config import Settings, load_config
from translate_i18n_ai.errors import (
    BackendError,
    BackendErrorCategory,
    ConfigurationError,
    TranslateI18nError,
)
from translate_i18n_ai.i18n import (
    NamespaceDetector,
    PathMatcher,
    PlaceholderMasker,
    PluralFamilyResolver,
    TreeFlattener,
    TreeRebuilder,
)
from translate_i18n_ai.translation import (
    I18nTranslator,
    TranslationBackend,
    TranslationOptions,
    TranslationPipeline,
    TranslationResult,
)

__all__ = [
    # Config
    "Settings",
    "load_config",
    # Errors
    "TranslateI18nError",
    "ConfigurationError",
    "BackendError",
    "BackendErrorCategory",
    # Tree components
    "PathMatcher",
    "PlaceholderMasker",
    "PluralFamilyResolver",
    "TreeFlattener",
    "TreeRebuilder",
    "NamespaceDetector",
    # Translation
    "I18nTranslator",
    "TranslationPipeline",
    "TranslationBackend",
    "TranslationOptions",
    "TranslationResult",
]
