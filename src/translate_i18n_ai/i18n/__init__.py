"""
Tree-level i18n building blocks.

Provides:
- Skip rules over dotted key paths
- Placeholder masking for ``{{name}}`` and ICU arguments
- CLDR plural families and per-locale expansion
- Tree flattening/rebuilding and namespace detection
"""

from translate_i18n_ai.i18n.namespaces import NamespaceDetector, NamespaceEntry, NamespaceInfo
from translate_i18n_ai.i18n.paths import KeyPath, PathMatcher, format_path, is_excluded
from translate_i18n_ai.i18n.placeholders import (
    MaskedText,
    Placeholder,
    PlaceholderMasker,
    mask,
    unmask,
)
from translate_i18n_ai.i18n.plurals import (
    PLURAL_CATEGORIES,
    PluralFamily,
    PluralFamilyResolver,
    required_categories,
)
from translate_i18n_ai.i18n.tree import TranslationUnit, TreeFlattener, TreeRebuilder

__all__ = [
    "KeyPath",
    "PathMatcher",
    "format_path",
    "is_excluded",
    "MaskedText",
    "Placeholder",
    "PlaceholderMasker",
    "mask",
    "unmask",
    "PLURAL_CATEGORIES",
    "PluralFamily",
    "PluralFamilyResolver",
    "required_categories",
    "TranslationUnit",
    "TreeFlattener",
    "TreeRebuilder",
    "NamespaceDetector",
    "NamespaceEntry",
    "NamespaceInfo",
]
