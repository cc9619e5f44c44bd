"""
Options and result types for the translation pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError
from pydantic.alias_generators import to_camel

from translate_i18n_ai.errors import ConfigurationError
from translate_i18n_ai.i18n.namespaces import NamespaceInfo


class TranslationOptions(BaseModel):
    """
    Per-call pipeline options.

    Accepts snake_case or camelCase keys (``skip_paths`` / ``skipPaths``).
    Unknown keys are rejected.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    preserve_placeholders: StrictBool = True
    enable_pluralization: StrictBool = True
    skip_keys: tuple[str, ...] = Field(default_factory=tuple)
    skip_paths: tuple[str, ...] = Field(default_factory=tuple)
    detect_namespaces: StrictBool = False

    @classmethod
    def coerce(
        cls,
        options: TranslationOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> TranslationOptions:
        """
        Build options from an instance, a mapping or keyword overrides.

        Only fields the caller actually set are carried over from an
        instance, so the result can still be layered over other defaults.

        Raises:
            ConfigurationError: If the options are malformed.
        """
        if isinstance(options, TranslationOptions):
            data: dict[str, Any] = options.model_dump(exclude_unset=True)
        elif options is None:
            data = {}
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            raise ConfigurationError(f"Options must be a mapping, got {type(options).__name__}")
        data.update(overrides)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid translation options: {e}") from e


class WarningKind(str, Enum):
    """Kinds of non-fatal anomalies collected during a translation."""

    PLACEHOLDER_MISMATCH = "placeholder_mismatch"
    PLURAL_CATEGORY_DROPPED = "plural_category_dropped"
    PLURAL_LOCALE_UNKNOWN = "plural_locale_unknown"


@dataclass(frozen=True)
class TranslationWarning:
    """A structural anomaly that did not abort the translation."""

    message: str
    key_path: str | None = None
    locale: str | None = None
    kind: WarningKind | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"message": self.message}
        if self.key_path is not None:
            data["keyPath"] = self.key_path
        if self.locale is not None:
            data["locale"] = self.locale
        if self.kind is not None:
            data["kind"] = self.kind.value
        return data


@dataclass(frozen=True)
class SkippedKeys:
    """Key paths excluded by skip rules, in traversal order."""

    keys: tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.keys)

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "keys": list(self.keys)}


@dataclass(frozen=True)
class TextTranslation:
    """One translated string from text-mode input."""

    original: str
    translated: str

    def to_dict(self) -> dict[str, str]:
        return {"original": self.original, "translated": self.translated}


@dataclass(frozen=True)
class TranslationResult:
    """
    Result of one ``translate`` call.

    ``per_language`` maps each target locale to its translated tree, or to a
    list of TextTranslation pairs for text-mode input.
    """

    per_language: Mapping[str, Any]
    skipped: SkippedKeys = field(default_factory=SkippedKeys)
    warnings: tuple[TranslationWarning, ...] = ()
    namespace_info: NamespaceInfo | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "per_language", MappingProxyType(dict(self.per_language)))

    def __getitem__(self, locale: str) -> Any:
        return self.per_language[locale]

    def __contains__(self, locale: object) -> bool:
        return locale in self.per_language

    @property
    def languages(self) -> list[str]:
        return list(self.per_language)

    def to_dict(self) -> dict[str, Any]:
        """Render as a JSON-compatible dict keyed by locale plus report fields."""
        data: dict[str, Any] = {}
        for locale, content in self.per_language.items():
            if isinstance(content, list) and all(isinstance(c, TextTranslation) for c in content):
                data[locale] = [c.to_dict() for c in content]
            else:
                data[locale] = content
        data["skipped"] = self.skipped.to_dict()
        data["warnings"] = [w.to_dict() for w in self.warnings]
        if self.namespace_info is not None:
            data["namespaceInfo"] = self.namespace_info.to_dict()
        return data
