"""
Plural families and CLDR plural categories.

i18next-style resources express plurals as sibling keys sharing a stem, for
example ``items_one`` / ``items_other``. Target languages need a different set
of forms (Russian needs ``one``, ``few``, ``many`` and ``other``), so families
are expanded or contracted per target locale.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from translate_i18n_ai.i18n.paths import KeyPath

if TYPE_CHECKING:
    from translate_i18n_ai.i18n.tree import TranslationUnit

CATEGORY_ORDER: tuple[str, ...] = ("zero", "one", "two", "few", "many", "other")

DEFAULT_CATEGORIES: tuple[str, ...] = ("one", "other")

PLURAL_SUFFIX_RE = re.compile(rf"^(?P<stem>.+)_(?P<category>{'|'.join(CATEGORY_ORDER)})$")

_OTHER = ("other",)
_ONE_OTHER = ("one", "other")
_ONE_FEW_OTHER = ("one", "few", "other")
_ONE_FEW_MANY_OTHER = ("one", "few", "many", "other")
_ALL = CATEGORY_ORDER


def _table(groups: Mapping[tuple[str, ...], Iterable[str]]) -> Mapping[str, tuple[str, ...]]:
    table: dict[str, tuple[str, ...]] = {}
    for categories, languages in groups.items():
        for language in languages:
            table[language] = categories
    return MappingProxyType(table)


# Required cardinal categories per language, in canonical order.
# Romance languages use the one/other pair that translation files carry in
# practice (the CLDR "many" form for compact millions is not emitted).
PLURAL_CATEGORIES: Mapping[str, tuple[str, ...]] = _table(
    {
        _OTHER: (
            "ja", "ko", "zh", "th", "vi", "id", "ms", "lo", "my", "km", "yo", "ig", "jv",
        ),
        _ONE_OTHER: (
            "en", "de", "nl", "sv", "da", "nb", "nn", "no", "fi", "et", "el", "hu",
            "tr", "es", "fr", "it", "pt", "ca", "gl", "eu", "bg", "hi", "bn", "fa",
            "ur", "sw", "af", "az", "ka", "kk", "ky", "uz", "mn", "ml", "ta", "te",
            "mr", "kn", "gu", "pa", "ne", "si", "sq", "mk", "is", "am", "ps", "so",
            "zu", "xh", "fil", "tl", "fy", "lb", "tk", "ha", "or", "as",
        ),
        _ONE_FEW_OTHER: ("ro", "mo", "bs", "hr", "sr", "sh"),
        _ONE_FEW_MANY_OTHER: ("ru", "uk", "be", "pl", "cs", "sk", "lt"),
        ("zero", "one", "other"): ("lv", "ksh"),
        ("one", "two", "other"): ("he", "iw", "se", "smn", "sms"),
        ("one", "two", "few", "other"): ("sl", "dsb", "hsb"),
        ("one", "two", "few", "many", "other"): ("ga", "br", "mt", "gv"),
        _ALL: ("ar", "cy", "ars"),
    }
)


def normalize_locale(locale: str) -> str:
    """Reduce a locale tag to its lowercase language subtag (``pt-BR`` -> ``pt``)."""
    return locale.replace("_", "-").split("-")[0].strip().lower()


def is_known_locale(locale: str) -> bool:
    return normalize_locale(locale) in PLURAL_CATEGORIES


def required_categories(locale: str) -> tuple[str, ...]:
    """Ordered CLDR categories ``locale`` needs; unknown locales get one/other."""
    return PLURAL_CATEGORIES.get(normalize_locale(locale), DEFAULT_CATEGORIES)


def split_plural_key(key: str) -> tuple[str, str] | None:
    """Split ``items_few`` into ``("items", "few")``; None for ordinary keys."""
    match = PLURAL_SUFFIX_RE.match(key)
    if match is None:
        return None
    return match.group("stem"), match.group("category")


@dataclass
class PluralFamily:
    """Sibling keys sharing a stem that express one message's plural forms."""

    parent: KeyPath
    stem: str
    source_forms: dict[str, TranslationUnit] = field(default_factory=dict)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(c for c in CATEGORY_ORDER if c in self.source_forms)

    @property
    def dotted(self) -> str:
        return ".".join(str(s) for s in (*self.parent, self.stem))

    def key_for(self, category: str) -> str:
        return f"{self.stem}_{category}"

    def path_for(self, category: str) -> KeyPath:
        return (*self.parent, self.key_for(category))

    def template(self) -> TranslationUnit:
        """Source form cloned into categories the source does not provide."""
        if "other" in self.source_forms:
            return self.source_forms["other"]
        return self.source_forms[self.categories[-1]]

    def required_categories(self, locale: str) -> tuple[str, ...]:
        return required_categories(locale)


@dataclass(frozen=True)
class PluralForm:
    """One target-locale form of a family and the unit it is translated from."""

    category: str
    key: str
    key_path: KeyPath
    template: TranslationUnit
    cloned: bool = False


@dataclass(frozen=True)
class PluralExpansion:
    """Forms to emit for one locale plus the source categories it drops."""

    forms: tuple[PluralForm, ...]
    dropped: tuple[str, ...] = ()


class PluralFamilyResolver:
    """Groups plural families and maps them onto target locales."""

    def group_families(self, units: Iterable[TranslationUnit]) -> list[PluralFamily]:
        """
        Group plural-tagged units by parent path and stem.

        Families are returned in order of their first member.
        """
        families: dict[tuple[KeyPath, str], PluralFamily] = {}
        for unit in units:
            if unit.plural_category is None:
                continue
            parent = unit.key_path[:-1]
            stem = unit.plural_stem
            family = families.get((parent, stem))
            if family is None:
                family = families[(parent, stem)] = PluralFamily(parent=parent, stem=stem)
            family.source_forms[unit.plural_category] = unit
        return list(families.values())

    def expand(
        self,
        family: PluralFamily,
        source_locale: str,
        target_locale: str,
        *,
        covered: Iterable[str] = (),
    ) -> PluralExpansion:
        """
        Work out which forms ``target_locale`` gets.

        Args:
            family: Source family.
            source_locale: Locale of the source forms.
            target_locale: Locale being produced.
            covered: Categories already present as skipped sibling keys; these
                are neither generated nor reported as dropped.

        Returns:
            PluralExpansion with forms in canonical category order and the
            surplus source categories that are not emitted.
        """
        covered = set(covered)
        required = [c for c in family.required_categories(target_locale) if c not in covered]
        template = family.template()

        forms = []
        for category in required:
            source_unit = family.source_forms.get(category)
            forms.append(
                PluralForm(
                    category=category,
                    key=family.key_for(category),
                    key_path=family.path_for(category),
                    template=source_unit or template,
                    cloned=source_unit is None,
                )
            )

        all_required = set(required_categories(target_locale))
        dropped = tuple(c for c in family.categories if c not in all_required)
        return PluralExpansion(forms=tuple(forms), dropped=dropped)
