"""
Flattening content trees into translation units and rebuilding them.

A content tree is JSON-shaped: objects (``dict``), arrays (``list``) and string
leaves. Other scalars are carried through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from translate_i18n_ai.i18n.paths import KeyPath, PathMatcher, format_path
from translate_i18n_ai.i18n.placeholders import Placeholder, PlaceholderMasker
from translate_i18n_ai.i18n.plurals import split_plural_key

ContentNode = Any


@dataclass(frozen=True)
class TranslationUnit:
    """A single translatable string taken from a content tree."""

    key_path: KeyPath
    source_text: str
    masked_text: str
    placeholders: tuple[Placeholder, ...] = ()
    plural_category: str | None = None

    @property
    def path(self) -> str:
        return format_path(self.key_path)

    @property
    def plural_stem(self) -> str | None:
        if self.plural_category is None:
            return None
        return str(self.key_path[-1])[: -(len(self.plural_category) + 1)]


class TreeFlattener:
    """Depth-first, order-preserving conversion of a tree to units."""

    def __init__(
        self,
        matcher: PathMatcher | None = None,
        masker: PlaceholderMasker | None = None,
        *,
        enable_pluralization: bool = True,
    ):
        """
        Args:
            matcher: Skip rules; leaves they match are not translated.
            masker: Placeholder masker; None sends raw text.
            enable_pluralization: Tag ``<stem>_<category>`` keys as plural forms.
        """
        self._matcher = matcher or PathMatcher()
        self._masker = masker
        self._plurals = enable_pluralization

    def flatten(self, tree: ContentNode) -> tuple[list[TranslationUnit], list[KeyPath]]:
        """
        Flatten a tree.

        Returns:
            Tuple of (units in traversal order, key paths of skipped leaves).
        """
        units: list[TranslationUnit] = []
        skipped: list[KeyPath] = []
        self._walk(tree, (), units, skipped)
        return units, skipped

    def _walk(
        self,
        node: ContentNode,
        path: KeyPath,
        units: list[TranslationUnit],
        skipped: list[KeyPath],
    ) -> None:
        if isinstance(node, Mapping):
            for key, value in node.items():
                self._walk(value, (*path, key), units, skipped)
        elif isinstance(node, list):
            for index, value in enumerate(node):
                self._walk(value, (*path, index), units, skipped)
        elif isinstance(node, str):
            if self._matcher.is_excluded(path):
                skipped.append(path)
                return
            units.append(self._make_unit(path, node))

    def _make_unit(self, path: KeyPath, text: str) -> TranslationUnit:
        category = None
        if self._plurals and path and isinstance(path[-1], str):
            split = split_plural_key(path[-1])
            if split is not None:
                category = split[1]

        if self._masker is None:
            return TranslationUnit(path, text, text, (), category)
        masked = self._masker.mask(text)
        return TranslationUnit(path, text, masked.text, masked.placeholders, category)


@dataclass
class PluralOutput:
    """Translated keys of one plural family, emitted together."""

    entries: list[tuple[str, str]]


class TreeRebuilder:
    """Rebuilds a translated tree with the exact shape of the source."""

    def __init__(self, skipped: set[KeyPath] | None = None):
        self._skipped = skipped or set()

    def rebuild(
        self,
        tree: ContentNode,
        translations: Mapping[KeyPath, str],
        plural_outputs: Mapping[KeyPath, PluralOutput] | None = None,
    ) -> ContentNode:
        """
        Produce the translated tree.

        Args:
            tree: Source tree.
            translations: Unmasked translated text per leaf path.
            plural_outputs: Family output keyed by every non-skipped member path.
                The family's keys are emitted once, where its first member sits.

        Returns:
            New tree; the source is not modified.
        """
        emitted: set[int] = set()
        return self._build(tree, (), translations, plural_outputs or {}, emitted)

    def _build(
        self,
        node: ContentNode,
        path: KeyPath,
        translations: Mapping[KeyPath, str],
        plural_outputs: Mapping[KeyPath, PluralOutput],
        emitted: set[int],
    ) -> ContentNode:
        if isinstance(node, Mapping):
            result: dict[str, ContentNode] = {}
            for key, value in node.items():
                child = (*path, key)
                family = plural_outputs.get(child)
                if family is not None:
                    if id(family) not in emitted:
                        emitted.add(id(family))
                        result.update(family.entries)
                    continue
                result[key] = self._build(value, child, translations, plural_outputs, emitted)
            return result

        if isinstance(node, list):
            return [
                self._build(value, (*path, index), translations, plural_outputs, emitted)
                for index, value in enumerate(node)
            ]

        if isinstance(node, str):
            if path in self._skipped:
                return node
            return translations.get(path, node)

        return node


def count_leaves(node: ContentNode, matcher: PathMatcher | None = None, path: KeyPath = ()) -> int:
    """Count string leaves under ``node``, leaving out those ``matcher`` excludes."""
    if isinstance(node, Mapping):
        return sum(count_leaves(v, matcher, (*path, k)) for k, v in node.items())
    if isinstance(node, list):
        return sum(count_leaves(v, matcher, (*path, i)) for i, v in enumerate(node))
    if isinstance(node, str):
        return 0 if matcher is not None and matcher.is_excluded(path) else 1
    return 0
