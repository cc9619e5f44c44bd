"""i18next namespace detection for reporting."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from translate_i18n_ai.i18n.paths import PathMatcher
from translate_i18n_ai.i18n.tree import ContentNode, count_leaves


@dataclass(frozen=True)
class NamespaceEntry:
    name: str
    key_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "keyCount": self.key_count}


@dataclass(frozen=True)
class NamespaceInfo:
    detected: bool
    namespaces: tuple[NamespaceEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "detected": self.detected,
            "namespaces": [ns.to_dict() for ns in self.namespaces],
        }


class NamespaceDetector:
    """
    Classifies top-level keys as namespaces.

    A tree is namespaced when it is a non-empty object whose top-level values
    are all objects, e.g. ``{"common": {...}, "auth": {...}}``.
    """

    def __init__(self, matcher: PathMatcher | None = None):
        self._matcher = matcher

    def detect(self, tree: ContentNode, matcher: PathMatcher | None = None) -> NamespaceInfo:
        """Detect namespaces; ``matcher`` overrides the skip rules given at construction."""
        matcher = matcher or self._matcher
        if not isinstance(tree, Mapping) or not tree:
            return NamespaceInfo(detected=False)
        if not all(isinstance(value, Mapping) for value in tree.values()):
            return NamespaceInfo(detected=False)

        return NamespaceInfo(
            detected=True,
            namespaces=tuple(
                NamespaceEntry(name=key, key_count=count_leaves(value, matcher, (key,)))
                for key, value in tree.items()
            ),
        )
