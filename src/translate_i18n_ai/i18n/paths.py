"""
Key paths and skip rules.

A key path locates a leaf inside a content tree. Skip rules are either exact
dotted paths (``company.name``) or glob patterns where ``*`` stands for exactly
one path segment (``states.*``, ``*.internal.*``).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from translate_i18n_ai.errors import ConfigurationError

KeyPath = tuple[str | int, ...]

WILDCARD = "*"


def format_path(key_path: KeyPath) -> str:
    """Serialize a key path as a dot-joined string."""
    return ".".join(str(segment) for segment in key_path)


def _split_rule(rule: str) -> tuple[str, ...]:
    if not isinstance(rule, str) or not rule:
        raise ConfigurationError(f"Skip rule must be a non-empty string, got {rule!r}")
    segments = tuple(rule.split("."))
    if any(segment == "" for segment in segments):
        raise ConfigurationError(f"Skip rule has an empty segment: {rule!r}")
    return segments


def matches_glob(path_segments: Sequence[str], pattern_segments: Sequence[str]) -> bool:
    """
    Check a path against a single glob pattern.

    Segments are compared positionally and ``*`` matches exactly one segment.
    A pattern anchored by an explicit first segment must have the same length
    as the path. A pattern starting with ``*`` is compared against the
    equal-length suffix of the path, so any nesting prefix is allowed.
    """
    width = len(pattern_segments)
    if width == 0 or width > len(path_segments):
        return False
    if pattern_segments[0] != WILDCARD and width != len(path_segments):
        return False

    window = path_segments[len(path_segments) - width :]
    return all(p == WILDCARD or p == s for p, s in zip(pattern_segments, window))


def is_excluded(
    key_path: str,
    exact_rules: Iterable[str],
    glob_rules: Iterable[str],
) -> bool:
    """Return True when ``key_path`` matches any exact or glob rule."""
    if key_path in set(exact_rules):
        return True
    segments = key_path.split(".")
    return any(matches_glob(segments, _split_rule(rule)) for rule in glob_rules)


class PathMatcher:
    """
    Pre-parsed skip rules.

    Rules are validated once on construction so malformed input fails before
    any traversal starts.
    """

    def __init__(
        self,
        skip_keys: Iterable[str] = (),
        skip_paths: Iterable[str] = (),
    ):
        self._exact: frozenset[str] = frozenset(
            ".".join(_split_rule(rule)) for rule in skip_keys
        )
        self._globs: tuple[tuple[str, ...], ...] = tuple(_split_rule(rule) for rule in skip_paths)

    @property
    def has_rules(self) -> bool:
        return bool(self._exact or self._globs)

    def is_excluded(self, key_path: KeyPath | str) -> bool:
        """Check a key path (tuple or dotted string) against all rules."""
        if isinstance(key_path, str):
            dotted = key_path
            segments: Sequence[str] = key_path.split(".")
        else:
            segments = tuple(str(segment) for segment in key_path)
            dotted = ".".join(segments)

        if dotted in self._exact:
            return True
        return any(matches_glob(segments, pattern) for pattern in self._globs)
