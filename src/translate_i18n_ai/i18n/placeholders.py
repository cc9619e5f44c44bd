"""
Placeholder masking.

Interpolation tokens must reach the target language untouched, so they are
swapped for index markers (``⟦0⟧``, ``⟦1⟧``, ...) before a string is sent to the
backend and swapped back afterwards.

Recognized tokens:
- double-brace interpolation: ``{{name}}``, ``{{ count }}``, ``{{value, number}}``
- ICU MessageFormat arguments: ``{name}``, ``{count, plural, one {# item} other {# items}}``
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass

MARKER_OPEN = "⟦"
MARKER_CLOSE = "⟧"

_MARKER_RE = re.compile(rf"{MARKER_OPEN}(\d+){MARKER_CLOSE}")
_DOUBLE_BRACE_RE = re.compile(r"\{\{\s*[^{}\s][^{}]*\}\}")
_ICU_HEAD_RE = re.compile(r"\{\s*[\w.\-]+\s*([,}])")


@dataclass(frozen=True)
class Placeholder:
    """One masked token occurrence."""

    index: int
    token: str

    @property
    def marker(self) -> str:
        return f"{MARKER_OPEN}{self.index}{MARKER_CLOSE}"


@dataclass(frozen=True)
class MaskedText:
    """A string with its tokens replaced by markers."""

    text: str
    placeholders: tuple[Placeholder, ...] = ()


@dataclass(frozen=True)
class RestoreResult:
    """Outcome of restoring markers in a translated string."""

    text: str
    missing: tuple[int, ...] = ()
    unexpected: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing and not self.unexpected


def _balanced_end(text: str, start: int) -> int | None:
    """Return the index just past the brace closing the one at ``start``."""
    depth = 0
    for pos in range(start, len(text)):
        char = text[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos + 1
    return None


def find_tokens(text: str) -> list[tuple[int, int]]:
    """
    Locate protected tokens left to right.

    Literal marker sentinels already present in the text are reported as
    tokens too, so every sentinel left in masked text belongs to a marker.

    Returns:
        List of ``(start, end)`` spans in order of appearance.
    """
    spans: list[tuple[int, int]] = []
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]

        if char in (MARKER_OPEN, MARKER_CLOSE):
            spans.append((pos, pos + 1))
            pos += 1
            continue

        if char == "{":
            match = _DOUBLE_BRACE_RE.match(text, pos)
            if match:
                spans.append(match.span())
                pos = match.end()
                continue

            match = _ICU_HEAD_RE.match(text, pos)
            if match:
                end = match.end() if match.group(1) == "}" else _balanced_end(text, pos)
                if end is not None:
                    spans.append((pos, end))
                    pos = end
                    continue

        pos += 1

    return spans


class PlaceholderMasker:
    """Masks and restores interpolation tokens."""

    def mask(self, text: str) -> MaskedText:
        """
        Replace every token in ``text`` with an index marker.

        Args:
            text: Source string.

        Returns:
            MaskedText with the marker string and one placeholder per token
            occurrence, in order.
        """
        spans = find_tokens(text)
        if not spans:
            return MaskedText(text=text)

        parts: list[str] = []
        placeholders: list[Placeholder] = []
        cursor = 0
        for index, (start, end) in enumerate(spans):
            placeholder = Placeholder(index=index, token=text[start:end])
            parts.append(text[cursor:start])
            parts.append(placeholder.marker)
            placeholders.append(placeholder)
            cursor = end
        parts.append(text[cursor:])

        return MaskedText(text="".join(parts), placeholders=tuple(placeholders))

    def restore(self, masked_text: str, placeholders: tuple[Placeholder, ...]) -> RestoreResult:
        """
        Restore markers by index and report drift.

        Markers whose index is out of range are left in place and reported as
        unexpected, as are repeated markers. Indices that never appear are
        reported as missing.
        """
        if not placeholders and MARKER_OPEN not in masked_text:
            return RestoreResult(text=masked_text)

        seen: Counter[int] = Counter()
        unexpected: list[str] = []

        def _replace(match: re.Match[str]) -> str:
            index = int(match.group(1))
            if index >= len(placeholders):
                unexpected.append(match.group(0))
                return match.group(0)
            seen[index] += 1
            if seen[index] > 1:
                unexpected.append(match.group(0))
            return placeholders[index].token

        text = _MARKER_RE.sub(_replace, masked_text)
        missing = tuple(p.index for p in placeholders if not seen[p.index])
        return RestoreResult(text=text, missing=missing, unexpected=tuple(unexpected))

    def unmask(self, masked_text: str, placeholders: tuple[Placeholder, ...]) -> str:
        """Restore markers by index, ignoring drift."""
        return self.restore(masked_text, placeholders).text


_default_masker = PlaceholderMasker()


def mask(text: str) -> MaskedText:
    """Mask ``text`` with the shared masker."""
    return _default_masker.mask(text)


def unmask(masked_text: str, placeholders: tuple[Placeholder, ...]) -> str:
    """Unmask ``masked_text`` with the shared masker."""
    return _default_masker.unmask(masked_text, placeholders)
