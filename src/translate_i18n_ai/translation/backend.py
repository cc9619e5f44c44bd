"""
Translation backend boundary.

The pipeline sends one ``BatchRequest`` per target locale and expects the
translated strings back in the same order. ``LLMTranslationBackend`` fulfils
that contract with any ``LLMProvider``.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from translate_i18n_ai.errors import BackendError, BackendErrorCategory
from translate_i18n_ai.i18n.placeholders import MARKER_CLOSE, MARKER_OPEN
from translate_i18n_ai.llm.base import LLMProvider

LANGUAGE_NAMES = {
    "ar": "Arabic",
    "bg": "Bulgarian",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "el": "Greek",
    "en": "English",
    "es": "Spanish",
    "fa": "Persian",
    "fi": "Finnish",
    "fr": "French",
    "he": "Hebrew",
    "hi": "Hindi",
    "hu": "Hungarian",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "nl": "Dutch",
    "no": "Norwegian",
    "pl": "Polish",
    "pt": "Portuguese",
    "ro": "Romanian",
    "ru": "Russian",
    "sv": "Swedish",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "zh": "Chinese",
}


def language_name(locale: str) -> str:
    base = locale.replace("_", "-").split("-")[0].lower()
    name = LANGUAGE_NAMES.get(base, locale)
    return f"{name} ({locale})" if name != locale else locale


@dataclass(frozen=True)
class BatchRequest:
    """One outbound request: every text for a single target locale."""

    source_locale: str
    target_locale: str
    texts: tuple[str, ...]
    plural_hints: tuple[str | None, ...] = ()
    preserve_placeholders: bool = True
    enable_pluralization: bool = True

    def __post_init__(self) -> None:
        if not self.plural_hints:
            object.__setattr__(self, "plural_hints", (None,) * len(self.texts))
        elif len(self.plural_hints) != len(self.texts):
            raise ValueError("plural_hints must align with texts")

    def __len__(self) -> int:
        return len(self.texts)


class TranslationBackend(ABC):
    """Translates an ordered batch of strings for one locale pair."""

    @abstractmethod
    async def translate(self, request: BatchRequest) -> list[str]:
        """
        Translate ``request.texts`` in order.

        Raises:
            BackendError: If the backend cannot produce a translation.
        """
        ...


@dataclass
class LLMTranslationBackend(TranslationBackend):
    """
    Backend that asks an LLM to translate a JSON array of strings.

    Items are sent as ``{"id", "text", "plural"}`` objects; the model must
    answer with a JSON array of translated strings of the same length.
    """

    provider: LLMProvider
    temperature: float = 0.3
    max_tokens: int = 4096
    extra_instructions: list[str] = field(default_factory=list)

    async def translate(self, request: BatchRequest) -> list[str]:
        if not request.texts:
            return []

        response = await self.provider.chat(
            system_prompt=self.build_system_prompt(request),
            user_prompt=self.build_user_prompt(request),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            target_locale=request.target_locale,
            batch_size=len(request),
        )
        return parse_translations(response.content)

    def build_system_prompt(self, request: BatchRequest) -> str:
        source = language_name(request.source_locale)
        target = language_name(request.target_locale)

        rules = [
            f"Translate each item's text from {source} to {target}.",
            "Return ONLY a JSON array of translated strings, one per input item, in the same order.",
            "Keep the array length identical to the number of input items.",
            "Preserve leading/trailing whitespace, line breaks, HTML tags and Markdown.",
        ]
        if request.preserve_placeholders:
            rules.append(
                f"Tokens like {MARKER_OPEN}0{MARKER_CLOSE} are placeholders: copy each one "
                "exactly once, unchanged. You may move them to fit the grammar."
            )
        if request.enable_pluralization and any(request.plural_hints):
            rules.append(
                "Items with a \"plural\" field are one CLDR plural form of a message. "
                f"Write the {target} grammatical form for that category (zero, one, two, "
                "few, many, other) even when several items share the same source text."
            )
        rules.extend(self.extra_instructions)

        numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
        return f"You are a professional software localizer.\n\n{numbered}"

    def build_user_prompt(self, request: BatchRequest) -> str:
        items: list[dict[str, Any]] = []
        for index, (text, hint) in enumerate(zip(request.texts, request.plural_hints)):
            item: dict[str, Any] = {"id": index, "text": text}
            if hint is not None and request.enable_pluralization:
                item["plural"] = hint
            items.append(item)
        payload = json.dumps(items, ensure_ascii=False, indent=2)
        return f"Translate these {len(items)} items:\n\n{payload}"


def parse_translations(content: str) -> list[str]:
    """
    Parse an LLM reply into a list of strings.

    Code fences are stripped; if the reply still is not valid JSON the first
    ``[...]`` span is tried. Items may be plain strings or objects carrying a
    ``text``/``translation`` field.

    Raises:
        BackendError: If no JSON array of strings can be recovered.
    """
    content = (content or "").strip()
    if content.startswith("```"):
        lines = content.split("\n")
        content = "\n".join(lines[1:-1]) if len(lines) > 2 else ""

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        json_match = re.search(r"\[.*\]", content, re.DOTALL)
        if json_match is None:
            raise BackendError(
                "Backend reply is not a JSON array",
                status_category=BackendErrorCategory.MALFORMED_RESPONSE,
                code="MALFORMED_RESPONSE",
            ) from None
        try:
            data = json.loads(json_match.group())
        except json.JSONDecodeError as e:
            raise BackendError(
                f"Backend reply is not valid JSON: {e}",
                status_category=BackendErrorCategory.MALFORMED_RESPONSE,
                code="MALFORMED_RESPONSE",
            ) from e

    if not isinstance(data, list):
        raise BackendError(
            "Backend reply is not a JSON array",
            status_category=BackendErrorCategory.MALFORMED_RESPONSE,
            code="MALFORMED_RESPONSE",
        )

    translations = []
    for item in data:
        if isinstance(item, dict):
            item = item.get("text", item.get("translation"))
        if not isinstance(item, str):
            raise BackendError(
                f"Backend reply contains a non-string item: {item!r}",
                status_category=BackendErrorCategory.MALFORMED_RESPONSE,
                code="MALFORMED_RESPONSE",
            )
        translations.append(item)
    return translations
