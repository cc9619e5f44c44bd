"""Shared fixtures: fake backends and providers, no network access."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from translate_i18n_ai.errors import BackendError, BackendErrorCategory
from translate_i18n_ai.llm.base import LLMProvider, LLMResponse
from translate_i18n_ai.translation.backend import BatchRequest, TranslationBackend

SPANISH = {
    "Hello {{name}}": "Hola {{name}}",
    "Hello ⟦0⟧": "Hola ⟦0⟧",
    "Welcome": "Bienvenido",
    "Save": "Guardar",
    "Cancel": "Cancelar",
}

RUSSIAN_PLURALS = {
    "one": "⟦0⟧ предмет",
    "few": "⟦0⟧ предмета",
    "many": "⟦0⟧ предметов",
    "other": "⟦0⟧ предмета",
}


class RecordingBackend(TranslationBackend):
    """Base fake: records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[BatchRequest] = []

    @property
    def locales(self) -> list[str]:
        return [request.target_locale for request in self.requests]

    def request_for(self, locale: str) -> BatchRequest:
        return next(r for r in self.requests if r.target_locale == locale)

    async def translate(self, request: BatchRequest) -> list[str]:
        self.requests.append(request)
        return [
            self.translate_one(text, hint, request)
            for text, hint in zip(request.texts, request.plural_hints)
        ]

    def translate_one(self, text: str, hint: str | None, request: BatchRequest) -> str:
        return text


class TaggingBackend(RecordingBackend):
    """Prefixes every text with the target locale: ``[es] Hello``."""

    def translate_one(self, text: str, hint: str | None, request: BatchRequest) -> str:
        suffix = f" ({hint})" if hint else ""
        return f"[{request.target_locale}] {text}{suffix}"


class DictionaryBackend(RecordingBackend):
    """Spanish lookups plus Russian plural forms; unknown text is tagged."""

    def translate_one(self, text: str, hint: str | None, request: BatchRequest) -> str:
        if request.target_locale == "ru" and hint in RUSSIAN_PLURALS:
            return RUSSIAN_PLURALS[hint]
        if request.target_locale == "es" and text in SPANISH:
            return SPANISH[text]
        return f"[{request.target_locale}] {text}"


class FailingBackend(RecordingBackend):
    """Fails for the given locales, tags text for all others."""

    def __init__(self, failing: dict[str, Exception]) -> None:
        super().__init__()
        self.failing = failing

    async def translate(self, request: BatchRequest) -> list[str]:
        self.requests.append(request)
        # Let the other locales run before failing.
        await asyncio.sleep(0)
        error = self.failing.get(request.target_locale)
        if error is not None:
            raise error
        return [f"[{request.target_locale}] {text}" for text in request.texts]


class ShortBackend(RecordingBackend):
    """Drops the last translation of every batch."""

    async def translate(self, request: BatchRequest) -> list[str]:
        self.requests.append(request)
        return list(request.texts[:-1])


class ConcurrencyProbeBackend(RecordingBackend):
    """Tracks how many batches run at the same time."""

    def __init__(self) -> None:
        super().__init__()
        self.active = 0
        self.peak = 0

    async def translate(self, request: BatchRequest) -> list[str]:
        self.requests.append(request)
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return list(request.texts)


class FakeProvider(LLMProvider):
    """LLM provider returning canned replies, or raising queued errors."""

    def __init__(self, replies: list[str | Exception] | None = None, name: str = "fake") -> None:
        self.replies = list(replies or [])
        self.calls: list[dict[str, Any]] = []
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return f"{self._name}-model"

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.3,
        max_tokens: int = 4096,
        **kwargs: Any,
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=self.model)


def backend_error(
    message: str = "boom", category: BackendErrorCategory = BackendErrorCategory.SERVER
) -> BackendError:
    return BackendError(message, status_category=category, code="TEST")


@pytest.fixture
def tagging_backend() -> TaggingBackend:
    return TaggingBackend()


@pytest.fixture
def dictionary_backend() -> DictionaryBackend:
    return DictionaryBackend()


@pytest.fixture(autouse=True)
def no_openrouter_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real key out of the tests."""
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers installed by ``setup_logging`` so caplog keeps working."""
    yield
    logger = logging.getLogger("translate_i18n_ai")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
