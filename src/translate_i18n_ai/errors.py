"""
Error types for translate-i18n-ai.

Configuration problems are raised before any backend call. Backend failures
carry the backend's message and machine code so callers can report them.
"""

from __future__ import annotations

from enum import Enum


class BackendErrorCategory(str, Enum):
    """Broad status category of a failed backend call."""

    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    INVALID_REQUEST = "invalid_request"
    NETWORK = "network"
    SERVER = "server"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"

    @property
    def transient(self) -> bool:
        """Whether a retry at the transport level can succeed."""
        return self in (
            BackendErrorCategory.RATE_LIMIT,
            BackendErrorCategory.NETWORK,
            BackendErrorCategory.SERVER,
        )


class TranslateI18nError(Exception):
    """Base class for all translate-i18n-ai errors."""


class ConfigurationError(TranslateI18nError, ValueError):
    """Missing credentials, malformed options or malformed content."""


class BackendError(TranslateI18nError):
    """The translation backend failed to translate a batch."""

    def __init__(
        self,
        message: str,
        *,
        status_category: BackendErrorCategory | str = BackendErrorCategory.UNKNOWN,
        code: str | None = None,
        locale: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_category = BackendErrorCategory(status_category)
        self.code = code
        self.locale = locale

    def __str__(self) -> str:
        if self.locale:
            return f"[{self.locale}] {self.message}"
        return self.message

    def with_locale(self, locale: str) -> BackendError:
        """Return a copy of this error tagged with the failing target locale."""
        error = BackendError(
            self.message,
            status_category=self.status_category,
            code=self.code,
            locale=locale,
        )
        error.__cause__ = self.__cause__
        return error
