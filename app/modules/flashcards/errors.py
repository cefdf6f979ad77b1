"""Failure taxonomy for flashcard generation.

Every failure coming out of the provider is normalised into a
``ClassifiedFailure`` carrying a ``FailureKind`` and a retryable flag, so the
retry loop and the callers can branch on the kind instead of on exception
types.
"""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Optional


class FailureKind(str, Enum):
    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN = "UNKNOWN"

    @property
    def retryable(self) -> bool:
        return self is not FailureKind.AUTH_ERROR


class ClassifiedFailure(Exception):
    """A provider failure tagged with its kind and whether it may be retried."""

    def __init__(
        self,
        message: str,
        kind: FailureKind = FailureKind.UNKNOWN,
        retryable: Optional[bool] = None,
        *,
        attempts: int = 0,
        last_failure: Optional["ClassifiedFailure"] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.retryable = kind.retryable if retryable is None else retryable
        self.attempts = attempts
        self.last_failure = last_failure

    def __repr__(self) -> str:
        return (
            f"ClassifiedFailure(kind={self.kind.value}, "
            f"retryable={self.retryable}, message={self.message!r})"
        )

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "kind": self.kind.value,
            "retryable": self.retryable,
        }


# Checked top to bottom; the first matching rule wins.
_RULES: tuple[tuple[FailureKind, tuple[str, ...], str], ...] = (
    (
        FailureKind.AUTH_ERROR,
        ("authentication", "api key", "unauthorized"),
        "Authentication failed. Please check your API key.",
    ),
    (
        FailureKind.RATE_LIMIT,
        ("rate limit", "429", "too many requests"),
        "Rate limit exceeded. Please try again in a moment.",
    ),
    (
        FailureKind.NETWORK_ERROR,
        ("network", "fetch", "econnrefused", "connection refused"),
        "Network error. Please check your connection.",
    ),
    (
        FailureKind.TIMEOUT,
        ("timeout", "timed out"),
        "Request timed out. Please try again.",
    ),
)


def error_message(error: object) -> str:
    """Return the human message of an arbitrary failure value."""
    if isinstance(error, ClassifiedFailure):
        return error.message
    return str(error)


def _describe(error: object) -> str:
    parts = [error_message(error)]
    if isinstance(error, BaseException):
        parts.insert(0, type(error).__name__)
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        try:
            parts.append(f"{status_code} {HTTPStatus(status_code).phrase}")
        except ValueError:
            parts.append(str(status_code))
    return " ".join(parts).lower()


def classify_error(error: object) -> ClassifiedFailure:
    """Map any failure raised by a provider call onto a ``ClassifiedFailure``.

    Already-classified failures are returned as they are. Never raises.
    """
    if isinstance(error, ClassifiedFailure):
        return error

    description = _describe(error)
    for kind, needles, message in _RULES:
        if any(n in description for n in needles):
            return ClassifiedFailure(message, kind)

    return ClassifiedFailure(
        error_message(error) or "An unknown error occurred", FailureKind.UNKNOWN
    )
