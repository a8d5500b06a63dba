"""Error taxonomy for calls made through the rate limiter."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

import httpx

_TIMEOUT_STATUS_CODES = frozenset({408, 504})
_RATE_LIMIT_STATUS = 429


class ErrorKind(str, Enum):
    """Closed classification of extraction-call failures."""

    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    OTHER = "other"

    @property
    def retryable(self) -> bool:
        return self is not ErrorKind.OTHER


class ExtractionCallError(RuntimeError):
    """Failure raised at the transport boundary with its kind already decided."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.OTHER,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @classmethod
    def from_status(cls, status_code: int, message: str) -> "ExtractionCallError":
        """Build an error whose kind follows the HTTP status code."""

        return cls(message, kind=kind_for_status(status_code), status_code=status_code)


class ExtractionError(RuntimeError):
    """Raised when the model answered but the payload is unusable."""


def kind_for_status(status_code: int | None) -> ErrorKind:
    """Map an HTTP status code onto an :class:`ErrorKind`."""

    if status_code == _RATE_LIMIT_STATUS:
        return ErrorKind.RATE_LIMITED
    if status_code in _TIMEOUT_STATUS_CODES:
        return ErrorKind.TIMEOUT
    return ErrorKind.OTHER


def _status_code_of(exc: BaseException) -> int | None:
    status: Any = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def classify_error(exc: BaseException) -> ErrorKind:
    """Return the :class:`ErrorKind` for ``exc``."""

    if isinstance(exc, ExtractionCallError):
        return exc.kind
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    return kind_for_status(_status_code_of(exc))


__all__ = [
    "ErrorKind",
    "ExtractionCallError",
    "ExtractionError",
    "classify_error",
    "kind_for_status",
]
