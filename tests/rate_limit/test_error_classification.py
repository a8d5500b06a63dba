from __future__ import annotations

import asyncio

import httpx
import pytest

from iep_backend.rate_limit import ErrorKind, ExtractionCallError, ExtractionError, classify_error
from iep_backend.rate_limit.errors import kind_for_status


class StatusError(Exception):
    def __init__(self, status_code: object) -> None:
        super().__init__("status error")
        self.status_code = status_code


@pytest.mark.parametrize(
    ("status", "kind"),
    [(429, ErrorKind.RATE_LIMITED), (408, ErrorKind.TIMEOUT), (504, ErrorKind.TIMEOUT), (500, ErrorKind.OTHER), (None, ErrorKind.OTHER)],
)
def test_kind_for_status(status, kind) -> None:
    assert kind_for_status(status) is kind


def test_tagged_errors_keep_their_kind() -> None:
    error = ExtractionCallError.from_status(429, "too many")

    assert error.kind is ErrorKind.RATE_LIMITED
    assert error.status_code == 429
    assert classify_error(error) is ErrorKind.RATE_LIMITED
    assert classify_error(ExtractionCallError("x", kind=ErrorKind.TIMEOUT)) is ErrorKind.TIMEOUT


def test_timeouts_are_classified_by_type() -> None:
    assert classify_error(TimeoutError()) is ErrorKind.TIMEOUT
    assert classify_error(asyncio.TimeoutError()) is ErrorKind.TIMEOUT
    assert classify_error(httpx.ReadTimeout("slow")) is ErrorKind.TIMEOUT


def test_status_code_attribute_or_response_is_inspected() -> None:
    request = httpx.Request("GET", "https://example.test")
    response = httpx.Response(504, request=request)

    assert classify_error(StatusError(429)) is ErrorKind.RATE_LIMITED
    assert classify_error(StatusError("not-a-number")) is ErrorKind.OTHER
    assert (
        classify_error(httpx.HTTPStatusError("gateway", request=request, response=response))
        is ErrorKind.TIMEOUT
    )


def test_messages_are_never_sniffed() -> None:
    assert classify_error(RuntimeError("429 rate limit exceeded")) is ErrorKind.OTHER
    assert classify_error(ExtractionError("rate limited?")) is ErrorKind.OTHER


def test_only_other_is_not_retryable() -> None:
    assert ErrorKind.RATE_LIMITED.retryable
    assert ErrorKind.TIMEOUT.retryable
    assert not ErrorKind.OTHER.retryable
