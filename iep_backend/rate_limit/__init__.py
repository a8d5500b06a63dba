"""Request throttling and retry for the extraction API."""

from .clock import Clock, SystemClock
from .errors import ErrorKind, ExtractionCallError, ExtractionError, classify_error
from .limiter import BURST_WINDOW_S, MINUTE_WINDOW_S, RateLimiter
from .models import LedgerSnapshot, RateLimitConfig, RequestLedger, RetryContext

__all__ = [
    "BURST_WINDOW_S",
    "Clock",
    "ErrorKind",
    "ExtractionCallError",
    "ExtractionError",
    "LedgerSnapshot",
    "MINUTE_WINDOW_S",
    "RateLimitConfig",
    "RateLimiter",
    "RequestLedger",
    "RetryContext",
    "SystemClock",
    "classify_error",
]
