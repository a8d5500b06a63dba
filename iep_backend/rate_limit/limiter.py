"""Multi-window request throttling with retry and exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, time as dt_time, timedelta
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

from ..config import get_settings
from ..utils.logging import RESERVED_ATTRS
from .clock import Clock, SystemClock
from .errors import ErrorKind, classify_error
from .models import LedgerSnapshot, RateLimitConfig, RequestLedger, RetryContext

LOGGER = logging.getLogger(__name__)

MINUTE_WINDOW_S = 60.0
BURST_WINDOW_S = 10.0
# Floor for computed waits so a wake-up always moves the clock forward.
_MIN_WAIT_S = 0.001

T = TypeVar("T")


def _local_date(timestamp: float) -> date:
    return datetime.fromtimestamp(timestamp).date()


def seconds_until_next_day(timestamp: float) -> float:
    """Return the seconds between ``timestamp`` and the next local midnight."""

    current = datetime.fromtimestamp(timestamp)
    midnight = datetime.combine(current.date() + timedelta(days=1), dt_time.min)
    return midnight.timestamp() - timestamp


class RateLimiter:
    """Gate for a rate-limited API shared by every concurrently running job.

    The limiter owns a :class:`RequestLedger` and enforces three quotas at
    once: ``burst_limit`` requests per rolling 10 s, ``requests_per_minute``
    per rolling 60 s and ``requests_per_day`` per local calendar day.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or RateLimitConfig.from_settings(get_settings())
        self._clock: Clock = clock or SystemClock()
        self._ledger = RequestLedger(reset_date=_local_date(self._clock.now()))
        self._lock = asyncio.Lock()

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def clock(self) -> Clock:
        return self._clock

    def snapshot(self) -> LedgerSnapshot:
        """Return the current window counts without recording a request."""

        now = self._clock.now()
        timestamps = [ts for ts in self._ledger.timestamps if now - ts < MINUTE_WINDOW_S]
        return LedgerSnapshot(
            minute_count=len(timestamps),
            burst_count=sum(1 for ts in timestamps if now - ts < BURST_WINDOW_S),
            daily_count=self._ledger.daily_count,
            reset_date=self._ledger.reset_date,
        )

    async def wait_for_availability(self) -> None:
        """Suspend until one request may be issued, then record it."""

        waits = 0
        while True:
            async with self._lock:
                wait_s, window, count = self._try_acquire(self._clock.now())
            if wait_s is None:
                return
            waits += 1
            # Only the first wait of each caller is logged at WARNING.
            LOGGER.log(
                logging.WARNING if waits == 1 else logging.DEBUG,
                "%s rate limit reached; waiting %.3fs",
                window.capitalize(),
                wait_s,
                extra={"operation": "rate_limit", "window": window, "requests": count, "wait_s": wait_s},
            )
            await self._clock.sleep(wait_s)

    def _try_acquire(self, now: float) -> tuple[Optional[float], str, int]:
        """Check all windows; record the request when none of them binds.

        Runs without suspending, under ``self._lock``.
        """

        ledger = self._ledger
        config = self._config

        while ledger.timestamps and now - ledger.timestamps[0] >= MINUTE_WINDOW_S:
            ledger.timestamps.popleft()

        today = _local_date(now)
        if today != ledger.reset_date:
            ledger.daily_count = 0
            ledger.reset_date = today

        if ledger.daily_count >= config.requests_per_day:
            return max(seconds_until_next_day(now), _MIN_WAIT_S), "daily", ledger.daily_count

        if len(ledger.timestamps) >= config.requests_per_minute:
            oldest = ledger.timestamps[0]
            wait_s = MINUTE_WINDOW_S - (now - oldest)
            return max(wait_s, _MIN_WAIT_S), "per-minute", len(ledger.timestamps)

        burst = [ts for ts in ledger.timestamps if now - ts < BURST_WINDOW_S]
        if len(burst) >= config.burst_limit:
            wait_s = BURST_WINDOW_S - (now - burst[0])
            return max(wait_s, _MIN_WAIT_S), "burst", len(burst)

        ledger.timestamps.append(now)
        ledger.daily_count += 1
        return None, "granted", len(ledger.timestamps)

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Mapping[str, Any] | None = None,
        *,
        timeout_s: float | None = None,
        retry: RetryContext | None = None,
    ) -> T:
        """Run ``operation`` under the quotas, retrying rate-limit and timeout failures.

        Each attempt first waits for availability. A failure classified as
        :attr:`ErrorKind.RATE_LIMITED` or :attr:`ErrorKind.TIMEOUT` is retried
        after ``backoff_multiplier ** (attempt - 1)`` seconds while attempts
        remain; any other failure stops immediately. The last error is
        re-raised unchanged. ``retry`` is reset on entry and, when given, lets the
        caller observe the attempt count afterwards.
        """

        retry = retry if retry is not None else RetryContext()
        retry.attempt = 0
        retry.last_error = None
        retry.delay_s = 0.0
        max_retries = self._config.max_retries

        while retry.attempt < max_retries:
            retry.attempt += 1
            await self.wait_for_availability()
            started = self._clock.now()
            try:
                if timeout_s is None:
                    result = await operation()
                else:
                    result = await asyncio.wait_for(operation(), timeout=timeout_s)
            except Exception as exc:
                retry.last_error = exc
                kind = classify_error(exc)
                should_retry = kind.retryable and retry.attempt < max_retries
                self._log_attempt(
                    context,
                    retry,
                    started=started,
                    kind=kind,
                    should_retry=should_retry,
                )
                if not should_retry:
                    break
                retry.delay_s = self._config.backoff_seconds(retry.attempt)
                await self._clock.sleep(retry.delay_s)
                continue

            self._log_attempt(context, retry, started=started)
            return result

        if retry.last_error is None:
            raise RuntimeError(f"No attempt was made (max_retries={max_retries})")
        raise retry.last_error

    def _log_attempt(
        self,
        context: Mapping[str, Any] | None,
        retry: RetryContext,
        *,
        started: float,
        kind: ErrorKind | None = None,
        should_retry: bool = False,
    ) -> None:
        try:
            extra = _context_extra(context)
            extra["attempt"] = retry.attempt
            extra["duration_ms"] = round((self._clock.now() - started) * 1000, 3)
            if kind is None:
                LOGGER.info("Operation completed successfully", extra=extra)
                return
            extra["should_retry"] = should_retry
            extra["error_kind"] = kind.value
            extra["error"] = str(retry.last_error)
            level = logging.WARNING if should_retry else logging.ERROR
            LOGGER.log(level, "Operation failed (attempt %s)", retry.attempt, extra=extra)
        except Exception:
            LOGGER.debug("Could not log retry attempt %s", retry.attempt, exc_info=True)


def _context_extra(context: Mapping[str, Any] | None) -> dict[str, Any]:
    """Copy ``context`` into a dict that is safe to pass as ``extra``."""

    if not context:
        return {}
    try:
        items = dict(context)
    except (TypeError, ValueError):
        return {"context": repr(context)}
    extra: dict[str, Any] = {}
    for key, value in items.items():
        name = str(key)
        if name in RESERVED_ATTRS:
            name = f"ctx_{name}"
        extra[name] = value
    return extra


__all__ = [
    "BURST_WINDOW_S",
    "MINUTE_WINDOW_S",
    "RateLimiter",
    "seconds_until_next_day",
]
