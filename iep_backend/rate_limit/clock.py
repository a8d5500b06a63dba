"""Wall-clock and delay primitives used by the rate limiter."""

from __future__ import annotations

import asyncio
import time
from typing import Protocol


class Clock(Protocol):
    """Source of the current time plus a cooperative sleep."""

    def now(self) -> float:
        """Return the current time as epoch seconds."""

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for ``seconds``."""


class SystemClock:
    """Clock backed by :func:`time.time` and :func:`asyncio.sleep`."""

    def now(self) -> float:
        return time.time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(seconds, 0.0))


__all__ = ["Clock", "SystemClock"]
