"""Configuration and state containers for the rate limiter."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Deque, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Settings


class RateLimitConfig(BaseModel):
    """Immutable quota and retry configuration."""

    model_config = ConfigDict(frozen=True)

    requests_per_minute: int = Field(default=50, gt=0)
    requests_per_day: int = Field(default=10_000, gt=0)
    burst_limit: int = Field(default=10, gt=0)
    backoff_multiplier: float = Field(default=2.0, gt=0)
    max_retries: int = Field(default=3, gt=0)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RateLimitConfig":
        return cls(
            requests_per_minute=settings.iep_requests_per_minute,
            requests_per_day=settings.iep_requests_per_day,
            burst_limit=settings.iep_burst_limit,
            backoff_multiplier=settings.iep_backoff_multiplier,
            max_retries=settings.iep_max_retries,
        )

    def backoff_seconds(self, attempt: int) -> float:
        """Delay to wait after failed ``attempt`` (1-based)."""

        return float(self.backoff_multiplier ** (attempt - 1))


@dataclass
class RequestLedger:
    """Timestamps of permitted requests plus the daily counter."""

    reset_date: date
    timestamps: Deque[float] = field(default_factory=deque)
    daily_count: int = 0


@dataclass(slots=True)
class RetryContext:
    """Per-call retry state."""

    attempt: int = 0
    last_error: Optional[Exception] = None
    delay_s: float = 0.0


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Read-only view of the ledger at one instant."""

    minute_count: int
    burst_count: int
    daily_count: int
    reset_date: date


__all__ = ["LedgerSnapshot", "RateLimitConfig", "RequestLedger", "RetryContext"]
