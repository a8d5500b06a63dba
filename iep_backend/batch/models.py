"""Outcome and summary models for batch extraction runs."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..llm_client import TokenUsage
from ..pricing import estimate_cost
from ..validation.models import ValidationReport


class JobState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


class ExtractionJob(BaseModel):
    """One document whose extracted text is sent to the model."""

    document_id: str = Field(min_length=1)
    text: str
    source_path: Optional[str] = None


class ApiUsage(BaseModel):
    """Token counts and cost reported for one extraction call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    reasoning_tokens: int = 0
    total_tokens: int = 0
    cost_usd: float = 0.0

    @classmethod
    def from_token_usage(cls, usage: TokenUsage, model: str) -> "ApiUsage":
        return cls(
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            reasoning_tokens=usage.reasoning_tokens,
            total_tokens=usage.total_tokens,
            cost_usd=estimate_cost(
                model,
                usage.prompt_tokens,
                usage.completion_tokens,
                usage.cached_prompt_tokens,
            ),
        )


class JobOutcome(BaseModel):
    """Terminal result of one job, written once by the worker that ran it."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    state: JobState
    data: Optional[Any] = None
    validation: Optional[ValidationReport] = None
    critical_issues: List[str] = Field(default_factory=list)
    form_issues: List[str] = Field(default_factory=list)
    confidence: Optional[float] = None
    processing_time_ms: float = 0.0
    usage: Optional[ApiUsage] = None
    model: Optional[str] = None
    attempts: int = 0
    error: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return self.state is JobState.SUCCEEDED

    @classmethod
    def failed(
        cls,
        job_id: str,
        error: BaseException | str,
        *,
        processing_time_ms: float = 0.0,
        attempts: int = 0,
        model: Optional[str] = None,
    ) -> "JobOutcome":
        message = error if isinstance(error, str) else f"{type(error).__name__}: {error}"
        return cls(
            job_id=job_id,
            state=JobState.FAILED,
            error=message,
            processing_time_ms=processing_time_ms,
            attempts=attempts,
            model=model,
        )


class BatchSummary(BaseModel):
    """Aggregate over every outcome of one batch run."""

    batch_id: str
    total_files: int
    success_count: int
    fail_count: int
    validation_passed: int
    success_rate: float
    avg_confidence: float
    total_cost_usd: float
    avg_cost_per_file: float
    total_tokens: int
    total_processing_time_ms: float
    avg_processing_time_ms: float
    critical_issues: List[str] = Field(default_factory=list)
    started_at: datetime
    finished_at: datetime

    @classmethod
    def from_outcomes(
        cls,
        batch_id: str,
        outcomes: Iterable[JobOutcome],
        *,
        started_at: datetime,
        finished_at: datetime,
    ) -> "BatchSummary":
        outcomes = list(outcomes)
        total = len(outcomes)
        succeeded = [outcome for outcome in outcomes if outcome.success]
        confidences = [o.confidence for o in succeeded if o.confidence is not None]
        total_cost = sum(o.usage.cost_usd for o in outcomes if o.usage is not None)
        total_time = sum(o.processing_time_ms for o in outcomes)
        issues = [issue for outcome in outcomes for issue in outcome.critical_issues]
        return cls(
            batch_id=batch_id,
            total_files=total,
            success_count=len(succeeded),
            fail_count=total - len(succeeded),
            validation_passed=sum(
                1 for o in succeeded if o.validation is not None and o.validation.valid
            ),
            success_rate=len(succeeded) / total if total else 0.0,
            avg_confidence=sum(confidences) / len(confidences) if confidences else 0.0,
            total_cost_usd=total_cost,
            avg_cost_per_file=total_cost / total if total else 0.0,
            total_tokens=sum(o.usage.total_tokens for o in outcomes if o.usage is not None),
            total_processing_time_ms=total_time,
            avg_processing_time_ms=total_time / total if total else 0.0,
            critical_issues=list(dict.fromkeys(issues)),
            started_at=started_at,
            finished_at=finished_at,
        )


class BatchResult(BaseModel):
    batch_id: str
    outcomes: List[JobOutcome]
    summary: BatchSummary


__all__ = [
    "ApiUsage",
    "BatchResult",
    "BatchSummary",
    "ExtractionJob",
    "JobOutcome",
    "JobState",
]
