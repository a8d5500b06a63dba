"""Concurrent batch runner with per-job failure isolation."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Any, Awaitable, Callable, Dict, Generic, List, Sequence, TypeVar
from uuid import uuid4

from ..rate_limit import RateLimiter
from .models import BatchResult, BatchSummary, JobOutcome, JobState
from .sink import ArtifactSink, NullArtifactSink

LOGGER = logging.getLogger(__name__)

SUMMARY_ARTIFACT = "BATCH_SUMMARY.json"
_SLUG_PATTERN = re.compile(r"[^A-Za-z0-9._-]+")

J = TypeVar("J")

_TRANSITIONS: Dict[JobState, tuple[JobState, ...]] = {
    JobState.PENDING: (JobState.RUNNING,),
    JobState.RUNNING: (JobState.SUCCEEDED, JobState.FAILED),
    JobState.SUCCEEDED: (),
    JobState.FAILED: (),
}


def default_job_id(job: Any) -> str:
    """Identify a job by its ``document_id`` when present, else by ``str(job)``."""

    document_id = getattr(job, "document_id", None)
    return str(document_id) if document_id else str(job)


def job_slug(job_id: str) -> str:
    stem = PurePath(job_id).stem if job_id else ""
    slug = _SLUG_PATTERN.sub("_", stem or job_id).strip("._")
    return slug or "job"


def _unique(job_ids: Sequence[str]) -> List[str]:
    seen: Dict[str, int] = {}
    unique: List[str] = []
    for job_id in job_ids:
        seen[job_id] = seen.get(job_id, 0) + 1
        unique.append(job_id if seen[job_id] == 1 else f"{job_id}#{seen[job_id]}")
    return unique


def new_batch_id() -> str:
    return f"{datetime.now(UTC).strftime('%Y%m%dT%H%M%S')}_{uuid4().hex[:8]}"


class BatchRunner(Generic[J]):
    """Run independent jobs concurrently and aggregate their outcomes.

    Every job's operation is expected to route its network call through the
    shared ``limiter``; the runner itself adds no throttling or retries.
    """

    def __init__(
        self,
        limiter: RateLimiter,
        sink: ArtifactSink | None = None,
        *,
        job_id: Callable[[J], str] = default_job_id,
    ) -> None:
        self.limiter = limiter
        self.sink: ArtifactSink = sink or NullArtifactSink()
        self._job_id = job_id
        self.states: Dict[str, JobState] = {}

    def _transition(self, job_id: str, state: JobState) -> None:
        current = self.states.get(job_id)
        if current is not None and state not in _TRANSITIONS[current]:
            raise RuntimeError(f"Illegal job transition for {job_id}: {current.value} -> {state.value}")
        self.states[job_id] = state

    def _derive_job_id(self, job: J, index: int) -> str:
        try:
            return str(self._job_id(job))
        except Exception:
            fallback = f"job-{index}"
            LOGGER.exception("Could not derive a job id; using %s", fallback, extra={"job_id": fallback})
            return fallback

    def _save(self, name: str, blob: Any) -> None:
        try:
            self.sink.save(name, blob)
        except Exception:
            LOGGER.exception("Failed to save artifact %s", name, extra={"artifact": name})

    async def _run_one(
        self,
        job: J,
        job_id: str,
        operation: Callable[[J], Awaitable[JobOutcome]],
    ) -> JobOutcome:
        self._transition(job_id, JobState.RUNNING)
        started = time.perf_counter()
        try:
            outcome = await operation(job)
            if not isinstance(outcome, JobOutcome):
                raise TypeError(f"operation returned {type(outcome).__name__}, expected JobOutcome")
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - started) * 1000
            LOGGER.exception("Job %s failed", job_id, extra={"job_id": job_id})
            outcome = JobOutcome.failed(job_id, exc, processing_time_ms=elapsed_ms)
        if not outcome.state.terminal:
            outcome = outcome.model_copy(
                update={"state": JobState.FAILED, "error": f"operation ended in state {outcome.state.value}"}
            )
        if outcome.job_id != job_id:
            outcome = outcome.model_copy(update={"job_id": job_id})
        self._transition(job_id, outcome.state)
        LOGGER.info(
            "Job %s %s",
            job_id,
            self.states[job_id].value,
            extra={"job_id": job_id, "state": self.states[job_id].value},
        )
        return outcome

    async def run_batch(
        self,
        jobs: Sequence[J],
        operation: Callable[[J], Awaitable[JobOutcome]],
        *,
        batch_id: str | None = None,
    ) -> BatchResult:
        """Run every job, wait for all of them, persist and summarise.

        Outcomes are returned in job order. One artifact named after the job
        is saved per outcome, then ``BATCH_SUMMARY.json``.
        """

        batch_id = batch_id or new_batch_id()
        started_at = datetime.now(UTC)
        job_ids = _unique([self._derive_job_id(job, index) for index, job in enumerate(jobs, start=1)])
        self.states = {job_id: JobState.PENDING for job_id in job_ids}
        LOGGER.info(
            "Starting batch %s with %s jobs",
            batch_id,
            len(job_ids),
            extra={"batch_id": batch_id, "jobs": len(job_ids)},
        )

        outcomes: List[JobOutcome] = list(
            await asyncio.gather(
                *(self._run_one(job, job_id, operation) for job, job_id in zip(jobs, job_ids))
            )
        )

        used: set[str] = set()
        for outcome in outcomes:
            slug = job_slug(outcome.job_id)
            candidate, counter = slug, 2
            while candidate in used:
                candidate = f"{slug}-{counter}"
                counter += 1
            used.add(candidate)
            self._save(f"{candidate}.json", outcome.model_dump(mode="json"))

        summary = BatchSummary.from_outcomes(
            batch_id, outcomes, started_at=started_at, finished_at=datetime.now(UTC)
        )
        self._save(SUMMARY_ARTIFACT, summary.model_dump(mode="json"))
        LOGGER.info(
            "Batch %s finished: %s succeeded, %s failed",
            batch_id,
            summary.success_count,
            summary.fail_count,
            extra={
                "batch_id": batch_id,
                "success_count": summary.success_count,
                "fail_count": summary.fail_count,
                "total_cost_usd": summary.total_cost_usd,
            },
        )
        return BatchResult(batch_id=batch_id, outcomes=outcomes, summary=summary)


__all__ = ["BatchRunner", "SUMMARY_ARTIFACT", "default_job_id", "job_slug", "new_batch_id"]
