"""IEP extraction API router."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ..api.iep import BatchRequest, ValidateResponse
from ..batch import BatchResult, BatchRunner, build_extraction_operation, create_sink
from ..batch.extraction import Operation
from ..batch.runner import new_batch_id
from ..config import Settings, get_settings
from ..llm_client import create_default_client
from ..rate_limit import RateLimitConfig, RateLimiter
from ..validation import (
    IEP_FORM_SCHEMA,
    check_form_structure,
    identify_critical_issues,
    render_validation_report,
    validate,
)

router = APIRouter(prefix="/api/iep", tags=["iep"])


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Return the limiter shared by every batch served by this process."""

    return RateLimiter(RateLimitConfig.from_settings(get_settings()))


def get_batch_id() -> str:
    return new_batch_id()


def get_batch_runner(
    batch_id: str = Depends(get_batch_id),
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> BatchRunner:
    return BatchRunner(limiter, create_sink(settings, batch_id))


def get_extraction_operation(
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> Operation:
    return build_extraction_operation(
        create_default_client(settings), limiter, IEP_FORM_SCHEMA, settings=settings
    )


@router.post("/validate", response_model=ValidateResponse)
async def validate_payload(payload: Dict[str, Any] = Body(...)) -> ValidateResponse:
    """Validate an extracted IEP payload against the form schema."""

    report = validate(payload, IEP_FORM_SCHEMA)
    critical_issues = identify_critical_issues(report)
    return ValidateResponse(
        report=report,
        critical_issues=critical_issues,
        form_issues=check_form_structure(payload),
        text_report=render_validation_report(report, critical_issues=critical_issues),
    )


@router.post("/batches", response_model=BatchResult)
async def run_batch(
    request: BatchRequest,
    *,
    batch_id: str = Depends(get_batch_id),
    runner: BatchRunner = Depends(get_batch_runner),
    operation: Operation = Depends(get_extraction_operation),
) -> BatchResult:
    """Extract every submitted document concurrently and return the outcomes."""

    return await runner.run_batch(request.jobs, operation, batch_id=batch_id)


__all__ = [
    "get_batch_id",
    "get_batch_runner",
    "get_extraction_operation",
    "get_rate_limiter",
    "router",
]
