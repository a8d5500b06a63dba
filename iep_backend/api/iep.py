"""Pydantic schemas for the IEP validation and batch API."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..batch.models import ExtractionJob
from ..validation.models import ValidationReport


class ValidateResponse(BaseModel):
    """Validation verdict for a single extracted IEP payload."""

    report: ValidationReport
    critical_issues: List[str] = Field(
        default_factory=list, description="Structurally important defects derived from the report."
    )
    form_issues: List[str] = Field(
        default_factory=list, description="Cross-field problems such as dangling goal references."
    )
    text_report: str = Field(description="Plain-text rendering of the report.")


class BatchRequest(BaseModel):
    """Documents (already converted to text) to extract in one batch."""

    jobs: List[ExtractionJob] = Field(min_length=1, description="Jobs to run concurrently.")


__all__ = ["BatchRequest", "ValidateResponse"]
