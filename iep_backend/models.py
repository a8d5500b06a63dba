"""Persistence models for batch artifacts."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return the current UTC timestamp."""

    return datetime.now(UTC)


class ArtifactRecord(SQLModel, table=True):
    """A named JSON blob written by a batch run (job outcome or summary)."""

    __tablename__ = "iep_artifacts"

    id: Optional[int] = Field(default=None, primary_key=True)
    batch_id: str = Field(nullable=False, index=True, description="Batch that produced the blob.")
    name: str = Field(nullable=False, index=True, description="Artifact name within the batch.")
    payload: Any = Field(
        sa_column=Column(JSON, nullable=False),
        description="JSON document as saved by the batch runner.",
    )
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)


__all__ = ["ArtifactRecord"]
