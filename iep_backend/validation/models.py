"""Result models produced by schema validation."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ValidationReport(BaseModel):
    """Outcome of checking one extraction result against a schema.

    ``errors`` holds every message in traversal order and is a superset of
    ``missing_fields`` and ``incorrect_types``. ``checked`` counts the paths
    examined, failed or not.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    missing_fields: List[str] = Field(default_factory=list)
    incorrect_types: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    checked: int = 0


__all__ = ["ValidationReport"]
