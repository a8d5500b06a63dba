"""Concurrent extraction batches: outcomes, artifact sinks and the runner."""

from .extraction import build_extraction_operation, compute_confidence, parse_extraction_payload
from .models import ApiUsage, BatchResult, BatchSummary, ExtractionJob, JobOutcome, JobState
from .runner import SUMMARY_ARTIFACT, BatchRunner
from .sink import (
    ArtifactSink,
    DatabaseArtifactSink,
    DirectoryArtifactSink,
    NullArtifactSink,
    create_sink,
)

__all__ = [
    "ApiUsage",
    "ArtifactSink",
    "BatchResult",
    "BatchRunner",
    "BatchSummary",
    "DatabaseArtifactSink",
    "DirectoryArtifactSink",
    "ExtractionJob",
    "JobOutcome",
    "JobState",
    "NullArtifactSink",
    "SUMMARY_ARTIFACT",
    "build_extraction_operation",
    "compute_confidence",
    "create_sink",
    "parse_extraction_payload",
]
