"""Per-job extraction operation: model call, parsing, validation, scoring."""

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Awaitable, Callable, Dict, Sequence

from ..config import Settings, get_settings
from ..llm_client import LLMClient, LLMRequest, LLMResponse
from ..rate_limit import ExtractionError, RateLimiter, RetryContext, classify_error
from ..validation import (
    DEFAULT_POLICY,
    IEP_FORM_SCHEMA,
    CriticalIssuePolicy,
    SchemaNode,
    ValidationReport,
    check_form_structure,
    identify_critical_issues,
    validate,
)
from .models import ApiUsage, ExtractionJob, JobOutcome, JobState

LOGGER = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"^```[^\n]*\n(?P<body>.*?)\n?```$", re.DOTALL)

SYSTEM_PROMPT = (
    "You extract Individualized Education Program (IEP) forms into JSON. "
    "Reply with a single JSON object rooted at \"IEP\" that uses the exact form "
    "section titles and field labels. Use false for unchecked boxes, empty arrays "
    "for empty tables, and null for blank text fields."
)

Operation = Callable[[ExtractionJob], Awaitable[JobOutcome]]


def build_user_prompt(job: ExtractionJob) -> str:
    return f"Document: {job.document_id}\n\n-- Document text --\n{job.text}"


def parse_extraction_payload(raw: str) -> Dict[str, Any]:
    """Decode the model reply into a JSON object.

    A surrounding Markdown code fence is tolerated. Raises
    :class:`ExtractionError` for empty, undecodable or non-object replies.
    """

    text = raw.strip()
    if not text:
        raise ExtractionError("model returned an empty response")
    match = FENCE_PATTERN.match(text)
    if match:
        text = match.group("body").strip()
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"model response is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ExtractionError("model response must be a JSON object")
    return payload


def compute_confidence(report: ValidationReport, form_issues: Sequence[str]) -> float:
    """Share of checks that passed; ``1.0`` for a fully valid extraction."""

    if report.valid and not form_issues:
        return 1.0
    total = report.checked + len(form_issues)
    if total <= 0:
        return 0.0
    failed = len(report.missing_fields) + len(report.incorrect_types) + len(form_issues)
    return round(max(0.0, (total - failed) / total), 4)


def build_extraction_operation(
    client: LLMClient,
    limiter: RateLimiter,
    schema: SchemaNode = IEP_FORM_SCHEMA,
    *,
    timeout_s: float | None = None,
    policy: CriticalIssuePolicy = DEFAULT_POLICY,
    settings: Settings | None = None,
) -> Operation:
    """Return the coroutine function the batch runner calls once per job.

    The model call goes through ``limiter.execute_with_retry``; the decoded
    payload is validated against ``schema`` and checked for form-level
    problems. Failures after retries are returned as failed outcomes.
    """

    settings = settings or get_settings()
    model = settings.iep_llm_model
    if timeout_s is None:
        timeout_s = settings.iep_llm_timeout_s

    async def operation(job: ExtractionJob) -> JobOutcome:
        started = time.perf_counter()
        retry = RetryContext()
        request = LLMRequest(
            model=model,
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_user_prompt(job),
            timeout=timeout_s,
            max_tokens=settings.iep_llm_max_tokens,
        )

        async def call() -> tuple[LLMResponse, Dict[str, Any]]:
            response = await client.complete(request)
            return response, parse_extraction_payload(response.content)

        try:
            response, data = await limiter.execute_with_retry(
                call,
                {"job_id": job.document_id, "model": model},
                timeout_s=timeout_s,
                retry=retry,
            )
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - started) * 1000
            LOGGER.error(
                "Extraction failed for %s",
                job.document_id,
                extra={"job_id": job.document_id, "error_kind": classify_error(exc).value},
            )
            return JobOutcome.failed(
                job.document_id,
                exc,
                processing_time_ms=elapsed_ms,
                attempts=retry.attempt,
                model=model,
            )

        report = validate(data, schema)
        critical_issues = identify_critical_issues(report, policy)
        form_issues = check_form_structure(data) if schema is IEP_FORM_SCHEMA else []
        elapsed_ms = (time.perf_counter() - started) * 1000
        return JobOutcome(
            job_id=job.document_id,
            state=JobState.SUCCEEDED,
            data=data,
            validation=report,
            critical_issues=critical_issues,
            form_issues=form_issues,
            confidence=compute_confidence(report, form_issues),
            processing_time_ms=elapsed_ms,
            usage=ApiUsage.from_token_usage(response.usage, model),
            model=response.model,
            attempts=retry.attempt,
        )

    return operation


__all__ = [
    "Operation",
    "SYSTEM_PROMPT",
    "build_extraction_operation",
    "build_user_prompt",
    "compute_confidence",
    "parse_extraction_payload",
]
