"""Elevate generic validation defects into form-level critical issues."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Pattern, Sequence

from .models import ValidationReport

REQUIRED_SECTIONS: tuple[str, ...] = (
    "CHILD'S INFORMATION",
    "PARENT/GUARDIAN INFORMATION",
    "6. MEASURABLE ANNUAL GOALS",
    "7. SPECIALLY DESIGNED SERVICES",
)


@dataclass(frozen=True)
class CriticalIssuePolicy:
    """Names the structurally important parts of a form.

    ``array_sections`` are sections that must decode to arrays,
    ``free_text_labels`` are regular expressions matching "other, please
    specify" style labels, and ``required_sections`` are the mandatory
    top-level sections.
    """

    array_sections: tuple[str, ...] = ("AMENDMENTS",)
    free_text_labels: tuple[str, ...] = (r"Other \((?:list|specify)\)", r"Other,? please specify")
    required_sections: tuple[str, ...] = REQUIRED_SECTIONS


DEFAULT_POLICY = CriticalIssuePolicy()


@lru_cache(maxsize=64)
def _compile(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def _array_section_issues(errors: Sequence[str], sections: Sequence[str]) -> List[str]:
    issues: List[str] = []
    for section in sections:
        if any(section in error and "array" in error for error in errors):
            issues.append(f"{section} array missing or incorrect type")
    return issues


def _free_text_issues(errors: Sequence[str], labels: Sequence[str]) -> List[str]:
    issues: List[str] = []
    for error in errors:
        for label in labels:
            match = _compile(label).search(error)
            if match:
                issues.append(f'"{match.group(0)}" free-text field missing or invalid')
    return issues


def _section_issues(missing_fields: Sequence[str], sections: Sequence[str]) -> List[str]:
    return [
        f"Missing required section: {section}"
        for section in sections
        if any(section in path for path in missing_fields)
    ]


def identify_critical_issues(
    report: ValidationReport, policy: CriticalIssuePolicy = DEFAULT_POLICY
) -> List[str]:
    """Return the distinct critical issues implied by ``report``.

    Rules run in a fixed order (array sections, free-text labels, required
    sections) and the first occurrence of each message wins, so the output is
    stable for a given report.
    """

    candidates = [
        *_array_section_issues(report.errors, policy.array_sections),
        *_free_text_issues(report.errors, policy.free_text_labels),
        *_section_issues(report.missing_fields, policy.required_sections),
    ]
    return list(dict.fromkeys(candidates))


__all__ = [
    "CriticalIssuePolicy",
    "DEFAULT_POLICY",
    "REQUIRED_SECTIONS",
    "identify_critical_issues",
]
