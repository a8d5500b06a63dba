"""Plain-text rendering of validation reports."""

from __future__ import annotations

from typing import List, Sequence

from .models import ValidationReport

RULE = "=" * 60


def render_validation_report(
    report: ValidationReport,
    *,
    critical_issues: Sequence[str] = (),
    title: str = "IEP VALIDATION REPORT",
) -> str:
    lines: List[str] = [RULE, title, RULE]

    if report.valid and not critical_issues:
        lines.append("VALIDATION PASSED")
        lines.append("All form fields match the schema.")
    else:
        lines.append("VALIDATION FAILED")
        lines.append(f"Total issues found: {len(report.errors) + len(critical_issues)}")
        lines.append("")
        sections = (
            ("CRITICAL ISSUES:", critical_issues),
            ("MISSING FIELDS:", report.missing_fields),
            ("TYPE ERRORS:", report.incorrect_types),
        )
        for heading, entries in sections:
            if not entries:
                continue
            lines.append(heading)
            lines.extend(f"  - {entry}" for entry in entries)
            lines.append("")
        if report.errors:
            lines.append("ALL ERRORS:")
            lines.extend(f"  {index}. {error}" for index, error in enumerate(report.errors, start=1))

    lines.append(RULE)
    return "\n".join(lines)


__all__ = ["render_validation_report"]
