"""Schema validation and critical-issue classification for extraction results."""

from .critical import DEFAULT_POLICY, REQUIRED_SECTIONS, CriticalIssuePolicy, identify_critical_issues
from .form_checks import check_form_structure
from .iep_schema import IEP_FORM_SCHEMA
from .models import ValidationReport
from .reporting import render_validation_report
from .schema import (
    ArrayOf,
    Enumerated,
    Field,
    Nullable,
    ObjectOf,
    OneOf,
    Primitive,
    SchemaNode,
)
from .validator import validate

__all__ = [
    "ArrayOf",
    "CriticalIssuePolicy",
    "DEFAULT_POLICY",
    "Enumerated",
    "Field",
    "IEP_FORM_SCHEMA",
    "Nullable",
    "ObjectOf",
    "OneOf",
    "Primitive",
    "REQUIRED_SECTIONS",
    "SchemaNode",
    "ValidationReport",
    "check_form_structure",
    "identify_critical_issues",
    "render_validation_report",
    "validate",
]
