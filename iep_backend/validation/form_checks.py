"""Cross-field checks on IEP payloads that a shape schema cannot express."""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Set

from .critical import REQUIRED_SECTIONS

LOGGER = logging.getLogger(__name__)

GOALS_SECTION = "6. MEASURABLE ANNUAL GOALS"
SERVICES_SECTION = "7. SPECIALLY DESIGNED SERVICES"
TRANSITION_SECTION = "5. POSTSECONDARY TRANSITION"
MEASUREMENT_METHODS = "METHOD(S) FOR MEASURING THE CHILD'S PROGRESS TOWARDS ANNUAL GOAL"
OBJECTIVES = "Objectives/Benchmarks"
GOAL_REFERENCE = "Goal Addressed #"
TRANSITION_AREAS = (
    "Postsecondary Training and Education",
    "Competitive Integrated Employment",
    "Independent Living (as appropriate)",
)
SERVICE_TYPES = (
    "SPECIALLY DESIGNED INSTRUCTION",
    "RELATED SERVICES",
    "ACCOMMODATIONS",
    "MODIFICATIONS",
)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def _format_number(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def _check_transition(iep: Mapping[str, Any]) -> List[str]:
    transition = iep.get(TRANSITION_SECTION)
    if not isinstance(transition, Mapping):
        return []
    issues: List[str] = []
    for area in TRANSITION_AREAS:
        section = transition.get(area)
        if not isinstance(section, Mapping):
            continue
        methods = section.get("Method for Measuring Progress")
        if isinstance(methods, Mapping) and "Other (list)" not in methods:
            issues.append(f'Missing "Other (list)" field in {area} methods')
    return issues


def _goal_numbers(iep: Mapping[str, Any]) -> tuple[List[str], Set[float]]:
    section = iep.get(GOALS_SECTION)
    if not isinstance(section, Mapping) or section.get("GOALS") is None:
        return [], set()
    goals = section["GOALS"]
    if not isinstance(goals, list):
        return ["GOALS must be an array"], set()

    issues: List[str] = []
    numbers: Set[float] = set()
    for position, goal in enumerate(goals, start=1):
        if not isinstance(goal, Mapping):
            issues.append(f"Goal {position}: must be an object")
            continue
        if not goal.get(MEASUREMENT_METHODS):
            issues.append(f"Goal {position}: Missing measurement methods section")
        if not isinstance(goal.get(OBJECTIVES), list):
            issues.append(f"Goal {position}: Objectives/Benchmarks must be an array")
        number = _as_number(goal.get("NUMBER"))
        if number is not None:
            numbers.add(number)
    return issues, numbers


def _check_services(iep: Mapping[str, Any], goal_numbers: Set[float]) -> List[str]:
    services = iep.get(SERVICES_SECTION)
    if not isinstance(services, Mapping):
        return []
    issues: List[str] = []
    for service_type in SERVICE_TYPES:
        entries = services.get(service_type)
        if entries is None:
            continue
        if not isinstance(entries, list):
            issues.append(f"{service_type} must be an array")
            continue
        for position, service in enumerate(entries):
            if not isinstance(service, Mapping) or GOAL_REFERENCE not in service:
                continue
            reference = _as_number(service[GOAL_REFERENCE])
            label = f"{service_type}[{position}]"
            if reference is None:
                issues.append(f'{label}: "{GOAL_REFERENCE}" must be a number')
            elif goal_numbers and reference not in goal_numbers:
                issues.append(
                    f"{label}: references Goal #{_format_number(reference)} not present in GOALS"
                )
            elif not goal_numbers and reference >= 1:
                issues.append(
                    f"{label}: references Goal #{_format_number(reference)} but GOALS array is empty"
                )
    return issues


def check_form_structure(data: Any) -> List[str]:
    """Return structural problems in an IEP payload.

    Covers the root ``IEP`` object, the mandatory sections, the "Other (list)"
    entries of the transition sections, goal shape and the service entries
    that point at goal numbers. Never raises.
    """

    if not isinstance(data, Mapping) or not isinstance(data.get("IEP"), Mapping):
        return ["Missing root IEP structure"]

    iep = data["IEP"]
    issues: List[str] = []
    try:
        issues.extend(
            f"Missing required section: {section}"
            for section in REQUIRED_SECTIONS
            if not iep.get(section)
        )
        issues.extend(_check_transition(iep))
        goal_issues, numbers = _goal_numbers(iep)
        issues.extend(goal_issues)
        issues.extend(_check_services(iep, numbers))
    except Exception as exc:  # noqa: BLE001 - structural checks never raise
        LOGGER.warning("Form structure check aborted", exc_info=True)
        issues.append(f"Error during form structure check: {exc}")
    return issues


__all__ = ["SERVICE_TYPES", "TRANSITION_AREAS", "check_form_structure"]
