"""Depth-first validation of extraction results against an algebraic schema."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

from .models import ValidationReport
from .schema import (
    ArrayOf,
    Enumerated,
    Field,
    Nullable,
    ObjectOf,
    OneOf,
    SchemaNode,
    accepts_null,
    expected_type_names,
    json_type_name,
    matches,
)

LOGGER = logging.getLogger(__name__)

ROOT_PATH = "(root)"


def _join(parent: str, key: str) -> str:
    return key if not parent else f"{parent}.{key}"


def _index(parent: str, position: int) -> str:
    return f"{parent}[{position}]"


def _display(path: str) -> str:
    return path or ROOT_PATH


class _SchemaWalker:
    def __init__(self) -> None:
        self.missing_fields: List[str] = []
        self.incorrect_types: List[str] = []
        self.errors: List[str] = []
        self.checked = 0

    def report(self) -> ValidationReport:
        return ValidationReport(
            valid=not self.missing_fields and not self.incorrect_types,
            missing_fields=list(self.missing_fields),
            incorrect_types=list(self.incorrect_types),
            errors=list(self.errors),
            checked=self.checked,
        )

    def _missing(self, path: str) -> None:
        self.checked += 1
        self.missing_fields.append(path)
        self.errors.append(f"Missing required field: {path}")

    def _incorrect(self, message: str) -> None:
        self.incorrect_types.append(message)
        self.errors.append(message)

    def check(self, node: SchemaNode, value: Any, path: str) -> None:
        self.checked += 1
        try:
            if not matches(node, value):
                self._mismatch(node, value, path)
                return
            self._descend(node, value, path)
        except Exception as exc:  # noqa: BLE001 - validation never raises
            LOGGER.debug("Schema traversal failed at %s", _display(path), exc_info=True)
            self._incorrect(
                f"{_display(path)}: could not be validated ({type(exc).__name__}: {exc})"
            )

    def _mismatch(self, node: SchemaNode, value: Any, path: str) -> None:
        if isinstance(node, Enumerated):
            allowed = ", ".join(str(item) for item in node.values)
            self._incorrect(f"{_display(path)}: value must be one of [{allowed}]")
            return
        expected = " or ".join(expected_type_names(node))
        self._incorrect(f"{_display(path)}: expected {expected}, got {json_type_name(value)}")

    def _descend(self, node: SchemaNode, value: Any, path: str) -> None:
        if isinstance(node, Nullable):
            if value is not None:
                self._descend(node.inner, value, path)
            return
        if isinstance(node, OneOf):
            for option in node.options:
                if matches(option, value):
                    self._descend(option, value, path)
                    return
            return
        if isinstance(node, ObjectOf):
            self._descend_object(node, value, path)
            return
        if isinstance(node, ArrayOf):
            for position, item in enumerate(value):
                self.check(node.items, item, _index(path, position))

    def _descend_object(self, node: ObjectOf, value: Mapping[str, Any], path: str) -> None:
        for key, field in node.fields.items():
            child_path = _join(path, key)
            if key not in value:
                if field.required:
                    self._missing(child_path)
                continue
            child = value[key]
            if child is None and not accepts_null(field.node):
                if field.required:
                    self._missing(child_path)
                continue
            self.check(field.node, child, child_path)
        if not node.additional:
            for key in value:
                if key not in node.fields:
                    self.checked += 1
                    self._incorrect(f'{_display(path)}: unexpected property "{key}"')


def validate(data: Any, schema: SchemaNode | Field) -> ValidationReport:
    """Validate ``data`` against ``schema`` and return a report.

    The walk is total: required paths that are absent (or null without a
    nullable declaration) land in ``missing_fields``, type mismatches in
    ``incorrect_types`` as ``"<path>: expected <types>, got <type>"``. Array
    elements are checked individually with index-qualified paths.
    """

    walker = _SchemaWalker()
    node = schema.node if isinstance(schema, Field) else schema
    walker.check(node, data, "")
    report = walker.report()
    LOGGER.debug(
        "Validated payload",
        extra={
            "valid": report.valid,
            "missing": len(report.missing_fields),
            "incorrect": len(report.incorrect_types),
        },
    )
    return report


__all__ = ["ROOT_PATH", "validate"]
