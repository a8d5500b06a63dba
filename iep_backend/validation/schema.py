"""Algebraic description of the JSON shape an extraction must produce."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Literal, Mapping, Union

PrimitiveKind = Literal["string", "number", "integer", "boolean"]


@dataclass(frozen=True, slots=True)
class Primitive:
    kind: PrimitiveKind


@dataclass(frozen=True, slots=True)
class ArrayOf:
    items: "SchemaNode"


@dataclass(frozen=True, slots=True)
class Field:
    """A keyed member of an :class:`ObjectOf`."""

    node: "SchemaNode"
    required: bool = True


@dataclass(frozen=True, slots=True)
class ObjectOf:
    fields: Mapping[str, Field]
    additional: bool = True


@dataclass(frozen=True, slots=True)
class Nullable:
    inner: "SchemaNode"


@dataclass(frozen=True, slots=True)
class OneOf:
    options: tuple["SchemaNode", ...]


@dataclass(frozen=True, slots=True)
class Enumerated:
    values: tuple[Any, ...]


SchemaNode = Union[Primitive, ArrayOf, ObjectOf, Nullable, OneOf, Enumerated]

STRING = Primitive("string")
NUMBER = Primitive("number")
INTEGER = Primitive("integer")
BOOLEAN = Primitive("boolean")


def obj(fields: Mapping[str, "SchemaNode | Field"], *, additional: bool = True) -> ObjectOf:
    """Build an :class:`ObjectOf`; bare nodes become required fields."""

    return ObjectOf(
        fields={
            key: value if isinstance(value, Field) else Field(value)
            for key, value in fields.items()
        },
        additional=additional,
    )


def optional(node: SchemaNode) -> Field:
    return Field(node, required=False)


def array(items: SchemaNode) -> ArrayOf:
    return ArrayOf(items)


def nullable(node: SchemaNode) -> Nullable:
    return Nullable(node)


def one_of(*options: SchemaNode) -> OneOf:
    return OneOf(tuple(options))


def enum(values: Iterable[Any]) -> Enumerated:
    return Enumerated(tuple(values))


def json_type_name(value: Any) -> str:
    """Return the JSON type name of a decoded value."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def expected_type_names(node: SchemaNode) -> List[str]:
    """Return the JSON type names ``node`` accepts, without duplicates."""

    names: List[str] = []

    def add(name: str) -> None:
        if name not in names:
            names.append(name)

    def visit(current: SchemaNode) -> None:
        if isinstance(current, Primitive):
            add(current.kind)
        elif isinstance(current, ArrayOf):
            add("array")
        elif isinstance(current, ObjectOf):
            add("object")
        elif isinstance(current, Nullable):
            visit(current.inner)
            add("null")
        elif isinstance(current, OneOf):
            for option in current.options:
                visit(option)
        elif isinstance(current, Enumerated):
            for value in current.values:
                add(json_type_name(value))

    visit(node)
    return names


def accepts_null(node: SchemaNode) -> bool:
    if isinstance(node, Nullable):
        return True
    if isinstance(node, OneOf):
        return any(accepts_null(option) for option in node.options)
    if isinstance(node, Enumerated):
        return any(value is None for value in node.values)
    return False


def matches(node: SchemaNode, value: Any) -> bool:
    """Return ``True`` when the top-level type of ``value`` fits ``node``."""

    if isinstance(node, Primitive):
        if node.kind == "string":
            return isinstance(value, str)
        if node.kind == "boolean":
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if node.kind == "integer":
            return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
        return isinstance(value, (int, float))
    if isinstance(node, ArrayOf):
        return isinstance(value, list)
    if isinstance(node, ObjectOf):
        return isinstance(value, Mapping)
    if isinstance(node, Nullable):
        return value is None or matches(node.inner, value)
    if isinstance(node, OneOf):
        return any(matches(option, value) for option in node.options)
    if isinstance(node, Enumerated):
        return any(
            value == candidate and type(value) is type(candidate) for candidate in node.values
        )
    return False


__all__ = [
    "ArrayOf",
    "BOOLEAN",
    "Enumerated",
    "Field",
    "INTEGER",
    "NUMBER",
    "Nullable",
    "ObjectOf",
    "OneOf",
    "Primitive",
    "STRING",
    "SchemaNode",
    "accepts_null",
    "array",
    "enum",
    "expected_type_names",
    "json_type_name",
    "matches",
    "nullable",
    "obj",
    "one_of",
    "optional",
]
