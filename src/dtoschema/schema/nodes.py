"""Schema node algebra: immutable descriptions of a value's shape.

Every node is a frozen dataclass tagged by its ``kind``. Nodes are built with
the factory functions at the bottom of this module::

    from dtoschema.schema import nodes as t

    address = t.object_({"street": t.string(min_length=1), "zip": t.optional(t.string())})
    tags = t.array(t.string(), unique_items=True)

Factories never check their options. Contradictory constraints such as
``minimum > maximum`` are stored as given and simply never validate.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Sequence, Union

__all__ = [
    "UNSET",
    "MISSING",
    "JsonPrimitive",
    "SchemaNode",
    "StringNode",
    "NumberNode",
    "IntegerNode",
    "BooleanNode",
    "NullNode",
    "LiteralNode",
    "EnumNode",
    "ArrayNode",
    "ObjectNode",
    "RecordNode",
    "UnionNode",
    "RefNode",
    "AnyNode",
    "is_schema_node",
    "string",
    "uuid",
    "email",
    "date",
    "date_time",
    "byte",
    "bytes_",
    "number",
    "integer",
    "boolean",
    "null",
    "literal",
    "enum",
    "array",
    "object_",
    "record",
    "union",
    "ref",
    "any_",
    "optional",
    "nullable",
]


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Sentinel:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Sentinel:
        return self


UNSET: Any = _Sentinel("UNSET")
"""Marks an option (such as ``default``) that was never given."""

MISSING: Any = _Sentinel("MISSING")
"""Marks a value that is absent from its container, as opposed to ``None``."""

JsonPrimitive = Union[str, int, float, bool, None]


@dataclass(frozen=True, kw_only=True)
class SchemaNode:
    """Options shared by every node kind."""

    kind: ClassVar[str] = "any"

    optional: bool = False
    nullable: bool = False
    description: str | None = None
    default: Any = UNSET
    title: str | None = None
    examples: tuple[Any, ...] | None = None
    deprecated: bool | None = None
    read_only: bool | None = None
    write_only: bool | None = None


@dataclass(frozen=True, kw_only=True)
class StringNode(SchemaNode):
    kind: ClassVar[str] = "string"

    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    format: str | None = None


@dataclass(frozen=True, kw_only=True)
class NumberNode(SchemaNode):
    kind: ClassVar[str] = "number"

    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: float | None = None
    exclusive_maximum: float | None = None
    multiple_of: float | None = None


@dataclass(frozen=True, kw_only=True)
class IntegerNode(NumberNode):
    kind: ClassVar[str] = "integer"


@dataclass(frozen=True, kw_only=True)
class BooleanNode(SchemaNode):
    kind: ClassVar[str] = "boolean"


@dataclass(frozen=True, kw_only=True)
class NullNode(SchemaNode):
    kind: ClassVar[str] = "null"


@dataclass(frozen=True, kw_only=True)
class LiteralNode(SchemaNode):
    kind: ClassVar[str] = "literal"

    value: JsonPrimitive


@dataclass(frozen=True, kw_only=True)
class EnumNode(SchemaNode):
    kind: ClassVar[str] = "enum"

    values: tuple[JsonPrimitive, ...]


@dataclass(frozen=True, kw_only=True)
class ArrayNode(SchemaNode):
    kind: ClassVar[str] = "array"

    items: SchemaNode
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False


@dataclass(frozen=True, kw_only=True)
class ObjectNode(SchemaNode):
    """An object with named properties.

    A property is required unless its own node is ``optional``.
    ``additional_properties`` is ``None`` (extra keys ignored), ``False``
    (extra keys rejected), ``True`` (extra keys allowed) or a node that every
    extra key must satisfy.
    """

    kind: ClassVar[str] = "object"

    properties: Mapping[str, SchemaNode] = field(default_factory=dict)
    additional_properties: bool | SchemaNode | None = None
    min_properties: int | None = None
    max_properties: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))


@dataclass(frozen=True, kw_only=True)
class RecordNode(SchemaNode):
    kind: ClassVar[str] = "record"

    values: SchemaNode


@dataclass(frozen=True, kw_only=True)
class UnionNode(SchemaNode):
    kind: ClassVar[str] = "union"

    any_of: tuple[SchemaNode, ...]


@dataclass(frozen=True, kw_only=True)
class RefNode(SchemaNode):
    """Points at a registered DTO by identity; resolved lazily."""

    kind: ClassVar[str] = "ref"

    dto: type


@dataclass(frozen=True, kw_only=True)
class AnyNode(SchemaNode):
    kind: ClassVar[str] = "any"


def is_schema_node(value: Any) -> bool:
    """Return True if value is a schema node rather than a DTO class."""
    return isinstance(value, SchemaNode)


# ----- Factories -----


def string(
    *,
    min_length: int | None = None,
    max_length: int | None = None,
    pattern: str | None = None,
    format: str | None = None,
    **options: Any,
) -> StringNode:
    return StringNode(min_length=min_length, max_length=max_length, pattern=pattern, format=format, **options)


def uuid(**options: Any) -> StringNode:
    return string(format="uuid", **options)


def email(**options: Any) -> StringNode:
    return string(format="email", **options)


def date(**options: Any) -> StringNode:
    """A calendar date, ``YYYY-MM-DD`` on the wire."""
    return string(format="date", **options)


def date_time(**options: Any) -> StringNode:
    """An ISO 8601 timestamp on the wire."""
    return string(format="date-time", **options)


def byte(**options: Any) -> StringNode:
    """Binary content, base64 text on the wire."""
    return string(format="byte", **options)


bytes_ = byte


def number(
    *,
    minimum: float | None = None,
    maximum: float | None = None,
    exclusive_minimum: float | None = None,
    exclusive_maximum: float | None = None,
    multiple_of: float | None = None,
    **options: Any,
) -> NumberNode:
    return NumberNode(
        minimum=minimum,
        maximum=maximum,
        exclusive_minimum=exclusive_minimum,
        exclusive_maximum=exclusive_maximum,
        multiple_of=multiple_of,
        **options,
    )


def integer(
    *,
    minimum: float | None = None,
    maximum: float | None = None,
    exclusive_minimum: float | None = None,
    exclusive_maximum: float | None = None,
    multiple_of: float | None = None,
    **options: Any,
) -> IntegerNode:
    return IntegerNode(
        minimum=minimum,
        maximum=maximum,
        exclusive_minimum=exclusive_minimum,
        exclusive_maximum=exclusive_maximum,
        multiple_of=multiple_of,
        **options,
    )


def boolean(**options: Any) -> BooleanNode:
    return BooleanNode(**options)


def null(**options: Any) -> NullNode:
    return NullNode(**options)


def literal(value: JsonPrimitive, **options: Any) -> LiteralNode:
    return LiteralNode(value=value, **options)


def enum(values: Sequence[JsonPrimitive], **options: Any) -> EnumNode:
    return EnumNode(values=tuple(values), **options)


def array(
    items: SchemaNode,
    *,
    min_items: int | None = None,
    max_items: int | None = None,
    unique_items: bool = False,
    **options: Any,
) -> ArrayNode:
    return ArrayNode(items=items, min_items=min_items, max_items=max_items, unique_items=unique_items, **options)


def object_(
    properties: Mapping[str, SchemaNode] | None = None,
    *,
    additional_properties: bool | SchemaNode | None = None,
    min_properties: int | None = None,
    max_properties: int | None = None,
    **options: Any,
) -> ObjectNode:
    return ObjectNode(
        properties=properties or {},
        additional_properties=additional_properties,
        min_properties=min_properties,
        max_properties=max_properties,
        **options,
    )


def record(values: SchemaNode, **options: Any) -> RecordNode:
    return RecordNode(values=values, **options)


def union(*members: SchemaNode | Sequence[SchemaNode], **options: Any) -> UnionNode:
    """Build a union from positional members or from a single list of members."""
    if len(members) == 1 and isinstance(members[0], (list, tuple)):
        return UnionNode(any_of=tuple(members[0]), **options)
    return UnionNode(any_of=tuple(members), **options)  # type: ignore[arg-type]


def ref(dto: type, **options: Any) -> RefNode:
    return RefNode(dto=dto, **options)


def any_(**options: Any) -> AnyNode:
    return AnyNode(**options)


def optional(node: SchemaNode) -> SchemaNode:
    """Copy of node that may be absent."""
    return dataclasses.replace(node, optional=True)


def nullable(node: SchemaNode) -> SchemaNode:
    """Copy of node that also accepts ``None``."""
    return dataclasses.replace(node, nullable=True)
