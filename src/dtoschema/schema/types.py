"""Schema type definitions and data structures for the dtoschema schema system."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence, Union

from dtoschema.errors import SchemaValidationError
from dtoschema.schema.nodes import UNSET, ObjectNode, SchemaNode

__all__ = [
    "PathSegment",
    "FieldMeta",
    "DtoMeta",
    "ValidationIssue",
    "ValidationResult",
    "format_path",
]

PathSegment = Union[str, int]


@dataclass(frozen=True)
class FieldMeta:
    """One declared DTO field."""

    schema: SchemaNode
    optional: bool = False
    description: str | None = None
    default: Any = UNSET

    @classmethod
    def from_node(cls, node: SchemaNode) -> FieldMeta:
        """Wrap a bare node, taking optionality and default from the node itself."""
        return cls(schema=node, optional=node.optional, default=node.default)


@dataclass(frozen=True)
class DtoMeta:
    """Registered description of a DTO: its name and ordered field map.

    ``additional_properties=None`` means the DTO does not declare a policy;
    validation and documentation then treat unknown keys as not allowed.
    """

    name: str
    fields: Mapping[str, FieldMeta] = field(default_factory=dict)
    description: str | None = None
    additional_properties: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def allows_additional_properties(self) -> bool:
        return bool(self.additional_properties)

    def as_object_node(self) -> ObjectNode:
        """Synthesize the object schema this DTO stands for.

        Field-level optionality, description and default are folded into
        each property node; unknown keys are rejected unless the DTO allows
        them.
        """
        properties: dict[str, SchemaNode] = {}
        for name, meta in self.fields.items():
            node = meta.schema
            changes: dict[str, Any] = {}
            if node.optional != meta.optional:
                changes["optional"] = meta.optional
            if meta.description and not node.description:
                changes["description"] = meta.description
            if meta.default is not UNSET and node.default is UNSET:
                changes["default"] = meta.default
            properties[name] = dataclasses.replace(node, **changes) if changes else node
        return ObjectNode(
            properties=properties,
            additional_properties=True if self.allows_additional_properties else False,
            description=self.description,
        )


@dataclass(frozen=True)
class ValidationIssue:
    """One validation failure.

    ``field`` is the rendered path (``a.b[0].c``), empty for the root value.
    ``code`` names the violated JSON Schema keyword.
    """

    field: str
    message: str
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"field": self.field, "message": self.message}
        if self.code is not None:
            result["code"] = self.code
        return result


@dataclass
class ValidationResult:
    """Aggregation of validation issues."""

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)

    def to_error(self) -> SchemaValidationError:
        """Convert this validation result into a SchemaValidationError exception."""
        if self.valid:
            raise ValueError("Cannot convert valid result to error")
        return SchemaValidationError(message="Schema validation failed", errors=[e.to_dict() for e in self.errors])


def format_path(path: Sequence[PathSegment]) -> str:
    """Render path segments as ``a.b[0].c``."""
    rendered = ""
    for segment in path:
        if isinstance(segment, int) and not isinstance(segment, bool):
            rendered += f"[{segment}]"
        elif rendered:
            rendered += f".{segment}"
        else:
            rendered = str(segment)
    return rendered
