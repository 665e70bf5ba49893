"""dtoschema schema system -- public API.

Re-exports the node algebra, validation and serialization entry points.

Example usage::

    from dtoschema.schema import nodes as t
    from dtoschema.schema import SchemaValidator, serialize_response
"""

from __future__ import annotations

from dtoschema.schema import nodes
from dtoschema.schema.nodes import MISSING, UNSET, SchemaNode, is_schema_node
from dtoschema.schema.serializer import serialize_response
from dtoschema.schema.types import (
    DtoMeta,
    FieldMeta,
    PathSegment,
    ValidationIssue,
    ValidationResult,
    format_path,
)
from dtoschema.schema.validator import SchemaValidator, validate

__all__ = [
    "nodes",
    "MISSING",
    "UNSET",
    "SchemaNode",
    "is_schema_node",
    "DtoMeta",
    "FieldMeta",
    "PathSegment",
    "ValidationIssue",
    "ValidationResult",
    "format_path",
    "SchemaValidator",
    "validate",
    "serialize_response",
]
