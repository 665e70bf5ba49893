"""Explicit builders that declare DTOs and register their metadata."""

from __future__ import annotations

import inspect
from typing import Any, Callable, Mapping

from dtoschema.errors import InvalidInputError
from dtoschema.registry.registry import DtoRegistry
from dtoschema.schema.nodes import UNSET, SchemaNode
from dtoschema.schema.types import DtoMeta, FieldMeta

__all__ = ["define_dto", "dto", "field", "new_identity", "normalize_fields"]


def field(
    schema: SchemaNode,
    *,
    optional: bool | None = None,
    description: str | None = None,
    default: Any = UNSET,
) -> FieldMeta:
    """Declare a DTO field.

    ``optional`` defaults to the node's own flag, ``default`` to the node's
    own default.
    """
    if not isinstance(schema, SchemaNode):
        raise InvalidInputError(message=f"Field schema must be a SchemaNode, got {type(schema).__name__}")
    return FieldMeta(
        schema=schema,
        optional=schema.optional if optional is None else optional,
        description=description,
        default=schema.default if default is UNSET else default,
    )


def normalize_fields(fields: Mapping[str, SchemaNode | FieldMeta]) -> dict[str, FieldMeta]:
    """Turn a mapping of nodes and/or FieldMeta into an ordered FieldMeta map."""
    result: dict[str, FieldMeta] = {}
    for name, value in fields.items():
        if not isinstance(name, str) or not name:
            raise InvalidInputError(message=f"Field names must be non-empty strings, got {name!r}")
        if isinstance(value, FieldMeta):
            result[name] = value
        elif isinstance(value, SchemaNode):
            result[name] = FieldMeta.from_node(value)
        else:
            raise InvalidInputError(
                message=f"Field '{name}' must be a SchemaNode or FieldMeta, got {type(value).__name__}"
            )
    return result


def new_identity(name: str, description: str | None = None) -> type:
    """Create a fresh class object to serve as a DTO identity."""
    return type(name, (), {"__doc__": description})


def define_dto(
    registry: DtoRegistry,
    name: str,
    fields: Mapping[str, SchemaNode | FieldMeta],
    *,
    description: str | None = None,
    additional_properties: bool | None = None,
) -> type:
    """Create and register a new DTO.

    Returns:
        The new DTO identity. Pass it to ``ref()`` or use it wherever a
        schema source is accepted.
    """
    meta = DtoMeta(
        name=name,
        fields=normalize_fields(fields),
        description=description,
        additional_properties=additional_properties,
    )
    identity = new_identity(name, description)
    registry.register(identity, meta)
    return identity


def dto(
    registry: DtoRegistry,
    *,
    name: str | None = None,
    description: str | None = None,
    additional_properties: bool | None = None,
) -> Callable[[type], type]:
    """Class decorator registering a DTO from its class attributes.

    Attributes holding a SchemaNode or a FieldMeta become fields, in
    declaration order. Fields of registered base classes come first::

        @dto(registry)
        class UserDto:
            id = t.integer(minimum=1)
            name = field(t.string(min_length=1), description="Display name")
            email = t.optional(t.email())
    """

    def decorator(cls: type) -> type:
        collected: dict[str, FieldMeta] = {}
        for base in reversed(cls.__mro__[1:]):
            base_meta = registry.get(base)
            if base_meta is not None:
                collected.update(base_meta.fields)

        own: dict[str, SchemaNode | FieldMeta] = {
            attr: value for attr, value in vars(cls).items() if isinstance(value, (SchemaNode, FieldMeta))
        }
        collected.update(normalize_fields(own))

        doc = inspect.cleandoc(cls.__doc__) if cls.__doc__ else None
        meta = DtoMeta(
            name=name or cls.__name__,
            fields=collected,
            description=description if description is not None else doc,
            additional_properties=additional_properties,
        )
        registry.register(cls, meta)
        return cls

    return decorator
