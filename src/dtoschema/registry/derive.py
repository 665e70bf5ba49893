"""DTO derivation: omit, pick, partial and merge.

Each operation reads registered field maps, computes a new one and registers
it under a fresh identity. Source metadata is never modified; because
``FieldMeta`` and schema nodes are immutable, copying an entry is enough to
keep the derived DTO independent of its source.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence, Union

from dtoschema.errors import InvalidInputError
from dtoschema.registry.declare import new_identity
from dtoschema.registry.registry import DtoRegistry
from dtoschema.schema.nodes import SchemaNode
from dtoschema.schema.types import DtoMeta, FieldMeta

logger = logging.getLogger(__name__)

__all__ = [
    "Replace",
    "Patch",
    "FieldOverride",
    "omit_dto",
    "pick_dto",
    "partial_dto",
    "merge_dto",
]

_FIELD_LEVEL = frozenset({"optional", "description", "default"})


@dataclass(frozen=True)
class Replace:
    """Override that swaps a field for a new schema wholesale."""

    schema: SchemaNode
    optional: bool | None = None
    description: str | None = None

    def apply(self, name: str, current: FieldMeta | None) -> FieldMeta:
        return FieldMeta(
            schema=self.schema,
            optional=self.schema.optional if self.optional is None else self.optional,
            description=self.description,
            default=self.schema.default,
        )


class Patch:
    """Override that changes selected attributes of an existing field.

    ``optional``, ``description`` and ``default`` change the field itself;
    any other keyword (``nullable``, ``min_length``, ``maximum``, ...) is set
    on a copy of the field's schema node and must exist on that node kind.
    """

    __slots__ = ("changes",)

    def __init__(self, **changes: Any) -> None:
        if not changes:
            raise InvalidInputError(message="Patch requires at least one attribute")
        self.changes: Mapping[str, Any] = MappingProxyType(changes)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self.changes.items())
        return f"Patch({inner})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Patch) and dict(self.changes) == dict(other.changes)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.changes)))

    def apply(self, name: str, current: FieldMeta | None) -> FieldMeta:
        if current is None:
            raise InvalidInputError(message=f"Cannot patch field '{name}': it does not exist")

        node_changes = {k: v for k, v in self.changes.items() if k not in _FIELD_LEVEL}
        # ``default`` lives on both; keep them in step.
        if "default" in self.changes:
            node_changes["default"] = self.changes["default"]
        schema = current.schema
        if node_changes:
            known = {f.name for f in dataclasses.fields(schema)}
            unknown = sorted(set(node_changes) - known)
            if unknown:
                raise InvalidInputError(
                    message=f"Cannot patch field '{name}': {schema.kind} schema has no attribute(s) {', '.join(unknown)}"
                )
            schema = dataclasses.replace(schema, **node_changes)

        return FieldMeta(
            schema=schema,
            optional=self.changes.get("optional", current.optional),
            description=self.changes.get("description", current.description),
            default=self.changes.get("default", current.default),
        )


FieldOverride = Union[Replace, Patch]


def omit_dto(
    registry: DtoRegistry,
    base: type,
    keys: Iterable[str],
    *,
    overrides: Mapping[str, FieldOverride | SchemaNode] | None = None,
    name: str | None = None,
    description: str | None = None,
) -> type:
    """Register a DTO with every field of ``base`` except ``keys``."""
    base_meta = registry.require(base)
    excluded = set(_as_keys(keys))
    fields = {k: v for k, v in base_meta.fields.items() if k not in excluded}
    fields = _apply_overrides(fields, overrides)
    return _register_derived(
        registry,
        name or f"Omit{base_meta.name}",
        fields,
        description if description is not None else base_meta.description,
        base_meta.additional_properties,
    )


def pick_dto(
    registry: DtoRegistry,
    base: type,
    keys: Iterable[str],
    *,
    overrides: Mapping[str, FieldOverride | SchemaNode] | None = None,
    name: str | None = None,
    description: str | None = None,
) -> type:
    """Register a DTO with only the ``keys`` of ``base``, in ``keys`` order.

    Keys that ``base`` does not declare are ignored.
    """
    base_meta = registry.require(base)
    fields: dict[str, FieldMeta] = {}
    for key in _as_keys(keys):
        if key in base_meta.fields:
            fields[key] = base_meta.fields[key]
        else:
            logger.debug("pick_dto: '%s' has no field '%s', skipping", base_meta.name, key)
    fields = _apply_overrides(fields, overrides)
    return _register_derived(
        registry,
        name or f"Pick{base_meta.name}",
        fields,
        description if description is not None else base_meta.description,
        base_meta.additional_properties,
    )


def partial_dto(
    registry: DtoRegistry,
    base: type,
    *,
    overrides: Mapping[str, FieldOverride | SchemaNode] | None = None,
    name: str | None = None,
    description: str | None = None,
) -> type:
    """Register a DTO whose fields are all optional; schemas are shared untouched."""
    base_meta = registry.require(base)
    fields = {k: dataclasses.replace(v, optional=True) for k, v in base_meta.fields.items()}
    fields = _apply_overrides(fields, overrides)
    return _register_derived(
        registry,
        name or f"Partial{base_meta.name}",
        fields,
        description if description is not None else base_meta.description,
        base_meta.additional_properties,
    )


def merge_dto(
    registry: DtoRegistry,
    bases: Sequence[type],
    *,
    name: str | None = None,
    description: str | None = None,
    additional_properties: bool | None = None,
) -> type:
    """Register the left-to-right union of several DTOs.

    When two bases declare the same key the later base's field wins entirely.
    """
    if not bases:
        raise InvalidInputError(message="merge_dto requires at least one base DTO")
    metas = [registry.require(b) for b in bases]

    fields: dict[str, FieldMeta] = {}
    for meta in metas:
        for key, value in meta.fields.items():
            # Assignment keeps the first-seen position and takes the later value.
            fields[key] = value

    if additional_properties is None:
        declared = [m.additional_properties for m in metas if m.additional_properties is not None]
        additional_properties = declared[-1] if declared else None

    return _register_derived(
        registry,
        name or "".join(m.name for m in metas),
        fields,
        description,
        additional_properties,
    )


# ----- Helpers -----


def _as_keys(keys: Iterable[str]) -> list[str]:
    if isinstance(keys, str):
        return [keys]
    return list(keys)


def _apply_overrides(
    fields: dict[str, FieldMeta],
    overrides: Mapping[str, FieldOverride | SchemaNode] | None,
) -> dict[str, FieldMeta]:
    if not overrides:
        return fields
    result = dict(fields)
    for key, override in overrides.items():
        if isinstance(override, SchemaNode):
            override = Replace(override)
        if not isinstance(override, (Replace, Patch)):
            raise InvalidInputError(
                message=f"Override for '{key}' must be Replace, Patch or a SchemaNode, got {type(override).__name__}"
            )
        result[key] = override.apply(key, result.get(key))
    return result


def _register_derived(
    registry: DtoRegistry,
    name: str,
    fields: Mapping[str, FieldMeta],
    description: str | None,
    additional_properties: bool | None,
) -> type:
    meta = DtoMeta(
        name=name,
        fields=fields,
        description=description,
        additional_properties=additional_properties,
    )
    identity = new_identity(name, description)
    registry.register(identity, meta)
    return identity
