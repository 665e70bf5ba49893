"""SchemaValidator -- collects every structural issue of a value against a schema."""

from __future__ import annotations

import datetime as dt
import json
import logging
import math
from fractions import Fraction
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from dtoschema.config import Config, ValidationSettings
from dtoschema.errors import InvalidInputError
from dtoschema.schema.formats import (
    compile_pattern,
    is_bytes_like,
    is_valid_base64,
    is_valid_date_string,
    is_valid_date_time_string,
    is_valid_email,
    is_valid_uuid,
)
from dtoschema.schema.nodes import (
    MISSING,
    ArrayNode,
    EnumNode,
    LiteralNode,
    NumberNode,
    ObjectNode,
    RecordNode,
    RefNode,
    SchemaNode,
    StringNode,
    UnionNode,
)
from dtoschema.schema.types import PathSegment, ValidationIssue, ValidationResult, format_path

if TYPE_CHECKING:
    from dtoschema.registry.registry import DtoRegistry

logger = logging.getLogger(__name__)

__all__ = ["SchemaValidator", "validate"]

_FORMAT_CHECKS: dict[str, tuple[Callable[[str], bool], str]] = {
    "email": (is_valid_email, "must be a valid email"),
    "uuid": (is_valid_uuid, "must be a valid UUID"),
    "date": (is_valid_date_string, "must be a valid date"),
    "date-time": (is_valid_date_time_string, "must be a valid date-time"),
    "byte": (is_valid_base64, "must be valid base64"),
}

_FLOAT_TOLERANCE = 1e-9
_COMPARE_DEPTH = 64


class SchemaValidator:
    """Validates values against schema nodes and registered DTOs.

    A validator is cheap to build and safe to share; every call keeps its
    own cycle guard, so the same instance can serve concurrent requests.
    """

    def __init__(self, registry: DtoRegistry, config: Config | None = None) -> None:
        self._registry = registry
        settings = (config or Config()).section("validation", ValidationSettings)
        self._max_depth = settings.max_depth
        self._dto_objects: dict[type, ObjectNode] = {}

    @property
    def registry(self) -> DtoRegistry:
        return self._registry

    def validate(self, value: Any, source: SchemaNode | type) -> ValidationResult:
        """Validate value against a node or DTO class, returning a result object."""
        issues = self.issues(value, source)
        return ValidationResult(valid=not issues, errors=issues)

    def issues(
        self,
        value: Any,
        source: SchemaNode | type,
        path: Sequence[PathSegment] = (),
    ) -> list[ValidationIssue]:
        """Validate value and return the issues found, in walk order.

        Raises:
            InvalidInputError: If source is neither a SchemaNode nor a class.
        """
        node = self._as_node(source)
        walk = _Walk(self, self._max_depth)
        walk.check(value, node, tuple(path), 0)
        return walk.issues

    def dto_object(self, dto: type) -> ObjectNode | None:
        """Object schema synthesized for a registered DTO, or None if unknown."""
        cached = self._dto_objects.get(dto)
        if cached is not None:
            return cached
        meta = self._registry.get(dto)
        if meta is None:
            return None
        node = meta.as_object_node()
        # Registry entries never change once written, so the cache stays valid.
        self._dto_objects[dto] = node
        return node

    def _as_node(self, source: SchemaNode | type) -> SchemaNode:
        if isinstance(source, SchemaNode):
            return source
        if isinstance(source, type):
            return RefNode(dto=source)
        raise InvalidInputError(
            message=f"Validation source must be a SchemaNode or DTO class, got {type(source).__name__}"
        )


def validate(
    value: Any,
    source: SchemaNode | type,
    registry: DtoRegistry,
    path: Sequence[PathSegment] = (),
    config: Config | None = None,
) -> list[ValidationIssue]:
    """Functional form of ``SchemaValidator(registry, config).issues(...)``."""
    return SchemaValidator(registry, config).issues(value, source, path)


class _Walk:
    """State of a single validation call."""

    def __init__(self, validator: SchemaValidator, max_depth: int) -> None:
        self._validator = validator
        self._max_depth = max_depth
        self._expanding: set[tuple[type, int]] = set()
        self.issues: list[ValidationIssue] = []
        self._handlers: dict[str, Callable[[Any, Any, tuple[PathSegment, ...], int], None]] = {
            "string": self._check_string,
            "number": self._check_number,
            "integer": self._check_number,
            "boolean": self._check_boolean,
            "null": self._check_null,
            "literal": self._check_literal,
            "enum": self._check_enum,
            "array": self._check_array,
            "object": self._check_object,
            "record": self._check_record,
            "union": self._check_union,
            "ref": self._check_ref,
        }

    def add(self, path: tuple[PathSegment, ...], message: str, code: str) -> None:
        self.issues.append(ValidationIssue(field=format_path(path), message=message, code=code))

    def check(self, value: Any, node: SchemaNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if value is None and node.nullable:
            return
        if value is MISSING:
            if not node.optional:
                self.add(path, "is required", "required")
            return
        if depth > self._max_depth:
            self.add(path, f"exceeds the maximum nesting depth of {self._max_depth}", "maxDepth")
            return
        handler = self._handlers.get(node.kind)
        if handler is not None:
            handler(value, node, path, depth)

    # ----- Primitives -----

    def _check_string(self, value: Any, node: StringNode, path: tuple[PathSegment, ...], depth: int) -> None:
        fmt = node.format
        if fmt == "date-time" and isinstance(value, (dt.datetime, dt.date)):
            if not isinstance(value, dt.datetime):
                self.add(path, "must be a valid date-time", "format")
            return
        if fmt == "date" and isinstance(value, dt.date):
            return
        if fmt == "byte" and is_bytes_like(value):
            return
        if not isinstance(value, str):
            self.add(path, "must be a string", "type")
            return

        if node.min_length is not None and len(value) < node.min_length:
            self.add(path, f"must be at least {node.min_length} characters long", "minLength")
        if node.max_length is not None and len(value) > node.max_length:
            self.add(path, f"must be at most {node.max_length} characters long", "maxLength")
        if node.pattern is not None:
            compiled = compile_pattern(node.pattern)
            if compiled is None or compiled.search(value) is None:
                self.add(path, f"must match pattern {node.pattern}", "pattern")

        check = _FORMAT_CHECKS.get(fmt) if fmt else None
        if check is not None:
            is_valid, message = check
            if not is_valid(value):
                self.add(path, message, "format")

    def _check_number(self, value: Any, node: NumberNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self.add(path, "must be an integer" if node.kind == "integer" else "must be a number", "type")
            return
        if isinstance(value, float) and not math.isfinite(value):
            self.add(path, f"must be a finite {node.kind}", "type")
            return
        if node.kind == "integer" and isinstance(value, float) and not value.is_integer():
            self.add(path, "must be an integer", "type")

        if node.minimum is not None and value < node.minimum:
            self.add(path, f"must be at least {_num(node.minimum)}", "minimum")
        if node.maximum is not None and value > node.maximum:
            self.add(path, f"must be at most {_num(node.maximum)}", "maximum")
        if node.exclusive_minimum is not None and value <= node.exclusive_minimum:
            self.add(path, f"must be greater than {_num(node.exclusive_minimum)}", "exclusiveMinimum")
        if node.exclusive_maximum is not None and value >= node.exclusive_maximum:
            self.add(path, f"must be less than {_num(node.exclusive_maximum)}", "exclusiveMaximum")
        if node.multiple_of is not None and not _is_multiple_of(value, node.multiple_of):
            self.add(path, f"must be a multiple of {_num(node.multiple_of)}", "multipleOf")

    def _check_boolean(self, value: Any, node: SchemaNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if not isinstance(value, bool):
            self.add(path, "must be a boolean", "type")

    def _check_null(self, value: Any, node: SchemaNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if value is not None:
            self.add(path, "must be null", "type")

    def _check_literal(self, value: Any, node: LiteralNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if not _same_value(value, node.value):
            self.add(path, f"must be equal to {_render(node.value)}", "const")

    def _check_enum(self, value: Any, node: EnumNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if not any(_same_value(value, option) for option in node.values):
            allowed = ", ".join(_render(option) for option in node.values)
            self.add(path, f"must be one of: {allowed}", "enum")

    # ----- Containers -----

    def _check_array(self, value: Any, node: ArrayNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if not isinstance(value, (list, tuple)):
            self.add(path, "must be an array", "type")
            return
        if node.min_items is not None and len(value) < node.min_items:
            self.add(path, f"must have at least {node.min_items} items", "minItems")
        if node.max_items is not None and len(value) > node.max_items:
            self.add(path, f"must have at most {node.max_items} items", "maxItems")
        if node.unique_items and not _all_unique(value, self._max_depth):
            self.add(path, "must contain unique items", "uniqueItems")
        for index, item in enumerate(value):
            self.check(item, node.items, path + (index,), depth + 1)

    def _check_object(self, value: Any, node: ObjectNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if not isinstance(value, Mapping):
            self.add(path, "must be an object", "type")
            return

        for name, prop in node.properties.items():
            self.check(value.get(name, MISSING), prop, path + (name,), depth + 1)

        extra = node.additional_properties
        if extra is False or isinstance(extra, SchemaNode):
            for key, item in value.items():
                if key in node.properties:
                    continue
                if extra is False:
                    self.add(path + (str(key),), "is not a valid field", "additionalProperties")
                else:
                    self.check(item, extra, path + (str(key),), depth + 1)

        count = len(value)
        if node.min_properties is not None and count < node.min_properties:
            self.add(path, f"must have at least {node.min_properties} properties", "minProperties")
        if node.max_properties is not None and count > node.max_properties:
            self.add(path, f"must have at most {node.max_properties} properties", "maxProperties")

    def _check_record(self, value: Any, node: RecordNode, path: tuple[PathSegment, ...], depth: int) -> None:
        if not isinstance(value, Mapping):
            self.add(path, "must be an object", "type")
            return
        for key, item in value.items():
            self.check(item, node.values, path + (str(key),), depth + 1)

    def _check_union(self, value: Any, node: UnionNode, path: tuple[PathSegment, ...], depth: int) -> None:
        outer = self.issues
        try:
            for member in node.any_of:
                self.issues = []
                self.check(value, member, path, depth)
                if not self.issues:
                    return
        finally:
            self.issues = outer
        self.add(path, "must match one of the allowed types", "anyOf")

    def _check_ref(self, value: Any, node: RefNode, path: tuple[PathSegment, ...], depth: int) -> None:
        target = self._validator.dto_object(node.dto)
        if target is None:
            name = getattr(node.dto, "__name__", repr(node.dto))
            logger.warning("Validation references unregistered DTO '%s'", name)
            self.add(path, f"references unregistered DTO '{name}'", "$ref")
            return

        key = (node.dto, id(value))
        if key in self._expanding:
            return
        self._expanding.add(key)
        try:
            self.check(value, target, path, depth)
        finally:
            self._expanding.discard(key)


# ----- Helpers -----


def _num(value: float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _render(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


def _is_multiple_of(value: float, divisor: float) -> bool:
    if divisor == 0:
        return False
    if isinstance(value, int) and isinstance(divisor, int):
        return value % divisor == 0
    try:
        quotient = value / divisor
    except OverflowError:
        # Integer too large to divide as a float.
        quotient = math.inf
    if math.isfinite(quotient):
        return abs(quotient - round(quotient)) < _FLOAT_TOLERANCE
    if isinstance(divisor, float) and not math.isfinite(divisor):
        return False
    return Fraction(value) % Fraction(divisor) == 0


def _same_value(a: Any, b: Any, budget: int = _COMPARE_DEPTH) -> bool:
    """Equality that keeps booleans apart from numbers."""
    if budget < 0:
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a is b
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(_same_value(a[k], b[k], budget - 1) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_same_value(x, y, budget - 1) for x, y in zip(a, b))
    if isinstance(a, (list, tuple, Mapping)) or isinstance(b, (list, tuple, Mapping)):
        return False
    try:
        return bool(a == b)
    except Exception:
        return False


def _unique_key(value: Any, budget: int) -> tuple[Any, ...]:
    """Hashable key equal for exactly the values ``_same_value`` treats as equal.

    Raises TypeError for values outside the JSON data model, unhashable
    object keys, or nesting deeper than budget.
    """
    if budget < 0:
        raise TypeError("value nested too deeply for a unique key")
    if value is None:
        return ("null",)
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, float) and math.isnan(value):
        return ("nan",)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str):
        return ("string", value)
    if isinstance(value, Mapping):
        return ("object", frozenset((k, _unique_key(v, budget - 1)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return ("array", tuple(_unique_key(v, budget - 1) for v in value))
    raise TypeError(f"no unique key for {type(value).__name__}")


def _all_unique(items: Sequence[Any], max_depth: int = _COMPARE_DEPTH) -> bool:
    seen: set[tuple[Any, ...]] = set()
    leftovers: list[int] = []
    for index, item in enumerate(items):
        try:
            key = _unique_key(item, max_depth)
        except TypeError:
            leftovers.append(index)
            continue
        if key in seen:
            return False
        seen.add(key)
    # Values without a key fall back to pairwise comparison.
    for index in leftovers:
        item = items[index]
        for other_index, other in enumerate(items):
            if other_index != index and _same_value(item, other, max_depth):
                return False
    return True
