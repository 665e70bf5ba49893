"""Best-effort conversion of textual request input into typed values.

Query strings and path parameters arrive as text (or lists of text for
repeated keys). The ``parse_*`` helpers turn such input into Python values
and return None for anything they cannot read; they never raise.
``coerce_input`` applies them along a schema so that validation sees typed
values.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Any, Literal, Mapping, Sequence, Union

from dtoschema.config import CoercionSettings, Config, ValidationSettings
from dtoschema.schema.formats import parse_date_string, parse_date_time_string
from dtoschema.schema.nodes import (
    ArrayNode,
    BooleanNode,
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

if TYPE_CHECKING:
    from dtoschema.registry.registry import DtoRegistry

logger = logging.getLogger(__name__)

__all__ = [
    "normalize_single",
    "parse_number",
    "parse_integer",
    "parse_boolean",
    "parse_id",
    "coerce_input",
]

EmptyPolicy = Literal["allow", "reject"]
Number = Union[int, float]

_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_RADIX_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def normalize_single(value: Any, *, trim: bool = True, empty: EmptyPolicy = "reject") -> str | None:
    """Reduce raw input to one string.

    Lists (repeated query keys) contribute their first element. Booleans are
    spelled ``"true"``/``"false"``. Empty text becomes None unless
    ``empty="allow"``.
    """
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]
    if value is None:
        return None
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, str):
        text = value
    else:
        try:
            text = str(value)
        except ValueError:
            # Integers beyond the interpreter's digit limit have no text form.
            return None
    if trim:
        text = text.strip()
    if not text and empty != "allow":
        return None
    return text


def parse_number(
    value: Any,
    *,
    min: Number | None = None,
    max: Number | None = None,
    clamp: bool = False,
    trim: bool = True,
    empty: EmptyPolicy = "reject",
) -> Number | None:
    """Parse a finite decimal or ``0x``/``0o``/``0b`` literal.

    Integer literals come back as ``int``, everything else as ``float``.
    Values outside ``[min, max]`` give None, or the nearest bound when
    ``clamp`` is set.
    """
    parsed = _parse_raw(value, trim, empty)
    if parsed is None:
        return None
    return _apply_range(parsed, min, max, clamp)


def parse_integer(
    value: Any,
    *,
    min: Number | None = None,
    max: Number | None = None,
    clamp: bool = False,
    trim: bool = True,
    empty: EmptyPolicy = "reject",
) -> int | None:
    """Like ``parse_number`` but only accepts integral values (``"10.0"`` is 10)."""
    parsed = _parse_raw(value, trim, empty)
    if parsed is None:
        return None
    if isinstance(parsed, float):
        if not parsed.is_integer():
            return None
        parsed = int(parsed)
    result = _apply_range(parsed, min, max, clamp)
    return None if result is None else int(result)


def parse_boolean(
    value: Any,
    *,
    true_values: Sequence[str] = ("true", "1"),
    false_values: Sequence[str] = ("false", "0"),
    case_sensitive: bool = False,
    trim: bool = True,
    empty: EmptyPolicy = "reject",
) -> bool | None:
    text = normalize_single(value, trim=trim, empty=empty)
    if text is None:
        return None
    if not case_sensitive:
        text = text.lower()
        true_values = [v.lower() for v in true_values]
        false_values = [v.lower() for v in false_values]
    if text in true_values:
        return True
    if text in false_values:
        return False
    return None


def parse_id(value: Any, **options: Any) -> int | None:
    """``parse_integer`` with ``min=1`` unless another minimum is given."""
    options.setdefault("min", 1)
    return parse_integer(value, **options)


def _parse_raw(value: Any, trim: bool, empty: EmptyPolicy) -> Number | None:
    text = normalize_single(value, trim=trim, empty=empty)
    if text is None:
        return None
    try:
        if _INT_RE.fullmatch(text):
            return int(text)
        if _RADIX_RE.fullmatch(text):
            return int(text, 0)
    except ValueError:
        # Longer than the interpreter's integer digit limit.
        return None
    if _DECIMAL_RE.fullmatch(text):
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def _apply_range(value: Number, minimum: Number | None, maximum: Number | None, clamp: bool) -> Number | None:
    if minimum is not None and value < minimum:
        return minimum if clamp else None
    if maximum is not None and value > maximum:
        return maximum if clamp else None
    return value


# ----- Schema-driven coercion -----


def coerce_input(
    value: Any,
    source: SchemaNode | type,
    registry: DtoRegistry,
    *,
    primitives: bool = True,
    dates: bool | None = None,
    config: Config | None = None,
) -> Any:
    """Convert textual input along a node or DTO so it can be validated.

    With ``primitives`` set, strings under number, integer, boolean, enum and
    literal schemas are parsed, and a lone value under an array schema is
    wrapped in a list. With ``dates`` set (default: ``coercion.dates``),
    ``date``/``date-time`` strings become ``date``/``datetime`` objects.
    Anything that cannot be converted is returned unchanged so that
    validation can report it, and so is anything nested deeper than
    ``validation.max_depth``.
    """
    config = config or Config()
    settings = config.section("coercion", CoercionSettings)
    coercer = _Coercer(
        registry,
        primitives=primitives,
        dates=settings.dates if dates is None else dates,
        trim=settings.trim,
        empty=settings.empty,
        max_depth=config.section("validation", ValidationSettings).max_depth,
    )
    node = source if isinstance(source, SchemaNode) else RefNode(dto=source)
    return coercer.coerce(value, node, 0)


class _Coercer:
    def __init__(
        self,
        registry: DtoRegistry,
        *,
        primitives: bool,
        dates: bool,
        trim: bool,
        empty: EmptyPolicy,
        max_depth: int,
    ) -> None:
        self._registry = registry
        self._primitives = primitives
        self._dates = dates
        self._trim = trim
        self._empty = empty
        self._max_depth = max_depth
        self._active: set[int] = set()

    def coerce(self, value: Any, node: SchemaNode, depth: int) -> Any:
        if value is None or depth > self._max_depth:
            return value
        if isinstance(node, StringNode):
            return self._string(value, node)
        if isinstance(node, NumberNode):
            return self._number(value, node)
        if isinstance(node, BooleanNode):
            if not self._is_text(value):
                return value
            parsed = parse_boolean(value, trim=self._trim, empty=self._empty)
            return value if parsed is None else parsed
        if isinstance(node, (LiteralNode, EnumNode)):
            return self._choice(value, (node.value,) if isinstance(node, LiteralNode) else node.values)
        if isinstance(node, ArrayNode):
            if isinstance(value, (list, tuple)):
                return [self.coerce(item, node.items, depth + 1) for item in value]
            if self._primitives and isinstance(value, str):
                return [self.coerce(value, node.items, depth + 1)]
            return value
        if isinstance(node, ObjectNode):
            extra = node.additional_properties if isinstance(node.additional_properties, SchemaNode) else None
            return self._mapping(value, node.properties, extra, depth)
        if isinstance(node, RecordNode):
            return self._mapping(value, {}, node.values, depth)
        if isinstance(node, RefNode):
            meta = self._registry.get(node.dto)
            if meta is None:
                logger.debug("coerce_input: unregistered DTO %r, leaving value unchanged", node.dto)
                return value
            return self._mapping(value, {name: f.schema for name, f in meta.fields.items()}, None, depth)
        if isinstance(node, UnionNode):
            for option in node.any_of:
                coerced = self.coerce(value, option, depth)
                if coerced is not value:
                    return coerced
        return value

    def _is_text(self, value: Any) -> bool:
        return self._primitives and isinstance(value, (str, list, tuple))

    def _string(self, value: Any, node: StringNode) -> Any:
        if self._primitives and isinstance(value, (list, tuple)) and value:
            value = value[0]
        if not self._dates or not isinstance(value, str):
            return value
        text = value.strip()
        if node.format == "date":
            parsed_date = parse_date_string(text)
            return value if parsed_date is None else parsed_date
        if node.format == "date-time":
            parsed_ts = parse_date_time_string(text)
            return value if parsed_ts is None else parsed_ts
        return value

    def _number(self, value: Any, node: NumberNode) -> Any:
        if not self._is_text(value):
            return value
        if node.kind == "integer":
            parsed = parse_integer(value, trim=self._trim, empty=self._empty)
        else:
            parsed = parse_number(value, trim=self._trim, empty=self._empty)
        return value if parsed is None else parsed

    def _choice(self, value: Any, options: Sequence[Any]) -> Any:
        if not self._primitives or not isinstance(value, str):
            return value
        if value in [o for o in options if isinstance(o, str)]:
            return value
        for option in options:
            if isinstance(option, bool):
                if parse_boolean(value, trim=self._trim) is option:
                    return option
            elif isinstance(option, (int, float)):
                parsed = parse_number(value, trim=self._trim)
                if parsed is not None and parsed == option:
                    return option
        return value

    def _mapping(
        self,
        value: Any,
        properties: Mapping[str, SchemaNode],
        extra: SchemaNode | None,
        depth: int,
    ) -> Any:
        if not isinstance(value, Mapping):
            return value
        marker = id(value)
        if marker in self._active:
            return value
        self._active.add(marker)
        try:
            output = dict(value)
            for key, item in value.items():
                schema = properties.get(key, extra)
                if schema is not None:
                    output[key] = self.coerce(item, schema, depth + 1)
            return output
        finally:
            self._active.discard(marker)
