"""Request boundary: validate every part of an incoming request at once."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Tuple, Union

from dtoschema.coerce import coerce_input
from dtoschema.config import Config
from dtoschema.context import SchemaContext
from dtoschema.errors import InvalidInputError, RequestValidationError
from dtoschema.registry.registry import DtoRegistry
from dtoschema.schema.nodes import SchemaNode
from dtoschema.schema.types import ValidationIssue
from dtoschema.schema.validator import SchemaValidator

logger = logging.getLogger(__name__)

__all__ = ["RequestPart", "ValidatedRequest", "validate_request"]

RequestPart = Tuple[Any, Union[SchemaNode, type]]


@dataclass(frozen=True)
class ValidatedRequest:
    """Values that passed validation (coerced when coercion was requested)."""

    body: Any = None
    query: Any = None
    params: Any = None


def validate_request(
    target: DtoRegistry | SchemaContext,
    *,
    body: RequestPart | None = None,
    query: RequestPart | None = None,
    params: RequestPart | None = None,
    trace_id: str | None = None,
    config: Config | None = None,
    coerce: bool = False,
) -> ValidatedRequest:
    """Validate body, query and path params, each given as ``(value, source)``.

    Issues of every part are collected before anything is raised. Query and
    params issues are reported under ``query.`` and ``params.``. With
    ``coerce`` set, query and params text is converted first (see
    ``coerce_input``).

    Raises:
        RequestValidationError: If any part has at least one issue.
    """
    if isinstance(target, SchemaContext):
        registry = target.registry
        config = config or target.config
        trace_id = trace_id or target.trace_id
    else:
        registry = target
    config = config or Config()
    validator = SchemaValidator(registry, config)

    issues: list[ValidationIssue] = []
    values: dict[str, Any] = {}
    for name, part, prefix in (("body", body, ()), ("query", query, ("query",)), ("params", params, ("params",))):
        if part is None:
            continue
        value, source = _unpack(name, part)
        if coerce and name != "body":
            value = coerce_input(value, source, registry, config=config)
        issues.extend(validator.issues(value, source, prefix))
        values[name] = value

    if issues:
        logger.debug("Request validation failed with %d issue(s)", len(issues))
        raise RequestValidationError(errors=[issue.to_dict() for issue in issues], trace_id=trace_id)
    return ValidatedRequest(**values)


def _unpack(name: str, part: Any) -> RequestPart:
    if not isinstance(part, tuple) or len(part) != 2:
        raise InvalidInputError(message=f"Request {name} must be a (value, source) pair")
    return part
