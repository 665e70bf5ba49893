"""Serialization of generated OpenAPI documents to JSON or YAML."""

from __future__ import annotations

import base64
import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from dtoschema.errors import InvalidInputError
from dtoschema.schema.formats import is_bytes_like
from dtoschema.schema.serializer import format_date, format_date_time

logger = logging.getLogger(__name__)

__all__ = ["export_openapi", "write_openapi"]

_FORMATS = ("json", "yaml")


def export_openapi(document: dict[str, Any], format: str = "json") -> str:
    """Serialize an OpenAPI document to a JSON or YAML string.

    Raises:
        InvalidInputError: If format is neither ``json`` nor ``yaml``.
    """
    if format not in _FORMATS:
        raise InvalidInputError(message=f"Unsupported export format '{format}', expected one of {', '.join(_FORMATS)}")
    return _serialize(document, format)


def write_openapi(document: dict[str, Any], path: str | Path, format: str | None = None) -> Path:
    """Write the document to path; format defaults from the file suffix."""
    target = Path(path)
    if format is None:
        format = "yaml" if target.suffix.lower() in (".yaml", ".yml") else "json"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(export_openapi(document, format), encoding="utf-8")
    logger.info("Wrote OpenAPI document to %s", target)
    return target


# ----- Helpers -----


def _serialize(data: Any, format: str) -> str:
    if format == "yaml":
        return yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, dt.datetime):
        return format_date_time(value)
    if isinstance(value, dt.date):
        return format_date(value)
    if is_bytes_like(value):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _plain(data: Any) -> Any:
    """Reduce data to the value types ``yaml.safe_dump`` represents as plain YAML."""
    if isinstance(data, dict):
        return {key: _plain(value) for key, value in data.items()}
    if isinstance(data, (list, tuple, set, frozenset)):
        return [_plain(value) for value in data]
    if isinstance(data, (dt.date, bytes, bytearray, memoryview)):
        return _json_default(data)
    return data
