"""String format checks shared by validation and coercion."""

from __future__ import annotations

import base64
import binascii
import datetime as dt
import re
from functools import lru_cache
from typing import Any

__all__ = [
    "DATE_FORMATS",
    "is_bytes_like",
    "is_valid_date_string",
    "is_valid_date_time_string",
    "is_valid_email",
    "is_valid_uuid",
    "is_valid_base64",
    "parse_date_string",
    "parse_date_time_string",
    "compile_pattern",
]

DATE_FORMATS = frozenset({"date", "date-time"})

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_TIME_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)([Zz]|[+-]\d{2}:?\d{2})?$"
)
_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)
_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_BASE64_RE = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$")


def is_bytes_like(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def parse_date_string(value: str) -> dt.date | None:
    """Parse ``YYYY-MM-DD``; None unless it names a real calendar day."""
    if not _DATE_RE.fullmatch(value):
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        return None


def parse_date_time_string(value: str) -> dt.datetime | None:
    """Parse an ISO 8601 timestamp with a time part and optional zone."""
    match = _DATE_TIME_RE.fullmatch(value)
    if match is None:
        return None
    day, clock, zone = match.groups()
    if zone in ("Z", "z"):
        zone = "+00:00"
    elif zone and ":" not in zone:
        zone = f"{zone[:3]}:{zone[3:]}"
    if "." in clock:
        whole, fraction = clock.split(".", 1)
        clock = f"{whole}.{fraction[:6].ljust(6, '0')}"
    try:
        return dt.datetime.fromisoformat(f"{day}T{clock}{zone or ''}")
    except ValueError:
        return None


def is_valid_date_string(value: str) -> bool:
    return parse_date_string(value) is not None


def is_valid_date_time_string(value: str) -> bool:
    return parse_date_time_string(value) is not None


def is_valid_email(value: str) -> bool:
    return _EMAIL_RE.fullmatch(value) is not None


def is_valid_uuid(value: str) -> bool:
    return _UUID_RE.fullmatch(value) is not None


def is_valid_base64(value: str) -> bool:
    if not _BASE64_RE.fullmatch(value):
        return False
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a schema ``pattern``; None when the expression is malformed."""
    try:
        return re.compile(pattern)
    except re.error:
        return None
