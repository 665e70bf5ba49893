"""Configuration loading and validation."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Literal, TypeVar

import yaml
from pydantic import BaseModel, Field, ValidationError

from dtoschema.errors import ConfigError, ConfigNotFoundError

__all__ = [
    "Config",
    "CoercionSettings",
    "OpenApiSettings",
    "ValidationSettings",
    "DEFAULTS",
]

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class ValidationSettings(BaseModel):
    """Settings for the validation engine."""

    max_depth: int = Field(default=64, gt=0, description="Deepest nesting level inspected before giving up")


class OpenApiSettings(BaseModel):
    """Settings for OpenAPI document generation."""

    version: str = "3.1.0"
    json_schema_dialect: str = "https://spec.openapis.org/oas/3.1/dialect/base"
    include_all_dtos: bool = False


class CoercionSettings(BaseModel):
    """Defaults applied by schema-driven input coercion."""

    trim: bool = True
    empty: Literal["allow", "reject"] = "reject"
    dates: bool = False


DEFAULTS: dict[str, Any] = {
    "validation": ValidationSettings().model_dump(),
    "openapi": OpenApiSettings().model_dump(),
    "coercion": CoercionSettings().model_dump(),
}


class Config:
    """Configuration accessor with dot-path key support.

    Values not present in the supplied data fall back to ``DEFAULTS``.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = _deep_merge(copy.deepcopy(DEFAULTS), data or {})

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigNotFoundError(config_path=str(config_path))

        try:
            parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(message=f"Invalid YAML in config file: {config_path}") from e

        if parsed is None:
            return cls()
        if not isinstance(parsed, dict):
            raise ConfigError(message=f"Config file must be a YAML mapping: {config_path}")

        unknown = sorted(set(parsed) - set(DEFAULTS))
        if unknown:
            logger.warning("Ignoring unknown config sections in %s: %s", config_path, ", ".join(unknown))
        return cls(parsed)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key."""
        parts = key.split(".")
        current: Any = self._data
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def section(self, name: str, model: type[_ModelT]) -> _ModelT:
        """Return a config section validated against a pydantic model.

        Raises:
            ConfigError: If the section does not satisfy the model.
        """
        raw = self.get(name, {})
        if not isinstance(raw, dict):
            raise ConfigError(message=f"Config section '{name}' must be a mapping")
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(message=f"Invalid config section '{name}': {e}", cause=e) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base
