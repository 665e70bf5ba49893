"""Tests for OpenAPI export to JSON and YAML."""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

import pytest
import yaml

from dtoschema.errors import InvalidInputError
from dtoschema.openapi import export_openapi, write_openapi

DOCUMENT = {
    "openapi": "3.1.0",
    "info": {"title": "Ünïcode API", "version": "1.0.0"},
    "paths": {"/items/{id}": {"get": {"responses": {"200": {"description": "OK"}}}}},
    "components": {"schemas": {"Item": {"type": "object", "required": ["id"]}}},
}


class TestExport:
    def test_json(self) -> None:
        text = export_openapi(DOCUMENT)
        assert json.loads(text) == DOCUMENT
        assert text.startswith("{\n  ")

    def test_yaml_keeps_key_order(self) -> None:
        text = export_openapi(DOCUMENT, "yaml")
        assert yaml.safe_load(text) == DOCUMENT
        assert text.index("openapi") < text.index("info") < text.index("paths")
        assert "Ünïcode" in text

    def test_native_values(self) -> None:
        document = {"example": {"at": dt.date(2024, 1, 2), "blob": b"Hello", "tags": ("a",)}}
        expected = {"example": {"at": "2024-01-02", "blob": "SGVsbG8=", "tags": ["a"]}}
        assert json.loads(export_openapi(document)) == expected
        assert yaml.safe_load(export_openapi(document, "yaml")) == expected

    def test_unknown_format(self) -> None:
        with pytest.raises(InvalidInputError):
            export_openapi(DOCUMENT, "toml")


class TestWrite:
    def test_format_from_suffix(self, tmp_path: Path) -> None:
        target = write_openapi(DOCUMENT, tmp_path / "out" / "openapi.yml")
        assert target.exists()
        assert yaml.safe_load(target.read_text(encoding="utf-8")) == DOCUMENT
        json_target = write_openapi(DOCUMENT, tmp_path / "openapi.json")
        assert json.loads(json_target.read_text(encoding="utf-8")) == DOCUMENT

    def test_explicit_format(self, tmp_path: Path) -> None:
        target = write_openapi(DOCUMENT, tmp_path / "spec.txt", format="yaml")
        assert yaml.safe_load(target.read_text(encoding="utf-8")) == DOCUMENT
