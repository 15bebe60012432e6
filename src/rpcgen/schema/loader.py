# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Loading of backend schema documents.

A schema document describes resources, their actions and the RPC exposure
configured per domain. Documents ending in ``.json`` are read as JSON;
everything else is read as YAML.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from rpcgen.model.entities import Schema

# ###############
# Public Interface
# ###############


class SchemaError(Exception):
    """Raised when a schema document cannot be loaded or does not describe a valid schema."""


def load_schema(path: Path) -> Schema:
    """Read and validate a schema document from *path*.

    Raises:
        SchemaError: If the file cannot be read, cannot be parsed, or fails validation.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SchemaError(f"Schema file not found: {path}") from None
    except OSError as exc:
        raise SchemaError(f"Cannot read schema file: {exc}") from exc

    if path.suffix == ".json":
        return parse_schema_json(text, source_label=str(path))
    return parse_schema_yaml(text, source_label=str(path))


def parse_schema_yaml(text: str, source_label: str = "<string>") -> Schema:
    """Parse a YAML schema document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SchemaError(f"Invalid YAML in {source_label}: {exc}") from exc
    return _build_schema(data, source_label)


def parse_schema_json(text: str, source_label: str = "<string>") -> Schema:
    """Parse a JSON schema document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaError(f"Invalid JSON in {source_label}: {exc}") from exc
    return _build_schema(data, source_label)


# ################
# Implementation
# ################


def _build_schema(data: Any, source_label: str) -> Schema:
    if not isinstance(data, dict):
        raise SchemaError(f"{source_label}: schema document must be a mapping")
    try:
        return Schema.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(_format_error(error) for error in exc.errors())
        raise SchemaError(f"{source_label}: invalid schema: {details}") from exc


def _format_error(error: Any) -> str:
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]
