# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema document loading for rpcgen."""

from rpcgen.schema.loader import SchemaError, load_schema, parse_schema_json, parse_schema_yaml

__all__ = [
    "SchemaError",
    "load_schema",
    "parse_schema_json",
    "parse_schema_yaml",
]
