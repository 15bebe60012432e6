# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Identifier formatting and name-legality rules for generated Kotlin code."""

from __future__ import annotations

import re
from functools import lru_cache

from rpcgen.config.options import FieldFormatter

# ###############
# Public Interface
# ###############

KOTLIN_KEYWORDS: frozenset[str] = frozenset({
    "as",
    "break",
    "class",
    "continue",
    "do",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "in",
    "interface",
    "is",
    "null",
    "object",
    "package",
    "return",
    "super",
    "this",
    "throw",
    "true",
    "try",
    "typealias",
    "typeof",
    "val",
    "var",
    "when",
    "while",
})


@lru_cache(maxsize=1024)
def to_camel_case(value: str) -> str:
    """Convert a snake_case identifier to camelCase.

    Examples:
        >>> to_camel_case("due_date")
        'dueDate'
        >>> to_camel_case("address_line_1")
        'addressLine1'
    """
    parts = [part for part in value.replace("-", "_").split("_") if part]
    if not parts:
        return value
    head, *tail = parts
    return head[0].lower() + head[1:] + "".join(part[0].upper() + part[1:] for part in tail)


@lru_cache(maxsize=1024)
def to_pascal_case(value: str) -> str:
    """Convert a snake_case, kebab-case or camelCase identifier to PascalCase.

    Examples:
        >>> to_pascal_case("in_progress")
        'InProgress'
        >>> to_pascal_case("listTodos")
        'ListTodos'
    """
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    parts = [part for part in re.split(r"[-_\s.]+", value) if part]
    return "".join(part[0].upper() + part[1:].lower() for part in parts)


@lru_cache(maxsize=1024)
def to_snake_case(value: str) -> str:
    """Convert a camelCase or PascalCase identifier to snake_case."""
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    value = re.sub(r"_+", "_", value.replace("-", "_"))
    return value.lower().strip("_")


def format_field_name(name: str, formatter: FieldFormatter) -> str:
    """Return the wire name of a source field under the configured formatter."""
    if formatter is FieldFormatter.CAMEL_CASE:
        return to_camel_case(name)
    return name


@lru_cache(maxsize=1024)
def enum_variant_name(value: str) -> str:
    """Return the Kotlin enum entry name for a wire value.

    Examples:
        >>> enum_variant_name("in_progress")
        'IN_PROGRESS'
        >>> enum_variant_name("high-priority")
        'HIGH_PRIORITY'
    """
    name = re.sub(r"[^A-Za-z0-9_]", "_", value).upper()
    if not name or name[0].isdigit():
        name = f"_{name}"
    return name


def enum_type_name(field_name: str) -> str:
    """Return the declared name of an enum owned by *field_name*."""
    return to_pascal_case(field_name)


def union_type_name(field_name: str) -> str:
    """Return the declared name of a union owned by *field_name*."""
    return f"{to_pascal_case(field_name)}Union"


def kotlin_identifier(name: str) -> str:
    """Escape *name* with backticks when it is a Kotlin hard keyword."""
    if name in KOTLIN_KEYWORDS:
        return f"`{name}`"
    return name


def kotlin_string(value: str) -> str:
    """Render *value* as a double-quoted Kotlin string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def is_valid_name(name: str) -> bool:
    """Return False if *name* contains a question mark or underscore-prefixed digits.

    Names such as ``field_1`` clash with the suffixes Kotlin serializers use
    to disambiguate duplicate names, and ``?`` is not an identifier character.
    """
    return _INVALID_NAME.search(name) is None


def suggest_name(name: str) -> str:
    """Return a corrected form of an invalid name.

    Examples:
        >>> suggest_name("field_1")
        'field1'
        >>> suggest_name("is_valid?")
        'is_valid'
    """
    without_underscores = re.sub(r"_+(\d)", r"\1", name)
    return without_underscores.replace("?", "")


def indent_block(text: str, indent: str = "    ") -> str:
    """Indent every non-empty line of *text*."""
    return "\n".join(f"{indent}{line}" if line else line for line in text.splitlines())


# ################
# Implementation
# ################

_INVALID_NAME = re.compile(r"_+\d|\?")
