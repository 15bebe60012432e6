# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapping of schema type descriptors to Kotlin type names.

Resolution order:

1. A user override whose source key matches the descriptor (first match wins).
2. Arrays map to ``List<inner>`` with the inner type mapped recursively.
3. Primitives are looked up in a fixed table; date and time kinds depend on
   the configured datetime library.
4. Enumerations map to ``String``. Their enum classes are declared
   separately by the resource schema renderer.
5. Resource references and structs with ``instance_of`` map to the
   referenced type's declared name.
6. Anything else maps to ``Any``.

Unknown or opaque types never raise; they degrade to ``Any``.
"""

from __future__ import annotations

from collections.abc import Callable

from rpcgen.codegen.naming import union_type_name
from rpcgen.config.options import DatetimeLibrary, GeneratorConfig
from rpcgen.model.types import (
    ArrayTypeRef,
    EnumTypeRef,
    FieldSpec,
    PrimitiveKind,
    PrimitiveTypeRef,
    ResourceTypeRef,
    StructTypeRef,
    TypeRef,
    UnionTypeRef,
    UnknownTypeRef,
)

# ###############
# Public Interface
# ###############

FALLBACK_TYPE = "Any"
"""Open type used when no rule applies to a descriptor."""

TypeNameResolver = Callable[[str], str | None]
"""Returns the declared type name of a resource id, or None if it is not a resource."""


def map_type(
    type_ref: TypeRef,
    config: GeneratorConfig,
    resolve_name: TypeNameResolver | None = None,
    *,
    owner: str | None = None,
) -> str:
    """Return the Kotlin type name for *type_ref*, without nullability.

    Args:
        type_ref: The source type descriptor.
        config: The generation run configuration (overrides, datetime library,
            untyped map type).
        resolve_name: Resolves resource ids to declared type names. Without it,
            the last dotted segment of the id is used.
        owner: Name of the field holding the type. Unnamed unions, directly or
            as array items, are named after it.
    """
    override = _find_override(type_ref, config)
    if override is not None:
        return override

    if isinstance(type_ref, ArrayTypeRef):
        return f"List<{map_type(type_ref.item_type, config, resolve_name, owner=owner)}>"
    if isinstance(type_ref, PrimitiveTypeRef):
        return _map_primitive(type_ref.primitive, config)
    if isinstance(type_ref, EnumTypeRef):
        return "String"
    if isinstance(type_ref, ResourceTypeRef):
        return _resolve(type_ref.resource, resolve_name)
    if isinstance(type_ref, StructTypeRef):
        return _map_struct(type_ref, config, resolve_name)
    if isinstance(type_ref, UnionTypeRef):
        if type_ref.name:
            return type_ref.name
        return union_type_name(owner) if owner else FALLBACK_TYPE
    return FALLBACK_TYPE


def map_field_type(
    field_spec: FieldSpec,
    config: GeneratorConfig,
    resolve_name: TypeNameResolver | None = None,
    *,
    nullable: bool | None = None,
) -> str:
    """Return the Kotlin type of a field, appending ``?`` when it is nullable.

    Unions, including those nested in arrays, are named after the field that
    owns them, matching the sealed classes declared for discovered unions.
    ``nullable`` overrides the field's own nullability when given.
    """
    kotlin_type = map_type(field_spec.type, config, resolve_name, owner=field_spec.name)
    is_nullable = field_spec.nullable if nullable is None else nullable
    return f"{kotlin_type}?" if is_nullable else kotlin_type


def source_key(type_ref: TypeRef) -> str | None:
    """Return the identifier that type overrides are matched against, if any."""
    if isinstance(type_ref, PrimitiveTypeRef):
        return type_ref.primitive.value
    if isinstance(type_ref, UnknownTypeRef):
        return type_ref.name
    if isinstance(type_ref, ResourceTypeRef):
        return type_ref.resource
    if isinstance(type_ref, StructTypeRef):
        return type_ref.instance_of
    if isinstance(type_ref, EnumTypeRef | UnionTypeRef):
        return type_ref.name
    return None


def is_fallback(kotlin_type: str) -> bool:
    """Return True if *kotlin_type* is the open fallback type."""
    return kotlin_type == FALLBACK_TYPE


# ################
# Implementation
# ################

_PRIMITIVES: dict[PrimitiveKind, str] = {
    PrimitiveKind.STRING: "String",
    PrimitiveKind.CI_STRING: "String",
    PrimitiveKind.ATOM: "String",
    PrimitiveKind.INTEGER: "Int",
    PrimitiveKind.FLOAT: "Double",
    PrimitiveKind.BOOLEAN: "Boolean",
    PrimitiveKind.BINARY: "ByteArray",
    PrimitiveKind.DECIMAL: "String",
    PrimitiveKind.UUID: "String",
    PrimitiveKind.TUPLE: "List<Any?>",
}

_DATETIME_TYPES: dict[DatetimeLibrary, dict[PrimitiveKind, str]] = {
    DatetimeLibrary.KOTLINX_DATETIME: {
        PrimitiveKind.DATE: "kotlinx.datetime.LocalDate",
        PrimitiveKind.TIME: "kotlinx.datetime.LocalTime",
        PrimitiveKind.UTC_DATETIME: "kotlinx.datetime.Instant",
        PrimitiveKind.UTC_DATETIME_USEC: "kotlinx.datetime.Instant",
        PrimitiveKind.DATETIME: "kotlinx.datetime.Instant",
        PrimitiveKind.NAIVE_DATETIME: "kotlinx.datetime.LocalDateTime",
    },
    DatetimeLibrary.JAVA_TIME: {
        PrimitiveKind.DATE: "java.time.LocalDate",
        PrimitiveKind.TIME: "java.time.LocalTime",
        PrimitiveKind.UTC_DATETIME: "java.time.Instant",
        PrimitiveKind.UTC_DATETIME_USEC: "java.time.Instant",
        PrimitiveKind.DATETIME: "java.time.ZonedDateTime",
        PrimitiveKind.NAIVE_DATETIME: "java.time.LocalDateTime",
    },
}

_UNTYPED_MAPS = frozenset({PrimitiveKind.MAP, PrimitiveKind.KEYWORD, PrimitiveKind.JSON})


def _find_override(type_ref: TypeRef, config: GeneratorConfig) -> str | None:
    key = source_key(type_ref)
    if key is None:
        return None
    for override in config.type_mapping_overrides:
        if override.source == key:
            return override.target
    return None


def _map_primitive(kind: PrimitiveKind, config: GeneratorConfig) -> str:
    if kind in _UNTYPED_MAPS:
        return config.untyped_map_type
    datetime_type = _DATETIME_TYPES[config.datetime_library].get(kind)
    if datetime_type is not None:
        return datetime_type
    return _PRIMITIVES.get(kind, FALLBACK_TYPE)


def _map_struct(type_ref: StructTypeRef, config: GeneratorConfig, resolve_name: TypeNameResolver | None) -> str:
    if type_ref.instance_of:
        return _resolve(type_ref.instance_of, resolve_name)
    if type_ref.container == "tuple" and not type_ref.fields:
        return "List<Any?>"
    # Typed maps without a class travel as plain JSON objects.
    return config.untyped_map_type


def _resolve(type_id: str, resolve_name: TypeNameResolver | None) -> str:
    if resolve_name is not None:
        resolved = resolve_name(type_id)
        if resolved is not None:
            return resolved
    return type_id.rsplit(".", 1)[-1]
