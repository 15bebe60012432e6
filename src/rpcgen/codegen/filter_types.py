# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Typed filter inputs for list reads.

Every generated resource gets a ``<Type>FilterInput`` with:

- ``and`` / ``or`` / ``not`` combinators over the same filter input,
- one base filter per public attribute and calculation,
- an ``IntFilter`` per ``count`` aggregate and a filter matching the
  summed field for each ``sum`` aggregate,
- a nested filter input per public relationship whose destination is
  itself a generated resource.
"""

from __future__ import annotations

from collections.abc import Sequence

from rpcgen.codegen.discovery import aggregate_type
from rpcgen.codegen.resource_schemas import Property, field_property, render_data_class
from rpcgen.codegen.type_mapper import TypeNameResolver, map_type
from rpcgen.config.options import DatetimeLibrary, GeneratorConfig
from rpcgen.model.entities import AggregateKind, Resource, Schema
from rpcgen.model.types import (
    EnumTypeRef,
    PrimitiveKind,
    PrimitiveTypeRef,
    ResourceTypeRef,
    TypeRef,
    UnknownTypeRef,
)

# ###############
# Public Interface
# ###############

DEFAULT_FILTER = "StringFilter"


def filter_input_name(resource_id: str, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Return the name of the filter input generated for a resource."""
    return f"{map_type(ResourceTypeRef(resource=resource_id), config, resolve_name)}FilterInput"


def filter_for_type(type_ref: TypeRef) -> str:
    """Return the base filter used for values of *type_ref*.

    Types without a dedicated filter are compared as strings.
    """
    if isinstance(type_ref, PrimitiveTypeRef):
        return _PRIMITIVE_FILTERS.get(type_ref.primitive, DEFAULT_FILTER)
    if isinstance(type_ref, EnumTypeRef):
        return "StringFilter"
    return DEFAULT_FILTER


def render_base_filter_types(config: GeneratorConfig) -> str:
    """Render the base filters shared by every filter input."""
    if config.datetime_library is DatetimeLibrary.KOTLINX_DATETIME:
        date_type, instant_type = "kotlinx.datetime.LocalDate", "kotlinx.datetime.Instant"
    else:
        date_type, instant_type = "java.time.LocalDate", "java.time.Instant"
    filters = [
        _base_filter("StringFilter", "String", ordered=False),
        _base_filter("IntFilter", "Int", ordered=True),
        _base_filter("DoubleFilter", "Double", ordered=True),
        _base_filter("BooleanFilter", "Boolean", ordered=False, membership=False),
        _base_filter("UuidFilter", "String", ordered=False),
        _base_filter("DateFilter", date_type, ordered=True),
        _base_filter("InstantFilter", instant_type, ordered=True),
        _base_filter("DecimalFilter", "String", ordered=True),
    ]
    return "\n\n".join(filters)


def render_filter_input(
    resource: Resource,
    schema: Schema,
    config: GeneratorConfig,
    resolve_name: TypeNameResolver,
    allowed_resource_ids: Sequence[str],
) -> str:
    """Render the filter input of one resource.

    Relationship filters are only emitted for destinations listed in
    *allowed_resource_ids*, so that every referenced filter input exists.
    """
    name = filter_input_name(resource.id, config, resolve_name)
    properties = [
        Property(kotlin_name=combinator, wire_name=combinator, kotlin_type=f"List<{name}>?", default="null")
        for combinator in ("and", "or", "not")
    ]
    for spec in [*resource.public_attributes, *resource.public_calculations]:
        properties.append(_filter_property(resource, spec.name, filter_for_type(spec.type), config))
    for aggregate in resource.public_aggregates:
        if aggregate.kind is AggregateKind.COUNT:
            properties.append(_filter_property(resource, aggregate.name, "IntFilter", config))
        elif aggregate.kind is AggregateKind.SUM:
            summed = aggregate_type(schema, resource, aggregate)
            if not isinstance(summed, UnknownTypeRef):
                properties.append(_filter_property(resource, aggregate.name, filter_for_type(summed), config))
    allowed = set(allowed_resource_ids)
    for relationship in resource.public_relationships:
        if relationship.destination in allowed:
            nested = filter_input_name(relationship.destination, config, resolve_name)
            properties.append(_filter_property(resource, relationship.name, nested, config))
    return render_data_class(name, properties)


def render_filter_types(
    resource_ids: Sequence[str], schema: Schema, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Render the base filters followed by one filter input per resource in *resource_ids*."""
    parts = [render_base_filter_types(config)]
    for resource_id in resource_ids:
        resource = schema.resource(resource_id)
        if resource is not None:
            parts.append(render_filter_input(resource, schema, config, resolve_name, resource_ids))
    return "\n\n".join(parts)


# ################
# Implementation
# ################

_PRIMITIVE_FILTERS: dict[PrimitiveKind, str] = {
    PrimitiveKind.STRING: "StringFilter",
    PrimitiveKind.CI_STRING: "StringFilter",
    PrimitiveKind.ATOM: "StringFilter",
    PrimitiveKind.INTEGER: "IntFilter",
    PrimitiveKind.FLOAT: "DoubleFilter",
    PrimitiveKind.DECIMAL: "DecimalFilter",
    PrimitiveKind.BOOLEAN: "BooleanFilter",
    PrimitiveKind.UUID: "UuidFilter",
    PrimitiveKind.DATE: "DateFilter",
    PrimitiveKind.UTC_DATETIME: "InstantFilter",
    PrimitiveKind.UTC_DATETIME_USEC: "InstantFilter",
    PrimitiveKind.DATETIME: "InstantFilter",
    PrimitiveKind.NAIVE_DATETIME: "InstantFilter",
}

_ORDERED_OPERATORS = ("greaterThan", "greaterThanOrEqual", "lessThan", "lessThanOrEqual")


def _base_filter(name: str, value_type: str, *, ordered: bool, membership: bool = True) -> str:
    operators = ["eq", "notEq"]
    if ordered:
        operators.extend(_ORDERED_OPERATORS)
    properties = [
        Property(kotlin_name=operator, wire_name=operator, kotlin_type=f"{value_type}?", default="null")
        for operator in operators
    ]
    if membership:
        properties.append(
            Property(kotlin_name="inValues", wire_name="in", kotlin_type=f"List<{value_type}>?", default="null")
        )
    return render_data_class(name, properties)


def _filter_property(resource: Resource, field_name: str, filter_type: str, config: GeneratorConfig) -> Property:
    return field_property(
        field_name,
        filter_type,
        True,
        config,
        override=resource.field_names.get(field_name),
        default="null",
    )
