# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Result types and field constants for predefined field selections.

A typed query names a read action and a field selection such as
``["id", "title", {"user": ["id", "name"]}]``. For each query the
generator emits a data class mirroring the selection (one nested
``...Result`` class per selected relationship), an object holding the
selection as a ``fields`` list usable for refetching, and a list alias
for reads returning many records.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rpcgen.codegen.discovery import aggregate_type
from rpcgen.codegen.naming import format_field_name, kotlin_string, to_pascal_case
from rpcgen.codegen.resource_schemas import Property, field_property, render_data_class
from rpcgen.codegen.type_mapper import TypeNameResolver, map_field_type, map_type
from rpcgen.config.options import GeneratorConfig
from rpcgen.model.entities import ActionKind, Resource, Schema, TypedQuery
from rpcgen.model.types import FieldSpec, ResourceTypeRef

# ###############
# Public Interface
# ###############


def query_result_type_name(query: TypedQuery) -> str:
    return query.result_type_name or f"{to_pascal_case(query.name)}Result"


def query_fields_const_name(query: TypedQuery) -> str:
    return query.fields_const_name or f"{to_pascal_case(query.name)}Fields"


def render_typed_query(
    resource: Resource,
    query: TypedQuery,
    schema: Schema,
    config: GeneratorConfig,
    resolve_name: TypeNameResolver,
) -> str:
    """Render the result classes, list alias and field constant of one typed query."""
    type_name = query_result_type_name(query)
    builder = _QueryRenderer(schema, config, resolve_name)
    builder.add_class(resource, query.fields, type_name)

    parts = [f"// Type for {query.name}", *builder.classes]
    action = resource.action(query.action)
    if action is not None and action.type is ActionKind.READ and not action.get:
        parts.append(f"typealias {type_name}List = List<{type_name}>")
    parts.append(
        f"// Field selection for {query.name}\n"
        f"object {query_fields_const_name(query)} {{\n"
        f"    val fields = {_fields_literal(resource, query.fields, schema, config)}\n"
        f"}}"
    )
    return "\n\n".join(parts)


def render_typed_queries(schema: Schema, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Render every typed query of the schema, grouped by resource, or an empty string."""
    sections: list[str] = []
    for rpc_resource in schema.rpc_resources():
        resource = schema.resource(rpc_resource.resource)
        if resource is None or not rpc_resource.typed_queries:
            continue
        rendered = [
            render_typed_query(resource, query, schema, config, resolve_name) for query in rpc_resource.typed_queries
        ]
        sections.append(f"// {resource.declared_type_name} Typed Queries\n\n" + "\n\n".join(rendered))
    return "\n\n".join(sections)


# ################
# Implementation
# ################


class _QueryRenderer:
    """Collects the result class of a selection followed by its nested classes, depth-first."""

    def __init__(self, schema: Schema, config: GeneratorConfig, resolve_name: TypeNameResolver) -> None:
        self._schema = schema
        self._config = config
        self._resolve_name = resolve_name
        self.classes: list[str] = []

    def add_class(self, resource: Resource, selection: Sequence[str | dict[str, list[Any]]], type_name: str) -> None:
        properties: list[Property] = []
        nested: list[tuple[Resource, list[Any], str]] = []
        for item in selection:
            if isinstance(item, str):
                properties.append(self._field(resource, item))
                continue
            for name, sub_selection in item.items():
                prop, child = self._relationship(resource, name, sub_selection, type_name)
                properties.append(prop)
                if child is not None:
                    nested.append(child)
        self.classes.append(render_data_class(type_name, properties))
        for child_resource, child_selection, child_name in nested:
            self.add_class(child_resource, child_selection, child_name)

    def _field(self, resource: Resource, name: str) -> Property:
        override = resource.field_names.get(name)
        spec = resource.attribute(name) or resource.calculation(name)
        if spec is not None:
            kotlin_type = map_field_type(spec, self._config, self._resolve_name)
            return field_property(name, kotlin_type, spec.nullable, self._config, override=override)
        aggregate = resource.aggregate(name)
        if aggregate is not None:
            value = FieldSpec(name=name, type=aggregate_type(self._schema, resource, aggregate))
            kotlin_type = map_field_type(value, self._config, self._resolve_name)
            return field_property(name, kotlin_type, aggregate.nullable, self._config, override=override)
        relationship = resource.relationship(name)
        if relationship is not None:
            target = map_type(ResourceTypeRef(resource=relationship.destination), self._config, self._resolve_name)
            kotlin_type = f"List<{target}>" if relationship.cardinality == "many" else target
            return field_property(name, kotlin_type, True, self._config, override=override, default="null")
        return field_property(name, "Any", True, self._config, override=override)

    def _relationship(
        self, resource: Resource, name: str, selection: list[Any], parent_type_name: str
    ) -> tuple[Property, tuple[Resource, list[Any], str] | None]:
        override = resource.field_names.get(name)
        relationship = resource.relationship(name)
        destination = self._schema.resource(relationship.destination) if relationship is not None else None
        if relationship is None or destination is None:
            return field_property(name, "Any", True, self._config, override=override), None
        nested_name = f"{parent_type_name}{to_pascal_case(name)}Result"
        if relationship.cardinality == "many":
            prop = field_property(name, f"List<{nested_name}>", False, self._config, override=override)
        else:
            prop = field_property(name, nested_name, True, self._config, override=override)
        return prop, (destination, selection, nested_name)


def _fields_literal(
    resource: Resource | None,
    selection: Sequence[str | dict[str, list[Any]]],
    schema: Schema,
    config: GeneratorConfig,
) -> str:
    items: list[str] = []
    for item in selection:
        if isinstance(item, str):
            items.append(kotlin_string(_wire_name(item, config)))
            continue
        for name, sub_selection in item.items():
            relationship = resource.relationship(name) if resource is not None else None
            destination = schema.resource(relationship.destination) if relationship is not None else None
            nested = _fields_literal(destination, sub_selection, schema, config)
            items.append(f"mapOf({kotlin_string(_wire_name(name, config))} to {nested})")
    return f"listOf({', '.join(items)})"


def _wire_name(name: str, config: GeneratorConfig) -> str:
    return format_field_name(name, config.output_field_formatter)
