# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of resources, enums and unions into Kotlin declarations."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from rpcgen.codegen.discovery import EnumDef, UnionDef
from rpcgen.codegen.naming import (
    enum_variant_name,
    format_field_name,
    indent_block,
    kotlin_identifier,
    kotlin_string,
    to_camel_case,
    to_pascal_case,
)
from rpcgen.codegen.type_mapper import TypeNameResolver, map_field_type, map_type
from rpcgen.config.options import FieldFormatter, GeneratorConfig, NullableStrategy
from rpcgen.model.entities import Resource
from rpcgen.model.types import FieldSpec, ResourceTypeRef, StructTypeRef, TypeRef

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class RelationshipShape:
    """A relationship as it appears on a generated record.

    Related records are never owned by the referencing record: each response
    carries its own copy, and an unloaded relationship is simply null.
    """

    name: str
    target_resource_id: str
    cardinality: Literal["one", "many"]


@dataclass(frozen=True)
class ResourceShape:
    """The normalized shape of a resource record.

    Attributes:
        resource_id: Qualified id of the resource.
        declared_type_name: Kotlin class name (configured or derived).
        fields: Public attributes in declaration order.
        relationships: Public relationships in declaration order.
        field_names: Explicit target names for source field names.
    """

    resource_id: str
    declared_type_name: str
    fields: tuple[FieldSpec, ...]
    relationships: tuple[RelationshipShape, ...]
    field_names: dict[str, str]


@dataclass(frozen=True)
class Property:
    """One rendered ``val`` of a Kotlin class."""

    kotlin_name: str
    wire_name: str
    kotlin_type: str
    default: str | None = None
    annotations: tuple[str, ...] = ()


def build_resource_shape(resource: Resource) -> ResourceShape:
    """Derive the record shape of *resource* from its public fields."""
    return ResourceShape(
        resource_id=resource.id,
        declared_type_name=resource.declared_type_name,
        fields=tuple(resource.public_attributes),
        relationships=tuple(
            RelationshipShape(name=rel.name, target_resource_id=rel.destination, cardinality=rel.cardinality)
            for rel in resource.public_relationships
        ),
        field_names=dict(resource.field_names),
    )


def field_property(
    source_name: str,
    kotlin_type: str,
    nullable: bool,
    config: GeneratorConfig,
    *,
    formatter: FieldFormatter | None = None,
    override: str | None = None,
    default: str | None = None,
    annotations: Sequence[str] = (),
) -> Property:
    """Build the property for a source field.

    The wire name is the source name under *formatter* (the output formatter
    by default). The Kotlin name is *override* when given, otherwise the
    camelCase source name. Nullable properties receive a ``null`` default
    under the explicit nullable strategy.
    """
    wire_name = format_field_name(source_name, formatter or config.output_field_formatter)
    if nullable and not kotlin_type.endswith("?"):
        kotlin_type = f"{kotlin_type}?"
    if default is None and nullable and config.nullable_strategy is NullableStrategy.EXPLICIT:
        default = "null"
    return Property(
        kotlin_name=override or to_camel_case(source_name),
        wire_name=wire_name,
        kotlin_type=kotlin_type,
        default=default,
        annotations=tuple(annotations),
    )


def render_properties(properties: Sequence[Property], indent: str = "    ") -> str:
    """Render constructor properties separated by commas, one per line group."""
    rendered: list[str] = []
    for prop in properties:
        lines = [f"{indent}{annotation}" for annotation in prop.annotations]
        if prop.kotlin_name != prop.wire_name:
            lines.append(f"{indent}@SerialName({kotlin_string(prop.wire_name)})")
        declaration = f"{indent}val {kotlin_identifier(prop.kotlin_name)}: {prop.kotlin_type}"
        if prop.default is not None:
            declaration += f" = {prop.default}"
        lines.append(declaration)
        rendered.append("\n".join(lines))
    return ",\n".join(rendered)


def render_data_class(name: str, properties: Sequence[Property], *, supertype: str | None = None) -> str:
    """Render a serializable data class, or a plain class when it has no properties."""
    suffix = f" : {supertype}" if supertype else ""
    if not properties:
        return f"@Serializable\nclass {name}{suffix}"
    return f"@Serializable\ndata class {name}(\n{render_properties(properties)}\n){suffix}"


def render_record(shape: ResourceShape, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Render a resource record: attributes first, then relationships (always nullable)."""
    properties = [
        field_property(
            spec.name,
            map_field_type(spec, config, resolve_name),
            spec.nullable,
            config,
            override=shape.field_names.get(spec.name),
        )
        for spec in shape.fields
    ]
    for relationship in shape.relationships:
        target = map_type(ResourceTypeRef(resource=relationship.target_resource_id), config, resolve_name)
        kotlin_type = f"List<{target}>" if relationship.cardinality == "many" else target
        properties.append(
            field_property(
                relationship.name,
                kotlin_type,
                True,
                config,
                override=shape.field_names.get(relationship.name),
                default="null",
            )
        )
    return render_data_class(shape.declared_type_name, properties)


def render_enum(enum_def: EnumDef) -> str:
    """Render an enum class whose entries carry their wire values as serial names."""
    entries = ",\n".join(
        f"    @SerialName({kotlin_string(value)}) {enum_variant_name(value)}" for value in enum_def.values
    )
    return f"@Serializable\nenum class {enum_def.name} {{\n{entries}\n}}"


def render_union(union_def: UnionDef, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Render a sealed class with one nested variant per union member.

    Members that are structs with typed fields inline those fields; every
    other member wraps its value in a ``value`` property.
    """
    variants: list[str] = []
    for tag, member in union_def.members.items():
        properties = _member_properties(tag, member, config, resolve_name)
        declaration = render_data_class(to_pascal_case(tag), properties, supertype=f"{union_def.name}()")
        declaration = declaration.replace("@Serializable\n", f"@Serializable\n@SerialName({kotlin_string(tag)})\n", 1)
        variants.append(indent_block(declaration))
    body = "\n\n".join(variants)
    return f"@Serializable\nsealed class {union_def.name} {{\n{body}\n}}"


# ################
# Implementation
# ################


def _member_properties(
    tag: str, member: TypeRef, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> list[Property]:
    if isinstance(member, StructTypeRef) and member.fields and not member.instance_of:
        return [
            field_property(
                spec.name,
                map_field_type(spec, config, resolve_name),
                spec.nullable,
                config,
                override=member.field_names.get(spec.name),
            )
            for spec in member.fields
        ]
    value = FieldSpec(name=tag, type=member, nullable=False)
    return [Property(kotlin_name="value", wire_name="value", kotlin_type=map_field_type(value, config, resolve_name))]
