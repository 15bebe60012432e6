# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-action type declarations: pagination, metadata, results and inputs."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rpcgen.codegen.action_shape import ActionShape, InputCardinality, PaginationKind
from rpcgen.codegen.naming import indent_block, kotlin_string
from rpcgen.codegen.resource_schemas import Property, field_property, render_data_class, render_properties
from rpcgen.codegen.type_mapper import TypeNameResolver, map_field_type, map_type
from rpcgen.codegen.validation_schemas import field_annotations
from rpcgen.config.options import GeneratorConfig
from rpcgen.model.entities import ActionKind, Schema
from rpcgen.model.types import FieldSpec, ResourceTypeRef

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

OFFSET_PAGE_CONFIG = "OffsetPageConfig"
KEYSET_PAGE_CONFIG = "KeysetPageConfig"
MIXED_PAGE_CONFIG = "PageConfig"

UNTYPED_DATA = "JsonElement?"
"""Success data type of actions whose result cannot be decoded into a typed value."""


def record_type(shape: ActionShape, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Return the Kotlin name of the record type an action operates on."""
    return map_type(ResourceTypeRef(resource=shape.resource_id), config, resolve_name)


def pagination_result_type(shape: ActionShape) -> str | None:
    """Return the name of the paginated result type of a paginated action."""
    if shape.pagination is PaginationKind.OFFSET:
        return f"{shape.type_prefix}OffsetResult"
    if shape.pagination is PaginationKind.KEYSET:
        return f"{shape.type_prefix}KeysetResult"
    if shape.pagination is PaginationKind.BOTH:
        return f"{shape.type_prefix}PaginatedResult"
    return None


def page_config_type(shape: ActionShape) -> str | None:
    """Return the name of the page config type a paginated action accepts."""
    if shape.pagination is PaginationKind.OFFSET:
        return OFFSET_PAGE_CONFIG
    if shape.pagination is PaginationKind.KEYSET:
        return KEYSET_PAGE_CONFIG
    if shape.pagination is PaginationKind.BOTH:
        return MIXED_PAGE_CONFIG
    return None


def success_data_type(
    shape: ActionShape, schema: Schema, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Return the type of the ``data`` carried by a successful call.

    Destroys carry no data. Gets carry an optional record, paginated reads a
    paginated result, other reads a list of records and creates and updates
    the record itself. Generic actions carry their mapped return type. Types
    built on the open fallback type cannot be decoded and stay raw JSON.
    """
    record = record_type(shape, config, resolve_name)
    if shape.action_kind is ActionKind.DESTROY:
        return UNTYPED_DATA
    if shape.action_kind is ActionKind.READ:
        if shape.is_get:
            return f"{record}?"
        paginated = pagination_result_type(shape)
        return paginated or f"List<{record}>"
    if shape.action_kind is ActionKind.ACTION:
        returns = _generic_return_type(shape, schema)
        if returns is None:
            return UNTYPED_DATA
        data_type = map_field_type(returns, config, resolve_name, nullable=True)
        return UNTYPED_DATA if _is_undecodable(data_type) else data_type
    return record


def render_page_config_types(shapes: Sequence[ActionShape]) -> str:
    """Render the page config types used by at least one action."""
    used = {page_config_type(shape) for shape in shapes} - {None}
    declarations: list[str] = []
    if OFFSET_PAGE_CONFIG in used:
        declarations.append(
            "@Serializable\n"
            f"data class {OFFSET_PAGE_CONFIG}(\n"
            "    val limit: Int? = null,\n"
            "    val offset: Int? = null,\n"
            "    val count: Boolean? = null\n"
            ")"
        )
    if KEYSET_PAGE_CONFIG in used:
        declarations.append(
            "@Serializable\n"
            f"data class {KEYSET_PAGE_CONFIG}(\n"
            "    val limit: Int? = null,\n"
            "    val after: String? = null,\n"
            "    val before: String? = null,\n"
            "    val count: Boolean? = null\n"
            ")"
        )
    if MIXED_PAGE_CONFIG in used:
        declarations.append(
            "@Serializable\n"
            f"data class {MIXED_PAGE_CONFIG}(\n"
            "    val limit: Int? = null,\n"
            "    val offset: Int? = null,\n"
            "    val after: String? = null,\n"
            "    val before: String? = null,\n"
            "    val count: Boolean? = null\n"
            ")"
        )
    return "\n\n".join(declarations)


def render_pagination_result(shape: ActionShape, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Render the paginated result type of a paginated action, or an empty string."""
    name = pagination_result_type(shape)
    if name is None:
        return ""
    record = record_type(shape, config, resolve_name)
    if shape.pagination is PaginationKind.OFFSET:
        return render_data_class(name, _offset_properties(record, config))
    if shape.pagination is PaginationKind.KEYSET:
        return render_data_class(name, _keyset_properties(record, config))

    offset = render_data_class("Offset", _offset_properties(record, config), supertype=f"{name}()")
    keyset = render_data_class("Keyset", _keyset_properties(record, config), supertype=f"{name}()")
    offset = offset.replace("@Serializable\n", '@Serializable\n@SerialName("offset")\n', 1)
    keyset = keyset.replace("@Serializable\n", '@Serializable\n@SerialName("keyset")\n', 1)
    return f"@Serializable\nsealed class {name} {{\n{indent_block(offset)}\n\n{indent_block(keyset)}\n}}"


def metadata_type_name(shape: ActionShape) -> str | None:
    """Return the name of an action's metadata type, or None if it exposes no metadata."""
    if not shape.exposed_metadata_fields:
        return None
    return f"{shape.type_prefix}Metadata"


def render_metadata_type(shape: ActionShape, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Render the metadata type of an action, or an empty string."""
    name = metadata_type_name(shape)
    if name is None:
        return ""
    properties = [
        field_property(
            meta.name,
            map_field_type(meta, config, resolve_name),
            meta.nullable,
            config,
            override=shape.metadata_field_names.get(meta.name),
        )
        for meta in shape.exposed_metadata_fields
    ]
    return render_data_class(name, properties)


def result_type_name(shape: ActionShape) -> str:
    return f"{shape.type_prefix}Result"


def render_result_type(
    shape: ActionShape, schema: Schema, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Render the sealed success/error result of an action."""
    name = result_type_name(shape)
    data_type = success_data_type(shape, schema, config, resolve_name)
    data_default = " = null" if data_type == UNTYPED_DATA else ""
    success_fields = [f"        val data: {data_type}{data_default}"]
    metadata = metadata_type_name(shape)
    if metadata is not None:
        success_fields.append(f"        val metadata: {metadata}? = null")
    return (
        f"sealed class {name} {{\n"
        f"    data class Success(\n"
        + ",\n".join(success_fields)
        + f"\n    ) : {name}()\n\n"
        f"    data class Error(\n"
        f"        val errors: List<AshRpcError>\n"
        f"    ) : {name}()\n"
        f"}}"
    )


def input_type_name(shape: ActionShape) -> str | None:
    """Return the name of an action's input type, or None if it takes no input."""
    if shape.input_cardinality is InputCardinality.NONE:
        return None
    return f"{shape.type_prefix}Input"


def render_input_type(shape: ActionShape, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    """Render the input type of an action, or an empty string if it takes no input.

    Fields are the accepted attributes followed by the public arguments. Wire
    names follow the input field formatter. Required fields have no default.
    """
    name = input_type_name(shape)
    if name is None:
        return ""
    properties: list[Property] = []
    for spec in shape.input_fields:
        kotlin_type = map_field_type(spec, config, resolve_name)
        annotations = field_annotations(spec) if config.generate_validation_annotations else ()
        properties.append(
            field_property(
                spec.name,
                kotlin_type,
                spec.nullable,
                config,
                formatter=config.input_field_formatter,
                override=shape.input_field_names.get(spec.name),
                default=default_literal(spec, kotlin_type),
                annotations=annotations,
            )
        )
    if not properties:
        return f"@Serializable\nclass {name}"
    return f"@Serializable\ndata class {name}(\n{render_properties(properties)}\n)"


def default_literal(spec: FieldSpec, kotlin_type: str) -> str | None:
    """Render the default value of an input field as a Kotlin literal.

    Strings and atoms are quoted, booleans and numbers are written as-is and
    any other value becomes ``null``. A default whose kind does not match the
    declared type is rendered anyway and reported as a warning.
    """
    value = spec.default
    if value is None:
        return None
    base_type = kotlin_type.rstrip("?")
    if isinstance(value, bool):
        literal = "true" if value else "false"
        expected = {"Boolean"}
    elif isinstance(value, int | float):
        literal = repr(value)
        expected = {"Int", "Double", "String"}
    elif isinstance(value, str):
        literal = kotlin_string(value)
        expected = {"String"}
    else:
        logger.warning("Default value %r of field '%s' has no Kotlin literal form; using null", value, spec.name)
        return "null"
    if base_type not in expected:
        logger.warning(
            "Default value %r of field '%s' does not match its declared type %s", value, spec.name, base_type
        )
    return literal


# ################
# Implementation
# ################


def _offset_properties(record: str, config: GeneratorConfig) -> list[Property]:
    return [
        field_property("results", f"List<{record}>", False, config),
        field_property("has_more", "Boolean", False, config),
        field_property("limit", "Int", False, config),
        field_property("offset", "Int", False, config),
        field_property("count", "Int", True, config, default="null"),
    ]


def _keyset_properties(record: str, config: GeneratorConfig) -> list[Property]:
    return [
        field_property("results", f"List<{record}>", False, config),
        field_property("has_more", "Boolean", False, config),
        field_property("limit", "Int", False, config),
        field_property("after", "String", True, config, override="afterCursor", default="null"),
        field_property("before", "String", True, config, override="beforeCursor", default="null"),
        field_property("previous_page", "String", False, config, default='""'),
        field_property("next_page", "String", False, config, default='""'),
        field_property("count", "Int", True, config, default="null"),
    ]


def _generic_return_type(shape: ActionShape, schema: Schema) -> FieldSpec | None:
    resource = schema.resource(shape.resource_id)
    action = resource.action(shape.backing_action_id) if resource is not None else None
    if action is None or action.returns is None:
        return None
    return FieldSpec(name=shape.rpc_name, type=action.returns, nullable=True)


def _is_undecodable(data_type: str) -> bool:
    return "Any" in data_type

