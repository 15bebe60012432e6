# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of per-action config records, payload builders and transport functions.

Both transports share the config record, the payload builder and the
result conversion of an action; they differ only in how the payload
reaches the server. Every key of the payload is present exactly when the
corresponding :class:`ActionShape` flag asks for it.
"""

from __future__ import annotations

from collections.abc import Sequence

from rpcgen.codegen.action_shape import ActionShape, InputCardinality
from rpcgen.codegen.filter_types import filter_input_name
from rpcgen.codegen.naming import kotlin_string, to_camel_case
from rpcgen.codegen.type_generators import (
    UNTYPED_DATA,
    input_type_name,
    metadata_type_name,
    page_config_type,
    result_type_name,
    success_data_type,
)
from rpcgen.codegen.type_mapper import TypeNameResolver, map_field_type
from rpcgen.config.options import GeneratorConfig
from rpcgen.model.entities import ActionKind, Resource, Schema

# ###############
# Public Interface
# ###############

DEFAULT_CHANNEL_TIMEOUT_MS = 10000


def config_type_name(shape: ActionShape) -> str:
    return f"{shape.type_prefix}Config"


def validation_config_type_name(shape: ActionShape) -> str:
    return f"{shape.type_prefix}ValidationConfig"


def supports_validation(shape: ActionShape) -> bool:
    """Return True if a validate function is generated for the action."""
    return shape.action_kind in (ActionKind.CREATE, ActionKind.UPDATE)


def identity_type(
    shape: ActionShape, resource: Resource, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Return the Kotlin type of the identity value an action is called with.

    A single-column primary key uses that column's type; composite keys and
    named identities are passed as free-form values.
    """
    if shape.identity_requirement.kind == "primary_key":
        primary_key = resource.primary_key
        if len(primary_key) == 1:
            return map_field_type(primary_key[0], config, resolve_name, nullable=False)
        return "Map<String, Any?>"
    return "Any"


def render_config_type(
    shape: ActionShape, resource: Resource, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Render the config record passed to an action's functions."""
    lines = _common_config_lines(shape, resource, config, resolve_name)
    if shape.has_field_selection:
        lines.append("    val fields: List<Any> = emptyList()")
    if shape.supports_filtering:
        lines.append(f"    val filter: {_filter_type(shape, config, resolve_name)}? = null")
        lines.append("    val sort: String? = null")
    page_type = page_config_type(shape)
    if page_type is not None:
        if shape.pagination_required:
            lines.append(f"    val page: {page_type}")
        else:
            lines.append(f"    val page: {page_type}? = null")
    if shape.exposed_metadata_fields:
        lines.append("    val metadataFields: List<String>? = null")
    lines.append("    val headers: Map<String, String> = emptyMap()")
    return f"data class {config_type_name(shape)}(\n" + ",\n".join(lines) + "\n)"


def render_payload_builder(shape: ActionShape, config: GeneratorConfig) -> str:
    """Render the function building the request payload from a config record."""
    lines = [f"    put(\"action\", {kotlin_string(shape.rpc_name)})"]
    lines.extend(_identity_payload_lines(shape))
    if shape.has_field_selection:
        lines.append('    put("fields", anyToJsonElement(config.fields))')
    if shape.supports_filtering:
        encode = "rpcJson.encodeToJsonElement(it)" if config.generate_filter_types else "anyToJsonElement(it)"
        lines.append(f'    config.filter?.let {{ put("filter", {encode}) }}')
        lines.append('    config.sort?.let { put("sort", it) }')
    page_type = page_config_type(shape)
    if page_type is not None:
        # Paginated reads always send a page object.
        page = "config.page" if shape.pagination_required else f"(config.page ?: {page_type}())"
        lines.append(f'    put("page", rpcJson.encodeToJsonElement({page}))')
    if shape.exposed_metadata_fields:
        lines.append('    config.metadataFields?.let { put("metadataFields", anyToJsonElement(it)) }')
    body = "\n".join(lines)
    return (
        f"fun build{shape.type_prefix}Payload(config: {config_type_name(shape)}): JsonObject = buildJsonObject {{\n"
        f"{body}\n"
        f"}}"
    )


def render_result_converter(
    shape: ActionShape, schema: Schema, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Render the conversion of a raw :code:`RpcResult` into the action's result type.

    Decoding failures become a ``deserialization_error`` instead of an exception.
    """
    result = result_type_name(shape)
    data_type = success_data_type(shape, schema, config, resolve_name)
    if data_type == UNTYPED_DATA:
        data = "response.data"
    else:
        data = f"rpcJson.decodeFromJsonElement<{data_type}>(response.data ?: JsonNull)"
    success_args = [f"            data = {data}"]
    metadata = metadata_type_name(shape)
    if metadata is not None:
        success_args.append(
            f"            metadata = response.metadata?.let {{ rpcJson.decodeFromJsonElement<{metadata}>(it) }}"
        )
    return (
        f"fun to{result}(response: RpcResult): {result} {{\n"
        f"    if (!response.success) {{\n"
        f"        return {result}.Error(response.errors ?: emptyList())\n"
        f"    }}\n"
        f"    return try {{\n"
        f"        {result}.Success(\n" + ",\n".join(success_args) + "\n"
        f"        )\n"
        f"    }} catch (e: SerializationException) {{\n"
        f"        {result}.Error(listOf(AshRpcError.deserialization(e)))\n"
        f"    }} catch (e: IllegalArgumentException) {{\n"
        f"        {result}.Error(listOf(AshRpcError.deserialization(e)))\n"
        f"    }}\n"
        f"}}"
    )


def render_http_function(shape: ActionShape, config: GeneratorConfig) -> str:
    """Render the suspend function calling an action over HTTP."""
    result = result_type_name(shape)
    return (
        f"suspend fun {shape.function_name}(\n"
        f"    client: HttpClient,\n"
        f"    config: {config_type_name(shape)},\n"
        f"    endpoint: String = {kotlin_string(config.run_endpoint)}\n"
        f"): {result} {{\n"
        f"    val response = executeRpc(client, endpoint, build{shape.type_prefix}Payload(config), config.headers)\n"
        f"    return to{result}(response)\n"
        f"}}"
    )


def render_action_functions(
    shape: ActionShape, resource: Resource, schema: Schema, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Render the config record, payload builder, result conversion and HTTP function of an action."""
    return "\n\n".join(
        [
            render_config_type(shape, resource, config, resolve_name),
            render_payload_builder(shape, config),
            render_result_converter(shape, schema, config, resolve_name),
            render_http_function(shape, config),
        ]
    )


def render_validation_function(
    shape: ActionShape, resource: Resource, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> str:
    """Render the validation config and validate function of a create or update action."""
    config_name = validation_config_type_name(shape)
    lines = _common_config_lines(shape, resource, config, resolve_name)
    lines.append("    val headers: Map<String, String> = emptyMap()")
    payload = [f"        put(\"action\", {kotlin_string(shape.rpc_name)})"]
    payload.extend(f"    {line}" for line in _identity_payload_lines(shape))
    payload_body = "\n".join(payload)
    return (
        f"data class {config_name}(\n" + ",\n".join(lines) + "\n)\n\n"
        f"suspend fun validate{shape.type_prefix}(\n"
        f"    client: HttpClient,\n"
        f"    config: {config_name},\n"
        f"    endpoint: String = {kotlin_string(config.validate_endpoint)}\n"
        f"): ValidationResult {{\n"
        f"    val payload = buildJsonObject {{\n"
        f"{payload_body}\n"
        f"    }}\n"
        f"    val response = executeRpc(client, endpoint, payload, config.headers)\n"
        f"    return if (response.success) {{\n"
        f"        ValidationResult.Valid\n"
        f"    }} else {{\n"
        f"        ValidationResult.Invalid(response.errors ?: emptyList())\n"
        f"    }}\n"
        f"}}"
    )


def render_channel_function(shape: ActionShape) -> str:
    """Render the suspend function calling an action over a Phoenix channel."""
    result = result_type_name(shape)
    return (
        f"suspend fun {shape.function_name}Channel(\n"
        f"    channel: AshRpcChannel,\n"
        f"    config: {config_type_name(shape)},\n"
        f"    timeout: Long = {DEFAULT_CHANNEL_TIMEOUT_MS}L\n"
        f"): {result} {{\n"
        f"    val response = channel.run(build{shape.type_prefix}Payload(config), timeout)\n"
        f"    return to{result}(response)\n"
        f"}}"
    )


def render_object_wrapper(resource: Resource, shapes: Sequence[ActionShape], config: GeneratorConfig) -> str:
    """Render ``object <Type>Rpc`` grouping a resource's HTTP functions under short verbs.

    The method name is the leading verb of the RPC name (``list_todos`` →
    ``list``). When two actions share a verb, later ones keep their full
    camelCase name.
    """
    methods: list[str] = []
    used: set[str] = set()
    for shape in shapes:
        method = _method_name(shape)
        if method in used:
            method = shape.function_name
        used.add(method)
        methods.append(
            f"    suspend fun {method}(\n"
            f"        client: HttpClient,\n"
            f"        config: {config_type_name(shape)},\n"
            f"        endpoint: String = {kotlin_string(config.run_endpoint)}\n"
            f"    ): {result_type_name(shape)} = {shape.function_name}(client, config, endpoint)"
        )
    body = "\n\n".join(methods)
    return f"object {resource.declared_type_name}Rpc {{\n{body}\n}}"


# ################
# Implementation
# ################

_VERBS = frozenset({"list", "get", "create", "update", "delete", "destroy", "read"})


def _method_name(shape: ActionShape) -> str:
    verb = shape.rpc_name.split("_", 1)[0]
    if verb in _VERBS:
        return verb
    return to_camel_case(shape.rpc_name)


def _common_config_lines(
    shape: ActionShape, resource: Resource, config: GeneratorConfig, resolve_name: TypeNameResolver
) -> list[str]:
    lines: list[str] = []
    if shape.requires_tenant:
        lines.append("    val tenant: String")
    if shape.identity_requirement.kind != "none":
        lines.append(f"    val identity: {identity_type(shape, resource, config, resolve_name)}")
    input_name = input_type_name(shape)
    if input_name is not None:
        if shape.input_cardinality is InputCardinality.REQUIRED:
            lines.append(f"    val input: {input_name}")
        else:
            lines.append(f"    val input: {input_name}? = null")
    return lines


def _identity_payload_lines(shape: ActionShape) -> list[str]:
    lines: list[str] = []
    if shape.requires_tenant:
        lines.append('    put("tenant", config.tenant)')
    if shape.identity_requirement.kind != "none":
        lines.append('    put("identity", anyToJsonElement(config.identity))')
    if shape.input_cardinality is InputCardinality.REQUIRED:
        lines.append('    put("input", rpcJson.encodeToJsonElement(config.input))')
    elif shape.input_cardinality is InputCardinality.OPTIONAL:
        lines.append('    config.input?.let { put("input", rpcJson.encodeToJsonElement(it)) }')
    return lines


def _filter_type(shape: ActionShape, config: GeneratorConfig, resolve_name: TypeNameResolver) -> str:
    if config.generate_filter_types:
        return filter_input_name(shape.resource_id, config, resolve_name)
    return "Map<String, Any?>"
