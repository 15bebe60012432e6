# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Orchestration of a generation run.

A run proceeds in three steps:

1. Every RPC action is paired with its resource and backing action and
   reduced to an :class:`ActionShape`.
2. Discovery collects every resource, enum and union reachable from the
   exposed resources and from the exposed actions' argument, return and
   metadata types. The verifier then checks the result.
3. If verification passed, the sections of the Kotlin file are rendered
   in a fixed order and joined into a single text.

Nothing is rendered when verification fails; the caller receives a
:class:`GenerationError` carrying every finding.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from rpcgen.codegen.action_shape import ActionShape, build_shape
from rpcgen.codegen.channel import render_channel_client
from rpcgen.codegen.discovery import DiscoveredTypeSet, TypeRoot, discover
from rpcgen.codegen.filter_types import render_filter_types
from rpcgen.codegen.functions import (
    render_action_functions,
    render_object_wrapper,
    render_validation_function,
    supports_validation,
)
from rpcgen.codegen.kotlin_static import (
    ERROR_TYPES,
    HTTP_CLIENT,
    RESULT_WRAPPER,
    TYPE_ALIASES,
    VALIDATION_TYPES,
    render_header,
    render_imports,
)
from rpcgen.codegen.resource_schemas import build_resource_shape, render_enum, render_record, render_union
from rpcgen.codegen.type_generators import (
    render_input_type,
    render_metadata_type,
    render_page_config_types,
    render_pagination_result,
    render_result_type,
)
from rpcgen.codegen.type_mapper import TypeNameResolver
from rpcgen.codegen.typed_queries import render_typed_queries
from rpcgen.config.options import GeneratorConfig
from rpcgen.model.entities import Action, ActionKind, Resource, RpcAction, Schema
from rpcgen.verification.checks import VerificationResult, verify

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class GenerationError(Exception):
    """Raised when a schema cannot be turned into a client.

    Attributes:
        result: The verification result holding every error found.
    """

    def __init__(self, message: str, result: VerificationResult) -> None:
        super().__init__(message)
        self.result = result


@dataclass(frozen=True)
class ExposedAction:
    """An RPC action together with the entities it exposes."""

    resource: Resource
    action: Action
    rpc_action: RpcAction
    shape: ActionShape


@dataclass
class GenerationPlan:
    """Everything known about a run before rendering starts.

    Attributes:
        exposed: Exposed actions in declaration order.
        discovered: Types reachable from the exposed resources and actions.
        result: Verification findings.
    """

    exposed: list[ExposedAction]
    discovered: DiscoveredTypeSet
    result: VerificationResult


def plan(schema: Schema, config: GeneratorConfig) -> GenerationPlan:
    """Collect exposed actions, discover reachable types and verify them."""
    exposed = collect_exposed_actions(schema)
    roots = _action_roots(exposed)
    discovered = discover(schema, schema.exposed_resource_ids(), roots)
    result = verify(schema, discovered, config)
    logger.debug(
        "Planned %d exposed actions: %d errors, %d warnings",
        len(exposed),
        len(result.errors),
        len(result.warnings),
    )
    return GenerationPlan(exposed=exposed, discovered=discovered, result=result)


def collect_exposed_actions(schema: Schema) -> list[ExposedAction]:
    """Pair every RPC action with its resource and backing action.

    Entries whose resource or action does not exist are skipped here and
    reported by the verifier.
    """
    exposed: list[ExposedAction] = []
    for rpc_resource in schema.rpc_resources():
        resource = schema.resource(rpc_resource.resource)
        if resource is None:
            continue
        for rpc_action in rpc_resource.rpc_actions:
            action = resource.action(rpc_action.action)
            if action is None:
                continue
            exposed.append(
                ExposedAction(
                    resource=resource,
                    action=action,
                    rpc_action=rpc_action,
                    shape=build_shape(resource, action, rpc_action),
                )
            )
    return exposed


def generate(schema: Schema, config: GeneratorConfig) -> str:
    """Generate the Kotlin client for *schema*.

    Args:
        schema: The backend schema.
        config: The run configuration.

    Returns:
        The complete Kotlin source text. Equal inputs always produce
        byte-identical output.

    Raises:
        GenerationError: If verification reports any error, including the
            case where no resource is exposed through RPC.
    """
    generation = plan(schema, config)
    for warning in generation.result.warnings:
        logger.warning(warning.message)
    return render(schema, config, generation)


def render(schema: Schema, config: GeneratorConfig, generation: GenerationPlan) -> str:
    """Render the Kotlin client from an existing plan.

    Warnings of the plan are left to the caller.

    Raises:
        GenerationError: If the plan holds any verification error.
    """
    if generation.result.has_errors:
        raise GenerationError(
            "Kotlin client generation failed:\n\n" + generation.result.format_report(), generation.result
        )
    return _Renderer(schema, config, generation).render()


def type_name_resolver(schema: Schema) -> TypeNameResolver:
    """Return a resolver mapping resource ids to their declared type names."""

    def resolve(resource_id: str) -> str | None:
        resource = schema.resource(resource_id)
        return resource.declared_type_name if resource is not None else None

    return resolve


# ################
# Implementation
# ################


def _action_roots(exposed: list[ExposedAction]) -> list[TypeRoot]:
    roots: list[TypeRoot] = []
    for entry in exposed:
        base = (entry.resource.short_name, entry.rpc_action.name)
        for argument in entry.action.public_arguments:
            roots.append(TypeRoot(owner=argument.name, type=argument.type, path=(*base, argument.name)))
        if entry.action.type is ActionKind.ACTION and entry.action.returns is not None:
            roots.append(TypeRoot(owner=entry.rpc_action.name, type=entry.action.returns, path=(*base, "returns")))
        for meta in entry.shape.exposed_metadata_fields:
            roots.append(TypeRoot(owner=meta.name, type=meta.type, path=(*base, meta.name)))
    return roots


class _Renderer:
    """Renders the sections of one Kotlin file in their fixed order."""

    def __init__(self, schema: Schema, config: GeneratorConfig, generation: GenerationPlan) -> None:
        self._schema = schema
        self._config = config
        self._exposed = generation.exposed
        self._shapes = [entry.shape for entry in generation.exposed]
        self._discovered = generation.discovered
        self._resolve = type_name_resolver(schema)

    def render(self) -> str:
        config = self._config
        sections: list[tuple[str, Callable[[], str]]] = [
            ("Type Aliases", lambda: TYPE_ALIASES),
            ("Error Types", lambda: ERROR_TYPES),
            ("HTTP Client", lambda: HTTP_CLIENT),
            ("Resource Types", lambda: self._records(self._discovered.resources)),
            ("Embedded Resource Types", lambda: self._records(self._discovered.embedded_shapes)),
            ("Enums", self._enums),
            ("Unions", self._unions),
            ("Result Wrapper", lambda: RESULT_WRAPPER),
            ("Validation Types", lambda: VALIDATION_TYPES if config.generate_validation_functions else ""),
            ("Pagination Types", self._pagination),
            ("Metadata Types", lambda: self._per_shape(render_metadata_type)),
            ("Result Types", self._results),
            ("Input Types", lambda: self._per_shape(render_input_type)),
            ("Filter Types", self._filters),
            ("Typed Queries", lambda: render_typed_queries(self._schema, config, self._resolve)),
            ("RPC Functions", self._functions),
            ("Validation Functions", self._validation_functions),
            ("Object API", self._object_wrappers),
            ("Channel Client", self._channel_client),
        ]

        parts = [render_header(config.resolve_package_name(self._schema.app)), render_imports(config)]
        for title, render_section in sections:
            body = render_section()
            if not body:
                logger.debug("Skipping empty section %s", title)
                continue
            logger.debug("Rendered section %s", title)
            parts.append(f"// {title}\n\n{body}")
        return "\n\n".join(parts) + "\n"

    def _records(self, resource_ids: list[str]) -> str:
        records = [
            render_record(build_resource_shape(resource), self._config, self._resolve)
            for resource_id in resource_ids
            if (resource := self._schema.resource(resource_id)) is not None
        ]
        return "\n\n".join(records)

    def _enums(self) -> str:
        return "\n\n".join(render_enum(enum_def) for enum_def in self._discovered.enums.values())

    def _unions(self) -> str:
        return "\n\n".join(
            render_union(union_def, self._config, self._resolve) for union_def in self._discovered.unions.values()
        )

    def _per_shape(self, render: Callable[[ActionShape, GeneratorConfig, TypeNameResolver], str]) -> str:
        rendered = (render(shape, self._config, self._resolve) for shape in self._shapes)
        return "\n\n".join(text for text in rendered if text)

    def _pagination(self) -> str:
        parts = [render_page_config_types(self._shapes), self._per_shape(render_pagination_result)]
        return "\n\n".join(part for part in parts if part)

    def _results(self) -> str:
        return "\n\n".join(
            render_result_type(shape, self._schema, self._config, self._resolve) for shape in self._shapes
        )

    def _filters(self) -> str:
        if not self._config.generate_filter_types:
            return ""
        return render_filter_types(self._discovered.resources, self._schema, self._config, self._resolve)

    def _functions(self) -> str:
        return "\n\n".join(
            render_action_functions(entry.shape, entry.resource, self._schema, self._config, self._resolve)
            for entry in self._exposed
        )

    def _validation_functions(self) -> str:
        if not self._config.generate_validation_functions:
            return ""
        return "\n\n".join(
            render_validation_function(entry.shape, entry.resource, self._config, self._resolve)
            for entry in self._exposed
            if supports_validation(entry.shape)
        )

    def _object_wrappers(self) -> str:
        grouped: dict[str, list[ExposedAction]] = {}
        for entry in self._exposed:
            grouped.setdefault(entry.resource.id, []).append(entry)
        return "\n\n".join(
            render_object_wrapper(entries[0].resource, [entry.shape for entry in entries], self._config)
            for entries in grouped.values()
        )

    def _channel_client(self) -> str:
        if not self._config.generate_channel_client:
            return ""
        return render_channel_client(self._shapes)
