# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Name and configuration checks run before any Kotlin code is emitted.

The checks operate on the schema and the discovered type set. Every check
runs to completion and all violations are reported together, grouped by
category, so that a single run surfaces every problem at once.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from rpcgen.codegen.action_shape import build_shape
from rpcgen.codegen.discovery import DiscoveredTypeSet
from rpcgen.codegen.naming import enum_variant_name, is_valid_name, suggest_name, to_camel_case, to_pascal_case
from rpcgen.config.options import GeneratorConfig
from rpcgen.model.entities import PRIMARY_KEY_IDENTITY, Action, ActionKind, Resource, RpcAction, Schema
from rpcgen.model.types import ArrayTypeRef, FieldSpec, ResourceTypeRef, StructTypeRef, TypeRef, UnionTypeRef

# ###############
# Public Interface
# ###############

INVALID_FIELD_NAMES = "invalid_field_names"
INVALID_ACTION_TYPES = "invalid_action_types"
DUPLICATE_TYPE_NAMES = "duplicate_type_names"
INVALID_IDENTITIES = "invalid_identities"
INVALID_RPC_CONFIG = "invalid_rpc_config"

MISSING_RPC_CONFIG = "missing_rpc_config"
NON_RPC_REFERENCES = "non_rpc_references"


@dataclass(frozen=True)
class VerificationWarning:
    """A non-fatal finding. Generation proceeds.

    Attributes:
        category: Machine-readable category of the warning.
        message: Human-readable description of the warning.
    """

    category: str
    message: str


@dataclass(frozen=True)
class VerificationError:
    """A fatal finding. No output is written while any error exists.

    Attributes:
        category: Machine-readable category of the error.
        message: Human-readable description of the error.
        suggestion: A corrected name, offered as a diagnostic aid only.
    """

    category: str
    message: str
    suggestion: str | None = None


@dataclass
class VerificationResult:
    """Result of running all verification checks.

    Attributes:
        warnings: Non-fatal findings.
        errors: Fatal findings that abort generation.
    """

    warnings: list[VerificationWarning] = field(default_factory=list)
    errors: list[VerificationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal verification errors were found."""
        return len(self.errors) > 0

    def errors_by_category(self) -> dict[str, list[VerificationError]]:
        """Group errors by category, in order of first occurrence."""
        grouped: dict[str, list[VerificationError]] = {}
        for error in self.errors:
            grouped.setdefault(error.category, []).append(error)
        return grouped

    def format_report(self) -> str:
        """Render every error as one human-readable report grouped by category."""
        sections: list[str] = []
        for category, errors in self.errors_by_category().items():
            lines = [f"{_CATEGORY_TITLES.get(category, category)}:"]
            for error in errors:
                line = f"  - {error.message}"
                if error.suggestion is not None:
                    line += f" (suggested: {error.suggestion})"
                lines.append(line)
            sections.append("\n".join(lines))
        return "\n\n".join(sections)


def verify(schema: Schema, discovered: DiscoveredTypeSet, config: GeneratorConfig) -> VerificationResult:
    """Run all verification checks.

    Checks performed:

    1. **RPC configuration** (error): at least one resource must be
       exposed, and every RPC entry must reference an existing resource,
       action, metadata field and typed query field. RPC names must be
       unique because they name the generated functions.

    2. **Field names** (error): every public attribute, relationship,
       calculation and aggregate of every reached resource must pass the
       name-legality predicate after applying user-configured name
       overrides. No two record properties may share a Kotlin name.

    3. **Action types** (error): argument names of exposed actions, and
       every field nested in their argument, return and metadata types,
       must pass the same predicate. Re-entrant types are checked once.
       No two input type properties may share a Kotlin name.

    4. **Type names** (error): declared type names must be unique across
       all reached resources, must not collide with enum or union names,
       and enums or unions that share a name must have the same definition.
       Enum entries and union variants must be unique within their type.

    5. **Identities** (error): identities named by update and destroy
       actions must exist; the primary-key sentinel requires a primary key.

    6. **Coverage** (warning): resources listed by a domain but not
       exposed, and non-exposed resources referenced by exposed ones.

    Args:
        schema: The schema being generated.
        discovered: The result of type discovery over the exposed resources.
        config: The run configuration (warning toggles).

    Returns:
        A :class:`VerificationResult` holding every finding.
    """
    errors: list[VerificationError] = []
    warnings: list[VerificationWarning] = []

    errors.extend(_check_rpc_config(schema, discovered))
    errors.extend(_check_field_names(schema, discovered))
    errors.extend(_check_action_types(schema))
    errors.extend(_check_type_names(schema, discovered))
    errors.extend(_check_identities(schema))

    if config.warn_on_missing_rpc_config:
        warnings.extend(_warn_missing_rpc_config(schema))
    if config.warn_on_non_rpc_references:
        warnings.extend(_warn_non_rpc_references(schema, discovered))

    return VerificationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################

_CATEGORY_TITLES = {
    INVALID_FIELD_NAMES: "Invalid field names (question marks or digits preceded by underscores)",
    INVALID_ACTION_TYPES: "Invalid field names in action argument, return or metadata types",
    DUPLICATE_TYPE_NAMES: "Duplicate Kotlin type names",
    INVALID_IDENTITIES: "Invalid identity configuration in RPC actions",
    INVALID_RPC_CONFIG: "Invalid RPC configuration",
}


def _exposed_actions(schema: Schema) -> Iterator[tuple[Resource, Action, RpcAction]]:
    """Yield every RPC action whose resource and backing action both exist."""
    for rpc_resource in schema.rpc_resources():
        resource = schema.resource(rpc_resource.resource)
        if resource is None:
            continue
        for rpc_action in rpc_resource.rpc_actions:
            action = resource.action(rpc_action.action)
            if action is not None:
                yield resource, action, rpc_action


def _check_rpc_config(schema: Schema, discovered: DiscoveredTypeSet) -> list[VerificationError]:
    errors: list[VerificationError] = []
    rpc_resources = schema.rpc_resources()
    if not rpc_resources:
        errors.append(VerificationError(INVALID_RPC_CONFIG, "No resources are exposed through RPC."))

    seen_names: dict[str, str] = {}
    for rpc_resource in rpc_resources:
        resource = schema.resource(rpc_resource.resource)
        if resource is None:
            errors.append(
                VerificationError(
                    INVALID_RPC_CONFIG, f"RPC configuration references unknown resource '{rpc_resource.resource}'"
                )
            )
            continue
        for rpc_action in rpc_resource.rpc_actions:
            previous = seen_names.get(rpc_action.name)
            if previous is not None:
                errors.append(
                    VerificationError(
                        INVALID_RPC_CONFIG,
                        f"RPC action name '{rpc_action.name}' is used by both {previous} and {resource.id}",
                    )
                )
            seen_names.setdefault(rpc_action.name, resource.id)

            action = resource.action(rpc_action.action)
            if action is None:
                errors.append(
                    VerificationError(
                        INVALID_RPC_CONFIG,
                        f"RPC action '{rpc_action.name}' references unknown action '{rpc_action.action}' "
                        f"on {resource.id}",
                    )
                )
                continue
            errors.extend(_check_metadata_config(resource, action, rpc_action))
            for key in rpc_action.get_by:
                if resource.attribute(key) is None:
                    errors.append(
                        VerificationError(
                            INVALID_RPC_CONFIG,
                            f"RPC action '{rpc_action.name}' gets by unknown attribute '{key}' on {resource.id}",
                        )
                    )

        for query in rpc_resource.typed_queries:
            errors.extend(_check_typed_query(schema, resource, query.name, query.action, query.fields))

    for reference in discovered.missing_resources:
        if reference.path == (reference.resource_id,):
            continue
        errors.append(
            VerificationError(
                INVALID_RPC_CONFIG,
                f"{reference.formatted_path} references unknown resource '{reference.resource_id}'",
            )
        )
    return errors


def _check_metadata_config(resource: Resource, action: Action, rpc_action: RpcAction) -> list[VerificationError]:
    errors: list[VerificationError] = []
    declared = {meta.name for meta in action.metadata}
    shown = rpc_action.show_metadata if isinstance(rpc_action.show_metadata, list) else []
    for name in [*shown, *rpc_action.metadata_field_names]:
        if name not in declared:
            errors.append(
                VerificationError(
                    INVALID_RPC_CONFIG,
                    f"RPC action '{rpc_action.name}' references unknown metadata field '{name}' "
                    f"of action '{action.name}' on {resource.id}",
                )
            )
    for name, mapped in rpc_action.metadata_field_names.items():
        if name in declared and not is_valid_name(mapped):
            errors.append(
                VerificationError(
                    INVALID_RPC_CONFIG,
                    f"RPC action '{rpc_action.name}' maps metadata field '{name}' to invalid name '{mapped}'",
                    suggest_name(mapped),
                )
            )
    return errors


def _check_typed_query(
    schema: Schema, resource: Resource, query_name: str, action_name: str, selection: Iterable[object]
) -> list[VerificationError]:
    action = resource.action(action_name)
    if action is None or action.type is not ActionKind.READ:
        return [
            VerificationError(
                INVALID_RPC_CONFIG,
                f"Typed query '{query_name}' must reference a read action on {resource.id}, got '{action_name}'",
            )
        ]
    return _check_selection(schema, resource, query_name, selection)


def _check_selection(
    schema: Schema, resource: Resource, query_name: str, selection: Iterable[object]
) -> list[VerificationError]:
    errors: list[VerificationError] = []
    for item in selection:
        names = [item] if isinstance(item, str) else list(item) if isinstance(item, dict) else []
        for name in names:
            known = (
                resource.attribute(name)
                or resource.calculation(name)
                or resource.aggregate(name)
                or resource.relationship(name)
            )
            if known is None:
                errors.append(
                    VerificationError(
                        INVALID_RPC_CONFIG,
                        f"Typed query '{query_name}' selects unknown field '{name}' on {resource.id}",
                    )
                )
                continue
            if isinstance(item, dict):
                relationship = resource.relationship(name)
                destination = schema.resource(relationship.destination) if relationship is not None else None
                if destination is None:
                    errors.append(
                        VerificationError(
                            INVALID_RPC_CONFIG,
                            f"Typed query '{query_name}' nests a selection under '{name}', "
                            f"which is not a relationship to a known resource",
                        )
                    )
                else:
                    errors.extend(_check_selection(schema, destination, query_name, item[name]))
    return errors


def _check_field_names(schema: Schema, discovered: DiscoveredTypeSet) -> list[VerificationError]:
    errors: list[VerificationError] = []
    for resource_id in discovered.all_resource_ids:
        resource = schema.resource(resource_id)
        if resource is None:
            continue
        named: list[tuple[str, str]] = [
            *(("attribute", attr.name) for attr in resource.public_attributes),
            *(("relationship", rel.name) for rel in resource.public_relationships),
            *(("calculation", calc.name) for calc in resource.public_calculations),
            *(("aggregate", agg.name) for agg in resource.public_aggregates),
        ]
        for kind, name in named:
            mapped = resource.mapped_field_name(name)
            if not is_valid_name(mapped):
                errors.append(
                    VerificationError(INVALID_FIELD_NAMES, f"{resource.id}: {kind} {name}", suggest_name(mapped))
                )
        properties = [
            (name, resource.field_names.get(name) or to_camel_case(name))
            for name in [
                *(attr.name for attr in resource.public_attributes),
                *(rel.name for rel in resource.public_relationships),
            ]
        ]
        errors.extend(_duplicate_properties(INVALID_FIELD_NAMES, f"{resource.id}: record", properties))
    return errors


def _duplicate_properties(
    category: str, context: str, properties: Iterable[tuple[str, str]]
) -> list[VerificationError]:
    sources: dict[str, list[str]] = {}
    for source_name, kotlin_name in properties:
        sources.setdefault(kotlin_name, []).append(source_name)
    return [
        VerificationError(
            category, f"{context} fields {', '.join(names)} all map to the Kotlin property '{kotlin_name}'"
        )
        for kotlin_name, names in sources.items()
        if len(names) > 1
    ]


def _check_action_types(schema: Schema) -> list[VerificationError]:
    errors: list[VerificationError] = []
    for resource, action, rpc_action in _exposed_actions(schema):
        checker = _TypeNameChecker(schema, f"{resource.id}: RPC action '{rpc_action.name}'")
        for argument in action.public_arguments:
            mapped = resource.mapped_argument_name(action.name, argument.name)
            if not is_valid_name(mapped):
                errors.append(
                    VerificationError(
                        INVALID_ACTION_TYPES,
                        f"{checker.context}: argument {argument.name}",
                        suggest_name(mapped),
                    )
                )
            checker.check(argument.type, f"argument {argument.name}")
        if action.type is ActionKind.ACTION and action.returns is not None:
            checker.check(action.returns, "return type")
        for meta in action.metadata:
            checker.check(meta.type, f"metadata {meta.name}")
        errors.extend(checker.errors)
        shape = build_shape(resource, action, rpc_action)
        inputs = [
            (spec.name, shape.input_field_names.get(spec.name) or to_camel_case(spec.name))
            for spec in shape.input_fields
        ]
        errors.extend(_duplicate_properties(INVALID_ACTION_TYPES, f"{checker.context}: input", inputs))
    return errors


class _TypeNameChecker:
    """Walks the fields nested in action types, visiting each resource once."""

    def __init__(self, schema: Schema, context: str) -> None:
        self._schema = schema
        self.context = context
        self.errors: list[VerificationError] = []
        self._visited: set[str] = set()

    def check(self, type_ref: TypeRef, location: str) -> None:
        if isinstance(type_ref, ArrayTypeRef):
            self.check(type_ref.item_type, location)
        elif isinstance(type_ref, UnionTypeRef):
            for tag, member in type_ref.members.items():
                self.check(member, f"{location} -> {tag}")
        elif isinstance(type_ref, StructTypeRef):
            if type_ref.instance_of and self._schema.resource(type_ref.instance_of) is not None:
                self._check_resource(type_ref.instance_of, location)
            self._check_fields(type_ref.fields, type_ref.field_names, location)
        elif isinstance(type_ref, ResourceTypeRef):
            self._check_resource(type_ref.resource, location)

    def _check_fields(self, fields: Iterable[FieldSpec], field_names: dict[str, str], location: str) -> None:
        for spec in fields:
            mapped = field_names.get(spec.name, spec.name)
            if not is_valid_name(mapped):
                self.errors.append(
                    VerificationError(
                        INVALID_ACTION_TYPES,
                        f"{self.context}: {location} field {spec.name}",
                        suggest_name(mapped),
                    )
                )
            self.check(spec.type, f"{location} -> {spec.name}")

    def _check_resource(self, resource_id: str, location: str) -> None:
        if resource_id in self._visited:
            return
        self._visited.add(resource_id)
        resource = self._schema.resource(resource_id)
        if resource is None:
            return
        specs: list[FieldSpec] = [*resource.public_attributes, *resource.public_calculations]
        self._check_fields(specs, resource.field_names, f"{location} ({resource.short_name})")


def _check_type_names(schema: Schema, discovered: DiscoveredTypeSet) -> list[VerificationError]:
    errors: list[VerificationError] = []

    owners: dict[str, list[str]] = {}
    for resource_id in discovered.all_resource_ids:
        resource = schema.resource(resource_id)
        if resource is not None:
            owners.setdefault(resource.declared_type_name, []).append(resource.id)
    for type_name, resource_ids in owners.items():
        if len(resource_ids) > 1:
            errors.append(
                VerificationError(
                    DUPLICATE_TYPE_NAMES, f"Type name '{type_name}' is used by: {', '.join(resource_ids)}"
                )
            )

    for name, enum_def in discovered.enums.items():
        if name in owners:
            errors.append(
                VerificationError(
                    DUPLICATE_TYPE_NAMES,
                    f"Enum '{name}' at {enum_def.origin} collides with the record type of {', '.join(owners[name])}",
                )
            )
    for name, union_def in discovered.unions.items():
        if name in owners or name in discovered.enums:
            errors.append(
                VerificationError(
                    DUPLICATE_TYPE_NAMES, f"Union '{name}' at {union_def.origin} collides with another type name"
                )
            )

    reported: set[str] = set()
    for occurrence in discovered.enum_occurrences:
        first = discovered.enums[occurrence.name]
        if occurrence.values != first.values and occurrence.name not in reported:
            reported.add(occurrence.name)
            errors.append(
                VerificationError(
                    DUPLICATE_TYPE_NAMES,
                    f"Enum '{occurrence.name}' is defined with different values at {first.origin} "
                    f"and {occurrence.origin}",
                )
            )
    for occurrence in discovered.union_occurrences:
        first = discovered.unions[occurrence.name]
        if not occurrence.same_shape(first) and occurrence.name not in reported:
            reported.add(occurrence.name)
            errors.append(
                VerificationError(
                    DUPLICATE_TYPE_NAMES,
                    f"Union '{occurrence.name}' is defined with different members at {first.origin} "
                    f"and {occurrence.origin}",
                )
            )

    for enum_def in discovered.enums.values():
        entries: dict[str, list[str]] = {}
        for value in enum_def.values:
            entries.setdefault(enum_variant_name(value), []).append(value)
        for entry, values in entries.items():
            if len(values) > 1:
                errors.append(
                    VerificationError(
                        DUPLICATE_TYPE_NAMES,
                        f"Enum '{enum_def.name}' at {enum_def.origin}: values {', '.join(repr(v) for v in values)} "
                        f"all map to the entry {entry}",
                    )
                )
    for union_def in discovered.unions.values():
        variants: dict[str, list[str]] = {}
        for tag in union_def.members:
            variants.setdefault(to_pascal_case(tag), []).append(tag)
        for variant, tags in variants.items():
            if len(tags) > 1:
                errors.append(
                    VerificationError(
                        DUPLICATE_TYPE_NAMES,
                        f"Union '{union_def.name}' at {union_def.origin}: tags {', '.join(repr(t) for t in tags)} "
                        f"all map to the variant {variant}",
                    )
                )
    return errors


def _check_identities(schema: Schema) -> list[VerificationError]:
    errors: list[VerificationError] = []
    for resource, action, rpc_action in _exposed_actions(schema):
        if action.type not in (ActionKind.UPDATE, ActionKind.DESTROY):
            continue
        identities = [PRIMARY_KEY_IDENTITY] if rpc_action.identities is None else rpc_action.identities
        for identity in identities:
            if identity == PRIMARY_KEY_IDENTITY:
                if not resource.primary_key:
                    errors.append(
                        VerificationError(
                            INVALID_IDENTITIES,
                            f"RPC action '{rpc_action.name}' (action: {action.name}) locates records by primary key, "
                            f"but {resource.id} has no primary key",
                        )
                    )
            elif resource.identity(identity) is None:
                errors.append(
                    VerificationError(
                        INVALID_IDENTITIES,
                        f"RPC action '{rpc_action.name}' (action: {action.name}) references unknown identity "
                        f"'{identity}' on {resource.id}. {_available_identities(resource)}",
                    )
                )
    return errors


def _available_identities(resource: Resource) -> str:
    if not resource.identities:
        return "No identities are defined on this resource."
    return "Available identities: " + ", ".join(ident.name for ident in resource.identities)


def _warn_missing_rpc_config(schema: Schema) -> list[VerificationWarning]:
    exposed = set(schema.exposed_resource_ids())
    return [
        VerificationWarning(MISSING_RPC_CONFIG, f"Resource {resource_id} is not exposed through RPC")
        for resource_id in schema.domain_resource_ids()
        if resource_id not in exposed
    ]


def _warn_non_rpc_references(schema: Schema, discovered: DiscoveredTypeSet) -> list[VerificationWarning]:
    exposed = set(schema.exposed_resource_ids())
    warnings: list[VerificationWarning] = []
    reported: set[str] = set()
    for reference in discovered.references:
        resource = schema.resource(reference.resource_id)
        if resource is None or resource.embedded or resource.id in exposed or resource.id in reported:
            continue
        reported.add(resource.id)
        warnings.append(
            VerificationWarning(
                NON_RPC_REFERENCES,
                f"Resource {resource.id} is referenced by an exposed resource but not exposed through RPC "
                f"({reference.formatted_path})",
            )
        )
    return warnings
