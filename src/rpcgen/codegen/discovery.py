# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Discovery of every type reachable from the exposed resources.

The traversal is depth-first over each resource's public attributes,
calculations, aggregates and relationships. Arrays, unions, structs and
resource references are unwrapped recursively. A resource id is marked as
visited before its fields are traversed, so self-referential and mutually
referential resource graphs terminate.

All collections in the result preserve first-encounter order, which makes
the generated output independent of anything but the schema itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from rpcgen.codegen.naming import enum_type_name, union_type_name
from rpcgen.model.entities import Aggregate, AggregateKind, Resource, Schema
from rpcgen.model.types import (
    ArrayTypeRef,
    EnumTypeRef,
    PrimitiveKind,
    PrimitiveTypeRef,
    ResourceTypeRef,
    StructTypeRef,
    TypeRef,
    UnionTypeRef,
    UnknownTypeRef,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class EnumDef:
    """An enumeration discovered on a field.

    Attributes:
        name: Declared Kotlin name.
        values: Wire values in declaration order.
        origin: Path of the field the enum was found on.
    """

    name: str
    values: tuple[str, ...]
    origin: str


@dataclass(frozen=True)
class UnionDef:
    """A tagged union discovered on a field.

    Attributes:
        name: Declared Kotlin name.
        members: Member types keyed by wire tag, in declaration order.
        origin: Path of the field the union was found on.
    """

    name: str
    members: dict[str, TypeRef]
    origin: str

    def same_shape(self, other: UnionDef) -> bool:
        """Return True if both unions declare the same tags with the same member types."""
        return list(self.members) == list(other.members) and all(
            self.members[tag] == other.members[tag] for tag in self.members
        )


@dataclass(frozen=True)
class ResourceReference:
    """A reference to a resource found while traversing another shape."""

    resource_id: str
    path: tuple[str, ...]

    @property
    def formatted_path(self) -> str:
        """Return the path as ``Todo -> user``."""
        return " -> ".join(self.path)


@dataclass
class DiscoveredTypeSet:
    """Accumulator threaded through one discovery traversal.

    Attributes:
        enums: Enumerations by declared name; the first occurrence wins.
        unions: Tagged unions by declared name; the first occurrence wins.
        embedded_shapes: Ids of embedded resources reached by the traversal.
        resources: Ids of non-embedded resources reached by the traversal,
            exposed resources first.
        visited: Resource ids whose fields have been traversed.
        enum_occurrences: Every enum found, including duplicates by name.
        union_occurrences: Every union found, including duplicates by name.
        references: Every resource reference with the path it was found on.
        missing_resources: References to resource ids absent from the schema.
    """

    enums: dict[str, EnumDef] = field(default_factory=dict)
    unions: dict[str, UnionDef] = field(default_factory=dict)
    embedded_shapes: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)
    visited: set[str] = field(default_factory=set)
    enum_occurrences: list[EnumDef] = field(default_factory=list)
    union_occurrences: list[UnionDef] = field(default_factory=list)
    references: list[ResourceReference] = field(default_factory=list)
    missing_resources: list[ResourceReference] = field(default_factory=list)

    @property
    def all_resource_ids(self) -> list[str]:
        """Return non-embedded then embedded resource ids."""
        return self.resources + self.embedded_shapes


@dataclass(frozen=True)
class TypeRoot:
    """An extra starting point for discovery, such as an action argument.

    Attributes:
        owner: Name of the value that carries the type (names enums and unions).
        type: The type to traverse.
        path: Human-readable location used in diagnostics.
    """

    owner: str
    type: TypeRef
    path: tuple[str, ...]


def discover(
    schema: Schema,
    exposed_resource_ids: Iterable[str],
    extra_roots: Iterable[TypeRoot] = (),
) -> DiscoveredTypeSet:
    """Collect every enum, union and resource reachable from the exposed resources.

    Args:
        schema: The schema to query.
        exposed_resource_ids: Resources exposed through RPC, in a stable order.
        extra_roots: Additional types to traverse, such as exposed action
            arguments and return types.

    Returns:
        A fresh :class:`DiscoveredTypeSet`. The visited set is local to this call.
    """
    collector = _Collector(schema)
    return collector.run(list(exposed_resource_ids), list(extra_roots))


def aggregate_type(schema: Schema, resource: Resource, aggregate: Aggregate) -> TypeRef:
    """Resolve the value type of *aggregate* on *resource*.

    ``count`` is an integer, ``exists`` a boolean and ``avg`` a float. The
    remaining kinds take the type of the backing field at the end of the
    relationship path, wrapped in an array for ``list``. Unresolvable paths
    yield an unknown type.
    """
    if aggregate.kind is AggregateKind.COUNT:
        return PrimitiveTypeRef(primitive=PrimitiveKind.INTEGER)
    if aggregate.kind is AggregateKind.EXISTS:
        return PrimitiveTypeRef(primitive=PrimitiveKind.BOOLEAN)
    if aggregate.kind is AggregateKind.AVG:
        return PrimitiveTypeRef(primitive=PrimitiveKind.FLOAT)

    backing = _backing_field_type(schema, resource, aggregate)
    if backing is None:
        return UnknownTypeRef(name=f"{resource.id}.{aggregate.name}")
    if aggregate.kind is AggregateKind.LIST:
        return ArrayTypeRef(item_type=backing)
    return backing


def related_resource(schema: Schema, resource: Resource, relationship_path: list[str]) -> Resource | None:
    """Follow *relationship_path* from *resource*, returning the resource at its end."""
    current: Resource | None = resource
    for name in relationship_path:
        if current is None:
            return None
        relationship = current.relationship(name)
        if relationship is None:
            return None
        current = schema.resource(relationship.destination)
    return current


# ################
# Implementation
# ################


class _Collector:
    """Performs a single discovery traversal over a schema."""

    def __init__(self, schema: Schema) -> None:
        self._schema = schema
        self._result = DiscoveredTypeSet()

    def run(self, exposed_resource_ids: list[str], extra_roots: list[TypeRoot]) -> DiscoveredTypeSet:
        roots: list[Resource] = []
        for resource_id in exposed_resource_ids:
            resource = self._schema.resource(resource_id)
            if resource is None:
                self._result.missing_resources.append(ResourceReference(resource_id, (resource_id,)))
                continue
            self._register(resource)
            roots.append(resource)

        for resource in roots:
            self._visit_resource(resource, (resource.short_name,))

        for root in extra_roots:
            self._visit_type(root.type, root.owner, root.path)

        logger.debug(
            "Discovered %d resources, %d embedded shapes, %d enums, %d unions",
            len(self._result.resources),
            len(self._result.embedded_shapes),
            len(self._result.enums),
            len(self._result.unions),
        )
        return self._result

    def _register(self, resource: Resource) -> None:
        target = self._result.embedded_shapes if resource.embedded else self._result.resources
        if resource.id not in target:
            target.append(resource.id)

    def _visit_resource(self, resource: Resource, path: tuple[str, ...]) -> None:
        if resource.id in self._result.visited:
            return
        # Mark before recursing so cycles back to this resource stop here.
        self._result.visited.add(resource.id)
        logger.debug("Visiting resource %s", resource.id)

        for attribute in resource.public_attributes:
            self._visit_type(attribute.type, attribute.name, (*path, attribute.name))
        for calculation in resource.public_calculations:
            self._visit_type(calculation.type, calculation.name, (*path, calculation.name))
        for aggregate in resource.public_aggregates:
            if aggregate.has_backing_field:
                self._visit_type(
                    aggregate_type(self._schema, resource, aggregate), aggregate.name, (*path, aggregate.name)
                )
        for relationship in resource.public_relationships:
            self._visit_reference(relationship.destination, (*path, relationship.name))

    def _visit_reference(self, resource_id: str, path: tuple[str, ...]) -> None:
        self._result.references.append(ResourceReference(resource_id, path))
        resource = self._schema.resource(resource_id)
        if resource is None:
            self._result.missing_resources.append(ResourceReference(resource_id, path))
            return
        self._register(resource)
        self._visit_resource(resource, path)

    def _visit_type(self, type_ref: TypeRef, owner: str, path: tuple[str, ...]) -> None:
        if isinstance(type_ref, EnumTypeRef):
            self._add_enum(
                EnumDef(
                    name=type_ref.name or enum_type_name(owner),
                    values=tuple(type_ref.values),
                    origin=" -> ".join(path),
                )
            )
        elif isinstance(type_ref, UnionTypeRef):
            self._add_union(
                UnionDef(
                    name=type_ref.name or union_type_name(owner),
                    members=dict(type_ref.members),
                    origin=" -> ".join(path),
                )
            )
            for tag, member in type_ref.members.items():
                self._visit_type(member, tag, (*path, tag))
        elif isinstance(type_ref, ArrayTypeRef):
            self._visit_type(type_ref.item_type, owner, (*path, "[]"))
        elif isinstance(type_ref, StructTypeRef):
            if type_ref.instance_of and self._schema.resource(type_ref.instance_of) is not None:
                self._visit_reference(type_ref.instance_of, path)
            for struct_field in type_ref.fields:
                self._visit_type(struct_field.type, struct_field.name, (*path, struct_field.name))
        elif isinstance(type_ref, ResourceTypeRef):
            self._visit_reference(type_ref.resource, path)

    def _add_enum(self, enum_def: EnumDef) -> None:
        self._result.enum_occurrences.append(enum_def)
        self._result.enums.setdefault(enum_def.name, enum_def)

    def _add_union(self, union_def: UnionDef) -> None:
        self._result.union_occurrences.append(union_def)
        self._result.unions.setdefault(union_def.name, union_def)


def _backing_field_type(schema: Schema, resource: Resource, aggregate: Aggregate) -> TypeRef | None:
    if aggregate.field is None:
        return None
    destination = related_resource(schema, resource, aggregate.relationship_path)
    if destination is None:
        return None
    attribute = destination.attribute(aggregate.field)
    if attribute is not None:
        return attribute.type
    calculation = destination.calculation(aggregate.field)
    if calculation is not None:
        return calculation.type
    return None
