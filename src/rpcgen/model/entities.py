# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resources, actions and RPC configuration of the backend schema."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

from rpcgen.model.types import FieldSpec, TypeRef

# ###############
# Public Interface
# ###############

PRIMARY_KEY_IDENTITY = "_primary_key"
"""Sentinel identity name meaning "locate the record by its primary key"."""


class ActionKind(Enum):
    """The kind of a backend action."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"
    ACTION = "action"


class RelationshipKind(Enum):
    """The kind of a relationship between two resources."""

    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    MANY_TO_MANY = "many_to_many"


class AggregateKind(Enum):
    """The kind of an aggregate over a relationship path."""

    COUNT = "count"
    EXISTS = "exists"
    SUM = "sum"
    AVG = "avg"
    FIRST = "first"
    LIST = "list"
    MAX = "max"
    MIN = "min"
    CUSTOM = "custom"


class Attribute(FieldSpec):
    """A stored attribute of a resource."""

    public: bool = True
    primary_key: bool = False


class Calculation(FieldSpec):
    """A computed field of a resource."""

    public: bool = True


class Aggregate(BaseModel):
    """A value aggregated over a relationship path."""

    name: str
    kind: AggregateKind
    relationship_path: list[str] = _Field(default_factory=list)
    field: str | None = None
    public: bool = True
    nullable: bool = True

    @property
    def has_backing_field(self) -> bool:
        """Return True if the aggregate's type is the type of a related field."""
        return self.kind in _FIELD_AGGREGATES and self.field is not None and len(self.relationship_path) > 0


class Relationship(BaseModel):
    """A relationship from one resource to another."""

    name: str
    type: RelationshipKind
    destination: str
    public: bool = True

    @property
    def cardinality(self) -> Literal["one", "many"]:
        """Return "many" for to-many relationships, "one" otherwise."""
        if self.type in (RelationshipKind.HAS_MANY, RelationshipKind.MANY_TO_MANY):
            return "many"
        return "one"


class Identity(BaseModel):
    """A named uniqueness constraint on a resource."""

    name: str
    keys: list[str] = _Field(default_factory=list)


class Argument(FieldSpec):
    """An argument accepted by an action."""

    public: bool = True


class MetadataField(FieldSpec):
    """A metadata value an action may return alongside its data."""


class Pagination(BaseModel):
    """Pagination capabilities of a read action."""

    offset: bool = False
    keyset: bool = False
    required: bool = False
    countable: bool = False
    default_limit: int | None = None


class Action(BaseModel):
    """A backend action declared on a resource."""

    name: str
    type: ActionKind
    arguments: list[Argument] = _Field(default_factory=list)
    accept: list[str] = _Field(default_factory=list)
    get: bool = False
    pagination: Pagination | None = None
    metadata: list[MetadataField] = _Field(default_factory=list)
    returns: TypeRef | None = None
    description: str | None = None

    @property
    def public_arguments(self) -> list[Argument]:
        """Return the arguments visible to clients."""
        return [arg for arg in self.arguments if arg.public]


class Resource(BaseModel):
    """A backend resource: its fields, relationships and actions."""

    id: str
    type_name: str | None = None
    embedded: bool = False
    multitenancy: Literal["none", "attribute", "context"] = "none"
    attributes: list[Attribute] = _Field(default_factory=list)
    relationships: list[Relationship] = _Field(default_factory=list)
    calculations: list[Calculation] = _Field(default_factory=list)
    aggregates: list[Aggregate] = _Field(default_factory=list)
    identities: list[Identity] = _Field(default_factory=list)
    actions: list[Action] = _Field(default_factory=list)
    field_names: dict[str, str] = _Field(default_factory=dict)
    argument_names: dict[str, dict[str, str]] = _Field(default_factory=dict)

    @property
    def short_name(self) -> str:
        """Return the last segment of the qualified resource id."""
        return self.id.rsplit(".", 1)[-1]

    @property
    def declared_type_name(self) -> str:
        """Return the configured type name, or the short name when none is configured."""
        return self.type_name or self.short_name

    @property
    def primary_key(self) -> list[Attribute]:
        """Return the primary key attributes in declaration order."""
        return [attr for attr in self.attributes if attr.primary_key]

    @property
    def public_attributes(self) -> list[Attribute]:
        return [attr for attr in self.attributes if attr.public]

    @property
    def public_relationships(self) -> list[Relationship]:
        return [rel for rel in self.relationships if rel.public]

    @property
    def public_calculations(self) -> list[Calculation]:
        return [calc for calc in self.calculations if calc.public]

    @property
    def public_aggregates(self) -> list[Aggregate]:
        return [agg for agg in self.aggregates if agg.public]

    def attribute(self, name: str) -> Attribute | None:
        return next((attr for attr in self.attributes if attr.name == name), None)

    def relationship(self, name: str) -> Relationship | None:
        return next((rel for rel in self.relationships if rel.name == name), None)

    def calculation(self, name: str) -> Calculation | None:
        return next((calc for calc in self.calculations if calc.name == name), None)

    def aggregate(self, name: str) -> Aggregate | None:
        return next((agg for agg in self.aggregates if agg.name == name), None)

    def identity(self, name: str) -> Identity | None:
        return next((ident for ident in self.identities if ident.name == name), None)

    def action(self, name: str) -> Action | None:
        return next((act for act in self.actions if act.name == name), None)

    def mapped_field_name(self, name: str) -> str:
        """Return the user-configured target name for a field, or the field name itself."""
        return self.field_names.get(name, name)

    def mapped_argument_name(self, action_name: str, argument_name: str) -> str:
        """Return the user-configured target name for an action argument."""
        return self.argument_names.get(action_name, {}).get(argument_name, argument_name)


class RpcAction(BaseModel):
    """Exposure of one backend action through the generated client.

    ``show_metadata`` is tri-state: ``None`` exposes every metadata field
    of the action, ``False`` or an empty list exposes none, and a list
    exposes exactly the named fields.
    """

    name: str
    action: str
    identities: list[str] | None = None
    show_metadata: bool | list[str] | None = None
    metadata_field_names: dict[str, str] = _Field(default_factory=dict)
    get: bool = False
    get_by: list[str] = _Field(default_factory=list)


class TypedQuery(BaseModel):
    """A predefined field selection for a read action."""

    name: str
    action: str
    fields: list[str | dict[str, list[Any]]] = _Field(default_factory=list)
    result_type_name: str | None = None
    fields_const_name: str | None = None


class RpcResource(BaseModel):
    """The RPC configuration of one resource inside a domain."""

    resource: str
    rpc_actions: list[RpcAction] = _Field(default_factory=list)
    typed_queries: list[TypedQuery] = _Field(default_factory=list)


class Domain(BaseModel):
    """A group of resources and their RPC exposure."""

    name: str
    resources: list[str] = _Field(default_factory=list)
    rpc: list[RpcResource] = _Field(default_factory=list)


class Schema(BaseModel):
    """The complete backend schema consumed by the generator."""

    app: str = "app"
    resources: list[Resource] = _Field(default_factory=list)
    domains: list[Domain] = _Field(default_factory=list)

    def resource(self, resource_id: str) -> Resource | None:
        """Look up a resource by its qualified id."""
        return next((res for res in self.resources if res.id == resource_id), None)

    def rpc_resources(self) -> list[RpcResource]:
        """Return every RPC resource configuration across all domains, in declaration order."""
        return [rpc for domain in self.domains for rpc in domain.rpc]

    def exposed_resource_ids(self) -> list[str]:
        """Return the ids of resources exposed through RPC, deduplicated in declaration order."""
        seen: dict[str, None] = {}
        for rpc in self.rpc_resources():
            seen.setdefault(rpc.resource, None)
        return list(seen)

    def domain_resource_ids(self) -> list[str]:
        """Return the ids of every resource listed by any domain."""
        seen: dict[str, None] = {}
        for domain in self.domains:
            for resource_id in domain.resources:
                seen.setdefault(resource_id, None)
        return list(seen)


# ################
# Implementation
# ################

_FIELD_AGGREGATES = frozenset(
    {AggregateKind.FIRST, AggregateKind.LIST, AggregateKind.MAX, AggregateKind.MIN, AggregateKind.CUSTOM}
)
