# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema model for rpcgen (resources, actions, type descriptors, RPC exposure)."""

from rpcgen.model.entities import (
    PRIMARY_KEY_IDENTITY,
    Action,
    ActionKind,
    Aggregate,
    AggregateKind,
    Argument,
    Attribute,
    Calculation,
    Domain,
    Identity,
    MetadataField,
    Pagination,
    Relationship,
    RelationshipKind,
    Resource,
    RpcAction,
    RpcResource,
    Schema,
    TypedQuery,
)
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
    ValueConstraints,
    array_of,
    primitive,
)

__all__ = [
    # Type system
    "PrimitiveKind",
    "ValueConstraints",
    "PrimitiveTypeRef",
    "ArrayTypeRef",
    "EnumTypeRef",
    "UnionTypeRef",
    "StructTypeRef",
    "ResourceTypeRef",
    "UnknownTypeRef",
    "TypeRef",
    "FieldSpec",
    "primitive",
    "array_of",
    # Entities
    "PRIMARY_KEY_IDENTITY",
    "ActionKind",
    "RelationshipKind",
    "AggregateKind",
    "Attribute",
    "Calculation",
    "Aggregate",
    "Relationship",
    "Identity",
    "Argument",
    "MetadataField",
    "Pagination",
    "Action",
    "Resource",
    "RpcAction",
    "TypedQuery",
    "RpcResource",
    "Domain",
    "Schema",
]
