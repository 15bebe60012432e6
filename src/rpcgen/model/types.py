# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type descriptors for the backend resource schema."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PrimitiveKind(Enum):
    """Primitive source types understood by the type mapper."""

    STRING = "string"
    CI_STRING = "ci_string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    BINARY = "binary"
    DECIMAL = "decimal"
    UUID = "uuid"
    DATE = "date"
    TIME = "time"
    UTC_DATETIME = "utc_datetime"
    UTC_DATETIME_USEC = "utc_datetime_usec"
    DATETIME = "datetime"
    NAIVE_DATETIME = "naive_datetime"
    ATOM = "atom"
    MAP = "map"
    KEYWORD = "keyword"
    TUPLE = "tuple"
    JSON = "json"


class ValueConstraints(BaseModel):
    """Value constraints declared on a type (used for validation annotations)."""

    min: int | float | None = None
    max: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    match: str | None = None

    @property
    def is_empty(self) -> bool:
        """Return True if no constraint is set."""
        return all(value is None for value in self.model_dump().values())


class PrimitiveTypeRef(BaseModel):
    """Reference to a primitive type."""

    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveKind
    constraints: ValueConstraints = _Field(default_factory=ValueConstraints)


class ArrayTypeRef(BaseModel):
    """Reference to an array of another type."""

    kind: Literal["array"] = "array"
    item_type: TypeRef
    constraints: ValueConstraints = _Field(default_factory=ValueConstraints)


class EnumTypeRef(BaseModel):
    """An enumeration with a fixed, ordered set of wire values.

    The declared name is normally derived from the owning field; ``name``
    overrides that derivation.
    """

    kind: Literal["enum"] = "enum"
    values: list[str]
    name: str | None = None


class UnionTypeRef(BaseModel):
    """A tagged union. Member order is preserved from the schema document."""

    kind: Literal["union"] = "union"
    members: dict[str, TypeRef]
    name: str | None = None


class StructTypeRef(BaseModel):
    """A map, keyword list, tuple or struct, optionally with typed fields.

    ``instance_of`` names a concrete class (or a resource id) that the
    struct is an instance of. ``field_names`` maps source field names to
    explicit target names.
    """

    kind: Literal["struct"] = "struct"
    container: Literal["map", "keyword", "tuple", "struct"] = "map"
    fields: list[FieldSpec] = _Field(default_factory=list)
    instance_of: str | None = None
    field_names: dict[str, str] = _Field(default_factory=dict)


class ResourceTypeRef(BaseModel):
    """Reference to another resource (embedded or top-level) by its id."""

    kind: Literal["resource"] = "resource"
    resource: str


class UnknownTypeRef(BaseModel):
    """An opaque or custom type the generator has no structural rule for."""

    kind: Literal["unknown"] = "unknown"
    name: str | None = None


TypeRef = Annotated[
    PrimitiveTypeRef
    | ArrayTypeRef
    | EnumTypeRef
    | UnionTypeRef
    | StructTypeRef
    | ResourceTypeRef
    | UnknownTypeRef,
    _Field(discriminator="kind"),
]


class FieldSpec(BaseModel):
    """A named, typed value: an attribute, argument, struct field or metadata field."""

    name: str
    type: TypeRef
    nullable: bool = True
    default: Any = None
    description: str | None = None


def primitive(kind: PrimitiveKind | str, **constraints: Any) -> PrimitiveTypeRef:
    """Build a PrimitiveTypeRef, accepting the kind by enum or by value."""
    return PrimitiveTypeRef(primitive=PrimitiveKind(kind), constraints=ValueConstraints(**constraints))


def array_of(item_type: TypeRef) -> ArrayTypeRef:
    """Build an ArrayTypeRef wrapping *item_type*."""
    return ArrayTypeRef(item_type=item_type)


# Resolve forward references for models that use TypeRef.
ArrayTypeRef.model_rebuild()
UnionTypeRef.model_rebuild()
StructTypeRef.model_rebuild()
FieldSpec.model_rebuild()
