# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Normalized shapes of exposed actions.

An :class:`ActionShape` is derived once per exposed action and consumed by
both the type renderers and the function renderers, so that, for example,
a paginated action gets a paginated result type *and* a page config field.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from rpcgen.codegen.naming import to_camel_case, to_pascal_case
from rpcgen.model.entities import (
    PRIMARY_KEY_IDENTITY,
    Action,
    ActionKind,
    Argument,
    Attribute,
    MetadataField,
    Resource,
    RpcAction,
)

# ###############
# Public Interface
# ###############


class InputCardinality(Enum):
    """Whether an action takes an input object, and whether it is mandatory."""

    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


class PaginationKind(Enum):
    """The pagination styles a read action supports."""

    OFFSET = "offset"
    KEYSET = "keyset"
    BOTH = "both"


@dataclass(frozen=True)
class IdentityRequirement:
    """How an action locates the record it operates on.

    Attributes:
        kind: ``none`` for actions that do not target an existing record,
            ``primary_key`` for lookup by primary key, ``named`` for lookup by
            one of the listed identities.
        identities: The identity names for ``named``, including the primary
            key sentinel when it is listed among them.
    """

    kind: Literal["none", "primary_key", "named"]
    identities: tuple[str, ...] = ()

    @classmethod
    def none(cls) -> IdentityRequirement:
        return cls(kind="none")

    @classmethod
    def primary_key(cls) -> IdentityRequirement:
        return cls(kind="primary_key", identities=(PRIMARY_KEY_IDENTITY,))


@dataclass(frozen=True)
class ActionShape:
    """Everything the renderers need to know about one exposed action.

    Attributes:
        rpc_name: The exposed name, used as the wire action name.
        resource_id: Id of the resource the action belongs to.
        backing_action_id: Name of the backend action.
        action_kind: Kind of the backend action.
        requires_tenant: True if the resource is multitenant.
        identity_requirement: How the target record is located.
        input_cardinality: Whether an input object is sent.
        input_fields: Accepted attributes followed by public arguments.
        pagination: Supported pagination style, or None.
        pagination_required: True if the action cannot be called without a page.
        countable: True if the action can return a total count.
        supports_filtering: True for list reads.
        is_get: True for reads returning at most one record.
        exposed_metadata_fields: Metadata fields included in results.
        metadata_field_names: Explicit target names for metadata fields.
        input_field_names: Explicit target names for input fields.
    """

    rpc_name: str
    resource_id: str
    backing_action_id: str
    action_kind: ActionKind
    requires_tenant: bool
    identity_requirement: IdentityRequirement
    input_cardinality: InputCardinality
    input_fields: tuple[Attribute | Argument, ...]
    pagination: PaginationKind | None
    pagination_required: bool
    countable: bool
    supports_filtering: bool
    is_get: bool
    exposed_metadata_fields: tuple[MetadataField, ...]
    metadata_field_names: dict[str, str]
    input_field_names: dict[str, str]

    @property
    def supports_pagination(self) -> bool:
        return self.pagination is not None

    @property
    def has_field_selection(self) -> bool:
        """Return True if the action returns record data the caller can select fields from."""
        return self.action_kind is not ActionKind.DESTROY

    @property
    def function_name(self) -> str:
        """Return the camelCase name of the generated function, e.g. ``listTodos``."""
        return to_camel_case(self.rpc_name)

    @property
    def type_prefix(self) -> str:
        """Return the PascalCase prefix of the generated types, e.g. ``ListTodos``."""
        return to_pascal_case(self.rpc_name)


def build_shape(resource: Resource, action: Action, rpc_action: RpcAction) -> ActionShape:
    """Derive the shape of an exposed action.

    Args:
        resource: The resource declaring the action.
        action: The backing action.
        rpc_action: The RPC exposure configuration of the action.
    """
    input_fields = tuple(_accepted_attributes(resource, action)) + tuple(action.public_arguments)
    is_get = action.type is ActionKind.READ and (action.get or rpc_action.get or bool(rpc_action.get_by))
    pagination = _pagination_kind(action, is_get)
    return ActionShape(
        rpc_name=rpc_action.name,
        resource_id=resource.id,
        backing_action_id=action.name,
        action_kind=action.type,
        requires_tenant=resource.multitenancy != "none",
        identity_requirement=_identity_requirement(action, rpc_action),
        input_cardinality=_input_cardinality(input_fields),
        input_fields=input_fields,
        pagination=pagination,
        pagination_required=pagination is not None and action.pagination is not None and action.pagination.required,
        countable=pagination is not None and action.pagination is not None and action.pagination.countable,
        supports_filtering=action.type is ActionKind.READ and not is_get,
        is_get=is_get,
        exposed_metadata_fields=tuple(exposed_metadata_fields(action, rpc_action)),
        metadata_field_names=dict(rpc_action.metadata_field_names),
        input_field_names=_input_field_names(resource, action, input_fields),
    )


def exposed_metadata_fields(action: Action, rpc_action: RpcAction) -> list[MetadataField]:
    """Resolve the metadata fields exposed by an RPC action.

    ``show_metadata`` unset (or true) exposes every metadata field of the
    action, false or an empty list exposes none, and a list exposes exactly
    the named fields in action declaration order. Unset and empty are
    distinct and must stay so.
    """
    show = rpc_action.show_metadata
    if show is None or show is True:
        return list(action.metadata)
    if show is False:
        return []
    wanted = set(show)
    return [meta for meta in action.metadata if meta.name in wanted]


# ################
# Implementation
# ################


def _accepted_attributes(resource: Resource, action: Action) -> list[Attribute]:
    if action.type not in (ActionKind.CREATE, ActionKind.UPDATE):
        return []
    return [attr for name in action.accept if (attr := resource.attribute(name)) is not None]


def _input_field_names(
    resource: Resource, action: Action, input_fields: tuple[Attribute | Argument, ...]
) -> dict[str, str]:
    names: dict[str, str] = {}
    for spec in input_fields:
        if isinstance(spec, Argument):
            mapped = resource.mapped_argument_name(action.name, spec.name)
        else:
            mapped = resource.mapped_field_name(spec.name)
        if mapped != spec.name:
            names[spec.name] = mapped
    return names


def _identity_requirement(action: Action, rpc_action: RpcAction) -> IdentityRequirement:
    if action.type not in (ActionKind.UPDATE, ActionKind.DESTROY):
        return IdentityRequirement.none()
    if rpc_action.identities is None:
        return IdentityRequirement.primary_key()
    if not rpc_action.identities:
        return IdentityRequirement.none()
    if rpc_action.identities == [PRIMARY_KEY_IDENTITY]:
        return IdentityRequirement.primary_key()
    return IdentityRequirement(kind="named", identities=tuple(rpc_action.identities))


def _input_cardinality(input_fields: tuple[Attribute | Argument, ...]) -> InputCardinality:
    if not input_fields:
        return InputCardinality.NONE
    if any(not spec.nullable and spec.default is None for spec in input_fields):
        return InputCardinality.REQUIRED
    return InputCardinality.OPTIONAL


def _pagination_kind(action: Action, is_get: bool) -> PaginationKind | None:
    if action.type is not ActionKind.READ or is_get or action.pagination is None:
        return None
    if action.pagination.offset and action.pagination.keyset:
        return PaginationKind.BOTH
    if action.pagination.offset:
        return PaginationKind.OFFSET
    if action.pagination.keyset:
        return PaginationKind.KEYSET
    return None
