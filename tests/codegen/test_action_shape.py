# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for deriving action shapes from actions and their RPC exposure."""

import pytest

from rpcgen.codegen.action_shape import (
    InputCardinality,
    PaginationKind,
    build_shape,
    exposed_metadata_fields,
)
from rpcgen.model.entities import (
    PRIMARY_KEY_IDENTITY,
    Action,
    ActionKind,
    Argument,
    Attribute,
    MetadataField,
    Pagination,
    Resource,
    RpcAction,
)
from rpcgen.model.types import primitive

# ###############
# Test Helpers
# ###############


def _resource(**kwargs: object) -> Resource:
    return Resource(
        id="App.Todos.Todo",
        attributes=[
            Attribute(name="id", type=primitive("uuid"), nullable=False, primary_key=True),
            Attribute(name="title", type=primitive("string"), nullable=False),
            Attribute(name="notes", type=primitive("string")),
        ],
        **kwargs,  # type: ignore[arg-type]
    )


def _shape(action: Action, rpc_action: RpcAction | None = None, resource: Resource | None = None):
    return build_shape(resource or _resource(), action, rpc_action or RpcAction(name="do_it", action=action.name))


def _read(**pagination: bool) -> Action:
    return Action(name="read", type=ActionKind.READ, pagination=Pagination(**pagination) if pagination else None)


# ###############
# Names
# ###############


class TestNames:
    def test_function_and_type_names(self) -> None:
        shape = _shape(_read(), RpcAction(name="list_todos", action="read"))
        assert shape.function_name == "listTodos"
        assert shape.type_prefix == "ListTodos"
        assert shape.rpc_name == "list_todos"
        assert shape.backing_action_id == "read"


# ###############
# Reads and Pagination
# ###############


class TestReads:
    @pytest.mark.parametrize(
        ("pagination", "expected"),
        [
            ({}, None),
            ({"offset": True}, PaginationKind.OFFSET),
            ({"keyset": True}, PaginationKind.KEYSET),
            ({"offset": True, "keyset": True}, PaginationKind.BOTH),
        ],
    )
    def test_pagination_kind(self, pagination: dict[str, bool], expected: PaginationKind | None) -> None:
        shape = _shape(_read(**pagination))
        assert shape.pagination is expected
        assert shape.supports_pagination is (expected is not None)

    def test_list_read_supports_filtering(self) -> None:
        shape = _shape(_read())
        assert shape.supports_filtering
        assert not shape.is_get
        assert shape.has_field_selection

    def test_get_disables_filtering_and_pagination(self) -> None:
        rpc = RpcAction(name="get_todo", action="read", get_by=["id"])
        shape = _shape(_read(offset=True), rpc)
        assert shape.is_get
        assert not shape.supports_filtering
        assert shape.pagination is None

    def test_required_and_countable_pagination(self) -> None:
        shape = _shape(_read(offset=True, required=True, countable=True))
        assert shape.pagination_required
        assert shape.countable


# ###############
# Inputs and Identities
# ###############


class TestInputs:
    def test_create_accepts_attributes_then_arguments(self) -> None:
        action = Action(
            name="create",
            type=ActionKind.CREATE,
            accept=["title", "notes", "missing"],
            arguments=[
                Argument(name="notify", type=primitive("boolean")),
                Argument(name="secret", type=primitive("string"), public=False),
            ],
        )
        shape = _shape(action)
        assert [spec.name for spec in shape.input_fields] == ["title", "notes", "notify"]
        assert shape.input_cardinality is InputCardinality.REQUIRED
        assert shape.identity_requirement.kind == "none"

    def test_optional_input_when_every_field_has_a_fallback(self) -> None:
        action = Action(
            name="search",
            type=ActionKind.ACTION,
            arguments=[Argument(name="limit", type=primitive("integer"), nullable=False, default=10)],
        )
        assert _shape(action).input_cardinality is InputCardinality.OPTIONAL

    def test_no_input(self) -> None:
        assert _shape(Action(name="destroy", type=ActionKind.DESTROY)).input_cardinality is InputCardinality.NONE

    def test_read_ignores_accept(self) -> None:
        action = Action(name="read", type=ActionKind.READ, accept=["title"])
        assert _shape(action).input_fields == ()

    def test_mapped_input_names(self) -> None:
        resource = _resource(
            field_names={"notes": "memo"},
            argument_names={"create": {"notify": "sendMail"}},
        )
        action = Action(
            name="create",
            type=ActionKind.CREATE,
            accept=["notes"],
            arguments=[Argument(name="notify", type=primitive("boolean"))],
        )
        shape = _shape(action, resource=resource)
        assert shape.input_field_names == {"notes": "memo", "notify": "sendMail"}

    def test_tenant_requirement(self) -> None:
        shape = _shape(_read(), resource=_resource(multitenancy="attribute"))
        assert shape.requires_tenant


class TestIdentities:
    def _update(self) -> Action:
        return Action(name="update", type=ActionKind.UPDATE, accept=["title"])

    def test_unset_identities_use_primary_key(self) -> None:
        requirement = _shape(self._update()).identity_requirement
        assert requirement.kind == "primary_key"
        assert requirement.identities == (PRIMARY_KEY_IDENTITY,)

    def test_empty_identities_need_no_identity(self) -> None:
        rpc = RpcAction(name="update_todo", action="update", identities=[])
        assert _shape(self._update(), rpc).identity_requirement.kind == "none"

    def test_named_identities(self) -> None:
        rpc = RpcAction(name="update_todo", action="update", identities=["by_email", PRIMARY_KEY_IDENTITY])
        requirement = _shape(self._update(), rpc).identity_requirement
        assert requirement.kind == "named"
        assert requirement.identities == ("by_email", PRIMARY_KEY_IDENTITY)


# ###############
# Metadata
# ###############


class TestMetadata:
    def _action(self) -> Action:
        return Action(
            name="read",
            type=ActionKind.READ,
            metadata=[
                MetadataField(name="total_time", type=primitive("integer")),
                MetadataField(name="cache_hit", type=primitive("boolean")),
            ],
        )

    @pytest.mark.parametrize(
        ("show_metadata", "expected"),
        [
            (None, ["total_time", "cache_hit"]),
            (True, ["total_time", "cache_hit"]),
            (False, []),
            ([], []),
            (["cache_hit"], ["cache_hit"]),
        ],
    )
    def test_show_metadata(self, show_metadata: bool | list[str] | None, expected: list[str]) -> None:
        rpc = RpcAction(name="list_todos", action="read", show_metadata=show_metadata)
        assert [meta.name for meta in exposed_metadata_fields(self._action(), rpc)] == expected

    def test_shape_carries_metadata_names(self) -> None:
        rpc = RpcAction(name="list_todos", action="read", metadata_field_names={"total_time": "elapsed"})
        shape = _shape(self._action(), rpc)
        assert len(shape.exposed_metadata_fields) == 2
        assert shape.metadata_field_names == {"total_time": "elapsed"}
