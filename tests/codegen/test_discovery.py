# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for discovery of types reachable from exposed resources."""

from rpcgen.codegen.discovery import TypeRoot, aggregate_type, discover, related_resource
from rpcgen.model.entities import Aggregate, AggregateKind, Attribute, Relationship, RelationshipKind, Resource, Schema
from rpcgen.model.types import (
    ArrayTypeRef,
    EnumTypeRef,
    FieldSpec,
    PrimitiveKind,
    PrimitiveTypeRef,
    ResourceTypeRef,
    StructTypeRef,
    UnionTypeRef,
    UnknownTypeRef,
    array_of,
    primitive,
)

# ###############
# Test Helpers
# ###############


def _rel(name: str, destination: str, kind: RelationshipKind = RelationshipKind.BELONGS_TO) -> Relationship:
    return Relationship(name=name, type=kind, destination=destination)


def _attr(name: str, type_ref: object) -> Attribute:
    return Attribute(name=name, type=type_ref)  # type: ignore[arg-type]


def _cyclic_schema() -> Schema:
    return Schema(
        resources=[
            Resource(id="App.A", relationships=[_rel("b", "App.B")]),
            Resource(id="App.B", relationships=[_rel("a", "App.A"), _rel("self", "App.B")]),
        ]
    )


# ###############
# Traversal
# ###############


class TestTraversal:
    def test_mutual_references_terminate(self) -> None:
        result = discover(_cyclic_schema(), ["App.A"])
        assert result.resources == ["App.A", "App.B"]
        assert result.visited == {"App.A", "App.B"}

    def test_each_call_starts_fresh(self) -> None:
        schema = _cyclic_schema()
        first = discover(schema, ["App.A"])
        second = discover(schema, ["App.A"])
        assert first.resources == second.resources
        assert first is not second

    def test_exposed_resources_come_first(self) -> None:
        schema = Schema(
            resources=[
                Resource(id="App.Todo", relationships=[_rel("user", "App.User")]),
                Resource(id="App.User"),
                Resource(id="App.Tag"),
            ]
        )
        assert discover(schema, ["App.Todo", "App.Tag"]).resources == ["App.Todo", "App.Tag", "App.User"]

    def test_embedded_resources_are_separated(self) -> None:
        schema = Schema(
            resources=[
                Resource(id="App.Todo", attributes=[_attr("address", ResourceTypeRef(resource="App.Address"))]),
                Resource(id="App.Address", embedded=True),
            ]
        )
        result = discover(schema, ["App.Todo"])
        assert result.resources == ["App.Todo"]
        assert result.embedded_shapes == ["App.Address"]
        assert result.all_resource_ids == ["App.Todo", "App.Address"]

    def test_private_fields_are_not_traversed(self) -> None:
        hidden = Attribute(name="status", type=EnumTypeRef(values=["a"]), public=False)
        schema = Schema(resources=[Resource(id="App.Todo", attributes=[hidden])])
        assert discover(schema, ["App.Todo"]).enums == {}

    def test_missing_references_are_recorded(self) -> None:
        schema = Schema(resources=[Resource(id="App.Todo", relationships=[_rel("owner", "App.Ghost")])])
        result = discover(schema, ["App.Todo", "App.Nope"])
        assert [(ref.resource_id, ref.formatted_path) for ref in result.missing_resources] == [
            ("App.Nope", "App.Nope"),
            ("App.Ghost", "Todo -> owner"),
        ]


# ###############
# Enums and Unions
# ###############


class TestEnumsAndUnions:
    def test_enum_is_named_after_its_field(self) -> None:
        status = EnumTypeRef(values=["pending", "in_progress", "completed"])
        schema = Schema(resources=[Resource(id="App.Todo", attributes=[_attr("status", status)])])
        enum_def = discover(schema, ["App.Todo"]).enums["Status"]
        assert enum_def.values == ("pending", "in_progress", "completed")
        assert enum_def.origin == "Todo -> status"

    def test_enums_inside_arrays_and_structs(self) -> None:
        struct = StructTypeRef(fields=[FieldSpec(name="level", type=EnumTypeRef(values=["low", "high"]))])
        schema = Schema(
            resources=[
                Resource(
                    id="App.Todo",
                    attributes=[
                        _attr("tags", array_of(EnumTypeRef(values=["x"], name="TagKind"))),
                        _attr("meta", struct),
                    ],
                )
            ]
        )
        assert list(discover(schema, ["App.Todo"]).enums) == ["TagKind", "Level"]

    def test_first_occurrence_wins_and_duplicates_are_kept(self) -> None:
        schema = Schema(
            resources=[
                Resource(
                    id="App.Todo",
                    attributes=[_attr("status", EnumTypeRef(values=["a"]))],
                    relationships=[_rel("other", "App.Other")],
                ),
                Resource(id="App.Other", attributes=[_attr("status", EnumTypeRef(values=["b"]))]),
            ]
        )
        result = discover(schema, ["App.Todo"])
        assert result.enums["Status"].values == ("a",)
        assert len(result.enum_occurrences) == 2

    def test_union_members_are_traversed(self) -> None:
        union = UnionTypeRef(
            members={
                "note": ResourceTypeRef(resource="App.Note"),
                "priority": EnumTypeRef(values=["low"]),
            }
        )
        schema = Schema(
            resources=[Resource(id="App.Todo", attributes=[_attr("content", union)]), Resource(id="App.Note")]
        )
        result = discover(schema, ["App.Todo"])
        assert list(result.unions) == ["ContentUnion"]
        assert list(result.enums) == ["Priority"]
        assert "App.Note" in result.resources

    def test_extra_roots_are_traversed(self) -> None:
        schema = Schema(resources=[Resource(id="App.Todo")])
        root = TypeRoot(owner="mode", type=EnumTypeRef(values=["fast"]), path=("Todo", "run", "mode"))
        result = discover(schema, ["App.Todo"], [root])
        assert result.enums["Mode"].origin == "Todo -> run -> mode"


# ###############
# Aggregates
# ###############


class TestAggregates:
    def _schema(self) -> Schema:
        return Schema(
            resources=[
                Resource(
                    id="App.User",
                    relationships=[_rel("todos", "App.Todo", RelationshipKind.HAS_MANY)],
                    aggregates=[
                        Aggregate(name="todo_count", kind=AggregateKind.COUNT, relationship_path=["todos"]),
                        Aggregate(name="any_done", kind=AggregateKind.EXISTS, relationship_path=["todos"]),
                        Aggregate(name="titles", kind=AggregateKind.LIST, relationship_path=["todos"], field="title"),
                        Aggregate(name="lost", kind=AggregateKind.FIRST, relationship_path=["todos"], field="nope"),
                    ],
                ),
                Resource(id="App.Todo", attributes=[_attr("title", primitive("string"))]),
            ]
        )

    def test_aggregate_types(self) -> None:
        schema = self._schema()
        user = schema.resource("App.User")
        assert user is not None
        count, exists, titles, lost = user.aggregates
        assert aggregate_type(schema, user, count) == PrimitiveTypeRef(primitive=PrimitiveKind.INTEGER)
        assert aggregate_type(schema, user, exists) == PrimitiveTypeRef(primitive=PrimitiveKind.BOOLEAN)
        titles_type = aggregate_type(schema, user, titles)
        assert isinstance(titles_type, ArrayTypeRef)
        assert titles_type.item_type == primitive("string")
        assert isinstance(aggregate_type(schema, user, lost), UnknownTypeRef)

    def test_related_resource(self) -> None:
        schema = self._schema()
        user = schema.resource("App.User")
        assert user is not None
        todo = related_resource(schema, user, ["todos"])
        assert todo is not None and todo.id == "App.Todo"
        assert related_resource(schema, user, ["missing"]) is None
