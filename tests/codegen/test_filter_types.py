# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for typed filter inputs."""

import pytest

from rpcgen.codegen.filter_types import (
    filter_for_type,
    filter_input_name,
    render_base_filter_types,
    render_filter_input,
    render_filter_types,
)
from rpcgen.config.options import DatetimeLibrary, GeneratorConfig
from rpcgen.model.entities import (
    Aggregate,
    AggregateKind,
    Attribute,
    Calculation,
    Relationship,
    RelationshipKind,
    Resource,
    Schema,
)
from rpcgen.model.types import EnumTypeRef, StructTypeRef, TypeRef, primitive

# ###############
# Test Helpers
# ###############

_CONFIG = GeneratorConfig(generate_filter_types=True)


def _resolve(resource_id: str) -> str | None:
    return {"App.Todo": "Todo", "App.User": "User", "App.Tag": "Tag"}.get(resource_id)


def _schema() -> Schema:
    return Schema(
        resources=[
            Resource(
                id="App.Todo",
                attributes=[
                    Attribute(name="id", type=primitive("uuid"), nullable=False, primary_key=True),
                    Attribute(name="title", type=primitive("string")),
                    Attribute(name="due_at", type=primitive("utc_datetime")),
                ],
                calculations=[Calculation(name="is_overdue", type=primitive("boolean"))],
                aggregates=[
                    Aggregate(name="tag_count", kind=AggregateKind.COUNT, relationship_path=["tags"]),
                    Aggregate(name="weight", kind=AggregateKind.SUM, relationship_path=["tags"], field="score"),
                    Aggregate(name="lost", kind=AggregateKind.SUM, relationship_path=["tags"], field="nope"),
                ],
                relationships=[
                    Relationship(name="user", type=RelationshipKind.BELONGS_TO, destination="App.User"),
                    Relationship(name="tags", type=RelationshipKind.HAS_MANY, destination="App.Tag"),
                ],
                field_names={"due_at": "dueTime"},
            ),
            Resource(id="App.User", attributes=[Attribute(name="name", type=primitive("string"))]),
            Resource(id="App.Tag", attributes=[Attribute(name="score", type=primitive("float"))]),
        ]
    )


# ###############
# Base Filters
# ###############


class TestBaseFilters:
    @pytest.mark.parametrize(
        ("type_ref", "expected"),
        [
            (primitive("string"), "StringFilter"),
            (primitive("integer"), "IntFilter"),
            (primitive("float"), "DoubleFilter"),
            (primitive("boolean"), "BooleanFilter"),
            (primitive("uuid"), "UuidFilter"),
            (primitive("date"), "DateFilter"),
            (primitive("utc_datetime_usec"), "InstantFilter"),
            (primitive("decimal"), "DecimalFilter"),
            (EnumTypeRef(values=["a"]), "StringFilter"),
            (StructTypeRef(), "StringFilter"),
        ],
    )
    def test_filter_for_type(self, type_ref: TypeRef, expected: str) -> None:
        assert filter_for_type(type_ref) == expected

    def test_string_filter(self) -> None:
        rendered = render_base_filter_types(_CONFIG)
        assert (
            "@Serializable\n"
            "data class StringFilter(\n"
            "    val eq: String? = null,\n"
            "    val notEq: String? = null,\n"
            '    @SerialName("in")\n'
            "    val inValues: List<String>? = null\n"
            ")"
        ) in rendered

    def test_ordered_filters_have_comparisons(self) -> None:
        rendered = render_base_filter_types(_CONFIG)
        assert "data class IntFilter(\n    val eq: Int? = null,\n    val notEq: Int? = null,\n" in rendered
        assert "    val lessThanOrEqual: Int? = null," in rendered

    def test_boolean_filter_has_no_membership(self) -> None:
        rendered = render_base_filter_types(_CONFIG)
        assert "data class BooleanFilter(\n    val eq: Boolean? = null,\n    val notEq: Boolean? = null\n)" in rendered

    def test_date_types_follow_the_datetime_library(self) -> None:
        java = GeneratorConfig(datetime_library=DatetimeLibrary.JAVA_TIME)
        assert "val eq: java.time.Instant? = null" in render_base_filter_types(java)
        assert "val eq: kotlinx.datetime.Instant? = null" in render_base_filter_types(_CONFIG)


# ###############
# Filter Inputs
# ###############


class TestFilterInputs:
    def test_filter_input_name(self) -> None:
        assert filter_input_name("App.Todo", _CONFIG, _resolve) == "TodoFilterInput"

    def test_resource_filter_input(self) -> None:
        schema = _schema()
        todo = schema.resource("App.Todo")
        assert todo is not None
        rendered = render_filter_input(todo, schema, _CONFIG, _resolve, ["App.Todo", "App.Tag"])
        assert rendered == (
            "@Serializable\n"
            "data class TodoFilterInput(\n"
            "    val and: List<TodoFilterInput>? = null,\n"
            "    val or: List<TodoFilterInput>? = null,\n"
            "    val not: List<TodoFilterInput>? = null,\n"
            "    val id: UuidFilter? = null,\n"
            "    val title: StringFilter? = null,\n"
            '    @SerialName("dueAt")\n'
            "    val dueTime: InstantFilter? = null,\n"
            "    val isOverdue: BooleanFilter? = null,\n"
            "    val tagCount: IntFilter? = null,\n"
            "    val weight: DoubleFilter? = null,\n"
            "    val tags: TagFilterInput? = null\n"
            ")"
        )

    def test_render_filter_types_includes_every_resource(self) -> None:
        rendered = render_filter_types(["App.Todo", "App.User", "App.Tag"], _schema(), _CONFIG, _resolve)
        assert rendered.startswith("@Serializable\ndata class StringFilter(")
        for name in ("TodoFilterInput", "UserFilterInput", "TagFilterInput"):
            assert f"data class {name}(" in rendered
        assert "    val user: UserFilterInput? = null," in rendered
