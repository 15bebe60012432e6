# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for per-action pagination, metadata, result and input types."""

import logging

import pytest

from rpcgen.codegen.action_shape import ActionShape, build_shape
from rpcgen.codegen.type_generators import (
    UNTYPED_DATA,
    default_literal,
    input_type_name,
    metadata_type_name,
    page_config_type,
    pagination_result_type,
    render_input_type,
    render_metadata_type,
    render_page_config_types,
    render_pagination_result,
    render_result_type,
    success_data_type,
)
from rpcgen.config.options import FieldFormatter, GeneratorConfig
from rpcgen.model.entities import (
    Action,
    ActionKind,
    Argument,
    Attribute,
    MetadataField,
    Pagination,
    Resource,
    RpcAction,
    Schema,
)
from rpcgen.model.types import FieldSpec, ResourceTypeRef, UnknownTypeRef, array_of, primitive

# ###############
# Test Helpers
# ###############

_CONFIG = GeneratorConfig()


def _resolve(resource_id: str) -> str | None:
    return {"App.Todo": "Todo"}.get(resource_id)


def _schema(*actions: Action) -> Schema:
    todo = Resource(
        id="App.Todo",
        attributes=[
            Attribute(name="id", type=primitive("uuid"), nullable=False, primary_key=True),
            Attribute(name="title", type=primitive("string"), nullable=False),
            Attribute(name="due_date", type=primitive("date")),
        ],
        actions=list(actions),
    )
    return Schema(resources=[todo])


def _shape(schema: Schema, action_name: str, **rpc: object) -> ActionShape:
    resource = schema.resource("App.Todo")
    assert resource is not None
    action = resource.action(action_name)
    assert action is not None
    name = str(rpc.pop("name", f"{action_name}_todo"))
    rpc_action = RpcAction(name=name, action=action_name, **rpc)  # type: ignore[arg-type]
    return build_shape(resource, action, rpc_action)


# ###############
# Pagination
# ###############


class TestPagination:
    def test_offset_only(self) -> None:
        schema = _schema(Action(name="read", type=ActionKind.READ, pagination=Pagination(offset=True)))
        shape = _shape(schema, "read", name="list_todos")

        assert page_config_type(shape) == "OffsetPageConfig"
        assert pagination_result_type(shape) == "ListTodosOffsetResult"
        assert render_pagination_result(shape, _CONFIG, _resolve) == (
            "@Serializable\n"
            "data class ListTodosOffsetResult(\n"
            "    val results: List<Todo>,\n"
            "    val hasMore: Boolean,\n"
            "    val limit: Int,\n"
            "    val offset: Int,\n"
            "    val count: Int? = null\n"
            ")"
        )
        assert success_data_type(shape, schema, _CONFIG, _resolve) == "ListTodosOffsetResult"

    def test_keyset_only(self) -> None:
        schema = _schema(Action(name="read", type=ActionKind.READ, pagination=Pagination(keyset=True)))
        shape = _shape(schema, "read", name="list_todos")

        assert page_config_type(shape) == "KeysetPageConfig"
        assert pagination_result_type(shape) == "ListTodosKeysetResult"
        rendered = render_pagination_result(shape, _CONFIG, _resolve)
        assert rendered.startswith("@Serializable\ndata class ListTodosKeysetResult(\n")
        assert "OffsetResult" not in rendered
        assert "sealed class" not in rendered
        page_types = render_page_config_types([shape])
        assert "data class KeysetPageConfig(" in page_types
        assert "OffsetPageConfig" not in page_types
        assert success_data_type(shape, schema, _CONFIG, _resolve) == "ListTodosKeysetResult"

    def test_both_styles_render_a_sealed_result(self) -> None:
        schema = _schema(Action(name="read", type=ActionKind.READ, pagination=Pagination(offset=True, keyset=True)))
        shape = _shape(schema, "read", name="list_todos")

        assert page_config_type(shape) == "PageConfig"
        rendered = render_pagination_result(shape, _CONFIG, _resolve)
        assert rendered.startswith("@Serializable\nsealed class ListTodosPaginatedResult {\n")
        assert '    @SerialName("offset")\n    data class Offset(' in rendered
        assert '    @SerialName("keyset")\n    data class Keyset(' in rendered
        assert '        @SerialName("after")\n        val afterCursor: String? = null' in rendered
        assert ") : ListTodosPaginatedResult()" in rendered

    def test_page_config_types_are_rendered_once_per_style(self) -> None:
        schema = _schema(
            Action(name="read", type=ActionKind.READ, pagination=Pagination(offset=True)),
            Action(name="search", type=ActionKind.READ, pagination=Pagination(offset=True)),
        )
        rendered = render_page_config_types([_shape(schema, "read"), _shape(schema, "search")])
        assert rendered.count("data class OffsetPageConfig(") == 1
        assert "KeysetPageConfig" not in rendered

    def test_unpaginated_read_has_no_pagination_types(self) -> None:
        schema = _schema(Action(name="read", type=ActionKind.READ))
        shape = _shape(schema, "read")
        assert render_pagination_result(shape, _CONFIG, _resolve) == ""
        assert success_data_type(shape, schema, _CONFIG, _resolve) == "List<Todo>"


# ###############
# Results
# ###############


class TestResults:
    def test_success_data_per_action_kind(self) -> None:
        schema = _schema(
            Action(name="read", type=ActionKind.READ, get=True),
            Action(name="create", type=ActionKind.CREATE, accept=["title"]),
            Action(name="destroy", type=ActionKind.DESTROY),
            Action(name="count", type=ActionKind.ACTION, returns=primitive("integer")),
            Action(name="ping", type=ActionKind.ACTION),
            Action(name="raw", type=ActionKind.ACTION, returns=UnknownTypeRef(name="App.Opaque")),
            Action(name="batch", type=ActionKind.ACTION, returns=array_of(ResourceTypeRef(resource="App.Todo"))),
        )
        names = ["read", "create", "destroy", "count", "ping", "raw", "batch"]
        data = {name: success_data_type(_shape(schema, name), schema, _CONFIG, _resolve) for name in names}
        assert data == {
            "read": "Todo?",
            "create": "Todo",
            "destroy": UNTYPED_DATA,
            "count": "Int?",
            "ping": UNTYPED_DATA,
            "raw": UNTYPED_DATA,
            "batch": "List<Todo>?",
        }

    def test_result_type_with_metadata(self) -> None:
        schema = _schema(
            Action(
                name="read",
                type=ActionKind.READ,
                metadata=[MetadataField(name="total_time", type=primitive("integer"), nullable=False)],
            )
        )
        shape = _shape(schema, "read", name="list_todos")
        assert render_result_type(shape, schema, _CONFIG, _resolve) == (
            "sealed class ListTodosResult {\n"
            "    data class Success(\n"
            "        val data: List<Todo>,\n"
            "        val metadata: ListTodosMetadata? = null\n"
            "    ) : ListTodosResult()\n"
            "\n"
            "    data class Error(\n"
            "        val errors: List<AshRpcError>\n"
            "    ) : ListTodosResult()\n"
            "}"
        )

    def test_destroy_data_defaults_to_null(self) -> None:
        schema = _schema(Action(name="destroy", type=ActionKind.DESTROY))
        rendered = render_result_type(_shape(schema, "destroy"), schema, _CONFIG, _resolve)
        assert "val data: JsonElement? = null" in rendered


# ###############
# Metadata
# ###############


class TestMetadataTypes:
    def _schema(self) -> Schema:
        return _schema(
            Action(
                name="read",
                type=ActionKind.READ,
                metadata=[
                    MetadataField(name="total_time", type=primitive("integer"), nullable=False),
                    MetadataField(name="cache_hit", type=primitive("boolean")),
                ],
            )
        )

    def test_all_metadata_when_unset(self) -> None:
        shape = _shape(self._schema(), "read", name="list_todos", metadata_field_names={"total_time": "elapsed"})
        assert render_metadata_type(shape, _CONFIG, _resolve) == (
            "@Serializable\n"
            "data class ListTodosMetadata(\n"
            '    @SerialName("totalTime")\n'
            "    val elapsed: Int,\n"
            "    val cacheHit: Boolean? = null\n"
            ")"
        )

    def test_no_metadata_type_when_hidden(self) -> None:
        shape = _shape(self._schema(), "read", show_metadata=[])
        assert metadata_type_name(shape) is None
        assert render_metadata_type(shape, _CONFIG, _resolve) == ""


# ###############
# Inputs
# ###############


class TestInputTypes:
    def test_input_fields_and_defaults(self) -> None:
        schema = _schema(
            Action(
                name="create",
                type=ActionKind.CREATE,
                accept=["title", "due_date"],
                arguments=[Argument(name="notify_owner", type=primitive("boolean"), nullable=False, default=False)],
            )
        )
        shape = _shape(schema, "create", name="create_todo")
        assert input_type_name(shape) == "CreateTodoInput"
        assert render_input_type(shape, _CONFIG, _resolve) == (
            "@Serializable\n"
            "data class CreateTodoInput(\n"
            "    val title: String,\n"
            "    val dueDate: kotlinx.datetime.LocalDate? = null,\n"
            "    val notifyOwner: Boolean = false\n"
            ")"
        )

    def test_snake_case_input_formatter(self) -> None:
        schema = _schema(Action(name="create", type=ActionKind.CREATE, accept=["due_date"]))
        config = GeneratorConfig(input_field_formatter=FieldFormatter.SNAKE_CASE)
        rendered = render_input_type(_shape(schema, "create"), config, _resolve)
        assert '    @SerialName("due_date")\n    val dueDate:' in rendered

    def test_validation_annotations(self) -> None:
        schema = _schema(
            Action(
                name="create",
                type=ActionKind.CREATE,
                arguments=[Argument(name="code", type=primitive("string", max_length=8), nullable=False)],
            )
        )
        config = GeneratorConfig(generate_validation_annotations=True)
        rendered = render_input_type(_shape(schema, "create"), config, _resolve)
        assert "    @field:NotBlank\n    @field:Size(max = 8)\n    val code: String" in rendered

    def test_no_input_type_without_fields(self) -> None:
        schema = _schema(Action(name="destroy", type=ActionKind.DESTROY))
        assert render_input_type(_shape(schema, "destroy"), _CONFIG, _resolve) == ""


class TestDefaultLiterals:
    @pytest.mark.parametrize(
        ("default", "kotlin_type", "expected"),
        [
            ("todo", "String", '"todo"'),
            (True, "Boolean", "true"),
            (3, "Int", "3"),
            (1.5, "Double?", "1.5"),
            (None, "String", None),
        ],
    )
    def test_literals(self, default: object, kotlin_type: str, expected: str | None) -> None:
        spec = FieldSpec(name="x", type=primitive("string"), default=default)
        assert default_literal(spec, kotlin_type) == expected

    def test_mismatched_default_is_rendered_with_a_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        spec = FieldSpec(name="count", type=primitive("integer"), default="many")
        with caplog.at_level(logging.WARNING, logger="rpcgen.codegen.type_generators"):
            assert default_literal(spec, "Int") == '"many"'
        assert "does not match its declared type Int" in caplog.text

    def test_structured_default_becomes_null(self, caplog: pytest.LogCaptureFixture) -> None:
        spec = FieldSpec(name="opts", type=primitive("map"), default={"a": 1})
        with caplog.at_level(logging.WARNING, logger="rpcgen.codegen.type_generators"):
            assert default_literal(spec, "Map<String, Any?>") == "null"
        assert "no Kotlin literal form" in caplog.text
