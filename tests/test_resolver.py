"""Tests for apigrader.document — pointers, refs, effective parameters, loading."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

import pytest

from apigrader.document.loader import LoadError, load_document
from apigrader.document.resolver import (
    MISSING,
    deref,
    get_in,
    has_parameter,
    has_problem_json,
    has_response_header,
    iter_operations,
    iter_strings,
    parameter_names,
    parse_pointer,
    resolve_effective_parameters,
    resolve_ref,
    responses_of,
)

if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def doc() -> dict[str, Any]:
    return {
        "components": {
            "parameters": {
                "Org": {"name": "X-Organization-ID", "in": "header"},
                "Limit": {"name": "limit", "in": "query"},
                "Alias": {"$ref": "#/components/parameters/Limit"},
                "a/b": {"name": "slashed", "in": "query"},
            },
            "responses": {
                "Problem": {
                    "description": "error",
                    "content": {"application/problem+json": {"schema": {}}},
                },
                "WithHeaders": {
                    "description": "ok",
                    "headers": {
                        "ETag": {"$ref": "#/components/headers/ETag"},
                        "Inline": {"schema": {"type": "string"}},
                        "Bare": {},
                    },
                },
            },
            "headers": {"ETag": {"schema": {"type": "string"}}},
        },
        "paths": {
            "/items": {
                "parameters": [
                    {"$ref": "#/components/parameters/Org"},
                    {"name": "limit", "in": "query", "description": "path level"},
                ],
                "get": {
                    "parameters": [{"$ref": "#/components/parameters/Limit"}],
                    "responses": {200: {"$ref": "#/components/responses/WithHeaders"}},
                },
                "post": {"responses": {"400": {"$ref": "#/components/responses/Problem"}}},
                "summary": "not an operation",
            },
        },
    }


# ---------------------------------------------------------------------------
# Pointers and refs
# ---------------------------------------------------------------------------


class TestPointers:
    def test_parse_pointer(self) -> None:
        assert parse_pointer("#/a/b") == ["a", "b"]
        assert parse_pointer("#") == []
        assert parse_pointer("#/a~1b/c~0d") == ["a/b", "c~d"]

    def test_non_local_pointers(self) -> None:
        assert parse_pointer("other.yaml#/a") is None
        assert parse_pointer("#a") is None
        assert parse_pointer(42) is None  # type: ignore[arg-type]

    def test_resolve_ref_escaped_segment(self, doc: dict[str, Any]) -> None:
        assert resolve_ref(doc, "#/components/parameters/a~1b")["name"] == "slashed"

    def test_resolve_ref_miss(self, doc: dict[str, Any]) -> None:
        assert resolve_ref(doc, "#/components/parameters/Nope") is MISSING

    def test_resolve_ref_list_index(self) -> None:
        tree = {"servers": [{"url": "a"}, {"url": "b"}]}
        assert resolve_ref(tree, "#/servers/1/url") == "b"
        assert resolve_ref(tree, "#/servers/5") is MISSING

    def test_missing_is_falsy_singleton(self) -> None:
        assert not MISSING
        assert repr(MISSING) == "MISSING"
        assert get_in({}, "a") is MISSING


class TestGetIn:
    def test_nested(self, doc: dict[str, Any]) -> None:
        assert get_in(doc, "components", "headers", "ETag", "schema", "type") == "string"

    def test_through_scalar(self) -> None:
        assert get_in({"a": 1}, "a", "b") is MISSING

    def test_null_is_not_missing(self) -> None:
        assert get_in({"a": None}, "a") is None


class TestDeref:
    def test_chain(self, doc: dict[str, Any]) -> None:
        resolved = deref(doc, {"$ref": "#/components/parameters/Alias"})
        assert resolved == {"name": "limit", "in": "query"}

    def test_dangling(self, doc: dict[str, Any]) -> None:
        assert deref(doc, {"$ref": "#/components/parameters/Ghost"}) is MISSING

    def test_cycle_is_dangling(self) -> None:
        tree = {"a": {"$ref": "#/b"}, "b": {"$ref": "#/a"}}
        assert deref(tree, {"$ref": "#/a"}) is MISSING

    def test_plain_node_passes_through(self) -> None:
        node = {"type": "string"}
        assert deref({}, node) is node


class TestIterStrings:
    def test_keys_and_values_in_order(self) -> None:
        tree = {"info": {"title": "Shop", "tags": ["a", 1, None]}}
        assert list(iter_strings(tree)) == ["info", "title", "Shop", "tags", "a"]

    def test_non_string_keys_skipped_values_kept(self) -> None:
        tree = {datetime.date(2024, 1, 1): "initial release", 200: {"description": "ok"}}
        assert list(iter_strings(tree)) == ["initial release", "description", "ok"]


# ---------------------------------------------------------------------------
# Operations and parameters
# ---------------------------------------------------------------------------


class TestIterOperations:
    def test_skips_non_methods(self, doc: dict[str, Any]) -> None:
        ops = [(path, method) for path, method, _, _ in iter_operations(doc)]
        assert ops == [("/items", "get"), ("/items", "post")]

    def test_method_filter(self, doc: dict[str, Any]) -> None:
        ops = [method for _, method, _, _ in iter_operations(doc, ("post",))]
        assert ops == ["post"]

    def test_no_paths(self) -> None:
        assert list(iter_operations({"paths": []})) == []


class TestEffectiveParameters:
    def test_operation_overrides_path_level_by_resolved_name(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        params = resolve_effective_parameters(item, item["get"], doc)
        assert params == [
            {"$ref": "#/components/parameters/Org"},
            {"$ref": "#/components/parameters/Limit"},
        ]

    def test_without_doc_only_ref_tail_and_name(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        params = resolve_effective_parameters(item, item["get"])
        # "limit" inline and "Limit" ref are not comparable without the document
        assert len(params) == 3

    def test_path_level_inherited(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        params = resolve_effective_parameters(item, item["post"], doc)
        assert len(params) == 2

    def test_has_parameter_by_ref_tail(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        assert has_parameter(doc, item, item["get"], "Org")
        assert has_parameter(doc, item, item["get"], "Limit", "query")

    def test_has_parameter_by_resolved_name(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        assert has_parameter(doc, item, item["post"], "X-Organization-ID", "header")

    def test_has_parameter_location_mismatch(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        assert not has_parameter(doc, item, item["post"], "X-Organization-ID", "query")

    def test_has_parameter_absent(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        assert not has_parameter(doc, item, item["post"], "X-Branch-ID")

    def test_parameter_names(self, doc: dict[str, Any]) -> None:
        item = doc["paths"]["/items"]
        assert parameter_names(doc, item, item["get"]) == ["X-Organization-ID", "limit"]
        assert parameter_names(doc, item, item["get"], "header") == ["X-Organization-ID"]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TestResponses:
    def test_integer_codes_normalized(self, doc: dict[str, Any]) -> None:
        assert list(responses_of(doc["paths"]["/items"]["get"])) == ["200"]

    def test_missing_responses(self) -> None:
        assert responses_of({}) == {}

    def test_has_response_header(self, doc: dict[str, Any]) -> None:
        response = doc["paths"]["/items"]["get"]["responses"][200]
        assert has_response_header(doc, response, "ETag")
        assert has_response_header(doc, response, "Inline")
        assert not has_response_header(doc, response, "Bare")
        assert not has_response_header(doc, response, "Vary")

    def test_has_problem_json(self, doc: dict[str, Any]) -> None:
        assert has_problem_json(doc, {"$ref": "#/components/responses/Problem"})
        assert not has_problem_json(doc, {"$ref": "#/components/responses/WithHeaders"})


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class TestLoadDocument:
    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.yaml"
        path.write_text("openapi: 3.0.3\ninfo:\n  title: T\n", encoding="utf-8")
        assert load_document(path) == {"openapi": "3.0.3", "info": {"title": "T"}}

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.json"
        path.write_text('{"openapi": "3.0.3", "paths": {}}', encoding="utf-8")
        assert load_document(path)["paths"] == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError, match="Cannot read"):
            load_document(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("a: [1, 2\n", encoding="utf-8")
        with pytest.raises(LoadError, match="Cannot parse"):
            load_document(path)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(LoadError, match="must be a mapping, got list"):
            load_document(path)
