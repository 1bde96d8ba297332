"""Tests for catalog conversion and the one-time fetch."""

from types import SimpleNamespace

import pytest
from mcp import types

from mcp_console.remote.catalog import (
    Parameter,
    fetch_catalog,
    operation_from_tool,
    parameters_from_schema,
    prompt_from_mcp,
    resource_from_mcp,
)
from tests.harness.fakes import ADD, GREETING, PING, README, FakeRemote


class TestParametersFromSchema:
    def test_declaration_order_types_and_required(self):
        schema = {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search text"},
                "limit": {"type": "integer"},
                "exact": {"type": "boolean"},
            },
            "required": ["query"],
        }
        assert parameters_from_schema(schema) == (
            Parameter(name="query", type="string", description="Search text", required=True),
            Parameter(name="limit", type="integer"),
            Parameter(name="exact", type="boolean"),
        )

    def test_union_and_unknown_types_are_undeclared(self):
        schema = {"properties": {"a": {"type": ["string", "null"]}, "b": {"type": "array"}, "c": {}}}
        assert [p.type for p in parameters_from_schema(schema)] == [None, None, None]

    @pytest.mark.parametrize("required", [5, "query", [["query"]], {"query": True}])
    def test_malformed_required_is_ignored(self, required):
        schema = {"properties": {"query": {"type": "string"}}, "required": required}
        assert parameters_from_schema(schema) == (Parameter(name="query", type="string"),)

    def test_missing_or_malformed_schema(self):
        assert parameters_from_schema(None) == ()
        assert parameters_from_schema({}) == ()
        assert parameters_from_schema({"properties": ["not", "a", "mapping"]}) == ()


class TestConversions:
    def test_operation_from_tool(self):
        tool = types.Tool(
            name="add",
            description=None,
            inputSchema={"type": "object", "properties": {"a": {"type": "number"}}},
        )
        op = operation_from_tool(tool)
        assert op.name == "add"
        assert op.description == ""
        assert op.has_parameters
        assert op.parameters[0].type == "number"

    def test_resource_from_mcp(self):
        resource = types.Resource(name="readme", uri="file:///readme.md", mimeType="text/markdown")
        converted = resource_from_mcp(resource)
        assert converted.uri == "file:///readme.md"
        assert converted.mime_type == "text/markdown"
        assert converted.description == ""

    def test_prompt_from_mcp(self):
        prompt = types.Prompt(
            name="greeting",
            description="Say hello",
            arguments=[types.PromptArgument(name="name", required=True)],
        )
        assert prompt_from_mcp(prompt).arguments == ("name",)

    def test_prompt_without_arguments(self):
        prompt = SimpleNamespace(name="bare", description=None, arguments=None)
        assert prompt_from_mcp(prompt).arguments == ()


class TestFetchCatalog:
    def test_success(self):
        remote = FakeRemote(operations=[ADD, PING], resources=[README], prompts=[GREETING])
        fetch = fetch_catalog(remote)
        assert fetch.ok
        assert fetch.error is None
        assert fetch.snapshot.operations == (ADD, PING)
        assert fetch.snapshot.counts() == {"tools": 2, "resources": 1, "prompts": 1}

    def test_remote_error_is_reported(self):
        fetch = fetch_catalog(FakeRemote(listing_error="list tools failed: connection refused"))
        assert not fetch.ok
        assert fetch.snapshot is None
        assert fetch.error == "list tools failed: connection refused"
