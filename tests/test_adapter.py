"""Tests for wrapping remote tools as callable functions."""

import asyncio

import pytest

from toolbridge.errors import CoercionError, JsonRpcError, SchemaConversionError, ToolInvocationError
from toolbridge.providers.base import ContentSegment, ToolDescriptor
from toolbridge.tools.adapter import build_arguments, extract_text, tool_to_function
from toolbridge.tools.schema import SemanticType, schema_to_parameters

from fakes import text_result


def _search_tool():
    return ToolDescriptor(
        name="search",
        description="Search issues",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string"},
                "limit": {"type": "integer"},
                "closed": {"type": "boolean"},
            },
            "required": ["query"],
        },
    )


class TestExtractText:
    """Tests for extract_text()."""

    def test_joins_text_and_drops_other_media(self):
        segments = [
            ContentSegment(kind="text", text="A"),
            ContentSegment(kind="image", data="iVBORw0...", mime_type="image/png"),
            ContentSegment(kind="text", text="B"),
        ]
        assert extract_text(segments) == "A\nB"

    def test_no_text(self):
        assert extract_text([ContentSegment(kind="image", data="x")]) == ""


class TestBuildArguments:
    """Tests for argument preparation."""

    def test_drops_none_and_coerces(self):
        params = schema_to_parameters("search", _search_tool().input_schema)
        args = build_arguments(params, {"query": "bug", "limit": "10", "closed": None})
        assert args == {"query": "bug", "limit": 10}

    def test_unknown_argument_passes_through(self):
        raw = {"nested": [1, 2]}
        args = build_arguments(None, {"mystery": raw})
        assert args["mystery"] is raw


class TestToolToFunction:
    """Tests for tool_to_function() and CallableFunction.invoke()."""

    def test_metadata(self, fake_client):
        fn = tool_to_function(fake_client, _search_tool())
        assert fn.name == "search"
        assert fn.description == "Search issues"
        assert fn.provider_id == "github"
        assert [p.name for p in fn.parameters] == ["query", "limit", "closed"]
        assert fn.parameter("limit").semantic_type is SemanticType.INTEGER
        assert fn.parameter("limit").nullable is True
        assert fn.parameter("missing") is None

    def test_no_properties(self, fake_client):
        fn = tool_to_function(fake_client, ToolDescriptor(name="ping", input_schema={"type": "object"}))
        assert fn.parameters is None

    def test_bad_schema_raises(self, fake_client):
        with pytest.raises(SchemaConversionError):
            tool_to_function(fake_client, ToolDescriptor(name="bad", input_schema={"properties": 3}))

    @pytest.mark.asyncio
    async def test_invoke_sends_coerced_arguments(self, fake_client):
        fake_client.responses["tools/call"] = text_result("found 2")
        fn = tool_to_function(fake_client, _search_tool())

        result = await fn.invoke({"query": "bug", "limit": "2", "closed": "false", "skip": None})

        assert result == "found 2"
        method, params, timeout = fake_client.calls[-1]
        assert method == "tools/call"
        assert params == {"name": "search", "arguments": {"query": "bug", "limit": 2, "closed": False}}
        assert timeout is None

    @pytest.mark.asyncio
    async def test_invoke_forwards_unknown_argument(self, fake_client):
        fake_client.responses["tools/call"] = text_result("ok")
        fn = tool_to_function(fake_client, _search_tool())

        await fn.invoke({"query": "x", "owner": {"login": "octo"}})

        _, params, _ = fake_client.calls[-1]
        assert params["arguments"]["owner"] == {"login": "octo"}

    @pytest.mark.asyncio
    async def test_invoke_passes_timeout(self, fake_client):
        fake_client.responses["tools/call"] = text_result("ok")
        fn = tool_to_function(fake_client, _search_tool())

        await fn.invoke({"query": "x"}, timeout=1.5)

        assert fake_client.calls[-1][2] == 1.5

    @pytest.mark.asyncio
    async def test_invoke_extracts_text_only(self, fake_client):
        fake_client.responses["tools/call"] = {
            "content": [
                {"type": "text", "text": "A"},
                {"type": "image", "data": "...", "mimeType": "image/png"},
                {"type": "text", "text": "B"},
            ],
        }
        fn = tool_to_function(fake_client, _search_tool())
        assert await fn.invoke({"query": "x"}) == "A\nB"

    @pytest.mark.asyncio
    async def test_coercion_error_surfaces_before_call(self, fake_client):
        fn = tool_to_function(fake_client, _search_tool())

        with pytest.raises(CoercionError):
            await fn.invoke({"query": "x", "limit": "abc"})

        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_transport_failure_wrapped(self, fake_client):
        cause = JsonRpcError(-32603, "Internal error")
        fake_client.responses["tools/call"] = cause
        fn = tool_to_function(fake_client, _search_tool())

        with pytest.raises(ToolInvocationError) as exc_info:
            await fn.invoke({"query": "x"})

        assert exc_info.value.tool_name == "search"
        assert exc_info.value.__cause__ is cause
        assert "Internal error" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_provider_reported_error(self, fake_client):
        fake_client.responses["tools/call"] = text_result("rate limited", is_error=True)
        fn = tool_to_function(fake_client, _search_tool())

        with pytest.raises(ToolInvocationError, match="rate limited"):
            await fn.invoke({"query": "x"})

    @pytest.mark.asyncio
    async def test_no_retry(self, fake_client):
        fake_client.responses["tools/call"] = ConnectionError("reset")
        fn = tool_to_function(fake_client, _search_tool())

        with pytest.raises(ToolInvocationError):
            await fn.invoke({"query": "x"})

        assert len(fake_client.calls) == 1

    @pytest.mark.asyncio
    async def test_cancellation_not_wrapped(self, fake_client):
        fake_client.responses["tools/call"] = asyncio.CancelledError()
        fn = tool_to_function(fake_client, _search_tool())

        with pytest.raises(asyncio.CancelledError):
            await fn.invoke({"query": "x"})

    @pytest.mark.asyncio
    async def test_concurrent_invocations_independent(self, fake_client):
        fake_client.responses["tools/call"] = lambda params: text_result(params["arguments"]["query"])
        fn = tool_to_function(fake_client, _search_tool())

        results = await asyncio.gather(*(fn.invoke({"query": q}) for q in ("a", "b", "c")))

        assert results == ["a", "b", "c"]
