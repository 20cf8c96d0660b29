import asyncio
import json
import time

import pytest
from fastmcp import Client, FastMCP

from core.dispatcher import ToolDispatcher
from core.errors import UpstreamFailure
from core.models import ErrorKind, ResponseEnvelope, RoutingInfo
from tools.mcp_server import create_server, to_tool_result


def test_routed_result_carries_metadata() -> None:
    envelope = ResponseEnvelope(payload={"reviews": []}, routing=RoutingInfo("reviews", "recent-reviews"))
    result = to_tool_result(envelope)

    assert json.loads(result.content[0].text) == {"reviews": []}
    assert result.structured_content == {"reviews": []}
    assert result.meta == {
        "routingInfo": {"tabId": "reviews", "sectionId": "recent-reviews", "highlightEffect": True}
    }


def test_error_result_has_no_metadata() -> None:
    result = to_tool_result(ResponseEnvelope.failure(ErrorKind.UPSTREAM_FAILURE, "AppTweak API error (500): x"))

    assert result.meta is None
    assert result.structured_content["error"] is True
    assert "500" in result.structured_content["message"]


def test_list_payload_is_wrapped_for_structured_content() -> None:
    result = to_tool_result(ResponseEnvelope(payload=[1, 2]))
    assert result.structured_content == {"result": [1, 2]}
    assert json.loads(result.content[0].text) == [1, 2]


def test_text_payload() -> None:
    result = to_tool_result(ResponseEnvelope(payload="Tool echo: hi"))
    assert result.content[0].text == "Tool echo: hi"
    assert result.structured_content is None


def test_create_server(dispatcher) -> None:
    assert isinstance(create_server(dispatcher), FastMCP)


# =============================================================================
# Through the MCP client
# =============================================================================
REVIEWS_ARGS = {"appId": "389801252", "platform": "ios", "country": "US"}


@pytest.mark.asyncio
async def test_routed_tool_call_returns_routing_meta(dispatcher, upstream) -> None:
    async with Client(create_server(dispatcher)) as client:
        result = await client.call_tool("get_reviews", REVIEWS_ARGS)

    assert result.structured_content == upstream.response
    assert result.meta["routingInfo"] == {
        "tabId": "reviews", "sectionId": "recent-reviews", "highlightEffect": True,
    }


@pytest.mark.asyncio
async def test_unrouted_tool_call_has_no_routing_meta(dispatcher, upstream) -> None:
    async with Client(create_server(dispatcher)) as client:
        result = await client.call_tool("get_trending_keywords", {"platform": "android"})

    assert result.structured_content == upstream.response
    assert "routingInfo" not in (result.meta or {})


@pytest.mark.asyncio
async def test_upstream_error_is_a_normal_result(dispatcher, upstream) -> None:
    upstream.error = UpstreamFailure.from_response(500, "Internal Server Error")
    async with Client(create_server(dispatcher)) as client:
        result = await client.call_tool("get_reviews", REVIEWS_ARGS)

    assert not result.is_error
    assert result.structured_content["error"] is True
    assert "500" in result.structured_content["message"]
    assert "routingInfo" not in (result.meta or {})


class SlowUpstream:
    def __init__(self, delay: float) -> None:
        self.delay = delay

    def fetch(self, path, params):
        time.sleep(self.delay)
        return {"path": path}


@pytest.mark.asyncio
async def test_concurrent_calls_do_not_wait_on_each_other() -> None:
    server = create_server(ToolDispatcher(SlowUpstream(0.5)))
    async with Client(server) as client:
        started = time.perf_counter()
        await asyncio.gather(
            client.call_tool("get_reviews", {"appId": "1"}),
            client.call_tool("get_reviews", {"appId": "2"}),
        )
        elapsed = time.perf_counter() - started

    assert elapsed < 0.9
