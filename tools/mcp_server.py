# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (the AppTweak tool catalog)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes every catalog tool over MCP.  Each tool is a thin wrapper:
#   it forwards its arguments to the ToolDispatcher and converts the
#   ResponseEnvelope it gets back into an MCP tool result.
#
# HOW IT WORKS (the flow):
#   1. The dashboard (or an agent) calls a tool by name, e.g. "get_reviews"
#   2. FastMCP routes the call to the decorated function below
#   3. The function hands (name, parameters) to the dispatcher, which
#      validates, checks the cache, and calls AppTweak on a miss
#   4. The envelope becomes a ToolResult:
#        content            → one text block with the JSON payload
#        structured_content → the payload object
#        meta               → {"routingInfo": {...}} when the tool is routed
#
# FAILURES:
#   A failed call is still a normal result whose payload is
#   {"error": true, "kind": ..., "message": ...}.  No tool raises.
#
# CONCURRENCY:
#   Tools are coroutines; each one runs the blocking dispatch in a worker
#   thread, so calls in flight do not wait on each other.
#
# PARAMETER NAMES:
#   Tool arguments keep the camelCase names the dashboard already sends
#   (appId, startDate, ...), because FastMCP derives the MCP input schema
#   from these signatures.
# =============================================================================

import asyncio
import json
import logging
import sys
from typing import Any, Literal, Optional

from fastmcp import FastMCP
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

from core.catalog import DEFAULT_COUNTRY, DEFAULT_LANGUAGE, DEFAULT_PLATFORM
from core.dispatcher import ToolDispatcher
from core.models import ResponseEnvelope, ToolCall

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: with the stdio transport, STDOUT carries the MCP
# message stream and any stray line there corrupts it.
#
#   CYAN   → incoming tool calls
#   YELLOW → status (cache hit / miss / error)
#   GREEN  → responses
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

_MAX_LOGGED_RESPONSE = 500  # characters

Platform = Literal["ios", "android"]
ReviewSort = Literal["most_useful", "most_recent", "most_positive"]
KeywordSort = Literal["score", "volume", "rank"]


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, params: dict[str, Any]) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, envelope: ResponseEnvelope) -> None:
    text = json.dumps(envelope.payload, separators=(",", ":"), default=str)
    if len(text) > _MAX_LOGGED_RESPONSE:
        text = text[:_MAX_LOGGED_RESPONSE] + "…"
    logging.info(f"{_GREEN}  ← {tool_name} response: {text}{_RESET}")


# =============================================================================
# Envelope → MCP result
# =============================================================================
def to_tool_result(envelope: ResponseEnvelope) -> ToolResult:
    """Convert a dispatcher envelope into the result FastMCP sends back."""
    payload = envelope.payload
    meta = envelope.to_metadata()

    if isinstance(payload, str):
        return ToolResult(content=[TextContent(type="text", text=payload)], meta=meta)

    # structured_content must be an object; wrap bare lists and scalars.
    structured = payload if isinstance(payload, dict) else {"result": payload}
    return ToolResult(
        content=[TextContent(type="text", text=json.dumps(payload, ensure_ascii=False))],
        structured_content=structured,
        meta=meta,
    )


# =============================================================================
# Server factory
# =============================================================================
def create_server(dispatcher: ToolDispatcher, name: str = "apptweak-analytics") -> FastMCP:
    """Build a FastMCP server whose tools all go through ``dispatcher``."""
    mcp = FastMCP(name)

    async def run(tool_name: str, **params: Any) -> ToolResult:
        _log_request(tool_name, params)
        # dispatch blocks on the upstream socket; keep it off the event loop.
        envelope = await asyncio.to_thread(dispatcher.dispatch, ToolCall(name=tool_name, parameters=params))
        if envelope.is_error:
            _log_status(f"{envelope.payload['kind']}: {envelope.payload['message']}")
        else:
            _log_status("served from cache" if envelope.cached else "fetched")
        _log_response(tool_name, envelope)
        return to_tool_result(envelope)

    # -------------------------------------------------------------------------
    # App details
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def search_app(
        query: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
    ) -> ToolResult:
        """Search for an app by name and platform (ios/android).

        Use this to turn an app name into an app ID for the other tools.
        """
        return await run("search_app", query=query, platform=platform, country=country, language=language)

    @mcp.tool()
    async def get_app_details(
        appId: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
    ) -> ToolResult:
        """Get detailed information about an app by ID.

        Args:
            appId: Store ID (numeric for iOS, package name for Android).
            platform: "ios" or "android".
            country: Two-letter store country code.
            language: Store language code.
        """
        return await run("get_app_details", appId=appId, platform=platform, country=country, language=language)

    # -------------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def get_reviews(
        appId: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
    ) -> ToolResult:
        """Get top 100 reviews for an app."""
        return await run("get_reviews", appId=appId, platform=platform, country=country)

    @mcp.tool()
    async def get_top_displayed_reviews(
        appId: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        size: int = 50,
        sort: ReviewSort = "most_useful",
    ) -> ToolResult:
        """Get top displayed reviews sorted by criteria."""
        return await run(
            "get_top_displayed_reviews",
            appId=appId, platform=platform, country=country, size=size, sort=sort,
        )

    @mcp.tool()
    async def search_reviews(
        appId: str,
        term: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
    ) -> ToolResult:
        """Search an app's reviews for a term."""
        return await run("search_reviews", appId=appId, term=term, platform=platform, country=country)

    @mcp.tool()
    async def get_review_stats(
        appId: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
    ) -> ToolResult:
        """Get aggregate review statistics for an app."""
        return await run("get_review_stats", appId=appId, platform=platform, country=country)

    @mcp.tool()
    async def analyze_ratings(
        appId: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
        startDate: Optional[str] = None,
        endDate: Optional[str] = None,
    ) -> ToolResult:
        """Get detailed ratings and sentiment analysis.

        startDate and endDate are optional YYYY-MM-DD bounds.
        """
        return await run(
            "analyze_ratings",
            appId=appId, platform=platform, country=country, language=language,
            startDate=startDate, endDate=endDate,
        )

    # -------------------------------------------------------------------------
    # Keywords
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def discover_keywords(
        query: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
        limit: int = 20,
    ) -> ToolResult:
        """Find relevant keywords based on a seed keyword or app."""
        return await run(
            "discover_keywords",
            query=query, platform=platform, country=country, language=language, limit=limit,
        )

    @mcp.tool()
    async def track_keyword_rankings(
        appId: str,
        keywords: list[str],
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
    ) -> ToolResult:
        """Track an app's ranking for a list of keywords."""
        return await run(
            "track_keyword_rankings",
            appId=appId, keywords=keywords, platform=platform, country=country, language=language,
        )

    @mcp.tool()
    async def get_keyword_stats(
        keywords: list[str],
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
    ) -> ToolResult:
        """Get volume and difficulty statistics for keywords."""
        return await run(
            "get_keyword_stats",
            keywords=keywords, platform=platform, country=country, language=language,
        )

    @mcp.tool()
    async def get_keyword_volume_history(
        keyword: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        startDate: Optional[str] = None,
        endDate: Optional[str] = None,
    ) -> ToolResult:
        """Get the search volume history of a keyword."""
        return await run(
            "get_keyword_volume_history",
            keyword=keyword, platform=platform, country=country,
            startDate=startDate, endDate=endDate,
        )

    @mcp.tool()
    async def analyze_top_keywords(
        appIds: list[str],
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        limit: int = 10,
        sortBy: KeywordSort = "score",
    ) -> ToolResult:
        """Analyze top keywords for apps including brand analysis and estimated installs.

        appIds must contain at least one app ID.
        """
        return await run(
            "analyze_top_keywords",
            appIds=appIds, platform=platform, country=country, limit=limit, sortBy=sortBy,
        )

    @mcp.tool()
    async def get_category_top_keywords(
        category: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
    ) -> ToolResult:
        """Get the top keywords of a store category."""
        return await run("get_category_top_keywords", category=category, platform=platform, country=country)

    @mcp.tool()
    async def get_trending_keywords(
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
    ) -> ToolResult:
        """Get currently trending store searches."""
        return await run("get_trending_keywords", platform=platform, country=country)

    # -------------------------------------------------------------------------
    # Competitors
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def get_competitors(
        appId: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        language: str = DEFAULT_LANGUAGE,
    ) -> ToolResult:
        """Get list of competing apps based on keyword overlap."""
        return await run("get_competitors", appId=appId, platform=platform, country=country, language=language)

    @mcp.tool()
    async def analyze_competitive_position(
        appId: str,
        platform: Platform = DEFAULT_PLATFORM,
        country: str = DEFAULT_COUNTRY,
        competitors: Optional[list[str]] = None,
    ) -> ToolResult:
        """Analyze app's competitive position including power scores and impressions."""
        return await run(
            "analyze_competitive_position",
            appId=appId, platform=platform, country=country, competitors=competitors,
        )

    # -------------------------------------------------------------------------
    # Downloads
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def get_downloads(
        appId: str,
        country: str,
        startDate: str,
        endDate: str,
        platform: Platform = DEFAULT_PLATFORM,
    ) -> ToolResult:
        """Get app download estimates for a specific time period (YYYY-MM-DD dates)."""
        return await run(
            "get_downloads",
            appId=appId, platform=platform, country=country, startDate=startDate, endDate=endDate,
        )

    # -------------------------------------------------------------------------
    # Local tools
    # -------------------------------------------------------------------------
    @mcp.tool()
    async def echo(message: str) -> ToolResult:
        """Echo a message."""
        return await run("echo", message=message)

    @mcp.tool()
    async def calculate(expression: str) -> ToolResult:
        """Evaluate an arithmetic expression.

        Only numbers, + - * /, unary signs and parentheses are accepted.
        """
        return await run("calculate", expression=expression)

    return mcp
