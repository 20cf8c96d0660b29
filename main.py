# =============================================================================
# main.py  -  Entry Point for the AppTweak Analytics MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py                       # stdio transport (default)
#   MCP_TRANSPORT=http uv run python main.py    # streamable HTTP transport
#
# WHAT HAPPENS:
#   1. Loads .env into the environment (APPTWEAK_API_KEY, REDIS_URL, ...)
#   2. Builds Settings; a missing API key stops the process here
#   3. Builds the ToolDispatcher with the AppTweak client and cache store
#   4. Builds the FastMCP server around it and serves until interrupted
# =============================================================================

import logging
import sys

from dotenv import load_dotenv

# Must run before Settings.from_env() reads the environment.
load_dotenv()

from core.config import Settings
from core.dispatcher import ToolDispatcher
from core.errors import ConfigurationError
from tools.mcp_server import configure_logging, create_server


def main() -> int:
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        configure_logging()
        logging.error(f"Startup failed: {e}")
        return 1

    configure_logging(settings.log_level)
    logging.info(
        "Starting AppTweak MCP server (transport=%s, caching=%s, ttl=%ss)",
        settings.transport,
        "on" if settings.caching_enabled else "off",
        settings.cache_ttl,
    )

    dispatcher = ToolDispatcher.from_settings(settings)
    mcp = create_server(dispatcher)

    if settings.transport == "http":
        mcp.run(transport="http")
    else:
        mcp.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
