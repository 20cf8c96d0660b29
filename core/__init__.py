# =============================================================================
# core/__init__.py
# =============================================================================
# Tool-dispatch and caching logic for the AppTweak analytics tools.
#
# Nothing in this package imports FastMCP.  The pieces, leaf-first:
#
#   cache_store.py  TTL key-value store adapters (Redis / no-op)
#   endpoints.py    tool name → platform-specific AppTweak path
#   upstream.py     authenticated GET against the AppTweak API
#   routing.py      tool name → dashboard tab/section
#   catalog.py      the closed set of tools and their parameters
#   dispatcher.py   ties them together: ToolCall → ResponseEnvelope
# =============================================================================
