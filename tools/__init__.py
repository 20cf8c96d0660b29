# =============================================================================
# tools/__init__.py
# =============================================================================
# The MCP layer.  tools/ depends on core/ and on FastMCP; core/ never
# imports anything from here.
#
# Each tool in mcp_server.py is a wrapper around ToolDispatcher.dispatch():
# it owns the MCP-facing signature and docstring (which become the tool's
# input schema and description) and the conversion of the dispatcher's
# envelope into an MCP result.  Validation, caching and the AppTweak call
# all live in core/.
# =============================================================================
