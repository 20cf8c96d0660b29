# =============================================================================
# core/errors.py  -  Error Taxonomy
# =============================================================================
#
# Every failure the dispatch layer knows about is a ToolError carrying an
# ErrorKind.  The dispatcher catches ToolError and turns it into an error
# payload, so none of these ever reach the MCP transport as a fault.
#
# Two exceptions sit outside that rule:
#   - CacheFailure is absorbed by the dispatcher (logged, never returned).
#   - ConfigurationError is raised at startup, before any tool is served.
# =============================================================================

from typing import Optional

from core.models import ErrorKind


class ToolError(Exception):
    """Base class for failures that become an error payload."""

    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownToolError(ToolError):
    """The tool name is not in the catalog."""

    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, name: str):
        super().__init__(f"Unknown AppTweak API action: {name}")
        self.name = name


class ValidationError(ToolError):
    """A parameter is missing, malformed or out of range."""

    kind = ErrorKind.VALIDATION_FAILURE


class UpstreamFailure(ToolError):
    """The AppTweak API could not be reached or answered with a non-2xx status."""

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body

    @classmethod
    def from_response(cls, status: int, body: str) -> "UpstreamFailure":
        return cls(f"AppTweak API error ({status}): {body}", status=status, body=body)


class AuthFailure(UpstreamFailure):
    """The API rejected our credential (401/403)."""

    kind = ErrorKind.AUTH_FAILURE


class CacheFailure(Exception):
    """The cache store could not be read or written.  Never user-visible."""


class ConfigurationError(Exception):
    """Startup configuration is missing or malformed."""
