# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the dispatch layer)
# =============================================================================
#
# These dataclasses define the shape of everything that flows between the
# MCP tool layer and the AppTweak API:
#
#   ToolCall ──▶ (validated params) ──▶ ResolvedEndpoint ──▶ upstream JSON
#                                                              │
#   ResponseEnvelope ◀── RoutingInfo ◀─────────────────────────┘
#
# All of them are frozen: a call, an endpoint or an envelope is built once
# per request and never mutated afterwards.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Platform(str, Enum):
    """The two store ecosystems AppTweak serves data for."""

    IOS = "ios"
    ANDROID = "android"


class ErrorKind(str, Enum):
    """Error categories surfaced in an error payload's ``kind`` field."""

    UNKNOWN_TOOL = "UnknownTool"
    VALIDATION_FAILURE = "ValidationFailure"
    UPSTREAM_FAILURE = "UpstreamFailure"
    AUTH_FAILURE = "AuthFailure"


# -----------------------------------------------------------------------------
# ToolCall - what the transport hands the dispatcher
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolCall:
    """One tool invocation: a catalog name plus its raw parameters."""

    name: str                                   # e.g. "get_reviews"
    parameters: dict[str, Any] = field(default_factory=dict)
    # Values are scalars, strings or lists of strings.  Defaults have NOT
    # been applied yet; the dispatcher does that before deriving a key.


# -----------------------------------------------------------------------------
# ResolvedEndpoint - the upstream resource a call maps to
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ResolvedEndpoint:
    """An AppTweak resource path with its platform segment filled in."""

    path: str                                   # "android/applications/reviews.json"
    platform: Platform


# -----------------------------------------------------------------------------
# RoutingInfo - which dashboard section a result belongs to
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class RoutingInfo:
    """Static UI destination attached to a tool's successful response."""

    tab_id: str                                 # "reviews"
    section_id: str                             # "recent-reviews"
    highlight: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Render in the key names the dashboard reads."""
        return {
            "tabId": self.tab_id,
            "sectionId": self.section_id,
            "highlightEffect": self.highlight,
        }


# -----------------------------------------------------------------------------
# ResponseEnvelope - the uniform result of every dispatch
# -----------------------------------------------------------------------------
# Success and failure share one shape.  A failure is an ordinary payload of
# the form {"error": True, "kind": ..., "message": ...}, so the transport
# never needs a special case per failure kind.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ResponseEnvelope:
    """Payload plus optional routing metadata for one tool call."""

    payload: Any
    routing: Optional[RoutingInfo] = None
    cached: bool = False                        # True when served from cache

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ResponseEnvelope":
        """Build an error envelope.  Errors never carry routing info."""
        return cls(payload={"error": True, "kind": kind.value, "message": message})

    @property
    def is_error(self) -> bool:
        return isinstance(self.payload, dict) and self.payload.get("error") is True

    def to_metadata(self) -> Optional[dict[str, Any]]:
        """The transport-level metadata object, or None without routing."""
        if self.routing is None:
            return None
        return {"routingInfo": self.routing.to_dict()}
