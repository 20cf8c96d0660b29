# =============================================================================
# core/catalog.py  -  Tool Catalog (the closed set of callable tools)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Declares every tool once, as a plain ToolSpec record: its parameters,
#   their defaults, and (for the two local tools) the handler that computes
#   the result in-process.  The table is built at import time and exposed
#   read-only; the dispatcher never registers anything at runtime.
#
# PARAMETER HANDLING:
#   validate_parameters() turns the raw mapping a caller sent into the
#   canonical parameter set:
#     - declared defaults are filled in (so "country omitted" and
#       "country='US'" are the same call)
#     - None values are dropped (so "endDate omitted" and "endDate=None"
#       are the same call)
#     - integers are normalized (50.0 → 50)
#     - undeclared parameters are dropped
#   Anything missing or malformed raises ValidationError before any I/O.
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from core.arithmetic import evaluate
from core.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM = "ios"
DEFAULT_COUNTRY = "US"
DEFAULT_LANGUAGE = "en"

PLATFORMS = ("ios", "android")
REVIEW_SORTS = ("most_useful", "most_recent", "most_positive")
KEYWORD_SORTS = ("score", "volume", "rank")

# Parameter kinds
STRING = "string"
INTEGER = "integer"
DATE = "date"
STRING_LIST = "string_list"
CHOICE = "choice"

_DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class ParamSpec:
    """One declared tool parameter."""

    name: str
    kind: str = STRING
    required: bool = False
    default: Any = None
    choices: tuple[str, ...] = ()
    minimum: Optional[int] = None               # integers only
    min_items: int = 0                          # lists only


@dataclass(frozen=True)
class ToolSpec:
    """A catalog entry.  Upstream tools have no handler."""

    name: str
    description: str
    params: tuple[ParamSpec, ...]
    handler: Optional[Callable[[dict[str, Any]], Any]] = None

    @property
    def is_local(self) -> bool:
        return self.handler is not None

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.params)


# -----------------------------------------------------------------------------
# Shared parameter declarations
# -----------------------------------------------------------------------------
def _platform() -> ParamSpec:
    return ParamSpec("platform", CHOICE, default=DEFAULT_PLATFORM, choices=PLATFORMS)


def _country(default: Optional[str] = DEFAULT_COUNTRY) -> ParamSpec:
    return ParamSpec("country", STRING, required=default is None, default=default)


def _language() -> ParamSpec:
    return ParamSpec("language", STRING, default=DEFAULT_LANGUAGE)


def _required(name: str, kind: str = STRING, **kwargs) -> ParamSpec:
    return ParamSpec(name, kind, required=True, **kwargs)


def _optional(name: str, kind: str = STRING, **kwargs) -> ParamSpec:
    return ParamSpec(name, kind, **kwargs)


# -----------------------------------------------------------------------------
# Local tool handlers
# -----------------------------------------------------------------------------
def _echo(params: dict[str, Any]) -> str:
    return f"Tool echo: {params['message']}"


def _calculate(params: dict[str, Any]) -> dict[str, Any]:
    expression = params["expression"]
    return {"expression": expression, "result": evaluate(expression)}


# -----------------------------------------------------------------------------
# The catalog
# -----------------------------------------------------------------------------
_SPECS = (
    # --- App details ---
    ToolSpec(
        "search_app",
        "Search for an app by name and platform (ios/android)",
        (_required("query"), _platform(), _country(), _language()),
    ),
    ToolSpec(
        "get_app_details",
        "Get detailed information about an app by ID",
        (_required("appId"), _platform(), _country(), _language()),
    ),

    # --- Reviews ---
    ToolSpec(
        "get_reviews",
        "Get top 100 reviews for an app",
        (_required("appId"), _platform(), _country()),
    ),
    ToolSpec(
        "get_top_displayed_reviews",
        "Get top displayed reviews sorted by criteria",
        (
            _required("appId"), _platform(), _country(),
            _optional("size", INTEGER, default=50, minimum=1),
            _optional("sort", CHOICE, default="most_useful", choices=REVIEW_SORTS),
        ),
    ),
    ToolSpec(
        "search_reviews",
        "Search an app's reviews for a term",
        (_required("appId"), _required("term"), _platform(), _country()),
    ),
    ToolSpec(
        "get_review_stats",
        "Get aggregate review statistics for an app",
        (_required("appId"), _platform(), _country()),
    ),
    ToolSpec(
        "analyze_ratings",
        "Get detailed ratings and sentiment analysis",
        (
            _required("appId"), _platform(), _country(), _language(),
            _optional("startDate", DATE), _optional("endDate", DATE),
        ),
    ),

    # --- Keywords ---
    ToolSpec(
        "discover_keywords",
        "Find relevant keywords based on a seed keyword or app",
        (
            _required("query"), _platform(), _country(), _language(),
            _optional("limit", INTEGER, default=20, minimum=1),
        ),
    ),
    ToolSpec(
        "track_keyword_rankings",
        "Track an app's ranking for a list of keywords",
        (
            _required("appId"), _required("keywords", STRING_LIST, min_items=1),
            _platform(), _country(), _language(),
        ),
    ),
    ToolSpec(
        "get_keyword_stats",
        "Get volume and difficulty statistics for keywords",
        (
            _required("keywords", STRING_LIST, min_items=1),
            _platform(), _country(), _language(),
        ),
    ),
    ToolSpec(
        "get_keyword_volume_history",
        "Get the search volume history of a keyword",
        (
            _required("keyword"), _platform(), _country(),
            _optional("startDate", DATE), _optional("endDate", DATE),
        ),
    ),
    ToolSpec(
        "analyze_top_keywords",
        "Analyze top keywords for apps including brand analysis and estimated installs",
        (
            _required("appIds", STRING_LIST, min_items=1), _platform(), _country(),
            _optional("limit", INTEGER, default=10, minimum=1),
            _optional("sortBy", CHOICE, default="score", choices=KEYWORD_SORTS),
        ),
    ),
    ToolSpec(
        "get_category_top_keywords",
        "Get the top keywords of a store category",
        (_required("category"), _platform(), _country()),
    ),
    ToolSpec(
        "get_trending_keywords",
        "Get currently trending store searches",
        (_platform(), _country()),
    ),

    # --- Competitors ---
    ToolSpec(
        "get_competitors",
        "Get list of competing apps based on keyword overlap",
        (_required("appId"), _platform(), _country(), _language()),
    ),
    ToolSpec(
        "analyze_competitive_position",
        "Analyze app's competitive position including power scores and impressions",
        (
            _required("appId"), _platform(), _country(),
            _optional("competitors", STRING_LIST),
        ),
    ),

    # --- Downloads ---
    ToolSpec(
        "get_downloads",
        "Get app download estimates for a specific time period",
        (
            _required("appId"), _platform(), _country(default=None),
            _required("startDate", DATE), _required("endDate", DATE),
        ),
    ),

    # --- Local tools ---
    ToolSpec("echo", "Echo a message", (_required("message"),), handler=_echo),
    ToolSpec(
        "calculate",
        "Evaluate an arithmetic expression (numbers, + - * /, parentheses)",
        (_required("expression"),),
        handler=_calculate,
    ),
)

CATALOG: Mapping[str, ToolSpec] = MappingProxyType({spec.name: spec for spec in _SPECS})


def get_spec(name: str) -> Optional[ToolSpec]:
    return CATALOG.get(name)


# =============================================================================
# Validation
# =============================================================================
def validate_parameters(spec: ToolSpec, raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return the canonical parameter set for a call to ``spec``.

    Raises:
        ValidationError: on a missing required parameter or a malformed value.
    """
    undeclared = set(raw) - set(spec.param_names)
    if undeclared:
        logger.debug("%s: ignoring undeclared parameters %s", spec.name, sorted(undeclared))

    params: dict[str, Any] = {}
    for param in spec.params:
        value = raw.get(param.name)
        if value is None:
            value = param.default
        if value is None:
            if param.required:
                raise ValidationError(f"Missing required parameter '{param.name}'")
            continue
        params[param.name] = _coerce(param, value)

    start, end = params.get("startDate"), params.get("endDate")
    if start and end and start > end:
        raise ValidationError(f"startDate {start} is after endDate {end}")

    return params


def _coerce(param: ParamSpec, value: Any) -> Any:
    if isinstance(value, Enum):
        value = value.value

    if param.kind == STRING:
        if not isinstance(value, str):
            raise ValidationError(f"'{param.name}' must be a string")
        if param.required and not value.strip():
            raise ValidationError(f"'{param.name}' must not be empty")
        return value

    if param.kind == CHOICE:
        if value not in param.choices:
            raise ValidationError(
                f"'{param.name}' must be one of {', '.join(param.choices)}, got {value!r}"
            )
        return value

    if param.kind == INTEGER:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"'{param.name}' must be an integer")
        if param.minimum is not None and value < param.minimum:
            raise ValidationError(f"'{param.name}' must be at least {param.minimum}")
        return value

    if param.kind == DATE:
        if not isinstance(value, str):
            raise ValidationError(f"'{param.name}' must be a YYYY-MM-DD date string")
        try:
            datetime.strptime(value, _DATE_FORMAT)
        except ValueError:
            raise ValidationError(
                f"'{param.name}' must be a YYYY-MM-DD date, got {value!r}"
            ) from None
        return value

    if param.kind == STRING_LIST:
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise ValidationError(f"'{param.name}' must be a list of strings")
        if len(value) < param.min_items:
            raise ValidationError(f"'{param.name}' must contain at least {param.min_items} item(s)")
        if not all(isinstance(item, str) and item.strip() for item in value):
            raise ValidationError(f"'{param.name}' must contain only non-empty strings")
        return list(value)

    raise ValueError(f"unknown parameter kind {param.kind!r}")
