# =============================================================================
# core/routing.py  -  Routing Table
# =============================================================================
#
# Tells the calling dashboard which tab and section a tool's result belongs
# to.  The table is static and keyed by tool name; nothing here looks at the
# payload.  Tools without an entry simply get no routing metadata.
# =============================================================================

from types import MappingProxyType
from typing import Optional

from core.models import RoutingInfo

ROUTING_TABLE = MappingProxyType({
    "search_app": RoutingInfo("overview", "app-info"),
    "get_app_details": RoutingInfo("overview", "app-info"),
    "get_downloads": RoutingInfo("overview", "download-statistics"),

    "get_reviews": RoutingInfo("reviews", "recent-reviews"),
    "get_top_displayed_reviews": RoutingInfo("reviews", "featured-reviews"),
    "analyze_ratings": RoutingInfo("reviews", "rating-analysis"),

    "discover_keywords": RoutingInfo("keywords", "keyword-discovery"),
    "analyze_top_keywords": RoutingInfo("keywords", "top-keywords"),

    "get_competitors": RoutingInfo("competitors", "competitor-discovery"),
    "analyze_competitive_position": RoutingInfo("competitors", "competitive-analysis"),
})


def routing_for(name: str) -> Optional[RoutingInfo]:
    """Look up the dashboard destination for ``name`` (None when unrouted)."""
    return ROUTING_TABLE.get(name)
