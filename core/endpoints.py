# =============================================================================
# core/endpoints.py  -  Endpoint Resolver
# =============================================================================
#
# Maps a logical tool name to the AppTweak resource that serves it.
#
# Every path is authored once, for iOS.  The Android variant is derived by
# swapping the leading platform segment ("ios/..." → "android/...").  Only
# that first segment is touched; the rest of the path is left alone.
# =============================================================================

from types import MappingProxyType

from core.errors import UnknownToolError
from core.models import Platform, ResolvedEndpoint

REFERENCE_PLATFORM = Platform.IOS

ENDPOINTS = MappingProxyType({
    # App details
    "search_app": "ios/applications/search.json",
    "get_app_details": "ios/applications/lookup.json",

    # Reviews
    "get_reviews": "ios/applications/reviews.json",
    "get_top_displayed_reviews": "ios/applications/featured_reviews.json",
    "search_reviews": "ios/applications/reviews/search.json",
    "get_review_stats": "ios/applications/reviews/stats.json",
    "analyze_ratings": "ios/applications/ratings.json",

    # Keywords
    "discover_keywords": "ios/keywords/suggestions.json",
    "track_keyword_rankings": "ios/keywords/rankings.json",
    "get_keyword_stats": "ios/keywords/stats.json",
    "get_keyword_volume_history": "ios/keywords/volume/history.json",
    "analyze_top_keywords": "ios/keywords/top.json",
    "get_category_top_keywords": "ios/categories/keywords.json",
    "get_trending_keywords": "ios/categories/trending_searches.json",

    # Competitors
    "get_competitors": "ios/applications/competitors.json",
    "analyze_competitive_position": "ios/applications/power.json",

    # Downloads
    "get_downloads": "ios/applications/downloads.json",
})


def resolve(name: str, platform: Platform | str = REFERENCE_PLATFORM) -> ResolvedEndpoint:
    """Return the upstream path for ``name`` on ``platform``.

    Raises:
        UnknownToolError: if ``name`` has no endpoint.  There is no
            fallback endpoint.
        ValueError: if ``platform`` is not a known platform.
    """
    template = ENDPOINTS.get(name)
    if template is None:
        raise UnknownToolError(name)

    platform = Platform(platform)
    _, rest = template.split("/", 1)
    return ResolvedEndpoint(path=f"{platform.value}/{rest}", platform=platform)
