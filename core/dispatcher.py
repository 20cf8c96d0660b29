# =============================================================================
# core/dispatcher.py  -  Tool Dispatcher
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns one ToolCall into one ResponseEnvelope:
#
#     1. look the tool up in the catalog         → UnknownTool if absent
#     2. validate + default-fill the parameters  → ValidationFailure
#     3. local tools: run the handler, done (never cached)
#     4. derive the cache key, try the cache     → hit: return cached JSON
#     5. resolve the endpoint, fetch upstream    → UpstreamFailure
#     6. write the JSON back to the cache
#     7. attach routing info
#
#   Steps 1-2 never touch the network or the cache.  Step 6 only runs after
#   step 5 returned a complete JSON body, so a failed fetch is never cached.
#
# CACHE FAILURES:
#   Reads and writes that raise CacheFailure are logged and otherwise
#   ignored: a broken cache means slower answers, not wrong ones.  The two
#   cases log different event names (cache_read_failed / cache_write_failed).
#
# DEPENDENCIES ARE INJECTED:
#   The cache store and the upstream client are constructor arguments, so
#   tests can pass fakes and main.py decides which real ones to build.
# =============================================================================

import json
import logging
from typing import Any, Mapping, Optional, Protocol

from core.cache_store import CacheStore, NullCacheStore, build_cache_store
from core.catalog import ToolSpec, get_spec, validate_parameters
from core.config import DEFAULT_CACHE_TTL, Settings
from core.endpoints import resolve
from core.errors import CacheFailure, ToolError, UnknownToolError, UpstreamFailure
from core.models import ErrorKind, ResponseEnvelope, ToolCall
from core.routing import routing_for
from core.upstream import AppTweakClient

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "apptweak"

_MISS = object()


class Upstream(Protocol):
    def fetch(self, path: str, params: Mapping[str, Any]) -> Any: ...


def canonicalize(params: Mapping[str, Any]) -> str:
    """Fixed textual form of a parameter set.

    Keys are sorted; list values keep their original order; scalars use their
    JSON representation.  None values are dropped, like the upstream query.
    """
    present = {key: value for key, value in params.items() if value is not None}
    return json.dumps(present, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def make_cache_key(name: str, params: Mapping[str, Any]) -> str:
    return f"{CACHE_KEY_PREFIX}:{name}:{canonicalize(params)}"


class ToolDispatcher:
    """Validates, caches and forwards tool calls to the AppTweak API."""

    def __init__(
        self,
        upstream: Upstream,
        cache: Optional[CacheStore] = None,
        cache_ttl: int = DEFAULT_CACHE_TTL,
    ):
        self.upstream = upstream
        self.cache = cache if cache is not None else NullCacheStore()
        self.cache_ttl = cache_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "ToolDispatcher":
        """Wire the real AppTweak client and cache store from startup settings."""
        client = AppTweakClient(settings.api_key, settings.base_url, settings.timeout)
        return cls(client, build_cache_store(settings.cache_url), settings.cache_ttl)

    def dispatch(self, call: ToolCall) -> ResponseEnvelope:
        """Handle one call.  Never raises for tool-level failures."""
        spec = get_spec(call.name)
        if spec is None:
            logger.warning("Unknown tool requested: %s", call.name)
            return ResponseEnvelope.failure(ErrorKind.UNKNOWN_TOOL, UnknownToolError(call.name).message)

        try:
            params = validate_parameters(spec, call.parameters)
            if spec.is_local:
                return ResponseEnvelope(payload=spec.handler(params), routing=routing_for(spec.name))
            return self._dispatch_upstream(spec, params)
        except ToolError as e:
            log = logger.info if e.kind is ErrorKind.VALIDATION_FAILURE else logger.error
            log("%s failed (%s): %s", call.name, e.kind.value, e.message)
            return ResponseEnvelope.failure(e.kind, e.message)

    def dispatch_tool(self, name: str, **parameters: Any) -> ResponseEnvelope:
        return self.dispatch(ToolCall(name=name, parameters=parameters))

    # -------------------------------------------------------------------------
    # Upstream path
    # -------------------------------------------------------------------------
    def _dispatch_upstream(self, spec: ToolSpec, params: dict[str, Any]) -> ResponseEnvelope:
        key = make_cache_key(spec.name, params)
        routing = routing_for(spec.name)

        cached = self._cache_get(key)
        if cached is not _MISS:
            logger.debug("cache hit %s", key)
            return ResponseEnvelope(payload=cached, routing=routing, cached=True)
        logger.debug("cache miss %s", key)

        endpoint = resolve(spec.name, params["platform"])
        try:
            data = self.upstream.fetch(endpoint.path, params)
        except ToolError:
            raise
        except Exception as e:
            raise UpstreamFailure(f"AppTweak API request failed: {e}") from e

        self._cache_set(key, data)
        return ResponseEnvelope(payload=data, routing=routing)

    def _cache_get(self, key: str) -> Any:
        try:
            raw = self.cache.get(key)
        except CacheFailure as e:
            logger.warning("cache_read_failed key=%s error=%s", key, e)
            return _MISS
        if raw is None:
            return _MISS
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("cache_read_failed key=%s error=undecodable entry", key)
            return _MISS

    def _cache_set(self, key: str, data: Any) -> None:
        try:
            self.cache.set(key, json.dumps(data, separators=(",", ":")), self.cache_ttl)
        except CacheFailure as e:
            logger.warning("cache_write_failed key=%s error=%s", key, e)
