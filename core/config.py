# =============================================================================
# core/config.py  -  Process-wide Settings
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the environment once at startup and freezes it into a Settings
#   object that is passed explicitly to whatever needs it.  Nothing else in
#   core/ reads os.environ.
#
# VARIABLES:
#   APPTWEAK_API_KEY    required; startup fails without it
#   REDIS_URL / KV_URL  optional; unset means "no caching"
#   APPTWEAK_BASE_URL   optional; defaults to the public API host
#   CACHE_TTL_SECONDS   optional; defaults to one hour
#   APPTWEAK_TIMEOUT    optional; unset means no socket timeout
#   LOG_LEVEL           optional; defaults to INFO
#   MCP_TRANSPORT       optional; "stdio" (default) or "http"
#
# main.py calls load_dotenv() before Settings.from_env(), so a local .env
# file works the same as real environment variables.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.errors import ConfigurationError

APPTWEAK_API_BASE_URL = "https://api.apptweak.com/"
DEFAULT_CACHE_TTL = 60 * 60  # 1 hour

_TRANSPORTS = ("stdio", "http")


@dataclass(frozen=True)
class Settings:
    """Validated startup configuration."""

    api_key: str
    cache_url: Optional[str] = None
    base_url: str = APPTWEAK_API_BASE_URL
    cache_ttl: int = DEFAULT_CACHE_TTL
    timeout: Optional[float] = None
    log_level: str = "INFO"
    transport: str = "stdio"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build Settings from environment variables.

        Raises:
            ConfigurationError: if the API key is missing or a numeric
                variable cannot be parsed.
        """
        env = os.environ if environ is None else environ

        api_key = env.get("APPTWEAK_API_KEY", "").strip()
        if not api_key:
            raise ConfigurationError("APPTWEAK_API_KEY environment variable is not set")

        # REDIS_URL wins; KV_URL is the name some hosted Redis providers inject.
        cache_url = env.get("REDIS_URL") or env.get("KV_URL") or None

        cache_ttl = _parse_number(env, "CACHE_TTL_SECONDS", int, DEFAULT_CACHE_TTL)
        if cache_ttl <= 0:
            raise ConfigurationError("CACHE_TTL_SECONDS must be a positive integer")

        timeout = _parse_number(env, "APPTWEAK_TIMEOUT", float, None)

        transport = env.get("MCP_TRANSPORT", "stdio").strip().lower()
        if transport not in _TRANSPORTS:
            raise ConfigurationError(
                f"MCP_TRANSPORT must be one of {', '.join(_TRANSPORTS)}, got {transport!r}"
            )

        return cls(
            api_key=api_key,
            cache_url=cache_url,
            base_url=env.get("APPTWEAK_BASE_URL") or APPTWEAK_API_BASE_URL,
            cache_ttl=cache_ttl,
            timeout=timeout,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            transport=transport,
        )

    @property
    def caching_enabled(self) -> bool:
        return bool(self.cache_url)


def _parse_number(env: Mapping[str, str], name: str, kind, default):
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
