# =============================================================================
# core/upstream.py  -  AppTweak HTTP Client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns (resource path, parameters) into one authenticated GET against the
#   AppTweak API and returns the decoded JSON body.
#
# REQUEST FORMAT:
#   GET {base_url}{path}?country=US&apps[]=1&apps[]=2
#   X-Apptweak-Key: <api key>
#   Accept: application/json
#
#   - list values become repeated "key[]" entries, in order
#   - None values are left out entirely
#   - booleans are sent as "true" / "false"
#
# FAILURES:
#   Anything other than a 2xx JSON response raises UpstreamFailure
#   (AuthFailure for 401/403), carrying the status and response text.
#   There is exactly one attempt per call; retrying is the caller's job.
# =============================================================================

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping, Optional

from core.config import APPTWEAK_API_BASE_URL
from core.errors import AuthFailure, ConfigurationError, UpstreamFailure

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Apptweak-Key"

_AUTH_STATUSES = (401, 403)


def build_query(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten parameters into ordered query pairs."""
    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((f"{key}[]", _to_text(item)) for item in value if item is not None)
        else:
            pairs.append((key, _to_text(value)))
    return pairs


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class AppTweakClient:
    """Thin synchronous client for the AppTweak REST API.

    Args:
        api_key: The AppTweak credential.  An empty key is a startup error.
        base_url: API host; resource paths are resolved relative to it.
        timeout: Optional socket timeout in seconds.  None means no timeout.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = APPTWEAK_API_BASE_URL,
        timeout: Optional[float] = None,
    ):
        if not api_key:
            raise ConfigurationError("APPTWEAK_API_KEY environment variable is not set")
        self._api_key = api_key
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout

    def build_url(self, path: str, params: Mapping[str, Any]) -> str:
        url = urllib.parse.urljoin(self.base_url, path.lstrip("/"))
        query = urllib.parse.urlencode(build_query(params))
        return f"{url}?{query}" if query else url

    def fetch(self, path: str, params: Mapping[str, Any]) -> Any:
        """GET ``path`` with ``params`` and return the parsed JSON body.

        Raises:
            AuthFailure: the API answered 401 or 403.
            UpstreamFailure: any other non-2xx status, a network error, or a
                body that is not JSON.
        """
        url = self.build_url(path, params)
        request = urllib.request.Request(
            url,
            headers={API_KEY_HEADER: self._api_key, "Accept": "application/json"},
            method="GET",
        )
        logger.debug("GET %s", url)

        try:
            if self.timeout is None:
                response = urllib.request.urlopen(request)
            else:
                response = urllib.request.urlopen(request, timeout=self.timeout)
            with response:
                status = response.status
                body = response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            # HTTPError is also a response object: keep its body for diagnostics.
            body = _read_error_body(e)
            raise self._failure(e.code, body) from e
        except (urllib.error.URLError, OSError) as e:
            reason = getattr(e, "reason", e)
            raise UpstreamFailure(f"AppTweak API request failed: {reason}") from e

        if not 200 <= status < 300:
            raise self._failure(status, body)

        try:
            return json.loads(body)
        except ValueError as e:
            raise UpstreamFailure(
                f"AppTweak API returned invalid JSON ({status})", status=status, body=body
            ) from e

    @staticmethod
    def _failure(status: int, body: str) -> UpstreamFailure:
        if status in _AUTH_STATUSES:
            return AuthFailure.from_response(status, body)
        return UpstreamFailure.from_response(status, body)


def _read_error_body(error: urllib.error.HTTPError) -> str:
    try:
        return error.read().decode("utf-8", errors="replace")
    except (OSError, AttributeError):
        return ""
