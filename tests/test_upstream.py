import io
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from core.errors import AuthFailure, ConfigurationError, UpstreamFailure
from core.upstream import API_KEY_HEADER, AppTweakClient, build_query


def _response(body: bytes, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.read.return_value = body
    return response


def _http_error(code: int, body: bytes) -> urllib.error.HTTPError:
    return urllib.error.HTTPError("https://api.apptweak.com/x", code, "error", {}, io.BytesIO(body))


def test_build_query_repeats_list_keys_and_skips_none() -> None:
    pairs = build_query({"appIds": ["1", "2"], "country": "US", "startDate": None, "limit": 10})
    assert pairs == [("appIds[]", "1"), ("appIds[]", "2"), ("country", "US"), ("limit", "10")]


def test_build_query_booleans() -> None:
    assert build_query({"flag": True, "other": False}) == [("flag", "true"), ("other", "false")]


def test_build_url() -> None:
    client = AppTweakClient("key")
    url = client.build_url("ios/keywords/top.json", {"appIds": ["1", "2"], "country": "US"})
    assert url == "https://api.apptweak.com/ios/keywords/top.json?appIds%5B%5D=1&appIds%5B%5D=2&country=US"


def test_base_url_without_trailing_slash() -> None:
    client = AppTweakClient("key", base_url="http://localhost:9000/api")
    assert client.build_url("ios/a.json", {}) == "http://localhost:9000/api/ios/a.json"


def test_missing_key_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        AppTweakClient("")


def test_fetch_sends_credential_and_parses_json() -> None:
    client = AppTweakClient("secret")
    with patch("urllib.request.urlopen", return_value=_response(b'{"name": "Facebook"}')) as urlopen:
        data = client.fetch("ios/applications/lookup.json", {"appId": "284882215"})

    assert data == {"name": "Facebook"}
    request = urlopen.call_args.args[0]
    assert request.get_method() == "GET"
    assert request.get_header(API_KEY_HEADER.capitalize()) == "secret"
    assert request.get_header("Accept") == "application/json"
    assert request.full_url.endswith("ios/applications/lookup.json?appId=284882215")
    # no timeout configured
    assert "timeout" not in urlopen.call_args.kwargs


def test_fetch_passes_configured_timeout() -> None:
    client = AppTweakClient("secret", timeout=5.0)
    with patch("urllib.request.urlopen", return_value=_response(b"[]")) as urlopen:
        assert client.fetch("ios/a.json", {}) == []
    assert urlopen.call_args.kwargs["timeout"] == 5.0


def test_http_500_raises_upstream_failure_with_body() -> None:
    client = AppTweakClient("secret")
    with patch("urllib.request.urlopen", side_effect=_http_error(500, b"boom")):
        with pytest.raises(UpstreamFailure) as excinfo:
            client.fetch("ios/a.json", {})

    assert excinfo.value.status == 500
    assert excinfo.value.body == "boom"
    assert "500" in excinfo.value.message
    assert not isinstance(excinfo.value, AuthFailure)


@pytest.mark.parametrize("code", [401, 403])
def test_auth_statuses_raise_auth_failure(code: int) -> None:
    client = AppTweakClient("secret")
    with patch("urllib.request.urlopen", side_effect=_http_error(code, b"denied")):
        with pytest.raises(AuthFailure):
            client.fetch("ios/a.json", {})


def test_non_2xx_status_without_http_error() -> None:
    client = AppTweakClient("secret")
    with patch("urllib.request.urlopen", return_value=_response(b"moved", status=304)):
        with pytest.raises(UpstreamFailure, match="304"):
            client.fetch("ios/a.json", {})


def test_network_error() -> None:
    client = AppTweakClient("secret")
    with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("Name or service not known")):
        with pytest.raises(UpstreamFailure, match="Name or service not known"):
            client.fetch("ios/a.json", {})


def test_invalid_json_body() -> None:
    client = AppTweakClient("secret")
    with patch("urllib.request.urlopen", return_value=_response(b"<html>")):
        with pytest.raises(UpstreamFailure, match="invalid JSON"):
            client.fetch("ios/a.json", {})
