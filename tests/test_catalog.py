import pytest

from core.catalog import CATALOG, get_spec, validate_parameters
from core.errors import ValidationError
from core.models import Platform


def test_defaults_are_applied() -> None:
    params = validate_parameters(get_spec("get_top_displayed_reviews"), {"appId": "1"})
    assert params == {
        "appId": "1", "platform": "ios", "country": "US", "size": 50, "sort": "most_useful",
    }


def test_optional_without_default_is_omitted() -> None:
    params = validate_parameters(get_spec("analyze_ratings"), {"appId": "1", "endDate": None})
    assert "startDate" not in params and "endDate" not in params


def test_undeclared_parameters_are_dropped() -> None:
    params = validate_parameters(get_spec("get_reviews"), {"appId": "1", "debug": True})
    assert "debug" not in params


def test_platform_enum_is_accepted() -> None:
    params = validate_parameters(get_spec("get_reviews"), {"appId": "1", "platform": Platform.ANDROID})
    assert params["platform"] == "android"
    assert type(params["platform"]) is str


def test_integral_float_is_normalized() -> None:
    params = validate_parameters(get_spec("discover_keywords"), {"query": "chat", "limit": 5.0})
    assert params["limit"] == 5
    assert isinstance(params["limit"], int)


@pytest.mark.parametrize(
    "name, raw, fragment",
    [
        ("get_reviews", {}, "appId"),
        ("get_reviews", {"appId": "  "}, "empty"),
        ("get_reviews", {"appId": 123}, "string"),
        ("get_reviews", {"appId": "1", "platform": "windows"}, "platform"),
        ("get_top_displayed_reviews", {"appId": "1", "sort": "random"}, "sort"),
        ("discover_keywords", {"query": "q", "limit": 0}, "at least 1"),
        ("discover_keywords", {"query": "q", "limit": True}, "integer"),
        ("analyze_top_keywords", {"appIds": []}, "at least 1"),
        ("analyze_top_keywords", {"appIds": "1,2"}, "list"),
        ("analyze_top_keywords", {"appIds": ["1", ""]}, "non-empty"),
        ("get_downloads", {"appId": "1", "startDate": "2024-01-01", "endDate": "2024-02-01"}, "country"),
        ("get_downloads", {"appId": "1", "country": "US", "startDate": "01/01/2024", "endDate": "2024-02-01"}, "YYYY-MM-DD"),
        ("get_downloads", {"appId": "1", "country": "US", "startDate": "2024-03-01", "endDate": "2024-02-01"}, "after"),
    ],
)
def test_invalid_parameters(name: str, raw: dict, fragment: str) -> None:
    with pytest.raises(ValidationError, match=fragment):
        validate_parameters(get_spec(name), raw)


def test_optional_competitors_list() -> None:
    spec = get_spec("analyze_competitive_position")
    assert "competitors" not in validate_parameters(spec, {"appId": "1"})
    assert validate_parameters(spec, {"appId": "1", "competitors": ("2", "3")})["competitors"] == ["2", "3"]


def test_catalog_is_read_only() -> None:
    with pytest.raises(TypeError):
        CATALOG["new_tool"] = CATALOG["echo"]  # type: ignore[index]


def test_only_echo_and_calculate_are_local() -> None:
    assert {name for name, spec in CATALOG.items() if spec.is_local} == {"echo", "calculate"}
