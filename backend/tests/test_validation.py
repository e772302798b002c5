import math

import pytest

from discovery.errors import InvalidParameter
from discovery.services.taxonomy import HoursFilter
from discovery.services.validation import split_csv, validate_box_request, validate_filters, validate_near_request


def _fields(exc_info) -> set[str]:
    return {error.field for error in exc_info.value.errors}


def test_split_csv_accepts_strings_and_lists():
    assert split_csv("cafe, bar,,") == ["cafe", "bar"]
    assert split_csv(["cafe", "bar,pub"]) == ["cafe", "bar", "pub"]
    assert split_csv(None) == []


def test_near_request_defaults():
    request = validate_near_request(latitude=53.9, longitude=27.56)
    assert request.radius_m == 10_000
    assert request.page_size == 20
    assert request.cursor is None
    assert request.filters.categories == ()


def test_near_request_normalizes_filter_selections():
    request = validate_near_request(
        latitude=53.9,
        longitude=27.56,
        categories="Bar,cafe,bar",
        features=["wifi", "parking"],
        hours="open_overnight",
        min_rating=4,
    )
    assert request.filters.categories == ("bar", "cafe")
    assert request.filters.features == ("parking", "wifi")
    assert request.filters.hours is HoursFilter.OPEN_OVERNIGHT
    assert request.filters.min_rating == 4.0


@pytest.mark.parametrize(
    ("latitude", "longitude", "field"),
    [
        (90.0001, 27.5, "latitude"),
        (-91, 27.5, "latitude"),
        (53.9, 180.5, "longitude"),
        (math.nan, 27.5, "latitude"),
        (53.9, math.inf, "longitude"),
        (None, 27.5, "latitude"),
    ],
)
def test_near_request_rejects_bad_coordinates(latitude, longitude, field):
    with pytest.raises(InvalidParameter) as exc_info:
        validate_near_request(latitude=latitude, longitude=longitude)
    assert exc_info.value.field == field


def test_near_request_accepts_boundary_coordinates_and_radius():
    request = validate_near_request(latitude=-90, longitude=180, radius_m=50_000, page_size=100)
    assert request.origin.latitude == -90
    request = validate_near_request(latitude=90, longitude=-180, radius_m=100, page_size=1)
    assert request.radius_m == 100


def test_near_request_collects_every_problem():
    with pytest.raises(InvalidParameter) as exc_info:
        validate_near_request(
            latitude=100,
            longitude=27.5,
            radius_m=99,
            page_size=0,
            categories="cafe,spaceport",
            hours="closes_by_22,open_overnight",
            min_rating=6,
        )
    assert _fields(exc_info) == {"latitude", "radius", "page_size", "categories", "hours", "min_rating"}


def test_near_request_rejects_out_of_range_radius_and_page_size():
    with pytest.raises(InvalidParameter) as exc_info:
        validate_near_request(latitude=53.9, longitude=27.5, radius_m=50_001, page_size=101)
    assert _fields(exc_info) == {"radius", "page_size"}


def test_near_request_leaves_cursor_checks_to_the_codec():
    long_token = "x" * 600
    assert validate_near_request(latitude=53.9, longitude=27.5, cursor=long_token).cursor == long_token
    assert validate_near_request(latitude=53.9, longitude=27.5, cursor="   ").cursor == "   "
    assert validate_near_request(latitude=53.9, longitude=27.5, cursor=" v1.a.b ").cursor == "v1.a.b"
    assert validate_near_request(latitude=53.9, longitude=27.5, cursor="").cursor is None


def test_unknown_enum_value_is_reported_with_allowed_values():
    with pytest.raises(InvalidParameter) as exc_info:
        validate_filters(price_range="$$$$")
    error = exc_info.value.errors[0]
    assert error.field == "price_range"
    assert "$$$$" in error.message
    assert "$$" in error.message


def test_empty_filter_lists_mean_no_filter():
    assert validate_filters(categories=[], cuisines="", features=None) == validate_filters()


def test_box_request_valid():
    request = validate_box_request(south=53.8, west=27.4, north=54.0, east=27.7, limit=50)
    assert request.box.south == 53.8
    assert request.limit == 50


def test_box_request_rejects_inverted_and_antimeridian_boxes():
    with pytest.raises(InvalidParameter) as exc_info:
        validate_box_request(south=54.0, west=27.4, north=53.8, east=27.7)
    assert exc_info.value.field == "south"

    with pytest.raises(InvalidParameter) as exc_info:
        validate_box_request(south=53.8, west=179.0, north=54.0, east=-179.0)
    assert exc_info.value.field == "west"


def test_box_request_rejects_oversized_span_and_limit():
    with pytest.raises(InvalidParameter) as exc_info:
        validate_box_request(south=0.0, west=0.0, north=25.0, east=1.0, limit=501)
    assert _fields(exc_info) == {"north", "limit"}


def test_page_size_must_be_an_integer():
    with pytest.raises(InvalidParameter) as exc_info:
        validate_near_request(latitude=53.9, longitude=27.5, page_size=True)
    assert exc_info.value.field == "page_size"
