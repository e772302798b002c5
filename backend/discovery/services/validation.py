"""Coordinate and filter validation.

This is the only place raw caller input is trusted to cross into query
construction. Every problem found is collected and raised together as one
``InvalidParameter``; nothing is partially normalized.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum

from ..config import Settings, get_settings
from ..errors import FieldError, InvalidParameter
from .contracts import (
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    BoundingBox,
    BoxRequest,
    FilterSet,
    GeoPoint,
    NearRequest,
)
from .taxonomy import Category, Cuisine, Feature, HoursFilter, PriceRange, enum_values

FilterInput = str | Iterable[str] | None


def split_csv(raw: FilterInput) -> list[str]:
    if raw is None:
        return []
    items = [raw] if isinstance(raw, str) else list(raw)
    values: list[str] = []
    for item in items:
        values.extend(part.strip() for part in str(item).split(","))
    return [value for value in values if value]


def _enum_selection(
    field: str,
    raw: FilterInput,
    enum_cls: type[Enum],
    errors: list[FieldError],
) -> tuple[str, ...]:
    allowed = enum_values(enum_cls)
    normalized = sorted({value.lower() for value in split_csv(raw)})
    invalid = [value for value in normalized if value not in allowed]
    if invalid:
        errors.append(
            FieldError(
                field=field,
                message=f"Unsupported value(s): {', '.join(invalid)}. Allowed: {', '.join(sorted(allowed))}",
            )
        )
        return ()
    return tuple(normalized)


def _finite(field: str, value: float | None, errors: list[FieldError]) -> float | None:
    if value is None:
        errors.append(FieldError(field=field, message="Value is required"))
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors.append(FieldError(field=field, message="Must be a number"))
        return None
    if not math.isfinite(number):
        errors.append(FieldError(field=field, message="Must be a finite number"))
        return None
    return number


def _in_range(
    field: str,
    value: float | None,
    bounds: tuple[float, float],
    errors: list[FieldError],
) -> float | None:
    number = _finite(field, value, errors)
    if number is None:
        return None
    low, high = bounds
    if not low <= number <= high:
        errors.append(FieldError(field=field, message=f"Must be between {low:g} and {high:g}"))
        return None
    return number


def _int_in_range(
    field: str,
    value: int | None,
    bounds: tuple[int, int],
    errors: list[FieldError],
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append(FieldError(field=field, message="Must be an integer"))
        return None
    low, high = bounds
    if not low <= value <= high:
        errors.append(FieldError(field=field, message=f"Must be between {low} and {high}"))
        return None
    return value


def _collect_filters(
    errors: list[FieldError],
    settings: Settings,
    *,
    categories: FilterInput = None,
    cuisines: FilterInput = None,
    price_range: FilterInput = None,
    features: FilterInput = None,
    hours: str | None = None,
    min_rating: float | None = None,
) -> FilterSet:
    selected_categories = _enum_selection("categories", categories, Category, errors)
    selected_cuisines = _enum_selection("cuisines", cuisines, Cuisine, errors)
    selected_prices = _enum_selection("price_range", price_range, PriceRange, errors)
    selected_features = _enum_selection("features", features, Feature, errors)

    hours_option: HoursFilter | None = None
    hours_values = split_csv(hours)
    if len(hours_values) > 1:
        errors.append(FieldError(field="hours", message="Only one hours option may be selected"))
    elif hours_values:
        try:
            hours_option = HoursFilter(hours_values[0].lower())
        except ValueError:
            allowed = ", ".join(sorted(enum_values(HoursFilter)))
            errors.append(FieldError(field="hours", message=f"Unsupported value. Allowed: {allowed}"))

    rating_floor: float | None = None
    if min_rating is not None:
        rating_floor = _in_range(
            "min_rating",
            min_rating,
            (settings.min_rating_floor, settings.min_rating_ceiling),
            errors,
        )

    return FilterSet(
        categories=selected_categories,
        cuisines=selected_cuisines,
        price_ranges=selected_prices,
        features=selected_features,
        hours=hours_option,
        min_rating=rating_floor,
    )


def validate_filters(
    *,
    categories: FilterInput = None,
    cuisines: FilterInput = None,
    price_range: FilterInput = None,
    features: FilterInput = None,
    hours: str | None = None,
    min_rating: float | None = None,
    settings: Settings | None = None,
) -> FilterSet:
    errors: list[FieldError] = []
    filters = _collect_filters(
        errors,
        settings or get_settings(),
        categories=categories,
        cuisines=cuisines,
        price_range=price_range,
        features=features,
        hours=hours,
        min_rating=min_rating,
    )
    if errors:
        raise InvalidParameter(errors)
    return filters


def validate_near_request(
    *,
    latitude: float | None,
    longitude: float | None,
    radius_m: float | None = None,
    page_size: int | None = None,
    cursor: str | None = None,
    categories: FilterInput = None,
    cuisines: FilterInput = None,
    price_range: FilterInput = None,
    features: FilterInput = None,
    hours: str | None = None,
    min_rating: float | None = None,
    settings: Settings | None = None,
) -> NearRequest:
    config = settings or get_settings()
    errors: list[FieldError] = []

    lat = _in_range("latitude", latitude, LATITUDE_RANGE, errors)
    lng = _in_range("longitude", longitude, LONGITUDE_RANGE, errors)
    radius = _in_range(
        "radius",
        config.default_radius_m if radius_m is None else radius_m,
        (config.min_radius_m, config.max_radius_m),
        errors,
    )
    size = _int_in_range(
        "page_size",
        config.default_page_size if page_size is None else page_size,
        (1, config.max_page_size),
        errors,
    )

    # Only an absent or empty cursor means "first page"; anything else goes to the codec.
    token = (cursor.strip() or cursor) if cursor else None

    filters = _collect_filters(
        errors,
        config,
        categories=categories,
        cuisines=cuisines,
        price_range=price_range,
        features=features,
        hours=hours,
        min_rating=min_rating,
    )
    if errors:
        raise InvalidParameter(errors)

    return NearRequest(
        origin=GeoPoint(latitude=lat, longitude=lng),
        radius_m=radius,
        filters=filters,
        page_size=size,
        cursor=token,
    )


def validate_box_request(
    *,
    south: float | None,
    west: float | None,
    north: float | None,
    east: float | None,
    limit: int | None = None,
    categories: FilterInput = None,
    cuisines: FilterInput = None,
    price_range: FilterInput = None,
    features: FilterInput = None,
    hours: str | None = None,
    min_rating: float | None = None,
    settings: Settings | None = None,
) -> BoxRequest:
    config = settings or get_settings()
    errors: list[FieldError] = []

    south_v = _in_range("south", south, LATITUDE_RANGE, errors)
    north_v = _in_range("north", north, LATITUDE_RANGE, errors)
    west_v = _in_range("west", west, LONGITUDE_RANGE, errors)
    east_v = _in_range("east", east, LONGITUDE_RANGE, errors)

    if south_v is not None and north_v is not None:
        if south_v > north_v:
            errors.append(FieldError(field="south", message="Must not be greater than north"))
        elif north_v - south_v > config.max_box_span_degrees:
            errors.append(
                FieldError(field="north", message=f"Box may span at most {config.max_box_span_degrees:g} degrees")
            )
    if west_v is not None and east_v is not None:
        if west_v > east_v:
            # Boxes crossing the antimeridian are not supported.
            errors.append(FieldError(field="west", message="Must not be greater than east"))
        elif east_v - west_v > config.max_box_span_degrees:
            errors.append(
                FieldError(field="east", message=f"Box may span at most {config.max_box_span_degrees:g} degrees")
            )

    size = _int_in_range(
        "limit",
        config.default_map_limit if limit is None else limit,
        (1, config.max_map_limit),
        errors,
    )
    filters = _collect_filters(
        errors,
        config,
        categories=categories,
        cuisines=cuisines,
        price_range=price_range,
        features=features,
        hours=hours,
        min_rating=min_rating,
    )
    if errors:
        raise InvalidParameter(errors)

    return BoxRequest(
        box=BoundingBox(south=south_v, west=west_v, north=north_v, east=east_v),
        filters=filters,
        limit=size,
    )
