from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from .taxonomy import HoursFilter

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east


@dataclass(frozen=True)
class FilterSet:
    categories: tuple[str, ...] = ()
    cuisines: tuple[str, ...] = ()
    price_ranges: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    hours: HoursFilter | None = None
    min_rating: float | None = None

    def as_payload(self) -> dict[str, Any]:
        return {
            "categories": list(self.categories),
            "cuisines": list(self.cuisines),
            "price_range": list(self.price_ranges),
            "features": list(self.features),
            "hours": self.hours.value if self.hours is not None else None,
            "min_rating": self.min_rating,
        }


@dataclass(frozen=True)
class NearRequest:
    origin: GeoPoint
    radius_m: float
    filters: FilterSet
    page_size: int
    cursor: str | None = None


@dataclass(frozen=True)
class BoxRequest:
    box: BoundingBox
    filters: FilterSet
    limit: int


@dataclass(frozen=True)
class EstablishmentRecord:
    """Read-only snapshot of one establishment row, as delivered by a store."""

    id: uuid.UUID
    name: str | None
    latitude: float | None
    longitude: float | None
    category: str | None
    cuisines: tuple[str, ...] = ()
    price_range: str | None = None
    features: tuple[str, ...] = ()
    operating_hours: dict[str, Any] | None = None
    is_24_hours: bool = False
    latest_close_minute: int | None = None
    average_rating: float | None = None
    review_count: int | None = None
    subscription_tier: str | None = None
    status: str = "active"
    description: str | None = None
    city: str | None = None
    address: str | None = None
    average_check_byn: float | None = None
    primary_image_url: str | None = None

    def has_valid_coordinate(self) -> bool:
        if self.latitude is None or self.longitude is None:
            return False
        return (
            LATITUDE_RANGE[0] <= self.latitude <= LATITUDE_RANGE[1]
            and LONGITUDE_RANGE[0] <= self.longitude <= LONGITUDE_RANGE[1]
        )


@dataclass(frozen=True)
class RadiusCandidate:
    record: EstablishmentRecord
    distance_m: float


@dataclass(frozen=True)
class RankedCandidate:
    record: EstablishmentRecord
    distance_m: float
    score: float

    @property
    def sort_key(self) -> tuple[float, uuid.UUID]:
        return (-self.score, self.record.id)


@dataclass
class StoreHealth:
    backend: str
    healthy: bool
    eligible_count: int = 0
    unlocatable_count: int = 0
    spatial_index: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
