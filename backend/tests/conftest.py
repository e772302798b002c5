import os
import sys
from pathlib import Path
from uuid import UUID

import pytest

os.environ.setdefault("TELEMETRY_ENABLED", "false")
os.environ.setdefault("CURSOR_SECRET", "test-cursor-secret")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from discovery.services.contracts import EstablishmentRecord, GeoPoint
from discovery.services.cursor_service import CursorCodec
from discovery.services.distance_service import destination_point
from discovery.services.search_service import DiscoveryService
from discovery.services.spatial import GridIndexStore

ORIGIN = GeoPoint(latitude=53.9006, longitude=27.5590)

# (distance_m, bearing) of the five establishments inside 3 km, nearest first.
NEAR_PLACEMENTS = [(250, 45), (600, 135), (1200, 225), (1900, 315), (2750, 90)]
NEAR_FEATURES = [
    ("wifi",),
    ("parking", "wifi"),
    ("parking",),
    ("live_music", "wifi"),
    ("delivery", "parking", "wifi"),
]
NEAR_CATEGORIES = ["cafe", "restaurant", "restaurant", "bar", "pizzeria"]

_FAR_CATEGORIES = ["restaurant", "cafe", "bar", "fast_food", "pizzeria", "bakery"]
_FAR_TIERS = ["free", "basic", "standard", "premium"]
_FAR_FEATURES = [("wifi",), ("parking",), ("parking", "wifi"), ("takeaway",), ()]
_FAR_CUISINES = [("european",), ("italian",), ("asian",), ("belarusian", "european")]
_FAR_CLOSE_MINUTES = [1260, 1380, 1560]


def make_record(index: int, distance_m: float, bearing: float, **overrides) -> EstablishmentRecord:
    latitude, longitude = destination_point(ORIGIN.latitude, ORIGIN.longitude, distance_m, bearing)
    values = {
        "id": UUID(int=index),
        "name": f"Establishment {index}",
        "latitude": latitude,
        "longitude": longitude,
        "category": "restaurant",
        "cuisines": ("european",),
        "price_range": "$$",
        "features": (),
        "latest_close_minute": 1380,
        "average_rating": 4.0,
        "review_count": 50,
        "subscription_tier": "free",
        "city": "Минск",
    }
    values.update(overrides)
    return EstablishmentRecord(**values)


def build_fixture_records() -> list[EstablishmentRecord]:
    records = []
    for offset, (distance_m, bearing) in enumerate(NEAR_PLACEMENTS):
        records.append(
            make_record(
                offset + 1,
                distance_m,
                bearing,
                category=NEAR_CATEGORIES[offset],
                features=NEAR_FEATURES[offset],
                average_rating=4.5,
                review_count=120,
                subscription_tier="standard",
            )
        )

    for index in range(6, 24):
        step = index - 6
        records.append(
            make_record(
                index,
                3400 + step * 594,
                (index * 47) % 360,
                category=_FAR_CATEGORIES[step % len(_FAR_CATEGORIES)],
                cuisines=_FAR_CUISINES[step % len(_FAR_CUISINES)],
                price_range=("$", "$$", "$$$")[step % 3],
                features=_FAR_FEATURES[step % len(_FAR_FEATURES)],
                latest_close_minute=_FAR_CLOSE_MINUTES[step % len(_FAR_CLOSE_MINUTES)],
                average_rating=round(3.0 + (index % 5) * 0.4, 1),
                review_count=(index * 37) % 260,
                subscription_tier=_FAR_TIERS[step % len(_FAR_TIERS)],
            )
        )

    # Three co-located twins: identical scores, ordered by id alone.
    for index in (24, 25, 26):
        records.append(
            make_record(
                index,
                15000,
                160,
                name="Twin",
                average_rating=4.0,
                review_count=80,
                subscription_tier="basic",
            )
        )

    records.append(
        make_record(
            27,
            18000,
            20,
            category="canteen",
            cuisines=("home_cooking",),
            price_range="$",
            is_24_hours=True,
            latest_close_minute=1440,
            average_rating=3.9,
            review_count=40,
            subscription_tier="premium",
        )
    )
    return records


FIXTURE_RECORDS = build_fixture_records()


@pytest.fixture
def records() -> list[EstablishmentRecord]:
    return list(FIXTURE_RECORDS)


@pytest.fixture
def store(records) -> GridIndexStore:
    return GridIndexStore(records)


@pytest.fixture
def codec() -> CursorCodec:
    return CursorCodec("test-cursor-secret")


@pytest.fixture
def service(codec) -> DiscoveryService:
    return DiscoveryService(codec=codec)
