"""In-process ``EstablishmentReader`` over a fixed-size latitude/longitude grid.

Records are bucketed into square cells of ``cell_degrees``. A radius search
visits only the cells overlapping the radius bounding rectangle, drops rows
outside that rectangle with a plain coordinate comparison, and computes the
haversine distance for what remains.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Iterable, Iterator

from ...config import get_settings
from ..contracts import BoundingBox, EstablishmentRecord, GeoPoint, RadiusCandidate, StoreHealth
from ..distance_service import haversine_m, longitude_ranges, radius_bounds
from ..filter_service import Predicate
from ..hours_service import summarize_operating_hours
from .base import ELIGIBLE_STATUS

logger = logging.getLogger(__name__)

CellKey = tuple[int, int]

# Rounding slack so a point lying exactly on the radius is never dropped.
# Reported distances are clamped back to the radius.
BOUNDS_MARGIN_DEG = 1e-9
DISTANCE_TOLERANCE_M = 1e-6


class GridIndexStore:
    backend = "grid"

    def __init__(self, records: Iterable[EstablishmentRecord], cell_degrees: float | None = None) -> None:
        if cell_degrees is None:
            cell_degrees = get_settings().grid_cell_degrees
        if cell_degrees <= 0:
            raise ValueError("cell_degrees must be positive")
        self.cell_degrees = cell_degrees
        self._cells: dict[CellKey, list[EstablishmentRecord]] = {}
        self.eligible_count = 0
        self.unlocatable_count = 0
        self.malformed_hours_count = 0

        for record in records:
            if not record.has_valid_coordinate():
                self.unlocatable_count += 1
                continue
            if record.status != ELIGIBLE_STATUS:
                continue
            if record.operating_hours and record.latest_close_minute is None:
                summary = summarize_operating_hours(record.operating_hours)
                if summary.malformed:
                    self.malformed_hours_count += 1
                record = dataclasses.replace(
                    record,
                    is_24_hours=summary.is_24_hours,
                    latest_close_minute=summary.latest_close_minute,
                )
            self._cells.setdefault(self._cell_of(record.latitude, record.longitude), []).append(record)
            self.eligible_count += 1

        if self.unlocatable_count:
            logger.warning(
                "Excluded %s establishment(s) without a valid coordinate from the grid index",
                self.unlocatable_count,
            )

    def _index(self, value: float) -> int:
        return math.floor(value / self.cell_degrees)

    def _cell_of(self, latitude: float, longitude: float) -> CellKey:
        return (self._index(latitude), self._index(longitude))

    def _cells_in(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> Iterator[CellKey]:
        rows = range(self._index(min_lat), self._index(max_lat) + 1)
        cols = range(self._index(min_lon), self._index(max_lon) + 1)
        if len(rows) * len(cols) > len(self._cells):
            # Sparse index: cheaper to scan the occupied cells.
            for key in self._cells:
                if key[0] in rows and key[1] in cols:
                    yield key
            return
        for row in rows:
            for col in cols:
                if (row, col) in self._cells:
                    yield (row, col)

    def _records_in(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> Iterator[EstablishmentRecord]:
        for key in self._cells_in(min_lat, max_lat, min_lon, max_lon):
            yield from self._cells[key]

    def within_radius(self, origin: GeoPoint, radius_m: float, predicate: Predicate) -> list[RadiusCandidate]:
        min_lat, max_lat, min_lon, max_lon = radius_bounds(origin.latitude, origin.longitude, radius_m)
        min_lat, max_lat = min_lat - BOUNDS_MARGIN_DEG, max_lat + BOUNDS_MARGIN_DEG
        min_lon, max_lon = min_lon - BOUNDS_MARGIN_DEG, max_lon + BOUNDS_MARGIN_DEG
        seen: set = set()
        candidates: list[RadiusCandidate] = []

        for low, high in longitude_ranges(min_lon, max_lon):
            for record in self._records_in(min_lat, max_lat, low, high):
                if record.id in seen:
                    continue
                if not (min_lat <= record.latitude <= max_lat and low <= record.longitude <= high):
                    continue
                seen.add(record.id)
                distance = haversine_m(origin.latitude, origin.longitude, record.latitude, record.longitude)
                if distance <= radius_m + DISTANCE_TOLERANCE_M and predicate.matches(record):
                    candidates.append(RadiusCandidate(record=record, distance_m=min(distance, float(radius_m))))
        return candidates

    def within_bounding_box(self, box: BoundingBox, predicate: Predicate, limit: int) -> list[EstablishmentRecord]:
        matched = [
            record
            for record in self._records_in(box.south, box.north, box.west, box.east)
            if box.contains(record.latitude, record.longitude) and predicate.matches(record)
        ]
        matched.sort(key=lambda record: record.id)
        return matched[:limit]

    def health(self) -> StoreHealth:
        return StoreHealth(
            backend=self.backend,
            healthy=True,
            eligible_count=self.eligible_count,
            unlocatable_count=self.unlocatable_count,
            spatial_index=f"grid({self.cell_degrees:g} deg)",
            details={"occupied_cells": len(self._cells), "malformed_hours": self.malformed_hours_count},
        )
