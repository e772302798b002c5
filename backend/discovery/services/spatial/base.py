from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..contracts import BoundingBox, EstablishmentRecord, GeoPoint, RadiusCandidate, StoreHealth
from ..filter_service import Predicate

ELIGIBLE_STATUS = "active"


@runtime_checkable
class EstablishmentReader(Protocol):
    """Read side of the establishment store as seen by the search pipeline.

    Implementations only ever return eligible rows: status ``active`` with a
    valid coordinate. Boundary points (distance equal to the radius, or a
    coordinate on a box edge) are included.
    """

    backend: str

    def within_radius(self, origin: GeoPoint, radius_m: float, predicate: Predicate) -> list[RadiusCandidate]:
        """Every eligible record within ``radius_m`` of ``origin`` matching ``predicate``, with its distance."""
        ...

    def within_bounding_box(
        self,
        box: BoundingBox,
        predicate: Predicate,
        limit: int,
    ) -> list[EstablishmentRecord]:
        """At most ``limit`` eligible records inside ``box``, ordered by id."""
        ...

    def health(self) -> StoreHealth:
        ...
