"""PostgreSQL + PostGIS implementation of ``EstablishmentReader``.

Radius search runs as a single statement: ``ST_DWithin`` on the GIST-indexed
``location`` geography narrows the rows, and ``ST_Distance`` is selected next
to each row so no follow-up query is needed. Both run with
``use_spheroid => false`` so distances match ``haversine_m``.
"""

from __future__ import annotations

import logging

from sqlalchemy import Select, and_, func, not_, or_, select, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from ...errors import UpstreamQueryFailure
from ...models import Establishment
from ..contracts import (
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    BoundingBox,
    EstablishmentRecord,
    GeoPoint,
    RadiusCandidate,
    StoreHealth,
)
from ..filter_service import AllOf, AnyOf, AtLeast, ContainsAll, HoursMatch, Overlaps, Predicate, describe
from ..hours_service import CLOSES_BY_LIMIT_MINUTE, MINUTES_PER_DAY
from ..taxonomy import HoursFilter
from .base import ELIGIBLE_STATUS

logger = logging.getLogger(__name__)

USE_SPHEROID = False


def _column(field: str):
    try:
        return getattr(Establishment, field)
    except AttributeError:
        raise ValueError(f"Unknown establishment attribute {field!r}") from None


def _hours_clause(option: HoursFilter) -> ColumnElement[bool]:
    if option is HoursFilter.OPEN_24_HOURS:
        return Establishment.is_24_hours.is_(True)
    if option is HoursFilter.OPEN_OVERNIGHT:
        return or_(
            Establishment.is_24_hours.is_(True),
            Establishment.latest_close_minute > MINUTES_PER_DAY,
        )
    if option is HoursFilter.CLOSES_BY_22:
        return and_(
            Establishment.is_24_hours.is_(False),
            Establishment.latest_close_minute.is_not(None),
            Establishment.latest_close_minute <= CLOSES_BY_LIMIT_MINUTE,
        )
    raise ValueError(f"Unsupported hours filter: {option!r}")


def compile_predicate(predicate: Predicate) -> ColumnElement[bool]:
    """Translate a predicate tree into a bound SQLAlchemy clause."""
    if isinstance(predicate, AllOf):
        if not predicate.clauses:
            return true()
        return and_(*(compile_predicate(clause) for clause in predicate.clauses))
    if isinstance(predicate, AnyOf):
        return _column(predicate.field).in_(list(predicate.values))
    if isinstance(predicate, Overlaps):
        return _column(predicate.field).overlap(list(predicate.values))
    if isinstance(predicate, ContainsAll):
        return _column(predicate.field).contains(list(predicate.values))
    if isinstance(predicate, AtLeast):
        return _column(predicate.field) >= predicate.value
    if isinstance(predicate, HoursMatch):
        return _hours_clause(predicate.option)
    raise TypeError(f"Unsupported predicate node: {predicate!r}")


def _locatable() -> ColumnElement[bool]:
    return and_(
        Establishment.location.is_not(None),
        Establishment.latitude.between(*LATITUDE_RANGE),
        Establishment.longitude.between(*LONGITUDE_RANGE),
    )


def _unlocatable() -> ColumnElement[bool]:
    return or_(
        Establishment.location.is_(None),
        Establishment.latitude.is_(None),
        Establishment.longitude.is_(None),
        not_(Establishment.latitude.between(*LATITUDE_RANGE)),
        not_(Establishment.longitude.between(*LONGITUDE_RANGE)),
    )


def _eligible() -> ColumnElement[bool]:
    return and_(Establishment.status == ELIGIBLE_STATUS, _locatable())


def _origin(point: GeoPoint):
    return func.geography(func.ST_SetSRID(func.ST_MakePoint(point.longitude, point.latitude), 4326))


def to_record(row: Establishment) -> EstablishmentRecord:
    return EstablishmentRecord(
        id=row.id,
        name=row.name,
        latitude=row.latitude,
        longitude=row.longitude,
        category=row.category,
        cuisines=tuple(row.cuisines or ()),
        price_range=row.price_range,
        features=tuple(row.features or ()),
        operating_hours=row.operating_hours,
        is_24_hours=bool(row.is_24_hours),
        latest_close_minute=row.latest_close_minute,
        average_rating=row.average_rating,
        review_count=row.review_count,
        subscription_tier=row.subscription_tier,
        status=row.status,
        description=row.description,
        city=row.city,
        address=row.address,
        average_check_byn=float(row.average_check_byn) if row.average_check_byn is not None else None,
        primary_image_url=row.primary_image_url,
    )


class SqlEstablishmentStore:
    backend = "postgis"

    def __init__(self, db: Session) -> None:
        self._db = db

    def radius_statement(self, origin: GeoPoint, radius_m: float, predicate: Predicate) -> Select:
        origin_geo = _origin(origin)
        distance = func.ST_Distance(Establishment.location, origin_geo, USE_SPHEROID).label("distance_m")
        return select(Establishment, distance).where(
            _eligible(),
            func.ST_DWithin(Establishment.location, origin_geo, radius_m, USE_SPHEROID),
            compile_predicate(predicate),
        )

    def box_statement(self, box: BoundingBox, predicate: Predicate, limit: int) -> Select:
        return (
            select(Establishment)
            .where(
                _eligible(),
                Establishment.latitude.between(box.south, box.north),
                Establishment.longitude.between(box.west, box.east),
                compile_predicate(predicate),
            )
            .order_by(Establishment.id.asc())
            .limit(limit)
        )

    def within_radius(self, origin: GeoPoint, radius_m: float, predicate: Predicate) -> list[RadiusCandidate]:
        stmt = self.radius_statement(origin, radius_m, predicate)
        try:
            rows = self._db.execute(stmt).all()
        except SQLAlchemyError as exc:
            logger.exception("Radius query failed (radius_m=%s, filters=%s)", radius_m, describe(predicate))
            raise UpstreamQueryFailure() from exc
        return [RadiusCandidate(record=to_record(row[0]), distance_m=float(row[1])) for row in rows]

    def within_bounding_box(self, box: BoundingBox, predicate: Predicate, limit: int) -> list[EstablishmentRecord]:
        stmt = self.box_statement(box, predicate, limit)
        try:
            rows = self._db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Bounding box query failed (box=%s, filters=%s)", box, describe(predicate))
            raise UpstreamQueryFailure() from exc
        return [to_record(row) for row in rows]

    def counts_statement(self) -> Select:
        return select(
            func.count().filter(_eligible()).label("eligible_count"),
            func.count().filter(_unlocatable()).label("unlocatable_count"),
        ).select_from(Establishment)

    def health(self) -> StoreHealth:
        try:
            postgis_version = self._db.execute(select(func.PostGIS_Version())).scalar_one()
            counts = self._db.execute(self.counts_statement()).one()
        except SQLAlchemyError:
            logger.exception("Search store health check failed")
            return StoreHealth(backend=self.backend, healthy=False, details={"error": "database unreachable"})

        return StoreHealth(
            backend=self.backend,
            healthy=True,
            eligible_count=int(counts.eligible_count or 0),
            unlocatable_count=int(counts.unlocatable_count or 0),
            spatial_index="gist(location)",
            details={"postgis_version": str(postgis_version)},
        )
