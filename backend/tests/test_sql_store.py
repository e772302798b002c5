import uuid

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from discovery.errors import UpstreamQueryFailure
from discovery.models import Establishment
from discovery.services.contracts import BoundingBox, FilterSet, GeoPoint
from discovery.services.filter_service import MATCH_ALL, compose_filters
from discovery.services.spatial import SqlEstablishmentStore
from discovery.services.spatial.sql_store import compile_predicate
from discovery.services.taxonomy import HoursFilter

ORIGIN = GeoPoint(latitude=53.9006, longitude=27.5590)


def render(statement) -> str:
    return " ".join(str(statement.compile(dialect=postgresql.dialect())).split())


class FakeResult:
    def __init__(self, rows=None, scalar=None):
        self._rows = rows or []
        self._scalar = scalar

    def all(self):
        return list(self._rows)

    def scalars(self):
        return self

    def scalar_one(self):
        return self._scalar

    def one(self):
        return self._rows[0]


class RecordingSession:
    def __init__(self, *results):
        self.results = list(results)
        self.statements = []

    def execute(self, statement):
        self.statements.append(statement)
        return self.results.pop(0)


class FailingSession:
    def execute(self, statement):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def establishment_row(**overrides) -> Establishment:
    values = {
        "id": uuid.UUID(int=1),
        "name": "Центральная кофейня",
        "latitude": 53.9026,
        "longitude": 27.5615,
        "category": "cafe",
        "cuisines": ["coffee"],
        "price_range": "$$",
        "features": ["wifi"],
        "is_24_hours": False,
        "latest_close_minute": 1320,
        "average_rating": 4.7,
        "review_count": 156,
        "subscription_tier": "premium",
        "status": "active",
    }
    values.update(overrides)
    return Establishment(**values)


def test_radius_statement_uses_spherical_dwithin_and_distance_in_one_select():
    sql = render(SqlEstablishmentStore(None).radius_statement(ORIGIN, 3000, MATCH_ALL))
    assert "ST_DWithin(establishments.location" in sql
    assert "ST_Distance(establishments.location" in sql
    assert "AS distance_m" in sql
    assert "ST_MakePoint" in sql
    assert "establishments.status = " in sql
    assert "establishments.location IS NOT NULL" in sql


def test_box_statement_uses_closed_ranges_ordered_by_id():
    box = BoundingBox(south=53.8, west=27.4, north=54.0, east=27.7)
    sql = render(SqlEstablishmentStore(None).box_statement(box, MATCH_ALL, 101))
    assert "establishments.latitude BETWEEN" in sql
    assert "establishments.longitude BETWEEN" in sql
    assert "ORDER BY establishments.id ASC" in sql
    assert "LIMIT" in sql


def test_predicate_compiles_array_operators():
    predicate = compose_filters(
        FilterSet(categories=("bar", "cafe"), cuisines=("italian",), features=("parking", "wifi"), min_rating=4.0)
    )
    sql = render(compile_predicate(predicate))
    assert "establishments.category IN" in sql
    assert "establishments.cuisines && " in sql
    assert "establishments.features @> " in sql
    assert "establishments.average_rating >= " in sql


def test_hours_predicates_compile():
    overnight = render(compile_predicate(compose_filters(FilterSet(hours=HoursFilter.OPEN_OVERNIGHT))))
    assert "establishments.is_24_hours IS true" in overnight
    assert "establishments.latest_close_minute > " in overnight

    closes_early = render(compile_predicate(compose_filters(FilterSet(hours=HoursFilter.CLOSES_BY_22))))
    assert "establishments.latest_close_minute IS NOT NULL" in closes_early
    assert "establishments.latest_close_minute <= " in closes_early


def test_within_radius_is_a_single_round_trip():
    session = RecordingSession(FakeResult(rows=[(establishment_row(), 301.25)]))
    candidates = SqlEstablishmentStore(session).within_radius(ORIGIN, 3000, MATCH_ALL)

    assert len(session.statements) == 1
    assert len(candidates) == 1
    assert candidates[0].distance_m == 301.25
    record = candidates[0].record
    assert record.cuisines == ("coffee",)
    assert record.features == ("wifi",)
    assert record.subscription_tier == "premium"


def test_within_bounding_box_converts_rows():
    session = RecordingSession(FakeResult(rows=[establishment_row(), establishment_row(id=uuid.UUID(int=2))]))
    box = BoundingBox(south=53.8, west=27.4, north=54.0, east=27.7)
    records = SqlEstablishmentStore(session).within_bounding_box(box, MATCH_ALL, 10)
    assert [record.id.int for record in records] == [1, 2]


def test_query_failures_become_upstream_failures():
    store = SqlEstablishmentStore(FailingSession())
    with pytest.raises(UpstreamQueryFailure) as exc_info:
        store.within_radius(ORIGIN, 3000, MATCH_ALL)
    assert "connection refused" not in exc_info.value.message

    with pytest.raises(UpstreamQueryFailure):
        store.within_bounding_box(BoundingBox(53.8, 27.4, 54.0, 27.7), MATCH_ALL, 10)


def test_health_reports_postgis_and_counts():
    class Counts:
        eligible_count = 25
        unlocatable_count = 2

    session = RecordingSession(FakeResult(scalar="3.4 USE_GEOS=1"), FakeResult(rows=[Counts()]))
    health = SqlEstablishmentStore(session).health()
    assert health.healthy
    assert health.backend == "postgis"
    assert health.eligible_count == 25
    assert health.unlocatable_count == 2
    assert health.details["postgis_version"] == "3.4 USE_GEOS=1"


def test_health_is_unhealthy_when_database_is_down():
    health = SqlEstablishmentStore(FailingSession()).health()
    assert not health.healthy
    assert health.details == {"error": "database unreachable"}


def test_counts_statement_filters_aggregates():
    sql = render(SqlEstablishmentStore(None).counts_statement())
    assert "count(*) FILTER (WHERE" in sql
