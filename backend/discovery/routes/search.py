from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import ErrorResponse, MapSearchResponse, NearSearchResponse, SearchHealthResponse
from ..services.search_service import discovery_service
from ..services.spatial import EstablishmentReader, SqlEstablishmentStore
from ..services.validation import validate_box_request, validate_near_request
from ..telemetry import get_current_trace, timed_stage

router = APIRouter(tags=["search"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid parameter or pagination cursor"},
    503: {"model": ErrorResponse, "description": "Search store unavailable"},
}


def get_establishment_store(db: Session = Depends(get_db)) -> EstablishmentReader:
    return SqlEstablishmentStore(db)


def _mark_search(mode: str) -> None:
    trace = get_current_trace()
    if trace is not None:
        trace.mark_search(mode)


@router.get("/establishments", response_model=NearSearchResponse, responses=ERROR_RESPONSES)
def search_establishments(
    latitude: float | None = Query(default=None),
    longitude: float | None = Query(default=None),
    radius: float | None = Query(default=None, description="Search radius in meters"),
    categories: str | None = Query(default=None, description="Comma separated, OR semantics"),
    cuisines: str | None = Query(default=None, description="Comma separated, OR semantics"),
    price_range: str | None = Query(default=None, description="Comma separated, OR semantics"),
    features: str | None = Query(default=None, description="Comma separated, AND semantics"),
    hours: str | None = Query(default=None),
    min_rating: float | None = Query(default=None),
    cursor: str | None = Query(default=None),
    page_size: int | None = Query(default=None),
    store: EstablishmentReader = Depends(get_establishment_store),
) -> NearSearchResponse:
    _mark_search("near")
    with timed_stage("validation"):
        request = validate_near_request(
            latitude=latitude,
            longitude=longitude,
            radius_m=radius,
            page_size=page_size,
            cursor=cursor,
            categories=categories,
            cuisines=cuisines,
            price_range=price_range,
            features=features,
            hours=hours,
            min_rating=min_rating,
        )
    return discovery_service.search_near(store, request)


@router.get("/map", response_model=MapSearchResponse, responses=ERROR_RESPONSES)
def search_map(
    south: float | None = Query(default=None),
    west: float | None = Query(default=None),
    north: float | None = Query(default=None),
    east: float | None = Query(default=None),
    categories: str | None = Query(default=None),
    cuisines: str | None = Query(default=None),
    price_range: str | None = Query(default=None),
    features: str | None = Query(default=None),
    hours: str | None = Query(default=None),
    min_rating: float | None = Query(default=None),
    limit: int | None = Query(default=None),
    store: EstablishmentReader = Depends(get_establishment_store),
) -> MapSearchResponse:
    _mark_search("box")
    with timed_stage("validation"):
        request = validate_box_request(
            south=south,
            west=west,
            north=north,
            east=east,
            limit=limit,
            categories=categories,
            cuisines=cuisines,
            price_range=price_range,
            features=features,
            hours=hours,
            min_rating=min_rating,
        )
    return discovery_service.search_box(store, request)


@router.get("/health", response_model=SearchHealthResponse, responses={503: {"model": SearchHealthResponse}})
def search_health(store: EstablishmentReader = Depends(get_establishment_store)):
    report = discovery_service.health(store)
    if report.status != "ok":
        return JSONResponse(status_code=503, content=report.model_dump())
    return report
