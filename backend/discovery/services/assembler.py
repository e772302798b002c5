from __future__ import annotations

import logging

from pydantic import ValidationError

from ..errors import ResultAssemblyError
from ..schemas import (
    BoundsEcho,
    EstablishmentListItem,
    MapMarker,
    MapSearchResponse,
    NearSearchResponse,
    PaginationBlock,
    SearchEcho,
)
from .contracts import BoxRequest, EstablishmentRecord, NearRequest, RankedCandidate

logger = logging.getLogger(__name__)


class ResultAssembler:
    """Shape ranked rows and map markers into response models.

    A row that fails to validate aborts the whole response; partial pages are
    never returned.
    """

    def __init__(self, include_score: bool = True) -> None:
        self.include_score = include_score

    def list_item(self, candidate: RankedCandidate) -> EstablishmentListItem:
        record = candidate.record
        try:
            return EstablishmentListItem(
                id=record.id,
                name=record.name,
                description=record.description,
                city=record.city,
                address=record.address,
                latitude=record.latitude,
                longitude=record.longitude,
                category=record.category,
                cuisines=list(record.cuisines),
                price_range=record.price_range,
                average_check_byn=record.average_check_byn,
                features=list(record.features),
                operating_hours=record.operating_hours,
                is_24_hours=record.is_24_hours,
                average_rating=record.average_rating,
                review_count=record.review_count,
                subscription_tier=record.subscription_tier,
                primary_image_url=record.primary_image_url,
                distance_m=round(candidate.distance_m, 2),
                score=round(candidate.score, 4) if self.include_score else None,
            )
        except ValidationError as exc:
            logger.error("Cannot assemble establishment %s: %s", record.id, exc)
            raise ResultAssemblyError() from exc

    def map_marker(self, record: EstablishmentRecord) -> MapMarker:
        try:
            return MapMarker(
                id=record.id,
                latitude=record.latitude,
                longitude=record.longitude,
                category=record.category,
                average_rating=record.average_rating,
                subscription_tier=record.subscription_tier,
            )
        except ValidationError as exc:
            logger.error("Cannot assemble map marker %s: %s", record.id, exc)
            raise ResultAssemblyError() from exc

    def near_response(
        self,
        request: NearRequest,
        items: list[RankedCandidate],
        has_more: bool,
        next_cursor: str | None,
        request_id: str | None = None,
    ) -> NearSearchResponse:
        results = [self.list_item(candidate) for candidate in items]
        return NearSearchResponse(
            results=results,
            pagination=PaginationBlock(
                next_cursor=next_cursor if has_more else None,
                has_more=has_more,
                page_size=request.page_size,
                returned=len(results),
            ),
            search=SearchEcho(
                latitude=request.origin.latitude,
                longitude=request.origin.longitude,
                radius_m=request.radius_m,
                filters=request.filters.as_payload(),
            ),
            request_id=request_id,
        )

    def map_response(
        self,
        request: BoxRequest,
        records: list[EstablishmentRecord],
        truncated: bool,
        request_id: str | None = None,
    ) -> MapSearchResponse:
        markers = [self.map_marker(record) for record in records]
        box = request.box
        return MapSearchResponse(
            results=markers,
            count=len(markers),
            limit=request.limit,
            truncated=truncated,
            bounds=BoundsEcho(south=box.south, west=box.west, north=box.north, east=box.east),
            filters=request.filters.as_payload(),
            request_id=request_id,
        )
