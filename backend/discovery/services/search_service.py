"""Discovery pipeline: validated request in, response model out.

Near mode runs filter composition, one store round trip, ranking, keyset
pagination and assembly. Map mode skips ranking and pagination and returns
at most ``limit`` markers in id order, flagging truncation.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..schemas import MapSearchResponse, NearSearchResponse, SearchHealthResponse
from ..telemetry import get_current_trace, timed_stage
from .assembler import ResultAssembler
from .contracts import BoxRequest, NearRequest
from .cursor_service import CursorCodec, paginate, query_scope
from .filter_service import compose_filters, describe
from .ranking_service import RankingWeights, rank_candidates
from .spatial.base import EstablishmentReader

logger = logging.getLogger(__name__)


class DiscoveryService:
    def __init__(
        self,
        settings: Settings | None = None,
        weights: RankingWeights | None = None,
        codec: CursorCodec | None = None,
        assembler: ResultAssembler | None = None,
    ) -> None:
        config = settings or get_settings()
        self.weights = weights or RankingWeights.from_settings(config)
        self.codec = codec or CursorCodec(config.cursor_secret, version=config.cursor_version)
        self.assembler = assembler or ResultAssembler(include_score=config.expose_ranking_score)

    def search_near(self, store: EstablishmentReader, request: NearRequest) -> NearSearchResponse:
        trace = get_current_trace()

        scope = query_scope(request, self.weights)
        # A bad cursor fails the request before any store work is done.
        with timed_stage("pagination"):
            cursor = self.codec.decode(request.cursor, scope) if request.cursor else None

        predicate = compose_filters(request.filters)
        logger.debug(
            "Near search origin=(%s, %s) radius_m=%s where %s",
            request.origin.latitude,
            request.origin.longitude,
            request.radius_m,
            describe(predicate),
        )

        with timed_stage("db"):
            candidates = store.within_radius(request.origin, request.radius_m, predicate)

        ranked = rank_candidates(candidates, request.radius_m, self.weights)

        with timed_stage("pagination"):
            page = paginate(ranked, cursor, request.page_size)
            next_token = self.codec.encode(page.next_cursor, scope) if page.next_cursor is not None else None

        with timed_stage("assembly"):
            response = self.assembler.near_response(
                request,
                page.items,
                has_more=page.has_more,
                next_cursor=next_token,
                request_id=str(trace.request_id) if trace is not None else None,
            )

        if trace is not None:
            trace.set_result_summary(len(candidates), len(page.items), page.has_more)
        return response

    def search_box(self, store: EstablishmentReader, request: BoxRequest) -> MapSearchResponse:
        trace = get_current_trace()

        predicate = compose_filters(request.filters)
        logger.debug("Box search %s where %s", request.box, describe(predicate))

        # One extra row tells us whether the box held more than the limit.
        with timed_stage("db"):
            records = store.within_bounding_box(request.box, predicate, request.limit + 1)

        truncated = len(records) > request.limit
        kept = records[: request.limit]
        with timed_stage("assembly"):
            response = self.assembler.map_response(
                request,
                kept,
                truncated=truncated,
                request_id=str(trace.request_id) if trace is not None else None,
            )

        if trace is not None:
            trace.set_result_summary(len(records), len(kept))
        return response

    def health(self, store: EstablishmentReader) -> SearchHealthResponse:
        report = store.health()
        return SearchHealthResponse(
            status="ok" if report.healthy else "unavailable",
            backend=report.backend,
            eligible_count=report.eligible_count,
            unlocatable_count=report.unlocatable_count,
            spatial_index=report.spatial_index,
            details=report.details,
        )


discovery_service = DiscoveryService()
