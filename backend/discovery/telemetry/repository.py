from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..models import TelemetryLog
from .trace import SearchTrace

logger = logging.getLogger(__name__)

_METRIC_COLUMNS = {
    "avg_validation_time_ms": TelemetryLog.validation_time_ms,
    "avg_db_time_ms": TelemetryLog.db_time_ms,
    "avg_ranking_time_ms": TelemetryLog.ranking_time_ms,
    "avg_pagination_time_ms": TelemetryLog.pagination_time_ms,
    "avg_assembly_time_ms": TelemetryLog.assembly_time_ms,
    "avg_total_time_ms": TelemetryLog.total_time_ms,
}


def build_telemetry_row(trace: SearchTrace) -> TelemetryLog:
    return TelemetryLog(
        request_id=trace.request_id,
        search_mode=trace.search_mode,
        validation_time_ms=trace.validation_time_ms,
        db_time_ms=trace.db_time_ms,
        ranking_time_ms=trace.ranking_time_ms,
        pagination_time_ms=trace.pagination_time_ms,
        assembly_time_ms=trace.assembly_time_ms,
        total_time_ms=trace.total_time_ms,
        candidate_count=trace.candidate_count,
        result_count=trace.result_count,
        has_more=trace.has_more,
        timestamp=trace.request_start_timestamp.replace(tzinfo=None),
    )


def persist_trace(trace: SearchTrace) -> None:
    if not trace.search_active:
        return

    row = build_telemetry_row(trace)
    try:
        with SessionLocal() as session:
            session.merge(row)
            session.commit()
    except SQLAlchemyError:
        logger.exception("Failed to persist telemetry trace", extra={"request_id": str(trace.request_id)})


def _to_float(value: float | None) -> float:
    if value is None:
        return 0.0
    return round(float(value), 3)


def fetch_average_latency_metrics(db: Session) -> dict[str, float | int]:
    stmt = select(
        func.count(TelemetryLog.request_id).label("sample_size"),
        *(func.avg(column).label(name) for name, column in _METRIC_COLUMNS.items()),
    )
    try:
        row = db.execute(stmt).one()
    except SQLAlchemyError:
        logger.exception("Failed to read telemetry metrics")
        return {"sample_size": 0, **{name: 0.0 for name in _METRIC_COLUMNS}}

    return {
        "sample_size": int(row.sample_size or 0),
        **{name: _to_float(getattr(row, name)) for name in _METRIC_COLUMNS},
    }
