from __future__ import annotations

import json
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from uuid import UUID, uuid4

_TRACE_CONTEXT: ContextVar["SearchTrace | None"] = ContextVar("search_trace", default=None)

STAGES = ("validation", "db", "ranking", "pagination", "assembly")
REQUIRED_STAGES = {
    "near": STAGES,
    "box": ("validation", "db", "assembly"),
}


def _round_or_none(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value, 3)


@dataclass
class SearchTrace:
    request_id: UUID = field(default_factory=uuid4)
    path: str = ""
    method: str = "GET"
    request_start_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    search_mode: str | None = None
    validation_time_ms: float | None = None
    db_time_ms: float | None = None
    ranking_time_ms: float | None = None
    pagination_time_ms: float | None = None
    assembly_time_ms: float | None = None
    total_time_ms: float | None = None
    candidate_count: int | None = None
    result_count: int | None = None
    has_more: bool | None = None
    _request_perf_counter_start: float = field(default_factory=perf_counter, repr=False)
    _recorded_stages: set[str] = field(default_factory=set, repr=False)

    @property
    def search_active(self) -> bool:
        return self.search_mode is not None

    def mark_search(self, mode: str) -> None:
        self.search_mode = mode

    def record_stage_time(self, stage: str, duration_ms: float) -> None:
        if stage not in STAGES:
            return
        self._recorded_stages.add(stage)
        attribute = f"{stage}_time_ms"
        setattr(self, attribute, (getattr(self, attribute) or 0.0) + duration_ms)

    def set_result_summary(self, candidate_count: int, result_count: int, has_more: bool | None = None) -> None:
        self.candidate_count = candidate_count
        self.result_count = result_count
        self.has_more = has_more

    def finalize(self) -> None:
        if self.total_time_ms is None:
            elapsed_ms = (perf_counter() - self._request_perf_counter_start) * 1000.0
            self.total_time_ms = elapsed_ms

        if self.search_active:
            for stage in REQUIRED_STAGES.get(self.search_mode, STAGES):
                attribute = f"{stage}_time_ms"
                if getattr(self, attribute) is None:
                    setattr(self, attribute, 0.0)
            if self.result_count is None:
                self.result_count = 0
            if self.candidate_count is None:
                self.candidate_count = 0

    def to_header_value(self) -> str:
        payload = {
            "request_id": str(self.request_id),
            "search_mode": self.search_mode,
            "validation_time_ms": _round_or_none(self.validation_time_ms),
            "db_time_ms": _round_or_none(self.db_time_ms),
            "ranking_time_ms": _round_or_none(self.ranking_time_ms),
            "pagination_time_ms": _round_or_none(self.pagination_time_ms),
            "assembly_time_ms": _round_or_none(self.assembly_time_ms),
            "total_time_ms": _round_or_none(self.total_time_ms),
            "candidate_count": self.candidate_count,
            "result_count": self.result_count,
        }
        return json.dumps(payload, separators=(",", ":"))

    def missing_required_stages(self) -> list[str]:
        if not self.search_active:
            return []
        required = REQUIRED_STAGES.get(self.search_mode, STAGES)
        return [stage for stage in required if stage not in self._recorded_stages]


def get_current_trace() -> SearchTrace | None:
    return _TRACE_CONTEXT.get()


def set_current_trace(trace: SearchTrace) -> Token:
    return _TRACE_CONTEXT.set(trace)


def reset_current_trace(token: Token) -> None:
    _TRACE_CONTEXT.reset(token)
