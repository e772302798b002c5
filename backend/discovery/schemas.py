from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class EstablishmentListItem(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    city: str | None = None
    address: str | None = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    category: str
    cuisines: list[str] = Field(default_factory=list)
    price_range: str | None = None
    average_check_byn: float | None = None
    features: list[str] = Field(default_factory=list)
    operating_hours: dict[str, Any] | None = None
    is_24_hours: bool = False
    average_rating: float
    review_count: int = Field(ge=0)
    subscription_tier: str
    primary_image_url: str | None = None
    distance_m: float = Field(ge=0)
    score: float | None = None


class PaginationBlock(BaseModel):
    next_cursor: str | None = None
    has_more: bool
    page_size: int
    returned: int


class SearchEcho(BaseModel):
    latitude: float
    longitude: float
    radius_m: float
    filters: dict[str, Any]


class NearSearchResponse(BaseModel):
    results: list[EstablishmentListItem]
    pagination: PaginationBlock
    search: SearchEcho
    request_id: str | None = None


class MapMarker(BaseModel):
    id: UUID
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    category: str
    average_rating: float | None = None
    subscription_tier: str | None = None


class BoundsEcho(BaseModel):
    south: float
    west: float
    north: float
    east: float


class MapSearchResponse(BaseModel):
    results: list[MapMarker]
    count: int
    limit: int
    truncated: bool
    bounds: BoundsEcho
    filters: dict[str, Any]
    request_id: str | None = None


class ErrorDetail(BaseModel):
    code: str
    message: str
    field: str | None = None
    fields: list[dict[str, str]] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str


class SearchHealthResponse(BaseModel):
    status: str
    backend: str
    eligible_count: int
    unlocatable_count: int
    spatial_index: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class HealthMetricsResponse(BaseModel):
    sample_size: int
    avg_validation_time_ms: float
    avg_db_time_ms: float
    avg_ranking_time_ms: float
    avg_pagination_time_ms: float
    avg_assembly_time_ms: float
    avg_total_time_ms: float
