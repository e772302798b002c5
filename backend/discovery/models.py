import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import UserDefinedType

from .database import Base


class Geography(UserDefinedType):
    """PostGIS ``geography(Point, 4326)`` column; only ever written and compared in SQL."""

    cache_ok = True

    def get_col_spec(self, **kw) -> str:
        return "geography(Point, 4326)"


class Establishment(Base):
    __tablename__ = "establishments"
    __table_args__ = (
        CheckConstraint("price_range IN ('$', '$$', '$$$')", name="check_price_range"),
        CheckConstraint(
            "subscription_tier IN ('free', 'basic', 'standard', 'premium')",
            name="check_subscription_tier",
        ),
        CheckConstraint(
            "status IN ('draft', 'pending', 'active', 'suspended', 'archived')",
            name="check_status",
        ),
        CheckConstraint("average_rating >= 0 AND average_rating <= 5", name="check_average_rating"),
        Index("idx_establishments_location", "location", postgresql_using="gist"),
        Index("idx_establishments_lat_lng", "latitude", "longitude"),
        Index("idx_establishments_category", "category"),
        Index("idx_establishments_cuisines", "cuisines", postgresql_using="gin"),
        Index("idx_establishments_features", "features", postgresql_using="gin"),
        Index("idx_establishments_price_range", "price_range"),
        Index("idx_establishments_subscription_tier", "subscription_tier"),
        Index("idx_establishments_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    location: Mapped[str | None] = mapped_column(Geography(), nullable=True, deferred=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    cuisines: Mapped[list[str]] = mapped_column(ARRAY(String(50)), nullable=False, default=list)
    price_range: Mapped[str | None] = mapped_column(String(3), nullable=True)
    average_check_byn: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    features: Mapped[list[str]] = mapped_column(ARRAY(String(50)), nullable=False, default=list)
    operating_hours: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_24_hours: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    latest_close_minute: Mapped[int | None] = mapped_column(Integer, nullable=True)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subscription_tier: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="free",
        server_default=text("'free'"),
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft", server_default=text("'draft'"))
    primary_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class TelemetryLog(Base):
    __tablename__ = "search_telemetry_logs"

    request_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    search_mode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    validation_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    db_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    ranking_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    pagination_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    assembly_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    candidate_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    result_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    has_more: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())
