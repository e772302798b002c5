import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .errors import DiscoveryError, FieldError, InvalidParameter, UpstreamQueryFailure
from .routes.search import router as search_router
from .schemas import ErrorDetail, ErrorResponse, HealthMetricsResponse, HealthResponse
from .telemetry.logging_utils import configure_logging
from .telemetry.middleware import TelemetryMiddleware
from .telemetry.repository import fetch_average_latency_metrics

logger = logging.getLogger(__name__)

configure_logging(settings.log_level, settings.perf_log_level)
app = FastAPI(title=settings.app_name, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TelemetryMiddleware)

app.include_router(search_router, prefix="/api/v1/search")


def _error_response(exc: DiscoveryError, fields: list[FieldError] | None = None) -> JSONResponse:
    fields = fields or []
    body = ErrorResponse(
        error=ErrorDetail(
            code=exc.code,
            message=exc.message,
            field=fields[0].field if fields else None,
            fields=[{"field": item.field, "message": item.message} for item in fields],
        )
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(InvalidParameter)
async def invalid_parameter_handler(request: Request, exc: InvalidParameter) -> JSONResponse:
    return _error_response(exc, exc.errors)


@app.exception_handler(UpstreamQueryFailure)
async def upstream_failure_handler(request: Request, exc: UpstreamQueryFailure) -> JSONResponse:
    logger.error(
        "Search failed (%s): %s",
        type(exc).__name__,
        exc.message,
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    # Callers only ever see the generic message.
    return _error_response(UpstreamQueryFailure())


@app.exception_handler(DiscoveryError)
async def discovery_error_handler(request: Request, exc: DiscoveryError) -> JSONResponse:
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        FieldError(field=str(error["loc"][-1]) if error.get("loc") else "request", message=error.get("msg", "Invalid value"))
        for error in exc.errors()
    ]
    if not fields:
        fields = [FieldError(field="request", message="Invalid request")]
    return _error_response(InvalidParameter(fields), fields)


@app.get("/health", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    with SessionLocal() as session:
        session.execute(text("SELECT 1"))
    return HealthResponse(status="ok")


@app.get("/health/metrics", response_model=HealthMetricsResponse)
def health_metrics() -> HealthMetricsResponse:
    with SessionLocal() as session:
        metrics = fetch_average_latency_metrics(session)
    return HealthMetricsResponse(**metrics)


def run() -> None:
    import uvicorn

    uvicorn.run("discovery.main:app", host=settings.host, port=settings.port)
