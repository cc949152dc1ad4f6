# backend/berry_events/main.py

import logging
import os
import time
from typing import Iterable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as SA_TimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from . import models  # noqa: F401  registers tables on Base.metadata
from .api import api_cart, api_catalog, api_order, api_pricing
from .core.config import settings
from .core.observability import setup_logging, setup_tracer
from .database import Base, engine
from .middleware.security_headers import SecurityHeadersMiddleware
from .utils.errors import BookingEngineError

setup_logging()
logger = logging.getLogger(__name__)

_BOOT_TS = time.time()

if os.getenv("SKIP_DB_BOOTSTRAP", "0") != "1":
    Base.metadata.create_all(bind=engine)

# Always use ORJSONResponse for JSON payloads
app = FastAPI(title="Berry Events Booking API", default_response_class=ORJSONResponse)
setup_tracer(app)


# ─── CORS middleware (credentials-compatible, explicit allowlist) ─────────────
# The cart cookie needs credentials, so Access-Control-Allow-Origin cannot be "*"
# unless CORS_ALLOW_ALL is set for local tooling.

def _merge_origins(*groups: Iterable[str]) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for origin in group:
            if not origin:
                continue
            normalized = origin.rstrip("/")
            if normalized not in merged:
                merged.append(normalized)
    return merged


ALLOWED_ORIGINS = _merge_origins(settings.CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("CORS origins set to: %s", ALLOWED_ORIGINS)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1024)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Return JSON responses for HTTP errors and log them."""
    try:
        response = await call_next(request)
    except StarletteHTTPException as exc:
        logger.error(
            "HTTP error %s at %s: %s", exc.status_code, request.url.path, exc.detail
        )
        response = ORJSONResponse(
            status_code=exc.status_code, content={"detail": exc.detail}
        )
    except SA_TimeoutError as exc:  # DB pool timeout -> 503 to reduce retry storms
        logger.error("DB timeout at %s: %s", request.url.path, str(exc))
        response = ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database busy, please retry"},
        )
    except Exception as exc:  # pragma: no cover - generic handler
        logger.exception("Unhandled error: %s", exc)
        response = ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )
    return response


@app.exception_handler(BookingEngineError)
async def booking_engine_exception_handler(request: Request, exc: BookingEngineError):
    """Render domain errors in the shared ``{"message", "field_errors"}`` shape."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s at %s: %s %s",
        type(exc).__name__,
        request.url.path,
        exc.message,
        exc.field_errors,
    )
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"detail": {"message": exc.message, "field_errors": exc.field_errors}},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return validation errors without echoing submitted values.

    Payment payloads can carry card or account numbers, so only the location
    and error type of each failure are logged or returned.
    """
    field_errors: dict[str, str] = {}
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
        field_errors[loc] = err.get("type", "invalid")
    logger.warning("Validation error at %s: %s", request.url.path, field_errors)
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": {"message": "Validation error", "field_errors": field_errors}},
    )


@app.get("/healthz/live", tags=["health"])
async def health_live():
    """Liveness probe: process can respond; does not touch the DB."""
    return {
        "status": "ok",
        "kind": "live",
        "uptime_s": round(time.time() - _BOOT_TS, 1),
        "pid": os.getpid(),
    }


@app.get("/healthz/ready", tags=["health"])
def health_ready():
    """Readiness probe: synchronous DB ping, run off the event loop."""
    t0 = time.perf_counter()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Readiness DB ping failed: %s", exc)
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "kind": "ready", "reason": "db_unavailable"},
            headers={"Cache-Control": "no-store"},
        )
    return ORJSONResponse(
        content={
            "status": "ok",
            "kind": "ready",
            "db_ping_ms": round((time.perf_counter() - t0) * 1000.0, 1),
        },
        headers={"Cache-Control": "no-store"},
    )


@app.get("/healthz", tags=["health"])
def healthz():
    return health_ready()


api_prefix = settings.API_V1_STR  # usually "/api/v1"

app.include_router(api_catalog.router, prefix=f"{api_prefix}")
app.include_router(api_pricing.router, prefix=f"{api_prefix}")
app.include_router(api_cart.router, prefix=f"{api_prefix}")
app.include_router(api_order.router, prefix=f"{api_prefix}")


# ─── A simple root check ─────────────────────────────────────────────────────────────
@app.get("/")
async def root():
    return {"message": "Welcome to Berry Events Booking API"}
