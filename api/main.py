"""
api/main.py -- FastAPI application entry point for StockTrack.

Run with:      uvicorn asgi:app --reload

Middleware:
  TrustedHostMiddleware -- rejects requests with unexpected Host headers (ALLOWED_HOSTS)
  CORSMiddleware        -- adds CORS headers for allowed browser origins (CORS_ORIGINS)
  SlowAPIMiddleware     -- applies the limiter's default limits (route limits come from @limiter.limit)
  log_requests          -- one access log line per request
  limit_upload_size     -- 413 for image uploads whose Content-Length is over MAX_UPLOAD_BYTES

Lifespan opens the stores on startup and disposes them on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.logs import router as logs_router
from api.routes.products import router as products_router
from audit.logger import AuditLogger
from audit.store import AuditStore
from auth.errors import AppError
from auth.store import UserStore
from core.config import get_settings
from inventory.images import ImageStorage
from inventory.store import ProductStore

VERSION = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("stocktrack.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open every store on startup and dispose them on shutdown.

    All stores share DATABASE_URL; each one creates only its own tables.
    """
    settings = get_settings()
    logger.info("StockTrack API starting up")
    app.state.user_store = UserStore(settings.database_url)
    app.state.products = ProductStore(settings.database_url)
    app.state.audit_store = AuditStore(settings.database_url)
    app.state.audit = AuditLogger(app.state.audit_store)
    app.state.images = ImageStorage(settings.media_dir, settings.media_base_url, settings.max_upload_bytes)
    logger.info("Stores initialized (media_dir=%s)", settings.media_dir)

    yield

    app.state.user_store.close()
    app.state.products.close()
    app.state.audit_store.close()
    logger.info("StockTrack API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="StockTrack API",
    description="Inventory management with audited product changes.",
    version=VERSION,
    debug=_settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# Multipart framing (boundaries, part headers) on top of the file itself.
_UPLOAD_OVERHEAD = 64 * 1024


@app.middleware("http")
async def limit_upload_size(request: Request, call_next):
    """Refuse image uploads whose declared Content-Length is over the limit.

    Runs before the multipart body is read, so an oversized upload is never
    spooled to disk. The route still checks the file size for requests
    without a Content-Length.
    """
    if request.method == "POST" and request.url.path.endswith("/image"):
        length = request.headers.get("content-length", "")
        max_bytes = request.app.state.images.max_bytes
        if length.isdigit() and int(length) > max_bytes + _UPLOAD_OVERHEAD:
            return _error(413, "file_too_large", f"Image must be {max_bytes} bytes or smaller")
    return await call_next(request)


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(products_router, prefix="/api", tags=["Products"])
app.include_router(logs_router, prefix="/api", tags=["Audit log"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope ({"error", "code"}) so
# API clients can parse errors uniformly.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, code=code, detail=detail).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map auth-service domain errors onto their HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s", exc.code, request.method, request.url.path)
    return _error(exc.status_code, exc.code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error(429, "rate_limited", "Too many requests.", str(exc))
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body or query params fail validation."""
    return _error(400, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with detail={"code", "message"}; plain
    string details (e.g. Starlette's own 404/405) get a generic code.
    """
    if isinstance(exc.detail, dict):
        response = _error(exc.status_code, exc.detail.get("code", "error"), exc.detail.get("message", ""))
    else:
        response = _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "internal error")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version and database reachability. No auth, no rate limit."""
    try:
        request.app.state.user_store.ping()
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Health check database ping failed")
        database = "error"
    return HealthResponse(version=VERSION, database=database)
