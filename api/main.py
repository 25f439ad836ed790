"""
api/main.py -- FastAPI application entry point for the SSO service.

Run with:  python main.py serve
           uvicorn api.main:app

Lifespan handles startup (storage + service construction) and shutdown
(engine disposal) symmetrically. uvicorn stops accepting connections and
drains in-flight requests before the lifespan exits, so the store is only
closed once no request can still be using it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.status import HTTP_STATUS, StatusCode
from auth.service import AuthService
from auth.store import SQLStore
from core.config import get_settings
from core.log import configure_logging

__version__ = "0.1.0"

logger = logging.getLogger("sso.api")

# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the storage gateway and auth service; dispose them on shutdown."""
    settings = get_settings()
    configure_logging(settings.env)
    logger.info("SSO API starting up (env=%s)", settings.env)

    app.state.settings = settings
    app.state.store = SQLStore(settings.database_url, timeout_seconds=settings.request_timeout_seconds)
    app.state.auth_service = AuthService(
        app.state.store,
        token_ttl=timedelta(seconds=settings.token_ttl_seconds),
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    logger.info("Auth service initialized (token_ttl=%ss)", settings.token_ttl_seconds)

    yield

    app.state.store.close()
    logger.info("SSO API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="SSO API",
    description="Credential login, token issuance and user roles.",
    version=__version__,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


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


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so clients can parse
# errors uniformly.
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and path params are invalid_argument, like empty fields."""
    return JSONResponse(
        status_code=HTTP_STATUS[StatusCode.invalid_argument],
        content=ErrorResponse(
            error=ErrorDetail(
                code=StatusCode.invalid_argument.value,
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Route handlers raise HTTPException with detail=ErrorDetail(...).model_dump().

    When detail is already a structured dict, use it as the error field
    directly rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors.

    The exception is logged server-side only. The client receives a fixed
    message so internal detail never crosses the API boundary.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_STATUS[StatusCode.internal],
        content=ErrorResponse(
            error=ErrorDetail(
                code=StatusCode.internal.value,
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
