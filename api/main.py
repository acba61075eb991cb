"""
api/main.py -- FastAPI application entry point for Armory.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware, in the order a request passes through it:
  1. log_requests          -- one access-log line per request, rejected ones included
  2. CORSMiddleware        -- CORS headers for the web client's origins
  3. TrustedHostMiddleware -- 400 for an unexpected Host header

Lifespan builds every process-wide object once (stores, token service,
services) from Settings and hangs it on app.state; shutdown disposes the
store engines. Settings are read at import (middleware needs them); stores
are never created at import time.
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
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import HealthResponse
from api.responses import envelope, error_response
from api.routes.v1.assets import router as assets_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.bases import router as bases_router
from auth.accounts import AccountService
from auth.credentials import CredentialStore
from auth.dependencies import TOKEN_HEADER
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings
from core.errors import ArmoryError
from inventory.repository import AssetRepository
from inventory.store import AssetStore

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
logger = logging.getLogger("armory.api")


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def wire_services(app: FastAPI, user_store: UserStore, asset_store: AssetStore, tokens: TokenService) -> None:
    """Attach stores and the services built on them to app.state.

    Shared by the real lifespan and the test fixtures, so both run routes
    against exactly the same object graph.
    """
    app.state.user_store = user_store
    app.state.asset_store = asset_store
    app.state.tokens = tokens
    app.state.accounts = AccountService(CredentialStore(user_store), tokens)
    app.state.assets = AssetRepository(asset_store)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create stores and services on startup; dispose engines on shutdown."""
    logger.info("Armory API starting up")
    wire_services(
        app,
        user_store=UserStore(_settings.database_url),
        asset_store=AssetStore(_settings.database_url),
        tokens=TokenService(_settings.secret_key, _settings.token_expire_seconds),
    )
    logger.info("Stores initialized (token lifetime %ds)", _settings.token_expire_seconds)

    yield

    app.state.user_store.close()
    app.state.asset_store.close()
    logger.info("Armory API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Armory API",
    description="Asset tracking across bases with role-based access.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", TOKEN_HEADER],
    expose_headers=[TOKEN_HEADER],
    max_age=3600,
)


def _log_access(request: Request, status_code: int, start: float) -> None:
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        status_code,
        (time.perf_counter() - start) * 1000,
        request.client.host if request.client else "unknown",
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # Unhandled errors propagate past this middleware to the 500 handler.
        _log_access(request, 500, start)
        raise
    _log_access(request, response.status_code, start)
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(assets_router, prefix="/api", tags=["Assets"])
app.include_router(bases_router, prefix="/api", tags=["Bases"])


# ---------------------------------------------------------------------------
# Exception handlers -- every failure leaves as the api.responses envelope
# ---------------------------------------------------------------------------


@app.exception_handler(ArmoryError)
async def armory_error_handler(request: Request, exc: ArmoryError) -> JSONResponse:
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed body, path or query (including a non-integer id) is a 400."""
    return envelope(400, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown route, wrong method and other errors raised by the framework itself."""
    return envelope(exc.status_code, f"http_{exc.status_code}", str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = repr(exc) if _settings.debug else None
    return envelope(500, "internal_error", "An unexpected error occurred.", detail)


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Liveness probe. Needs no token."""
    return HealthResponse(version=VERSION)
