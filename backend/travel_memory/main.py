"""
TravelMemory Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() is the composition root. It resolves
       settings, builds the single MongoConnector, subscribes the connection
       log lines, registers middleware, exception handlers and routes.
Who:   Called by the CLI (python -m travel_memory); `app` at the bottom of
       this module is what `uvicorn travel_memory.main:app` serves.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────────────────┐  │
    │  │   CORS   │→│  Req ID  │→│  Logging            │  │
    │  └──────────┘ └──────────┘ └─────────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌──────────┐ ┌────────┐ ┌─────────┐   │
    │  │ /trip/*  │ │ /metrics │ │ /hello │ │ /health │   │
    │  └──────────┘ └──────────┘ └────────┘ └─────────┘   │
    │                                                     │
    │  app.state: settings, connector, metrics_registry   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Schedule connector.connect() in the background (does not block)
    3. The server binds and starts listening

    Shutdown (external signal only):
    1. Cancel a still-pending connect attempt
    2. Close the MongoDB client
"""

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import REGISTRY, CollectorRegistry

from travel_memory import __version__
from travel_memory.config import Settings, get_settings
from travel_memory.database import MongoConnector
from travel_memory.exceptions import (
    DatabaseError,
    NotFoundError,
    StorageConnectError,
    ValidationError,
)
from travel_memory.middleware.logging import RequestLoggingMiddleware
from travel_memory.middleware.request_id import RequestIDMiddleware, request_id_var
from travel_memory.routes import health, metrics, trips

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (process managers and containers capture it)
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request lines come from RequestLoggingMiddleware; the driver is chatty at DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def _log_connected() -> None:
    logger.info("DB connected")


def _log_connection_error(error: StorageConnectError) -> None:
    logger.error("DB connection error: %s", error.message)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Run the connector in the background for the lifetime of the app.

    The connect attempt is a task, not an await: the server starts listening
    while MongoDB is still being reached, and a failed attempt only produces
    a log line.
    """
    settings: Settings = app.state.settings
    connector: MongoConnector = app.state.connector

    setup_logging(settings.log_level)
    logger.info("TravelMemory Backend %s starting up...", __version__)

    connect_task = asyncio.create_task(connector.connect())
    app.state.connect_task = connect_task

    yield

    logger.info("TravelMemory Backend shutting down...")
    if not connect_task.done():
        connect_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await connect_task
    await connector.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError      → 400 Bad Request
        NotFoundError        → 404 Not Found
        DatabaseError        → 500 Internal Server Error (generic message)
        Exception (fallback) → 500 Internal Server Error

    Details of 500s are logged server-side only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    # Starlette runs this handler outside the middleware stack, so the CORS
    # and request id headers are added here
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        headers = _cors_headers(request)
        if rid:
            headers["X-Request-ID"] = rid
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
            headers=headers,
        )


def _cors_headers(request: Request) -> Dict[str, str]:
    """CORS response headers CORSMiddleware would have set for this request."""
    origin = request.headers.get("origin")
    if not origin:
        return {}
    allowed = request.app.state.settings.cors_origins_list
    if "*" in allowed:
        allow_origin = "*"
    elif origin in allowed:
        allow_origin = origin
    else:
        return {}
    headers = {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Expose-Headers": "X-Request-ID",
    }
    if allow_origin != "*":
        headers["Vary"] = "Origin"
    return headers


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    connector: Optional[MongoConnector] = None,
    metrics_registry: Optional[CollectorRegistry] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:         Resolved configuration; read from the environment if omitted
        connector:        Storage connector; built from settings.mongo_uri if omitted
        metrics_registry: Registry rendered by /metrics; prometheus_client's
                          default registry if omitted

    Returns:
        Configured FastAPI instance. Nothing touches the network until the
        lifespan starts.
    """
    settings = settings or get_settings()
    if connector is None:
        connector = MongoConnector(
            settings.mongo_uri,
            server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
        )
    connector.on_connect(_log_connected)
    connector.on_error(_log_connection_error)

    app = FastAPI(
        title="TravelMemory API",
        description="Trip journal backend: trip CRUD over MongoDB, Prometheus metrics.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connector = connector
    app.state.metrics_registry = metrics_registry if metrics_registry is not None else REGISTRY

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(metrics.router)
    app.include_router(trips.router)
    app.include_router(health.router)

    return app


# Module-level instance for `uvicorn travel_memory.main:app`. The driver
# client is lazy, so importing this module opens no connections.
app = create_app()
