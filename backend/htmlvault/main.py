"""
HTMLVault Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database handle, registers middleware,
       exception handlers and routers, and returns the app. `run()` serves
       it with uvicorn (console script `htmlvault`).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌───────────┐ ┌──────────┐ ┌─────────┐ ┌─────────┐ │
    │  │ Body Size │→│ Req ID   │→│ Logging │→│GZip/CORS│ │
    │  └───────────┘ └──────────┘ └─────────┘ └─────────┘ │
    │                                                     │
    │  Routes:                                            │
    │  POST /api/upload   GET|PUT|DELETE /api/content/:id │
    │  GET /api/content   GET /health                     │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Storage→500        │
    │  Unmatched route→404 │ anything else→500            │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the table if absent
    Shutdown: dispose the connection pool (uvicorn runs this on SIGINT/SIGTERM
              after it stops accepting connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from htmlvault import __version__
from htmlvault.config import Settings, settings
from htmlvault.database import Database
from htmlvault.exceptions import NotFoundError, StorageError, ValidationError
from htmlvault.middleware.body_limit import BodySizeLimitMiddleware
from htmlvault.middleware.logging import RequestLoggingMiddleware
from htmlvault.middleware.request_id import RequestIDMiddleware, request_id_var
from htmlvault.routes import content, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # One line per request already comes from htmlvault.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if log_level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then CREATE TABLE IF NOT EXISTS.
    Shutdown: close every pooled connection.

    A table-creation failure is logged and the server keeps running; requests
    then fail with 500 and /health reports the database as disconnected.
    """
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("HTMLVault Backend starting up (environment=%s)", app_settings.environment)

    try:
        await database.create_tables()
    except Exception as e:
        logger.error("Error creating table: %s", str(e), exc_info=True)

    logger.info("Listening at http://%s:%d", app_settings.host, app_settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Shutting down gracefully...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """
    Map every failure to a `{error, details?}` JSON body.

        ValidationError / RequestValidationError → 400
        NotFoundError                            → 404
        StorageError                             → 500 (+ details outside production)
        Unmatched route or method                → 404 "Route not found"
        Exception (fallback)                     → 500 "Something went wrong!"
    """

    def error_body(message: str, details: Optional[str] = None) -> dict:
        body = {"error": message}
        if details is not None and not app_settings.is_production:
            body["details"] = details
        return body

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body is not JSON, not an object, or has non-string fields."""
        rid = request_id_var.get("")
        logger.warning("[%s] Invalid request body: %s", rid, exc.errors())
        return JSONResponse(status_code=400, content=error_body("Invalid request body"))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body(exc.message))

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=error_body(exc.message, exc.details))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # The router raises 404 for unknown paths and 405 for known paths
        # with the wrong method; both mean no handler matched.
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body("Something went wrong!", str(exc)),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Defaults to the process-wide `settings`.
        database:     Defaults to a Database built from app_settings. Tests
                      pass one pointing at a throwaway SQLite file.
    """
    app_settings = app_settings or settings
    database = database or Database.from_settings(app_settings)

    app = FastAPI(
        title="HTMLVault API",
        description="Store, list, update and delete named HTML documents.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute, so the body-size check runs first.
    origins = app_settings.cors_origins_list or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=app_settings.max_body_size)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, app_settings)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(content.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app on settings.host:settings.port."""
    uvicorn.run(
        "htmlvault.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# uvicorn htmlvault.main:app
app = create_app()


if __name__ == "__main__":
    run()
