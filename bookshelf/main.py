"""
Bookshelf — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       lifespan() owns the database engine for the life of the process.
Who:   Served by uvicorn (`uvicorn bookshelf.main:app` or `python -m bookshelf`).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────────────────────┐ │
    │  │ Req ID   │→│ Logging  │→│ Request deadline     │ │
    │  └──────────┘ └──────────┘ └──────────────────────┘ │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────┐ ┌──────────────────┐  │
    │  │ /books, /books/{id}      │ │ GET /health      │  │
    │  └──────────────────────────┘ └──────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌────────────────────────────────────────────────┐ │
    │  │ Input→400 │ NotFound→404 │ Method→405 │ DB→500 │ │
    │  └────────────────────────────────────────────────┘ │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup (any failure here aborts the process before it listens):
    1. Initialize logging
    2. Validate configuration (DATABASE_URL is required)
    3. Build the engine / connection pool
    4. Ensure the books table exists

    Shutdown:
    1. Dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookshelf import __version__
from bookshelf.bootstrap import ensure_schema
from bookshelf.config import settings
from bookshelf.database import (
    create_engine_from_settings,
    create_session_factory,
    dispose_engine,
)
from bookshelf.exceptions import DatabaseError, NotFoundError, ValidationError
from bookshelf.middleware.logging import RequestLoggingMiddleware
from bookshelf.middleware.request_id import RequestIDMiddleware, request_id_var
from bookshelf.middleware.timeout import RequestTimeoutMiddleware
from bookshelf.responses import INTERNAL_ERROR_MESSAGE, error_response
from bookshelf.routes import books, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # bookshelf.access replaces uvicorn's access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the database dependencies on startup and release them on shutdown.

    The engine and session factory are stored on app.state; request handlers
    reach them only through dependencies. Raising here makes uvicorn abort
    startup, so a misconfigured or unreachable database is fatal.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Bookshelf %s starting up...", __version__)

    try:
        settings.validate_required()
    except ValueError as e:
        logger.critical("%s", e)
        raise

    engine = create_engine_from_settings(settings)
    try:
        await ensure_schema(engine)
    except Exception as e:
        logger.critical("Schema bootstrap failed: %s: %s", type(e).__name__, e)
        await dispose_engine(engine)
        raise

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    logger.info("Server ready at http://%s:%d", settings.host, settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Bookshelf shutting down...")
    await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def describe_invalid_request(errors: List[Dict[str, Any]]) -> str:
    """
    Condense FastAPI's validation errors into one client message.

    A bad path id wins over a bad body. Errors at the body root (unparseable
    JSON, empty body, not an object) read as invalid JSON; errors on a field
    mean title or author is missing, empty or not a string.
    """
    locations = [tuple(err.get("loc", ())) for err in errors]
    if any(loc[:1] == ("path",) for loc in locations):
        return "invalid id"
    if any(
        err.get("type") == "json_invalid" or loc == ("body",)
        for err, loc in zip(errors, locations)
    ):
        return "invalid JSON"
    return "title and author are required"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to its status code and the `{"error": ...}` envelope.

    Handler table:
        RequestValidationError  → 400 (bad id, malformed JSON, missing field)
        ValidationError         → 400
        NotFoundError           → 404
        StarletteHTTPException  → its own status (405 for a wrong method)
        DatabaseError           → 500, cause logged server-side
        Exception (fallback)    → 500, stack trace logged server-side

    Unexpected exceptions from a route are normally answered by
    RequestIDMiddleware; the Exception handler here covers anything raised
    outside it, where no request id is set.

    Client-input and not-found outcomes are expected and only logged at DEBUG.
    No driver message, SQL or stack information is ever put in a response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.debug("[%s] Rejected input: %s", request_id_var.get(""), exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = list(exc.errors())
        return await handle_validation_error(
            request,
            ValidationError(
                message=describe_invalid_request(errors),
                context={"errors": [err.get("type") for err in errors]},
            ),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, str) and exc.detail:
            message = exc.detail
        else:
            message = HTTPStatus(exc.status_code).phrase
        return error_response(exc.status_code, message.lower(), headers=exc.headers)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s | Cause: %r",
            request_id_var.get(""),
            exc.message,
            exc.context,
            exc.__cause__,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            exc,
            exc_info=True,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fresh instance on every call, so tests can build their own app
    and override its dependencies.
    """
    app = FastAPI(
        title="Bookshelf API",
        description="Create, read, update, delete and list book records.",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → Request deadline → route
    app.add_middleware(RequestTimeoutMiddleware, timeout=settings.request_timeout)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(books.router)
    app.include_router(health.router)

    return app


app = create_app()
