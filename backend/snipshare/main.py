"""
SnipShare — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn snipshare.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  RateLimit → RequestID → Logging → SecurityHeaders       │
    │            → GZip → Session                              │
    │                                                          │
    │  Routes:                                                 │
    │  accounts (/login, /register, /createUser, /logout)      │
    │  snippets (/, /profile, /new, /create, /{id}/...)        │
    │  health   (/health)      static (/static/...)            │
    │                                                          │
    │  Exception Handlers (HTML pages):                        │
    │  NotFound→404 │ Forbidden→403 │ Validation→400 │ *→500   │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config validation → wait for database
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from snipshare import __version__
from snipshare.config import settings
from snipshare.database import dispose_engine, wait_for_database
from snipshare.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    SnipShareError,
    ValidationError,
)
from snipshare.middleware.logging import RequestLoggingMiddleware
from snipshare.middleware.rate_limit import RateLimitMiddleware
from snipshare.middleware.request_id import RequestIDMiddleware, request_id_var
from snipshare.middleware.security_headers import SecurityHeadersMiddleware
from snipshare.routes import accounts, health, snippets
from snipshare.templating import render

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by Docker / the process manager)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate security-critical configuration
        3. Wait (bounded) for the database to accept connections
    Shutdown:
        1. Dispose database engine
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("SnipShare %s starting up (%s)...", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    try:
        await wait_for_database()
        logger.info("Database reachable")
    except Exception as e:
        # Keep serving: /health reports the outage and pages show the 500 view
        logger.error("Database unreachable after %d attempts: %s", settings.db_connect_attempts, e)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("SnipShare shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions that escape a handler to error pages.

    Handler hierarchy:
        NotFoundError              → 404 page
        ForbiddenError             → 403 page
        ValidationError            → 400 page (forms normally catch these first)
        DatabaseError              → 500 page
        SnipShareError (base)      → 500 page
        HTTPException (Starlette)  → 404 page for unknown routes, else generic
        RequestValidationError     → 400 page
        Exception (fallback)       → 500 page; exception text only in development

    Security: stack traces and driver messages are logged, never rendered
    in production.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] Not found: %s", rid, exc.message)
        return render(request, "errors/404.html", {"request_id": rid}, status_code=404)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        rid = request_id_var.get("")
        logger.warning("[%s] Forbidden: %s | Context: %s", rid, exc.message, exc.context)
        return render(request, "errors/403.html", {"request_id": rid}, status_code=403)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return render(
            request,
            "errors/error.html",
            {"status_code": 400, "message": exc.message, "request_id": rid},
            status_code=400,
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return render(request, "errors/500.html", {"request_id": rid}, status_code=500)

    @app.exception_handler(SnipShareError)
    async def handle_app_error(request: Request, exc: SnipShareError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return render(request, "errors/500.html", {"request_id": rid}, status_code=500)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = request_id_var.get("")
        if exc.status_code == 404:
            return render(request, "errors/404.html", {"request_id": rid}, status_code=404)
        return render(
            request,
            "errors/error.html",
            {"status_code": exc.status_code, "message": exc.detail, "request_id": rid},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request: %s", rid, exc.errors())
        return render(
            request,
            "errors/error.html",
            {"status_code": 400, "message": "The request could not be understood.", "request_id": rid},
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        if not settings.is_production:
            return render(
                request,
                "errors/error.html",
                {"status_code": 500, "message": repr(exc), "request_id": rid},
                status_code=500,
            )
        return render(request, "errors/500.html", {"request_id": rid}, status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    The OpenAPI docs are switched off: every route renders HTML, so the
    generated schema would describe nothing useful.
    """
    app = FastAPI(
        title="SnipShare",
        description="Store and share short code snippets.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)

    # Signed-cookie sessions; innermost so handlers and exception pages see them
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.is_production,
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(health.router)
    app.include_router(accounts.router)
    app.include_router(snippets.router)

    return app


app = create_app()
