"""
Storyboard Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Started by the `storyboard` console script (run()), which binds
       APP_HOST:PORT, or by `uvicorn storyboard.main:app`.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                     FastAPI App                          │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌─────────┐ ┌──────────────┐  │
    │  │  Req ID  │→│ Logging  │→│ Session │→│     CORS     │  │
    │  └──────────┘ └──────────┘ └─────────┘ └──────────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  /api/parts  /api/upload  /api/auth  /uploads  /  /health│
    │                                                          │
    │  Exception Handlers:                                     │
    │  StoryboardError→status_code │ RequestValidation→400     │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (log problems, keep serving)
    3. Create the upload directory
    4. Create missing tables when AUTO_CREATE_SCHEMA is on

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from storyboard import __version__
from storyboard.config import settings
from storyboard.database import dispose_engine, init_db
from storyboard.exceptions import StoryboardError
from storyboard.middleware.logging import RequestLoggingMiddleware
from storyboard.middleware.request_id import RequestIDMiddleware, request_id_var
from storyboard.routes import auth, health, pages, parts, upload
from storyboard.services.file_service import UPLOAD_URL_PREFIX, file_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: 2026-01-15T12:00:00 [INFO] storyboard.access: GET /api/parts 200 3.1ms
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Storyboard %s starting up (env=%s)", __version__, settings.app_env)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("Insecure configuration: %s", str(e))

    logger.info("Upload directory: %s", file_service.storage_root)

    if settings.auto_create_schema:
        await init_db()
        logger.info("Database schema ready")

    logger.info("Server ready at http://%s:%d", settings.app_host, settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Storyboard shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {"error": error, "message": message}
    if details:
        content["details"] = details
    content["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses with one JSON shape:
        {"error": code, "message": text, "details"?: {...}, "request_id": id}

    Handler hierarchy:
        StoryboardError 4xx         → its status, message and context as details
        StoryboardError 5xx         → 500, generic message, context logged only
        RequestValidationError      → 400 validation_error (malformed body)
        Exception (fallback)        → 500 internal_server_error
    """

    @app.exception_handler(StoryboardError)
    async def handle_storyboard_error(request: Request, exc: StoryboardError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
            # 5xx messages are fixed, user-safe strings; SQL and OS details stay in context
            return _error_response(exc.status_code, "server_error", exc.message)

        if exc.status_code == 400:
            logger.warning("[%s] Validation error: %s", rid, exc.message)
            return _error_response(400, exc.error_code, exc.message, exc.context)

        return _error_response(exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body failed schema parsing (e.g. `parts` is not an array)."""
        rid = request_id_var.get("")
        errors = exc.errors()
        logger.warning("[%s] Malformed request body: %s", rid, errors)
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid value for '{field}'" if field else "Invalid request body"
        return _error_response(400, "validation_error", message, {"field": field} if field else None)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Storyboard API",
        description=(
            "Ordered, illustrated story parts with a public read-only view "
            "and a session-authenticated editor."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → Session → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Signed cookie session; max_age is the 60-day login lifetime
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.is_production,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(parts.router)
    app.include_router(upload.router)
    app.include_router(auth.router)
    app.include_router(health.router)
    app.include_router(pages.router)

    # Uploaded images are public
    app.mount(
        UPLOAD_URL_PREFIX,
        StaticFiles(directory=str(file_service.storage_root)),
        name="uploads",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()


def run() -> None:
    """
    Console entry point (`storyboard`): serve the app on APP_HOST:PORT.

    Equivalent to `uvicorn storyboard.main:app --host $APP_HOST --port $PORT`.
    """
    uvicorn.run(
        "storyboard.main:app",
        host=settings.app_host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
