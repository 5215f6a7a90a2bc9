"""
NoteShare Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn noteshare.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                     FastAPI App                          │
    │                                                          │
    │  Middleware:  Rate Limit → Request ID → Access Log       │
    │                                                          │
    │  Routes:                                                 │
    │    /api/taxonomy   /api/notes   /api/notes/{id}/...      │
    │    /api/auth       /health                               │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  Authentication→401  Authorization→403 │
    │    NotFound→404    RateLimit→429       RemoteFailure→500 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, storage directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from noteshare import __version__
from noteshare.config import settings
from noteshare.database import dispose_engine
from noteshare.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NoteShareError,
    NotFoundError,
    RateLimitExceededError,
    RemoteFailure,
    ValidationError,
)
from noteshare.middleware.logging import RequestLoggingMiddleware
from noteshare.middleware.rate_limit import RateLimitMiddleware
from noteshare.middleware.request_id import RequestIDMiddleware, request_id_var
from noteshare.routes import auth, health, note_detail, notes, taxonomy

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-query and per-connection chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("NoteShare Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health still answers and every /api call returns 401
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s (bucket '%s')", storage.resolve(), settings.notes_bucket)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("NoteShare Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the NoteShareError hierarchy onto HTTP responses.

        ValidationError         → 400
        AuthenticationError     → 401
        AuthorizationError      → 403
        NotFoundError           → 404
        RateLimitExceededError  → 429
        RemoteFailure           → 500 (per-action message, context logged only)
        NoteShareError / other  → 500

    Responses never include stack traces or remote error text.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("authentication_required", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        logger.warning("[%s] Forbidden: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=403,
            content=_error_body("forbidden", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=429,
            content=_error_body("rate_limit_exceeded", exc.message, {"retry_after": exc.retry_after}),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(RemoteFailure)
    async def handle_remote_failure(request: Request, exc: RemoteFailure):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(NoteShareError)
    async def handle_noteshare_error(request: Request, exc: NoteShareError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="NoteShare API",
        description=(
            "Share course notes: upload PDFs or images, or type notes directly; "
            "browse and filter by subject and professor; rate and download."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After", "Content-Disposition"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(taxonomy.router)
    app.include_router(notes.router)
    app.include_router(note_detail.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


app = create_app()
