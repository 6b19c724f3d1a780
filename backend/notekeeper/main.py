"""
Notekeeper Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn notekeeper.main:app).
When:  Once at server startup; the returned app handles all requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────┐ ┌────────┐ ┌─────────┐ ┌──────────────┐   │
    │  │ CORS │→│ Req ID │→│ Logging │→│ Auth RateLim │   │
    │  └──────┘ └────────┘ └─────────┘ └──────────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌────────────────┐ ┌───────────┐  │
    │  │ signup/login │ │ /notes (guard) │ │ /health   │  │
    │  └──────────────┘ └────────────────┘ └───────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ 400 validation │ 401/403 token │ 404 │ 500   │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (missing JWT_SECRET is fatal)
    3. Create the schema if CREATE_SCHEMA_ON_STARTUP (failure is fatal)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from notekeeper import __version__
from notekeeper.config import settings
from notekeeper.database import dispose_engine, init_models
from notekeeper.exceptions import (
    ConfigurationError,
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    NotekeeperError,
    NotFoundError,
    ValidationError,
)
from notekeeper.middleware.logging import RequestLoggingMiddleware
from notekeeper.middleware.rate_limit import AuthRateLimitMiddleware
from notekeeper.middleware.request_id import RequestIDMiddleware, request_id_var
from notekeeper.routes import auth, health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by Docker / systemd)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Run startup checks, then clean up on shutdown.

    Startup failures are fatal: the exception propagates out of the
    lifespan and uvicorn refuses to serve. A server that cannot sign tokens
    or reach its store has nothing useful to answer with.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Notekeeper Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.critical("Configuration error: %s", str(e))
        raise ConfigurationError(message=str(e))

    if settings.create_schema_on_startup:
        try:
            await init_models()
        except (SQLAlchemyError, OSError) as e:
            logger.critical("Database initialization failed: %s", str(e))
            raise ConfigurationError(
                message="Database initialization failed",
                context={"error_type": type(e).__name__},
            )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Notekeeper Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {"error": error, "message": message}
    if details:
        content["details"] = details
    # request.state survives into ServerErrorMiddleware, which runs outside
    # the request-id middleware's context
    content["request_id"] = getattr(request.state, "request_id", "") or request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP status codes and JSON bodies.

    Handler table:
        ValidationError / RequestValidationError → 400 validation_error
        DuplicateEmailError                      → 400 duplicate_email
        InvalidCredentialsError                  → 400 invalid_credentials
        MissingTokenError                        → 401 missing_token
        InvalidTokenError / ExpiredTokenError    → 403 invalid_token / expired_token
        NotFoundError                            → 404 not_found
        DatabaseError                            → 500 server_error
        NotekeeperError (base)                   → 500 server_error
        Exception (fallback)                     → 500 internal_server_error

    5xx bodies never include internal details; those go to the log.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(request, 400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON, wrong types, or a path id that is not a UUID."""
        fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        return _error_response(
            request,
            400,
            "validation_error",
            "Request body or parameters are invalid",
            {"fields": fields},
        )

    @app.exception_handler(DuplicateEmailError)
    async def handle_duplicate_email(request: Request, exc: DuplicateEmailError):
        return _error_response(request, 400, "duplicate_email", exc.message)

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return _error_response(request, 400, "invalid_credentials", exc.message)

    @app.exception_handler(MissingTokenError)
    async def handle_missing_token(request: Request, exc: MissingTokenError):
        return _error_response(
            request,
            401,
            "missing_token",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(InvalidTokenError)
    async def handle_invalid_token(request: Request, exc: InvalidTokenError):
        logger.info("[%s] Rejected token: %s", request_id_var.get(""), exc.error_code)
        return _error_response(request, 403, exc.error_code, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(request, 404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(
            request,
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(NotekeeperError)
    async def handle_app_error(request: Request, exc: NotekeeperError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _error_response(
            request,
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Notekeeper API",
        description=(
            "Personal notes API. Sign up, log in for a bearer token, then "
            "create, edit, pin, archive and delete your own notes.\n\n"
            "Pinning or archiving sets a note's `status` (Active, Pinned, "
            "Archived). The `category` field is never overwritten: a pinned "
            "note keeps its category, so clients must read `status`, not "
            "`category`, to find pinned or archived notes."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # CORS → RequestID → Logging → AuthRateLimit → router
    # CORS outermost: its headers must reach every response, 429s included
    app.add_middleware(AuthRateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# uvicorn expects `notekeeper.main:app` to be importable
app = create_app()
