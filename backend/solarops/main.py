"""SolarOps Backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other solarops imports
# to avoid the structlog cache pitfall (structlog caches the processor chain on first use).
from solarops.core.logging import configure_structlog
from solarops.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from solarops.api.routes import api_router
from solarops.core.config import get_settings
from solarops.core.exceptions import (
    NotFoundError,
    PermissionDenied,
    PersistenceError,
    PhaseValidationError,
    SolarOpsError,
    UnknownStatusError,
)
from solarops.db import init_db, close_db, init_redis, close_redis
from solarops.middleware.correlation import (
    setup_correlation_middleware,
    get_correlation_id,
)

logger = structlog.get_logger(__name__)

# Most specific first; PersistenceError and anything unlisted map to 500
_ERROR_STATUS: tuple[tuple[type[SolarOpsError], int], ...] = (
    (PhaseValidationError, 422),
    (UnknownStatusError, 422),
    (NotFoundError, 404),
    (PermissionDenied, 403),
    (PersistenceError, 500),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Graceful shutdown flag: the SIGTERM handler flips it so /api/health returns 503
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)

    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    await init_db()
    logger.info("db_initialized")

    await init_redis()
    logger.info("redis_initialized", channel=settings.broadcast_channel)

    yield

    logger.info("shutdown_begin")
    await close_redis()
    await close_db()
    logger.info("shutdown_complete")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking.

    Logs errors server-side with full context, returns sanitized response to client.
    """
    debug_id = str(uuid.uuid4())
    user_id = getattr(request.state, "user_id", None)

    logger.error(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=user_id,
        detail=exc.detail,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "debug_id": debug_id},
        headers=getattr(exc, "headers", None),
    )


async def solarops_exception_handler(request: Request, exc: SolarOpsError) -> JSONResponse:
    """Map domain errors to HTTP responses with debug_id tracking."""
    debug_id = str(uuid.uuid4())
    status_code = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
    user_id = getattr(request.state, "user_id", None)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "domain_error",
        status_code=status_code,
        error_type=type(exc).__name__,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=user_id,
        error=str(exc),
        exc_info=status_code >= 500,
    )

    # Store failures are reported generically; the log carries the detail
    detail = "Internal server error" if status_code >= 500 else str(exc)
    content: dict = {"detail": detail, "debug_id": debug_id}
    if isinstance(exc, PhaseValidationError):
        content["missing_fields"] = exc.missing_fields
    return JSONResponse(status_code=status_code, content=content)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())
    user_id = getattr(request.state, "user_id", None)

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=user_id,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "debug_id": debug_id},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Solar installation project lifecycle service",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(dict.fromkeys([settings.frontend_url, *settings.cors_origins])),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(SolarOpsError)(solarops_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "solarops.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
