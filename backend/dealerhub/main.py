"""
FastAPI application entry point.

Wires CORS, rate limiting, request correlation logging, the shared
exception handlers, the health endpoints and the v1 API routers. The
database is only touched when the ``database`` storage backend is selected.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from dealerhub.api.errors import register_exception_handlers
from dealerhub.api.v1 import api_router
from dealerhub.core.config import get_settings
from dealerhub.core.logging import (
    clear_context,
    configure_logging,
    get_logger,
    log_performance,
    set_dealer_id,
    set_request_id,
)
from dealerhub.database.connection import (
    check_database_health,
    close_database_connections,
    initialize_database,
)

# Configure logging before application initialization
configure_logging()
logger = get_logger(__name__)

settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan: connect the database on startup, dispose on shutdown.

    Args:
        app: FastAPI application instance
    """
    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        version=settings.app_version,
        storage_backend=settings.storage_backend,
        blob_storage_backend=settings.blob_storage_backend,
    )

    with log_performance(logger, "application_startup"):
        if settings.uses_database:
            await initialize_database()

    yield

    logger.info("Application shutting down")
    with log_performance(logger, "application_shutdown"):
        if settings.uses_database:
            await close_database_connections()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Dealer network back office: stock, quotes, orders and defect reports",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

register_exception_handlers(app)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Bind the request and acting dealer IDs for the duration of a request.

    The request ID comes from ``X-Request-ID`` or is generated, and is echoed
    back on the response. ``X-Dealer-ID`` is optional and only used for logs.
    """
    request_id = set_request_id(request.headers.get("X-Request-ID"))
    set_dealer_id(request.headers.get("X-Dealer-ID"))
    try:
        with log_performance(
            logger, "request", method=request.method, path=request.url.path
        ):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response
    finally:
        clear_context()


@app.get(
    "/health",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Health check endpoint",
)
async def health_check() -> dict[str, str]:
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "storage_backend": settings.storage_backend,
    }


@app.get(
    "/ready",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Readiness check endpoint",
)
async def readiness_check():
    """
    Report whether the record store can serve traffic.

    The memory backend is always ready; the database backend is probed.
    """
    if not settings.uses_database:
        return {"status": "ready", "service": settings.app_name, "database": "not_used"}

    if not await check_database_health(max_retries=1):
        logger.warning("Readiness check failed", dependencies_ready=False)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "service": settings.app_name,
                "database": "unhealthy",
            },
        )

    return {"status": "ready", "service": settings.app_name, "database": "healthy"}


app.include_router(api_router, prefix=settings.api_v1_prefix)

if settings.blob_storage_backend == "local":
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )
