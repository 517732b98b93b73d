#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Configures the geo-cache application: lifespan-managed resources,
middleware, exception handlers and routes.

Run with:
    uvicorn geocache.application.app:app
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from geocache.application.api.middleware import ErrorHandlingMiddleware, register_exception_handlers
from geocache.application.api.routes import health_router, maps_router, metrics_router
from geocache.application.services.cache_service import build_cache_services, build_http_client
from geocache.core.config.constants import HEADER_REQUEST_ID, Stage
from geocache.core.config.settings import Settings, get_settings
from geocache.core.logging.logger import clear_request_id, get_logger, set_request_id, setup_logging
from geocache.infrastructure.store import RedisClient

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Own the long-lived resources: Redis pool and upstream HTTP client.

    Both are released on shutdown, including when startup fails half way.
    """
    settings: Settings = app.state.settings

    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting geo-cache",
        stage=Stage.INITIALIZATION.value,
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    store = RedisClient(settings)
    http_client = build_http_client(settings)

    try:
        await store.connect()
        app.state.services = build_cache_services(settings, store, http_client)
        logger.info("Application startup complete", stage=Stage.INITIALIZATION.value)

        yield

    finally:
        logger.info("Shutting down application")
        await http_client.aclose()
        await store.disconnect()
        logger.info("Application shutdown complete")


# ============================================================================
# Application Factory
# ============================================================================


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Read-through cache for geolocation API lookups",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        ErrorHandlingMiddleware,
        include_traceback=(settings.app.ENVIRONMENT == "development"),
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Correlate every log line of a request with one ID."""
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)
        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(maps_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "geocache.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
