"""
Error Handling

Two layers:

1. Exception handlers for the geo-cache exception families, registered on
   the app by ``register_exception_handlers``:
   - CacheError → 500 (store failure, fatal for the request)
   - UpstreamUnavailableError → 502
   - any other GeoCacheError → 500
2. ErrorHandlingMiddleware, a catch-all for anything else, so clients never
   see a stack trace outside development.
"""

import traceback
from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from geocache.core.config.constants import HEADER_REQUEST_ID
from geocache.core.exceptions import CacheError, GeoCacheError, UpstreamUnavailableError
from geocache.core.logging.logger import get_logger, get_request_id

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Last line of defense for exceptions no handler claimed."""

    def __init__(self, app, include_traceback: bool = False):
        """
        Args:
            app: The ASGI application
            include_traceback: Include stack traces in error responses
                               (development only)
        """
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            error_type = type(e).__name__

            logger.error(
                f"Unhandled exception in request: {request.method} {request.url.path}",
                method=request.method,
                path=request.url.path,
                error_type=error_type,
                error_message=str(e),
                exc_info=True,
            )

            error_response = {
                "error": "internal_server_error",
                "message": "An unexpected error occurred while processing your request",
                "error_type": error_type,
            }

            if self.include_traceback:
                error_response["traceback"] = traceback.format_exc()
                error_response["detail"] = str(e)

            return JSONResponse(status_code=500, content=error_response)


def _error_response(status_code: int, exc: GeoCacheError) -> JSONResponse:
    if exc.request_id is None:
        exc.request_id = get_request_id()
    return JSONResponse(
        status_code=status_code,
        content=exc.to_dict(),
        headers={HEADER_REQUEST_ID: exc.request_id or ""},
    )


async def store_error_handler(request: Request, exc: CacheError) -> JSONResponse:
    logger.error(f"Store failure: {exc.message}", error_type=type(exc).__name__, path=request.url.path)
    return _error_response(500, exc)


async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailableError) -> JSONResponse:
    logger.error(f"Upstream unavailable: {exc.message}", error_type=type(exc).__name__, path=request.url.path)
    return _error_response(502, exc)


async def geocache_error_handler(request: Request, exc: GeoCacheError) -> JSONResponse:
    logger.error(f"geo-cache exception: {exc.message}", error_type=type(exc).__name__, path=request.url.path)
    return _error_response(500, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CacheError, store_error_handler)
    app.add_exception_handler(UpstreamUnavailableError, upstream_unavailable_handler)
    app.add_exception_handler(GeoCacheError, geocache_error_handler)
