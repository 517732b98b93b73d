from geocache.application.api.middleware.error_handler import (
    ErrorHandlingMiddleware,
    register_exception_handlers,
)

__all__ = ["ErrorHandlingMiddleware", "register_exception_handlers"]
