"""
Base Exception Class

This module contains the base exception class that all other geo-cache
exceptions inherit from. Specialized exceptions live in their themed modules.
"""

from typing import Any


class GeoCacheError(Exception):
    """
    Base exception for all geo-cache errors.

    Attributes:
        message: Error message
        request_id: Request ID for correlation (if available)
        details: Additional error details (dict)

    Example:
        raise UpstreamTransportError(
            "Upstream returned 500",
            status_code=500,
            reason="Internal Server Error",
            details={"path": "/maps/api/geocode/json"},
        )
    """

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, message, request_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        request_id_str = f", request_id='{self.request_id}'" if self.request_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{request_id_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        request_id: str | None = None,
        **details,
    ) -> "GeoCacheError":
        """
        Create a GeoCacheError from another exception.

        Useful for wrapping third-party exceptions with additional context.

        Example:
            >>> try:
            ...     await pipe.execute()
            ... except redis.RedisError as e:
            ...     raise CacheKeyError.from_exception(e, commands=["get", "expire"])
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details,
        }
        return cls(error_message, request_id=request_id, details=error_details)


class ConfigurationError(GeoCacheError):
    """Raised when configuration is invalid or missing."""
    pass
