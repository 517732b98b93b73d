"""
Upstream and Authorization Exceptions

Errors surfaced to the caller when the request cannot be served from the
cache, the local resolver or a successful upstream call.
"""

from typing import Any

from geocache.core.exceptions.base import GeoCacheError


class AuthorizationError(GeoCacheError):
    """
    Raised when no upstream credential can be resolved.

    Neither a configured default key nor a caller-supplied ``key`` parameter
    is present. Rendered as 401 with no store or upstream side effects.
    """
    pass


class UpstreamError(GeoCacheError):
    """Base exception for upstream API failures."""
    pass


class UpstreamTransportError(UpstreamError):
    """
    Raised when the upstream answers with a non-success HTTP status.

    The caller receives the same status code and the upstream reason phrase.
    Nothing is written to the cache.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        reason: str,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, request_id=request_id, details=details)
        self.status_code = status_code
        self.reason = reason
        self.details.setdefault("status_code", status_code)


class UpstreamUnavailableError(UpstreamError):
    """
    Raised when the upstream cannot be reached or answers with a body
    that is not JSON.

    Common causes:
    - DNS or connect failure
    - Request timeout
    - Truncated or non-JSON 200 response
    """
    pass
