"""
Unit Tests for Core Exceptions

Tests the exception hierarchy and its serialization.
"""

import pytest

from geocache.core.exceptions import (
    AuthorizationError,
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    ConfigurationError,
    GeoCacheError,
    MalformedPayloadError,
    StoreError,
    UpstreamError,
    UpstreamTransportError,
    UpstreamUnavailableError,
)


@pytest.mark.unit
class TestGeoCacheError:
    """Test the base exception class."""

    def test_base_error_creation(self):
        error = GeoCacheError("Test message")

        assert str(error) == "Test message"
        assert error.details == {}
        assert error.request_id is None

    def test_details_are_copied(self):
        details = {"path": "/maps/api/geocode/json"}
        error = GeoCacheError("Test", details=details)
        error.details["attempt"] = 2

        assert details == {"path": "/maps/api/geocode/json"}
        assert error.details == {"path": "/maps/api/geocode/json", "attempt": 2}

    def test_to_dict(self):
        error = CacheKeyError("Pipeline failed", request_id="req-1", details={"commands": ["get"]})

        assert error.to_dict() == {
            "error_type": "CacheKeyError",
            "message": "Pipeline failed",
            "request_id": "req-1",
            "details": {"commands": ["get"]},
        }

    def test_from_exception_keeps_original(self):
        original = ConnectionError("socket closed")

        error = CacheKeyError.from_exception(original, commands=["get", "expire"])

        assert isinstance(error, CacheKeyError)
        assert error.message == "socket closed"
        assert error.details["original_error"] == "ConnectionError"
        assert error.details["commands"] == ["get", "expire"]

    def test_repr_includes_request_id(self):
        error = GeoCacheError("Oops", request_id="abc")
        assert "request_id='abc'" in repr(error)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Families used by the HTTP exception handlers."""

    def test_store_errors_share_base(self):
        assert StoreError is CacheError
        assert issubclass(CacheConnectionError, CacheError)
        assert issubclass(CacheKeyError, CacheError)

    def test_upstream_errors_share_base(self):
        assert issubclass(UpstreamTransportError, UpstreamError)
        assert issubclass(UpstreamUnavailableError, UpstreamError)

    @pytest.mark.parametrize(
        "exc_type",
        [AuthorizationError, ConfigurationError, MalformedPayloadError, CacheError, UpstreamError],
    )
    def test_everything_is_a_geocache_error(self, exc_type):
        assert issubclass(exc_type, GeoCacheError)


@pytest.mark.unit
class TestUpstreamTransportError:
    def test_carries_status_and_reason(self):
        error = UpstreamTransportError("Upstream returned 503", status_code=503, reason="Service Unavailable")

        assert error.status_code == 503
        assert error.reason == "Service Unavailable"
        assert error.details["status_code"] == 503
