"""
System Constants and Enumerations

This module defines constants and enumerations shared by the cache layer,
the store adapter and the HTTP application.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for key tags, metric hash names and headers
- Type-safe enums for stage logging and upstream status classification
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Request processing stages for structured logging.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    Each stage represents one branch of the read-through protocol.
    """

    INITIALIZATION = "0.0_INITIALIZATION"
    AUTHORIZATION = "1.0_AUTHORIZATION"
    LOCAL_RESOLVE = "2.0_LOCAL_RESOLVE"
    MIGRATE = "3.0_LEGACY_MIGRATION"
    CACHE_LOOKUP = "4.0_CACHE_LOOKUP"
    CACHE_HIT = "4.1_CACHE_HIT"
    CACHE_REFORMAT = "4.2_CACHE_REFORMAT"
    CACHE_MISS = "4.3_CACHE_MISS"
    UPSTREAM_FETCH = "5.0_UPSTREAM_FETCH"
    UPSTREAM_ERROR = "5.1_UPSTREAM_ERROR"
    UPSTREAM_STATUS = "5.2_UPSTREAM_BUSINESS_STATUS"
    CACHE_WRITE = "6.0_CACHE_WRITE"

    # Cross-cutting concerns
    REDIS = "R_REDIS"
    METRICS = "M_METRICS"


# ============================================================================
# Upstream Response Status
# ============================================================================


class ResponseStatus(str, Enum):
    """
    Logical outcome reported in the upstream body's ``status`` field.

    OK and ZERO_RESULTS are cacheable; every other upstream value
    (REQUEST_DENIED, OVER_QUERY_LIMIT, ...) collapses to OTHER.
    """

    OK = "OK"
    ZERO_RESULTS = "ZERO_RESULTS"
    OTHER = "OTHER"


CACHEABLE_STATUSES = frozenset({ResponseStatus.OK, ResponseStatus.ZERO_RESULTS})


# ============================================================================
# Redis Keys
# ============================================================================

KEY_DELIMITER = ":"

CANONICAL_KEY_TAG = "j"

LEGACY_KEY_NAMESPACE = "cache-geo-cache"
LEGACY_KEY_TAG = "json"

METRIC_GET_HASH = "metric:get:path:count:h"
METRIC_SET_HASH = "metric:set:path:count:h"
METRIC_MIGRATE_HASH = "metric:migrate:path:count:h"


# ============================================================================
# Upstream API
# ============================================================================

API_KEY_PARAM = "key"

TIMEZONE_PATH = "/maps/api/timezone/json"
TIMEZONE_LOCATION_PARAM = "location"


# ============================================================================
# HTTP
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
HEADER_CONTENT_TYPE = "Content-Type"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
