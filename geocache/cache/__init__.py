"""
Read-through cache for the upstream geolocation API.

Modules:
- fingerprint: request → canonical and legacy cache keys
- timezone: offline answers for the timezone endpoint
- migration: one-time move of legacy entries
- metrics: per-path get/set/migrate counters
- upstream: HTTP client for the upstream API
- read_through: orchestration of all of the above
"""

from geocache.cache.fingerprint import CacheKey, Fingerprinter, RequestFingerprint
from geocache.cache.metrics import MetricCounter, MetricsAggregator, MetricsSnapshot
from geocache.cache.migration import MigrationResolver
from geocache.cache.models import GeoPayload, GeoRequest, GeoResponse
from geocache.cache.read_through import ReadThroughCacheManager, TtlPolicy
from geocache.cache.timezone import TimezoneResolver
from geocache.cache.upstream import UpstreamClient

__all__ = [
    "CacheKey",
    "Fingerprinter",
    "GeoPayload",
    "GeoRequest",
    "GeoResponse",
    "MetricCounter",
    "MetricsAggregator",
    "MetricsSnapshot",
    "MigrationResolver",
    "ReadThroughCacheManager",
    "RequestFingerprint",
    "TimezoneResolver",
    "TtlPolicy",
    "UpstreamClient",
]
