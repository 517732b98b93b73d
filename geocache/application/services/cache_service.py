"""
Cache Service Wiring

Builds the read-through cache and its collaborators from settings and the
long-lived resources owned by the application lifespan (Redis pool, HTTP
client, timezone database).
"""

from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from geocache.cache import (
    Fingerprinter,
    MetricsAggregator,
    MigrationResolver,
    ReadThroughCacheManager,
    TimezoneResolver,
    TtlPolicy,
    UpstreamClient,
)
from geocache.core.config.settings import Settings
from geocache.core.exceptions import ConfigurationError
from geocache.infrastructure.store import RedisClient


@dataclass(frozen=True)
class CacheServices:
    """Everything the routes need, created once per application."""

    cache_manager: ReadThroughCacheManager
    metrics: MetricsAggregator
    store: RedisClient


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.upstream.UPSTREAM_TIMEOUT))


def build_cache_services(
    settings: Settings,
    store: RedisClient,
    http_client: httpx.AsyncClient,
    timezone_resolver: TimezoneResolver | None = None,
) -> CacheServices:
    """
    Wire the cache layer.

    Raises:
        ConfigurationError: If the cache or upstream settings fail validation
    """
    try:
        cache_settings = settings.cache
        upstream_settings = settings.upstream
    except ValidationError as e:
        raise ConfigurationError.from_exception(e, message=f"Invalid cache configuration: {e}")

    namespace = cache_settings.REDIS_NAMESPACE
    base_url = upstream_settings.UPSTREAM_BASE_URL

    metrics = MetricsAggregator(store, namespace)
    cache_manager = ReadThroughCacheManager(
        store=store,
        fingerprinter=Fingerprinter(namespace, base_url),
        upstream=UpstreamClient(http_client, base_url),
        timezone_resolver=timezone_resolver or TimezoneResolver(),
        migration=MigrationResolver(store, metrics),
        metrics=metrics,
        ttl_policy=TtlPolicy.from_settings(settings),
        default_api_key=upstream_settings.GOOGLE_API_KEY,
    )
    return CacheServices(cache_manager=cache_manager, metrics=metrics, store=store)
