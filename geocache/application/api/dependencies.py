"""
FastAPI Dependency Providers

Route handlers receive the cache services through ``Depends`` instead of
module-level singletons. The services are created in the application
lifespan and stored on ``app.state``; tests replace them with
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from geocache.cache import MetricsAggregator, ReadThroughCacheManager
from geocache.core.config.settings import Settings, get_settings
from geocache.infrastructure.store import RedisClient


def get_cache_manager(request: Request) -> ReadThroughCacheManager:
    """Read-through cache created during startup."""
    return request.app.state.services.cache_manager


def get_metrics(request: Request) -> MetricsAggregator:
    """Per-path metrics aggregator created during startup."""
    return request.app.state.services.metrics


def get_store(request: Request) -> RedisClient:
    """Redis client created during startup."""
    return request.app.state.services.store


CacheManagerDep = Annotated[ReadThroughCacheManager, Depends(get_cache_manager)]
MetricsDep = Annotated[MetricsAggregator, Depends(get_metrics)]
StoreDep = Annotated[RedisClient, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
