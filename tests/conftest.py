"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.

The store is an in-memory stand-in for ``redis.asyncio.Redis`` that
implements the pipeline subset the service uses; the upstream API is an
``httpx.MockTransport``.
"""

import asyncio

import httpx
import orjson
import pytest

from geocache.application.services.cache_service import build_cache_services
from geocache.cache import Fingerprinter, TimezoneResolver
from geocache.core.config.settings import Settings
from geocache.infrastructure.store import StorePipeline

TEST_API_KEY = "AIzaTestDefaultKey000"
UPSTREAM_BASE_URL = "https://maps.googleapis.com"
NAMESPACE = "geo-cache"


# ============================================================================
# In-Memory Store
# ============================================================================


class InMemoryPipeline:
    """Queues commands and applies them in order on ``execute()``."""

    def __init__(self, redis):
        self._redis = redis
        self._queued = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self._queued = []
        self._redis.released += 1
        return False

    def _queue(self, name, *args, **kwargs):
        self._queued.append((name, args, kwargs))
        return self

    def get(self, key):
        return self._queue("get", key)

    def set(self, key, value, keepttl=False):
        return self._queue("set", key, value, keepttl=keepttl)

    def setex(self, key, ttl, value):
        return self._queue("setex", key, ttl, value)

    def delete(self, *keys):
        return self._queue("delete", *keys)

    def expire(self, key, ttl):
        return self._queue("expire", key, ttl)

    def hincrby(self, name, field_name, amount=1):
        return self._queue("hincrby", name, field_name, amount)

    def hgetall(self, name):
        return self._queue("hgetall", name)

    async def execute(self):
        if self._redis.fail_with is not None:
            raise self._redis.fail_with
        # yields like a network round trip
        await asyncio.sleep(0)
        self._redis.transactions.append([name for name, _, _ in self._queued])
        return [getattr(self._redis, f"_do_{name}")(*args, **kwargs) for name, args, kwargs in self._queued]


class InMemoryRedis:
    """
    Minimal ``redis.asyncio.Redis`` replacement with decoded responses.

    TTLs are recorded as the last value set, not as wall-clock deadlines.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.transactions: list[list[str]] = []
        self.released = 0
        self.fail_with: Exception | None = None

    def pipeline(self, transaction=True):
        return InMemoryPipeline(self)

    async def ping(self):
        if self.fail_with is not None:
            raise self.fail_with
        return True

    async def aclose(self):
        pass

    def _do_get(self, key):
        return self.data.get(key)

    def _do_set(self, key, value, keepttl=False):
        self.data[key] = value
        if not keepttl:
            self.ttls.pop(key, None)
        return True

    def _do_setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def _do_delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def _do_expire(self, key, ttl):
        if key not in self.data:
            return False
        self.ttls[key] = ttl
        return True

    def _do_hincrby(self, name, field_name, amount=1):
        bucket = self.hashes.setdefault(name, {})
        value = int(bucket.get(field_name, 0)) + amount
        bucket[field_name] = str(value)
        return value

    def _do_hgetall(self, name):
        return dict(self.hashes.get(name, {}))

    def counter(self, action: str, path: str) -> int:
        """Value of ``<namespace>:metric:<action>:path:count:h`` for ``path``."""
        bucket = self.hashes.get(f"{NAMESPACE}:metric:{action}:path:count:h", {})
        return int(bucket.get(path, 0))


class InMemoryStore:
    """Stands in for RedisClient: hands out pipelines over InMemoryRedis."""

    def __init__(self, redis: InMemoryRedis):
        self.redis = redis
        self.healthy = True

    def pipeline(self) -> StorePipeline:
        return StorePipeline(self.redis)

    async def health_check(self):
        if not self.healthy:
            return {"status": "unhealthy", "connected": False, "error": "Connection refused"}
        return {"status": "healthy", "connected": True, "ping_latency_ms": 0.1}


# ============================================================================
# Upstream API
# ============================================================================


class UpstreamStub:
    """
    Programmable upstream: responses are looked up by request path.

    Every request that reaches the transport is recorded in ``requests``.
    """

    def __init__(self):
        self.responses: dict[str, httpx.Response] = {}
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None

    def respond_json(self, path: str, body, status_code: int = 200) -> None:
        self.responses[path] = httpx.Response(status_code, content=orjson.dumps(body))

    def respond(self, path: str, response: httpx.Response) -> None:
        self.responses[path] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        response = self.responses.get(request.url.path)
        if response is None:
            return httpx.Response(404, text="Not Found")
        return response

    @property
    def call_count(self) -> int:
        return len(self.requests)


class FakeTimezoneFinder:
    """TimezoneFinder stand-in with a fixed coordinate table."""

    def __init__(self, zones=None):
        self.zones = zones or {(48.8, 2.3): "Europe/Paris", (40.7, -74.0): "America/New_York"}
        self.calls = 0

    def timezone_at(self, *, lng, lat):
        self.calls += 1
        return self.zones.get((lat, lng))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def app_settings():
    """Settings with a default credential and the standard namespace."""
    return Settings(
        ENVIRONMENT="test",
        GOOGLE_API_KEY=TEST_API_KEY,
        REDIS_NAMESPACE=NAMESPACE,
        UPSTREAM_BASE_URL=UPSTREAM_BASE_URL,
        EXPIRE_SECONDS=2592000,
        SHORT_EXPIRE_SECONDS=86400,
    )


@pytest.fixture
def keyless_settings(app_settings):
    """Settings with no default credential."""
    return app_settings.model_copy(update={"GOOGLE_API_KEY": None})


@pytest.fixture
def in_memory_redis():
    return InMemoryRedis()


@pytest.fixture
def store(in_memory_redis):
    return InMemoryStore(in_memory_redis)


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
async def http_client(upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    yield client
    await client.aclose()


@pytest.fixture
def timezone_finder():
    return FakeTimezoneFinder()


@pytest.fixture
def timezone_resolver(timezone_finder):
    return TimezoneResolver(finder=timezone_finder)


@pytest.fixture
def fingerprinter():
    return Fingerprinter(NAMESPACE, UPSTREAM_BASE_URL)


@pytest.fixture
def services(app_settings, store, http_client, timezone_resolver):
    """Fully wired cache services over the in-memory store and stub upstream."""
    return build_cache_services(app_settings, store, http_client, timezone_resolver=timezone_resolver)


@pytest.fixture
def cache_manager(services):
    return services.cache_manager
