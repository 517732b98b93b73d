#!/usr/bin/env python3
"""
Read-Through Cache Manager

Request flow:
    1. Resolve credential (caller ``key`` or configured default) → 401 if none
    2. Local timezone resolution → answer immediately, no store access
    3. Legacy migration (one GET, then SET+DEL+HINCRBY if found)
    4. GET + EXPIRE + HINCRBY in one pipeline
    5. Hit with cacheable status → normalize stored formatting, serve
    6. Miss / malformed / non-cacheable → upstream, then SETEX+HINCRBY

Store failures propagate (fatal for the request). Malformed cached JSON and
local resolution misses never reach the caller.

Concurrent misses for the same key are not deduplicated: each one calls the
upstream and the last write wins.
"""

from dataclasses import dataclass

from geocache.cache.fingerprint import Fingerprinter, RequestFingerprint
from geocache.cache.metrics import MetricsAggregator
from geocache.cache.migration import MigrationResolver
from geocache.cache.models import GeoPayload, GeoRequest, GeoResponse
from geocache.cache.timezone import TimezoneResolver
from geocache.cache.upstream import UpstreamClient
from geocache.core.config.constants import API_KEY_PARAM, ResponseStatus, Stage
from geocache.core.exceptions import AuthorizationError, MalformedPayloadError, UpstreamTransportError
from geocache.core.logging.logger import get_logger
from geocache.infrastructure.store import RedisClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class TtlPolicy:
    """Expiry in seconds for each cacheable status."""

    standard: int
    short: int

    @classmethod
    def from_settings(cls, settings) -> "TtlPolicy":
        return cls(standard=settings.cache.EXPIRE_SECONDS, short=settings.cache.SHORT_EXPIRE_SECONDS)

    def for_status(self, status: ResponseStatus) -> int:
        if status is ResponseStatus.ZERO_RESULTS:
            return self.short
        return self.standard


class ReadThroughCacheManager:
    """
    Serves proxied geolocation requests from Redis, the local timezone
    database or the upstream API, in that order of preference.

    Holds no per-request state; every collaborator is shared and safe to
    use from concurrent tasks.
    """

    def __init__(
        self,
        store: RedisClient,
        fingerprinter: Fingerprinter,
        upstream: UpstreamClient,
        timezone_resolver: TimezoneResolver,
        migration: MigrationResolver,
        metrics: MetricsAggregator,
        ttl_policy: TtlPolicy,
        default_api_key: str | None = None,
    ):
        self._store = store
        self._fingerprinter = fingerprinter
        self._upstream = upstream
        self._timezone = timezone_resolver
        self._migration = migration
        self._metrics = metrics
        self._ttl = ttl_policy
        self._default_api_key = default_api_key

    def resolve_api_key(self, query: dict[str, str]) -> str:
        """
        Caller-supplied `key` wins over the configured default.

        Raises:
            AuthorizationError: If neither is present
        """
        api_key = query.get(API_KEY_PARAM) or self._default_api_key
        if not api_key:
            raise AuthorizationError("No upstream credential")
        return api_key

    async def handle(self, request: GeoRequest) -> GeoResponse:
        """
        Serve one proxied request.

        Raises:
            CacheError: Redis failure at any step
            UpstreamUnavailableError: Upstream unreachable or non-JSON body
        """
        try:
            api_key = self.resolve_api_key(request.query)
        except AuthorizationError:
            logger.warning("Rejected request without credential", stage=Stage.AUTHORIZATION.value, path=request.path)
            return GeoResponse.unauthorized()

        local_response = self._timezone.resolve(request)
        if local_response is not None:
            return local_response

        fingerprint = self._fingerprinter.fingerprint(request.path, request.query)
        logger.info(
            "Incoming request",
            stage=Stage.CACHE_LOOKUP.value,
            path=request.path,
            canonical_query=fingerprint.canonical_query,
            cache_key=str(fingerprint.cache_key),
        )

        await self._migration.migrate(fingerprint)

        cached = await self._lookup(fingerprint)
        if cached is not None:
            return GeoResponse.json(cached)

        try:
            payload = await self._upstream.fetch(request.path, request.query, api_key)
        except UpstreamTransportError as e:
            return GeoResponse.text(e.status_code, e.reason)

        await self._write_back(fingerprint, payload)
        return GeoResponse.json(payload)

    async def _lookup(self, fingerprint: RequestFingerprint) -> GeoPayload | None:
        """
        Read the canonical entry, refreshing its TTL and counting the get.

        Returns:
            The cached payload, or None on miss, malformed JSON or a
            non-cacheable status
        """
        cache_key = str(fingerprint.cache_key)

        pipe = self._store.pipeline().get(cache_key).expire(cache_key, self._ttl.standard)
        self._metrics.record_get(pipe, fingerprint.path)
        cached_content, _, _ = await pipe.execute()

        if not cached_content:
            logger.info("Cache miss", stage=Stage.CACHE_MISS.value, cache_key=cache_key)
            return None

        try:
            payload = GeoPayload.parse(cached_content)
        except MalformedPayloadError as e:
            logger.warning("Ignoring malformed cache entry", stage=Stage.CACHE_MISS.value, cache_key=cache_key, error=e.message)
            return None

        if not payload.is_cacheable:
            logger.warning(
                "Ignoring cache entry with non-cacheable status",
                stage=Stage.CACHE_MISS.value,
                cache_key=cache_key,
                status=payload.raw_status,
            )
            return None

        formatted_content = payload.compact()
        if formatted_content != cached_content:
            logger.info("Reformatting cache entry", stage=Stage.CACHE_REFORMAT.value, cache_key=cache_key)
            await self._store.pipeline().set(cache_key, formatted_content, keepttl=True).execute()

        logger.info("Cache hit", stage=Stage.CACHE_HIT.value, cache_key=cache_key, hash=fingerprint.digest)
        return payload

    async def _write_back(self, fingerprint: RequestFingerprint, payload: GeoPayload) -> None:
        """Persist a cacheable upstream payload with its status-dependent TTL."""
        if not payload.is_cacheable:
            logger.warning(
                "Upstream reported non-cacheable status",
                stage=Stage.UPSTREAM_STATUS.value,
                path=fingerprint.path,
                status=payload.raw_status,
            )
            return

        if self._timezone.applies_to(fingerprint.path):
            logger.debug("Not caching timezone response", stage=Stage.CACHE_WRITE.value, path=fingerprint.path)
            return

        ttl = self._ttl.for_status(payload.status)
        cache_key = str(fingerprint.cache_key)

        pipe = self._store.pipeline().setex(cache_key, ttl, payload.compact())
        self._metrics.record_set(pipe, fingerprint.path)
        await pipe.execute()

        logger.info(
            "Cached upstream response",
            stage=Stage.CACHE_WRITE.value,
            cache_key=cache_key,
            status=payload.raw_status,
            expire_seconds=ttl,
        )
