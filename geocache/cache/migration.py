"""
Legacy Cache Migration

Entries written by the previous key scheme live under
``cache-geo-cache:<sha>:json``. The first request that maps to such an
entry copies it to the canonical key and deletes the legacy key in the same
transaction, so a legacy entry is migrated at most once and the canonical
read that follows sees the migrated value.
"""

from geocache.cache.fingerprint import RequestFingerprint
from geocache.cache.metrics import MetricsAggregator
from geocache.cache.models import GeoPayload
from geocache.core.config.constants import Stage
from geocache.core.exceptions import MalformedPayloadError
from geocache.core.logging.logger import get_logger
from geocache.infrastructure.store import RedisClient

logger = get_logger(__name__)


class MigrationResolver:
    def __init__(self, store: RedisClient, metrics: MetricsAggregator):
        self._store = store
        self._metrics = metrics

    async def migrate(self, fingerprint: RequestFingerprint) -> bool:
        """
        Move a legacy entry, if any, to the canonical key.

        The canonical entry is written without a TTL; the read that follows
        in the same request sets one.

        Returns:
            True if an entry was migrated
        """
        legacy_key = str(fingerprint.legacy_key)
        cache_key = str(fingerprint.cache_key)

        (legacy_content,) = await self._store.pipeline().get(legacy_key).execute()
        if legacy_content is None:
            return False

        try:
            payload = GeoPayload.parse(legacy_content)
        except MalformedPayloadError as e:
            logger.warning(
                "Dropping unreadable legacy entry",
                stage=Stage.MIGRATE.value,
                legacy_key=legacy_key,
                error=e.message,
            )
            await self._store.pipeline().delete(legacy_key).execute()
            return False

        pipe = self._store.pipeline().set(cache_key, payload.compact()).delete(legacy_key)
        self._metrics.record_migrate(pipe, fingerprint.path)
        await pipe.execute()

        logger.info(
            "Migrated legacy entry",
            stage=Stage.MIGRATE.value,
            legacy_key=legacy_key,
            cache_key=cache_key,
            path=fingerprint.path,
        )
        return True
