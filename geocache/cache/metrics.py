"""
Per-Path Cache Metrics

Three Redis hashes, one per caching action, each mapping a request path to
the number of times the action happened for it:

    <namespace>:metric:get:path:count:h
    <namespace>:metric:set:path:count:h
    <namespace>:metric:migrate:path:count:h

Increments are queued on the caller's pipeline so they commit atomically
with the action they count. Counters are never decremented.
"""

from dataclasses import dataclass, field
from enum import Enum

from geocache.core.config.constants import (
    KEY_DELIMITER,
    METRIC_GET_HASH,
    METRIC_MIGRATE_HASH,
    METRIC_SET_HASH,
    Stage,
)
from geocache.core.logging.logger import get_logger
from geocache.infrastructure.store import RedisClient, StorePipeline

logger = get_logger(__name__)


class MetricCounter(str, Enum):
    """Caching actions that are counted per path."""

    GET = METRIC_GET_HASH
    SET = METRIC_SET_HASH
    MIGRATE = METRIC_MIGRATE_HASH


@dataclass(frozen=True)
class MetricsSnapshot:
    get_count: dict[str, int] = field(default_factory=dict)
    set_count: dict[str, int] = field(default_factory=dict)
    migrate_count: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            "getCount": dict(self.get_count),
            "setCount": dict(self.set_count),
            "migrateCount": dict(self.migrate_count),
        }


def _parse_counts(raw: dict[str, str] | None) -> dict[str, int]:
    return {path: int(value) for path, value in (raw or {}).items()}


class MetricsAggregator:
    """Records and reads the per-path get/set/migrate counters."""

    def __init__(self, store: RedisClient, namespace: str):
        self._store = store
        self._namespace = namespace

    def hash_name(self, counter: MetricCounter) -> str:
        return KEY_DELIMITER.join((self._namespace, counter.value))

    def record(self, pipe: StorePipeline, counter: MetricCounter, path: str) -> StorePipeline:
        return pipe.hincrby(self.hash_name(counter), path, 1)

    def record_get(self, pipe: StorePipeline, path: str) -> StorePipeline:
        return self.record(pipe, MetricCounter.GET, path)

    def record_set(self, pipe: StorePipeline, path: str) -> StorePipeline:
        return self.record(pipe, MetricCounter.SET, path)

    def record_migrate(self, pipe: StorePipeline, path: str) -> StorePipeline:
        return self.record(pipe, MetricCounter.MIGRATE, path)

    async def read(self) -> MetricsSnapshot:
        """
        Read all three counters in one batch.

        A counter hash that does not exist yet reads as an empty mapping.
        """
        get_raw, set_raw, migrate_raw = await (
            self._store.pipeline()
            .hgetall(self.hash_name(MetricCounter.GET))
            .hgetall(self.hash_name(MetricCounter.SET))
            .hgetall(self.hash_name(MetricCounter.MIGRATE))
            .execute()
        )

        snapshot = MetricsSnapshot(
            get_count=_parse_counts(get_raw),
            set_count=_parse_counts(set_raw),
            migrate_count=_parse_counts(migrate_raw),
        )
        logger.debug(
            "Metrics read",
            stage=Stage.METRICS.value,
            paths=len(snapshot.get_count),
        )
        return snapshot
