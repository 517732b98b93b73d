"""
Store Pipeline Builder

Queues typed commands and executes them as one MULTI/EXEC transaction.
Results come back in the order the commands were queued, so callers can
unpack them positionally:

    cached, _, _ = await (
        store.pipeline()
        .get(cache_key)
        .expire(cache_key, ttl)
        .hincrby(metric_hash, path, 1)
        .execute()
    )

Every command in one pipeline runs contiguously on the server; two
separate pipelines are not atomic with respect to each other.
"""

from dataclasses import dataclass, field
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from geocache.core.config.constants import Stage
from geocache.core.exceptions import CacheKeyError
from geocache.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PipelineCommand:
    """One queued store command."""

    name: str
    args: tuple = ()
    kwargs: dict[str, Any] = field(default_factory=dict)


class StorePipeline:
    """
    Builder for an ordered batch of store commands.

    Responsibility: Collect commands, then run them against a pooled
    connection that is returned to the pool on every exit path.
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client
        self._commands: list[PipelineCommand] = []

    @property
    def commands(self) -> list[PipelineCommand]:
        return list(self._commands)

    def _queue(self, name: str, *args, **kwargs) -> "StorePipeline":
        self._commands.append(PipelineCommand(name, args, kwargs))
        return self

    # -------------------------------------------------------------------------
    # String commands
    # -------------------------------------------------------------------------

    def get(self, key: str) -> "StorePipeline":
        """GET key → str | None"""
        return self._queue("get", key)

    def set(self, key: str, value: str, keepttl: bool = False) -> "StorePipeline":
        """SET key value [KEEPTTL] → bool"""
        if keepttl:
            return self._queue("set", key, value, keepttl=True)
        return self._queue("set", key, value)

    def setex(self, key: str, ttl: int, value: str) -> "StorePipeline":
        """SETEX key ttl value → bool"""
        return self._queue("setex", key, ttl, value)

    def delete(self, *keys: str) -> "StorePipeline":
        """DEL key [key ...] → int"""
        return self._queue("delete", *keys)

    def expire(self, key: str, ttl: int) -> "StorePipeline":
        """EXPIRE key ttl → bool"""
        return self._queue("expire", key, ttl)

    # -------------------------------------------------------------------------
    # Hash commands
    # -------------------------------------------------------------------------

    def hincrby(self, name: str, field_name: str, amount: int = 1) -> "StorePipeline":
        """HINCRBY name field amount → int"""
        return self._queue("hincrby", name, field_name, amount)

    def hgetall(self, name: str) -> "StorePipeline":
        """HGETALL name → dict[str, str]"""
        return self._queue("hgetall", name)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def execute(self) -> list[Any]:
        """
        Run all queued commands as a single transaction.

        Returns:
            One result per queued command, in queue order

        Raises:
            CacheKeyError: If the transaction fails for any reason
        """
        if not self._commands:
            return []

        commands = self._commands
        self._commands = []

        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                for command in commands:
                    getattr(pipe, command.name)(*command.args, **command.kwargs)
                return await pipe.execute()
        except RedisError as e:
            names = [command.name for command in commands]
            logger.error("Redis pipeline failed", stage=Stage.REDIS.value, commands=names, error=str(e))
            raise CacheKeyError.from_exception(e, message=f"Redis pipeline failed: {e}", commands=names)
