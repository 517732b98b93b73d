#!/usr/bin/env python3
"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API)
        ├── ConnectionManager (Connection lifecycle + reconnection policy)
        ├── StorePipeline (Ordered MULTI/EXEC batches)
        └── HealthMonitor (Health checks and pool metrics)

The client is created once by the application lifespan and handed to the
cache layer explicitly. Request handlers never hold a connection directly:
each StorePipeline borrows one from the pool for the duration of
``execute()`` and returns it afterwards, including on errors.
"""

import time
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, TimeoutError

from geocache.core.config.settings import Settings, get_settings
from geocache.core.exceptions import CacheConnectionError
from geocache.core.logging.logger import get_logger
from geocache.infrastructure.store.pipeline import StorePipeline
from geocache.infrastructure.store.reconnect import ReconnectPolicy

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    Responsibility: Connection establishment, pooling, and cleanup.

    Pool Configuration:
    - Max connections: REDIS_MAX_CONNECTIONS
    - Socket timeouts: REDIS_SOCKET_TIMEOUT / REDIS_SOCKET_CONNECT_TIMEOUT
    - Command retry: derived from ReconnectPolicy
    - Decode responses: True (returns strings, not bytes)
    """

    def __init__(self, settings: Settings, policy: ReconnectPolicy):
        self._settings = settings
        self._policy = policy
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis with connection pooling.

        STAGE-REDIS.2: Connection establishment

        The initial PING is retried according to the reconnection policy.

        Returns:
            redis.Redis: Connected Redis client

        Raises:
            CacheConnectionError: If the policy is exhausted
        """
        if self._is_connected and self._client:
            return self._client

        redis_settings = self._settings.redis

        self._pool = ConnectionPool(
            host=redis_settings.REDIS_HOST,
            port=redis_settings.REDIS_PORT,
            db=redis_settings.REDIS_DB,
            password=redis_settings.REDIS_PASSWORD,
            max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=redis_settings.REDIS_SOCKET_CONNECT_TIMEOUT,
            socket_timeout=redis_settings.REDIS_SOCKET_TIMEOUT,
            health_check_interval=redis_settings.REDIS_HEALTH_CHECK_INTERVAL,
            retry=self._policy.command_retry(),
            retry_on_error=list(self._policy.retryable),
            decode_responses=True,
        )
        self._client = redis.Redis(connection_pool=self._pool)

        try:
            async for attempt in self._policy.retrying():
                with attempt:
                    await self._client.ping()
        except (ConnectionError, TimeoutError) as e:
            logger.error("Failed to connect to Redis", stage="REDIS.2", error=str(e))
            await self.disconnect()
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={
                    "host": redis_settings.REDIS_HOST,
                    "port": redis_settings.REDIS_PORT,
                },
            )

        self._is_connected = True

        logger.info(
            "Redis connected successfully",
            stage="REDIS.2",
            host=redis_settings.REDIS_HOST,
            port=redis_settings.REDIS_PORT,
            max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
        )

        return self._client

    async def disconnect(self) -> None:
        """
        Close Redis connection and pool.

        STAGE-REDIS.3: Connection cleanup
        """
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        logger.info("Redis disconnected", stage="REDIS.3")

    def get_client(self) -> redis.Redis | None:
        """Get the Redis client instance."""
        return self._client

    def get_pool(self) -> ConnectionPool | None:
        """Get the connection pool instance."""
        return self._pool

    def is_connected(self) -> bool:
        """Check if connected to Redis."""
        return self._is_connected


# =============================================================================
# LAYER 2: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """
    Monitors Redis health and connection pool metrics.

    Metrics Tracked:
    - Connection status
    - Ping latency
    - Pool size
    """

    def __init__(self, connection_manager: ConnectionManager, settings: Settings):
        self._conn_mgr = connection_manager
        self._settings = settings

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check on Redis connection.

        STAGE-REDIS.HEALTH: Redis health check

        Returns:
            Dict with health status and metrics
        """
        health = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            "host": self._settings.redis.REDIS_HOST,
            "port": self._settings.redis.REDIS_PORT,
            "pool_size": 0,
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if not client:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            await client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except (ConnectionError, TimeoutError) as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)
            return health

        pool = self._conn_mgr.get_pool()
        if pool:
            health["pool_size"] = pool.max_connections

        return health


# =============================================================================
# LAYER 3: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Async Redis client with connection pooling and health checks.

    Usage:
        client = RedisClient()
        await client.connect()

        cached, _ = await client.pipeline().get(key).expire(key, ttl).execute()

        await client.disconnect()
    """

    def __init__(self, settings: Settings | None = None, policy: ReconnectPolicy | None = None):
        """
        Initialize Redis client.

        STAGE-REDIS.1: Client initialization
        """
        self._settings = settings or get_settings()
        self._policy = policy or ReconnectPolicy.from_settings(self._settings)
        self._conn_mgr = ConnectionManager(self._settings, self._policy)
        self._health_monitor = HealthMonitor(self._conn_mgr, self._settings)

        logger.info(
            "Redis client initialized",
            stage="REDIS.1",
            host=self._settings.redis.REDIS_HOST,
            port=self._settings.redis.REDIS_PORT,
        )

    @property
    def policy(self) -> ReconnectPolicy:
        return self._policy

    async def connect(self) -> None:
        """
        Establish connection to Redis with connection pooling.

        Raises:
            CacheConnectionError: If connection fails
        """
        await self._conn_mgr.connect()

    async def disconnect(self) -> None:
        """Close Redis connection and pool."""
        await self._conn_mgr.disconnect()

    def pipeline(self) -> StorePipeline:
        """
        Start a new command batch.

        Raises:
            CacheConnectionError: If called before connect()
        """
        client = self._conn_mgr.get_client()
        if client is None:
            raise CacheConnectionError("Redis client is not connected")
        return StorePipeline(client)

    async def health_check(self) -> dict[str, Any]:
        """Perform health check on Redis connection."""
        return await self._health_monitor.health_check()
