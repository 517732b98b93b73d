"""
Key-Value Store Adapter

Redis connection management, ordered command pipelines and the
reconnection policy consumed by both.
"""

from geocache.infrastructure.store.pipeline import PipelineCommand, StorePipeline
from geocache.infrastructure.store.reconnect import ReconnectPolicy
from geocache.infrastructure.store.redis_client import RedisClient

__all__ = ["PipelineCommand", "ReconnectPolicy", "RedisClient", "StorePipeline"]
