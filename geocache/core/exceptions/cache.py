"""
Store-Related Exceptions

All exceptions raised while talking to the key-value store (Redis).
Any of these is fatal for the current request.
"""

from geocache.core.exceptions.base import GeoCacheError


class CacheError(GeoCacheError):
    """Base exception for key-value store errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the store (Redis).

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Reconnection policy exhausted
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a store command or pipeline fails.

    Common causes:
    - Operation timeout
    - Connection dropped mid-pipeline
    - Transaction aborted by the server
    """
    pass


StoreError = CacheError
