"""
Exception Module

Structured exception hierarchy for the geo-cache proxy.

Module Structure:
-----------------
- **base.py**: GeoCacheError base class + ConfigurationError
- **cache.py**: Key-value store exceptions (Redis)
- **payload.py**: Malformed cached/upstream JSON
- **upstream.py**: Authorization and upstream API exceptions

Usage:
------
```python
from geocache.core.exceptions import CacheKeyError, UpstreamTransportError
```
"""

from geocache.core.exceptions.base import ConfigurationError, GeoCacheError
from geocache.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    StoreError,
)
from geocache.core.exceptions.payload import MalformedPayloadError
from geocache.core.exceptions.upstream import (
    AuthorizationError,
    UpstreamError,
    UpstreamTransportError,
    UpstreamUnavailableError,
)

__all__ = [
    # Base
    "GeoCacheError",
    "ConfigurationError",
    # Store
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "StoreError",
    # Payload
    "MalformedPayloadError",
    # Upstream
    "AuthorizationError",
    "UpstreamError",
    "UpstreamTransportError",
    "UpstreamUnavailableError",
]
