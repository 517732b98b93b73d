"""
Payload Exceptions

Raised when a cached value or an upstream body cannot be interpreted as a
JSON document. The read-through cache treats a malformed cached value as a
miss and never surfaces this error to the caller.
"""

from geocache.core.exceptions.base import GeoCacheError


class MalformedPayloadError(GeoCacheError):
    """Raised when a stored or fetched body is not valid JSON."""
    pass
