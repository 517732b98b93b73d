"""
Request Fingerprinting

Turns ``(path, query)`` into the keys the read-through cache uses.

Two schemes are computed for every request:

- current: ``sha1(base + path + "?" + canonical_query)`` where the canonical
  query has its names sorted and its values encoded like JavaScript's
  ``encodeURIComponent``; stored under ``<namespace>:<sha>:j``
- legacy: ``sha1(base + path + "#" + json(query))`` with the query in
  caller order; stored under ``cache-geo-cache:<sha>:json``

The credential parameter is removed before either hash is computed, so
callers with different keys share cache entries.
"""

import hashlib
from dataclasses import dataclass
from urllib.parse import quote

import orjson

from geocache.core.config.constants import (
    API_KEY_PARAM,
    CANONICAL_KEY_TAG,
    KEY_DELIMITER,
    LEGACY_KEY_NAMESPACE,
    LEGACY_KEY_TAG,
)

# encodeURIComponent leaves these unescaped in addition to ASCII alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def sha1_hex(data: str) -> str:
    return hashlib.sha1(data.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheKey:
    """
    A ``namespace:digest:tag`` store key.

    No component may be empty or contain the delimiter, so two different
    triples can never render to the same key.
    """

    namespace: str
    digest: str
    tag: str

    def __post_init__(self):
        for name in ("namespace", "digest", "tag"):
            component = getattr(self, name)
            if not component or KEY_DELIMITER in component:
                raise ValueError(f"Invalid cache key {name}: {component!r}")

    def __str__(self) -> str:
        return KEY_DELIMITER.join((self.namespace, self.digest, self.tag))


@dataclass(frozen=True)
class RequestFingerprint:
    """Everything derived from one request's path and query."""

    path: str
    canonical_query: str
    digest: str
    legacy_digest: str
    cache_key: CacheKey
    legacy_key: CacheKey


class Fingerprinter:
    """
    Derives cache keys for proxied requests.

    Pure: no store access, no clock, no randomness.
    """

    def __init__(self, namespace: str, upstream_base_url: str):
        self._namespace = namespace
        self._base_url = upstream_base_url.rstrip("/")

    @staticmethod
    def strip_credential(query: dict[str, str]) -> dict[str, str]:
        return {name: value for name, value in query.items() if name != API_KEY_PARAM}

    @staticmethod
    def canonical_query_string(query: dict[str, str]) -> str:
        """``name=encoded`` pairs sorted by name and joined with ``&``."""
        return "&".join(f"{name}={encode_uri_component(query[name])}" for name in sorted(query))

    def upstream_url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def fingerprint(self, path: str, query: dict[str, str]) -> RequestFingerprint:
        params = self.strip_credential(query)
        url = self.upstream_url(path)
        canonical_query = self.canonical_query_string(params)

        digest = sha1_hex(f"{url}?{canonical_query}")
        legacy_digest = sha1_hex(f"{url}#{orjson.dumps(params).decode('utf-8')}")

        return RequestFingerprint(
            path=path,
            canonical_query=canonical_query,
            digest=digest,
            legacy_digest=legacy_digest,
            cache_key=CacheKey(self._namespace, digest, CANONICAL_KEY_TAG),
            legacy_key=CacheKey(LEGACY_KEY_NAMESPACE, legacy_digest, LEGACY_KEY_TAG),
        )
