"""
Cache Layer Models

- GeoRequest: inbound request as seen by the read-through cache
- GeoPayload: parsed JSON body with its classified ``status``
- GeoResponse: what the HTTP layer sends back
"""

from dataclasses import dataclass, field
from typing import Any

import orjson

from geocache.core.config.constants import (
    CACHEABLE_STATUSES,
    HEADER_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    ResponseStatus,
)
from geocache.core.exceptions import MalformedPayloadError


@dataclass(frozen=True)
class GeoRequest:
    """
    Proxied request.

    Attributes:
        path: Full request path, e.g. ``/maps/api/geocode/json``
        query: Query parameters in the order the caller sent them
    """

    path: str
    query: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GeoPayload:
    """
    A JSON document from the upstream API or the cache.

    ``status`` is the classified value of the body's ``status`` field;
    ``raw_status`` keeps the original string for logging.
    """

    body: Any
    status: ResponseStatus
    raw_status: str | None = None

    @classmethod
    def from_body(cls, body: Any) -> "GeoPayload":
        raw_status = body.get("status") if isinstance(body, dict) else None
        if not isinstance(raw_status, str):
            return cls(body=body, status=ResponseStatus.OTHER)
        try:
            status = ResponseStatus(raw_status)
        except ValueError:
            status = ResponseStatus.OTHER
        return cls(body=body, status=status, raw_status=raw_status)

    @classmethod
    def parse(cls, text: str | bytes) -> "GeoPayload":
        """
        Parse a JSON document.

        Raises:
            MalformedPayloadError: If ``text`` is not valid JSON
        """
        try:
            body = orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise MalformedPayloadError(f"Invalid JSON payload: {e}")
        return cls.from_body(body)

    @property
    def is_cacheable(self) -> bool:
        return self.status in CACHEABLE_STATUSES

    def compact(self) -> str:
        """Canonical storage form: no insignificant whitespace."""
        return orjson.dumps(self.body).decode("utf-8")

    def pretty(self) -> str:
        """Client-facing form: two-space indent and a trailing newline."""
        return orjson.dumps(self.body, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n"


@dataclass(frozen=True)
class GeoResponse:
    """Response handed to the HTTP layer."""

    body: str
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(cls, payload: GeoPayload) -> "GeoResponse":
        return cls(body=payload.pretty(), headers={HEADER_CONTENT_TYPE: JSON_CONTENT_TYPE})

    @classmethod
    def text(cls, status_code: int, message: str) -> "GeoResponse":
        return cls(body=f"{message}\n", status_code=status_code)

    @classmethod
    def unauthorized(cls) -> "GeoResponse":
        return cls.text(401, "Unauthorized")
