"""
Upstream Geolocation API Client

Forwards a cache miss to the upstream API with the resolved credential and
classifies the answer:

- non-200 HTTP status → UpstreamTransportError (status and reason kept)
- connect/timeout failure or non-JSON body → UpstreamUnavailableError
- otherwise a GeoPayload whose ``status`` decides cacheability
"""

import httpx

from geocache.cache.fingerprint import encode_uri_component
from geocache.cache.models import GeoPayload
from geocache.core.config.constants import API_KEY_PARAM, Stage
from geocache.core.exceptions import (
    MalformedPayloadError,
    UpstreamTransportError,
    UpstreamUnavailableError,
)
from geocache.core.logging.logger import get_logger

logger = get_logger(__name__)


class UpstreamClient:
    """
    Thin wrapper over a shared ``httpx.AsyncClient``.

    The HTTP client is owned by the application lifespan; this class never
    closes it.
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str):
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    def build_url(self, path: str, query: dict[str, str], api_key: str) -> str:
        """
        Upstream URL with the credential first, then the caller's parameters.

        A caller-supplied ``key`` has already been folded into ``api_key``.
        """
        params = {API_KEY_PARAM: api_key}
        params.update((name, value) for name, value in query.items() if name != API_KEY_PARAM)
        query_string = "&".join(
            f"{encode_uri_component(name)}={encode_uri_component(value)}" for name, value in params.items()
        )
        return f"{self._base_url}{path}?{query_string}"

    async def fetch(self, path: str, query: dict[str, str], api_key: str) -> GeoPayload:
        """
        Call the upstream API.

        Raises:
            UpstreamTransportError: Upstream answered with a non-200 status
            UpstreamUnavailableError: Upstream unreachable or body not JSON
        """
        url = self.build_url(path, query, api_key)

        try:
            response = await self._http.get(url)
        except httpx.TimeoutException as e:
            logger.error("Upstream timeout", stage=Stage.UPSTREAM_ERROR.value, path=path, error=str(e))
            raise UpstreamUnavailableError(f"Upstream timeout: {e}", details={"path": path})
        except httpx.HTTPError as e:
            logger.error("Upstream unreachable", stage=Stage.UPSTREAM_ERROR.value, path=path, error=str(e))
            raise UpstreamUnavailableError(f"Upstream request failed: {e}", details={"path": path})

        if response.status_code != 200:
            logger.warning(
                "Upstream error status",
                stage=Stage.UPSTREAM_ERROR.value,
                path=path,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
            raise UpstreamTransportError(
                f"Upstream returned {response.status_code}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                details={"path": path},
            )

        try:
            payload = GeoPayload.parse(response.content)
        except MalformedPayloadError as e:
            logger.error("Upstream body is not JSON", stage=Stage.UPSTREAM_ERROR.value, path=path)
            raise UpstreamUnavailableError(e.message, details={"path": path})

        logger.info(
            "Upstream fetched",
            stage=Stage.UPSTREAM_FETCH.value,
            path=path,
            status=payload.raw_status,
        )
        return payload
