"""
Unit Tests for the Upstream API Client

The upstream is an httpx.MockTransport driven by the UpstreamStub fixture.
"""

import httpx
import pytest

from geocache.cache import UpstreamClient
from geocache.core.config.constants import ResponseStatus
from geocache.core.exceptions import UpstreamTransportError, UpstreamUnavailableError

GEOCODE_PATH = "/maps/api/geocode/json"


@pytest.fixture
def client(http_client):
    return UpstreamClient(http_client, "https://maps.googleapis.com")


@pytest.mark.unit
class TestBuildUrl:
    def test_credential_comes_first(self, client):
        url = client.build_url(GEOCODE_PATH, {"address": "Paris", "region": "fr"}, "AIzaDefault")

        assert url == "https://maps.googleapis.com/maps/api/geocode/json?key=AIzaDefault&address=Paris&region=fr"

    def test_caller_key_is_not_duplicated(self, client):
        url = client.build_url(GEOCODE_PATH, {"key": "AIzaCaller", "address": "Paris"}, "AIzaCaller")

        assert url.count("key=") == 1
        assert "?key=AIzaCaller&address=Paris" in url

    def test_values_are_encoded(self, client):
        url = client.build_url(GEOCODE_PATH, {"latlng": "48.8,2.3"}, "k")

        assert url.endswith("?key=k&latlng=48.8%2C2.3")


@pytest.mark.unit
class TestFetch:
    async def test_ok_payload(self, client, upstream):
        upstream.respond_json(GEOCODE_PATH, {"status": "OK", "results": [{"place_id": "abc"}]})

        payload = await client.fetch(GEOCODE_PATH, {"address": "Paris"}, "AIzaDefault")

        assert payload.status is ResponseStatus.OK
        assert payload.body["results"] == [{"place_id": "abc"}]
        assert upstream.requests[0].url.params["key"] == "AIzaDefault"
        assert upstream.requests[0].url.params["address"] == "Paris"

    async def test_business_status_is_returned(self, client, upstream):
        upstream.respond_json(GEOCODE_PATH, {"status": "OVER_QUERY_LIMIT", "error_message": "quota"})

        payload = await client.fetch(GEOCODE_PATH, {"address": "Paris"}, "k")

        assert payload.status is ResponseStatus.OTHER
        assert payload.raw_status == "OVER_QUERY_LIMIT"

    async def test_non_200_raises_transport_error(self, client, upstream):
        upstream.respond(GEOCODE_PATH, httpx.Response(500, text="boom"))

        with pytest.raises(UpstreamTransportError) as exc_info:
            await client.fetch(GEOCODE_PATH, {}, "k")

        assert exc_info.value.status_code == 500
        assert exc_info.value.reason == "Internal Server Error"

    async def test_non_json_body_is_unavailable(self, client, upstream):
        upstream.respond(GEOCODE_PATH, httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(UpstreamUnavailableError):
            await client.fetch(GEOCODE_PATH, {}, "k")

    async def test_connect_error_is_unavailable(self, client, upstream):
        upstream.error = httpx.ConnectError("Name or service not known")

        with pytest.raises(UpstreamUnavailableError):
            await client.fetch(GEOCODE_PATH, {}, "k")

    async def test_timeout_is_unavailable(self, client, upstream):
        upstream.error = httpx.ReadTimeout("timed out")

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.fetch(GEOCODE_PATH, {}, "k")

        assert "timeout" in exc_info.value.message.lower()
