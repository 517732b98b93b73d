"""
Local Timezone Resolution

Answers ``/maps/api/timezone/json?location=lat,long`` from an offline
timezone database (timezonefinder) without touching Redis or the upstream.
When the coordinates cannot be parsed or no zone is found the request falls
through to the normal read-through path.
"""

from timezonefinder import TimezoneFinder

from geocache.cache.models import GeoPayload, GeoRequest, GeoResponse
from geocache.core.config.constants import TIMEZONE_LOCATION_PARAM, TIMEZONE_PATH, ResponseStatus, Stage
from geocache.core.logging.logger import get_logger

logger = get_logger(__name__)


def parse_location(location: str) -> tuple[float, float]:
    """
    Parse ``"lat,long"``.

    Raises:
        ValueError: If the string is not two comma-separated numbers
    """
    parts = location.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected 'lat,long', got {location!r}")
    return float(parts[0]), float(parts[1])


class TimezoneResolver:
    """
    Offline timezone lookup for the timezone endpoint.

    The underlying TimezoneFinder is read-only once loaded and is shared
    across requests.
    """

    def __init__(self, finder: TimezoneFinder | None = None, path: str = TIMEZONE_PATH):
        self._finder = finder
        self._path = path

    def _get_finder(self) -> TimezoneFinder:
        if self._finder is None:
            self._finder = TimezoneFinder()
        return self._finder

    def applies_to(self, path: str) -> bool:
        return path == self._path

    def lookup(self, lat: float, lng: float) -> list[str]:
        """Candidate timezone IDs for the coordinates, best first."""
        timezone_id = self._get_finder().timezone_at(lng=lng, lat=lat)
        return [timezone_id] if timezone_id else []

    def resolve(self, request: GeoRequest) -> GeoResponse | None:
        """
        Answer a timezone request locally.

        Returns:
            A JSON response, or None to fall through to the cache and upstream
        """
        if not self.applies_to(request.path):
            return None

        location = request.query.get(TIMEZONE_LOCATION_PARAM)
        if not location:
            logger.debug("Timezone request without location", stage=Stage.LOCAL_RESOLVE.value)
            return None

        try:
            lat, lng = parse_location(location)
            candidates = self.lookup(lat, lng)
        except Exception as e:
            logger.warning(
                "Local timezone lookup failed",
                stage=Stage.LOCAL_RESOLVE.value,
                location=location,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        if not candidates:
            logger.info("No local timezone found", stage=Stage.LOCAL_RESOLVE.value, location=location)
            return None

        logger.info(
            "Timezone found",
            stage=Stage.LOCAL_RESOLVE.value,
            location=location,
            timezone=candidates[0],
        )
        payload = GeoPayload.from_body({"status": ResponseStatus.OK.value, "timeZoneId": candidates[0]})
        return GeoResponse.json(payload)
