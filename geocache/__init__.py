"""geo-cache: read-through cache proxy for geolocation APIs."""

__version__ = "1.0.0"
