from geocache.application.api.routes.health import router as health_router
from geocache.application.api.routes.maps import router as maps_router
from geocache.application.api.routes.metrics import router as metrics_router

__all__ = ["health_router", "maps_router", "metrics_router"]
