"""
Health Check Routes

``GET /health`` reports whether the service can reach Redis. Load balancers
should treat 503 as "remove from rotation": without the store every proxied
request fails.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from geocache.application.api.dependencies import SettingsDep, StoreDep

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """Standard health check response model."""

    status: str
    timestamp: str
    version: str
    components: dict | None = None


@router.get("", response_model=HealthResponse)
async def health_check(store: StoreDep, settings: SettingsDep):
    redis_health = await store.health_check()
    body = HealthResponse(
        status=redis_health["status"],
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app.APP_VERSION,
        components={"redis": redis_health},
    )
    status_code = 200 if redis_health["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=body.model_dump())
