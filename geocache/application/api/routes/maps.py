"""
Maps API Proxy Route

``GET /maps/api/{path}`` accepts exactly what the upstream accepts. The
response body and status are whatever the read-through cache decided:
pretty-printed JSON for cache hits, local answers and upstream bodies,
plain text for 401 and upstream transport errors.
"""

from fastapi import APIRouter, Request, Response

from geocache.application.api.dependencies import CacheManagerDep
from geocache.cache import GeoRequest

router = APIRouter(prefix="/maps/api", tags=["Maps"])


@router.get("/{api_path:path}")
async def proxy_maps_api(api_path: str, request: Request, cache_manager: CacheManagerDep) -> Response:
    geo_request = GeoRequest(path=request.url.path, query=dict(request.query_params))
    result = await cache_manager.handle(geo_request)
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
        media_type="text/plain",
    )
