"""
Metrics Routes

``GET /metrics`` returns the per-path get/set/migrate counters:

    {
      "getCount": {"/maps/api/geocode/json": 12},
      "setCount": {"/maps/api/geocode/json": 3},
      "migrateCount": {}
    }

``GET /stats`` is kept as a redirect for older dashboards.
"""

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from geocache.application.api.dependencies import MetricsDep

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def get_metrics(metrics: MetricsDep) -> dict[str, dict[str, int]]:
    snapshot = await metrics.read()
    return snapshot.to_dict()


@router.get("/stats", include_in_schema=False)
async def stats_redirect() -> RedirectResponse:
    return RedirectResponse(url="/metrics")
