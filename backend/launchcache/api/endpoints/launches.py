import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from launchcache.api.deps import get_cache_store, get_launch_service
from launchcache.services.cache_store import CacheStore
from launchcache.services.orchestrator import LaunchQueryService
from launchcache.services.query_params import LaunchQueryParameters
from launchcache.services.spacex import UpstreamPayloadError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_launches(request: Request, service: LaunchQueryService = Depends(get_launch_service)):
    """
    Query SpaceX launches (cached).

    Filters: success, upcoming, from, to, name, limit (1-50, default 10),
    sort (asc|desc, default desc). Malformed values fall back to defaults.
    """
    # Read raw values so bad input degrades instead of failing validation
    params = LaunchQueryParameters.from_query(request.query_params.multi_items())
    try:
        payload, hit = await service.lookup_or_compute(params)
    except (httpx.HTTPError, UpstreamPayloadError) as e:
        logger.error(f"Launch provider request failed: {e}")
        raise HTTPException(status_code=502, detail="Upstream launch provider unavailable")

    return Response(
        content=payload,
        media_type="application/json",
        headers={"X-Cache": "HIT" if hit else "MISS"},
    )


@router.delete("/cache")
def clear_launch_cache(store: CacheStore = Depends(get_cache_store)):
    """Drop every cached upstream and rendered response."""
    cleared = len(store)
    store.clear()
    logger.info(f"Cleared {cleared} cache entries")
    return {"cleared": cleared}
