from fastapi import Request

from launchcache.services.cache_store import CacheStore
from launchcache.services.orchestrator import LaunchQueryService


def get_cache_store(request: Request) -> CacheStore:
    return request.app.state.cache_store


def get_launch_service(request: Request) -> LaunchQueryService:
    return request.app.state.launch_service
