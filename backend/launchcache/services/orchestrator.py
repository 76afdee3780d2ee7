import logging
from typing import Tuple

from launchcache.services.cache_store import CacheNamespace
from launchcache.services.launch_query import LaunchDataSource, query_launches
from launchcache.services.query_params import LaunchQueryParameters

logger = logging.getLogger(__name__)


class LaunchQueryService:
    """
    Lookup-or-compute for rendered launch query responses.

    Concurrent misses on the same key each compute and store their own
    rendering; the last write wins.
    """

    def __init__(self, source: LaunchDataSource, cache: CacheNamespace):
        self.source = source
        self.cache = cache

    async def lookup_or_compute(self, params: LaunchQueryParameters) -> Tuple[str, bool]:
        """Return ``(json_payload, cache_hit)``."""
        key = params.to_cache_key()
        cached, hit = self.cache.try_get(key)
        if hit:
            return cached, True

        result = await query_launches(params, self.source)
        payload = result.render()
        self.cache.set(key, payload)
        logger.info(f"Cached rendered response {self.cache.key(key)} ({result.count} launches)")
        return payload, False

    async def handle_query_string(self, raw: str) -> Tuple[str, bool]:
        return await self.lookup_or_compute(LaunchQueryParameters.from_query_string(raw))
