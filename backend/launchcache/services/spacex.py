"""
SpaceX REST API (v4) launch data source.

Posts broad server-side filters (success, upcoming, date range) to
/launches/query; name matching, sorting and limits are applied locally by
the query engine. Raw upstream responses are cached under the upstream
namespace, keyed by the canonical request body.

Transport and HTTP status errors are raised as ``httpx.HTTPError``; nothing
is retried here.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from launchcache.models.launch import LaunchRecord
from launchcache.services.cache_store import CacheNamespace
from launchcache.services.query_params import LaunchQueryParameters

logger = logging.getLogger(__name__)

SELECT_FIELDS = ["id", "name", "date_utc", "success", "upcoming", "flight_number", "rocket", "details", "links"]


class UpstreamPayloadError(ValueError):
    """The provider answered, but not with the JSON we expect."""


def build_query_body(params: LaunchQueryParameters) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if params.success is not None:
        query["success"] = params.success
    if params.upcoming is not None:
        query["upcoming"] = params.upcoming

    date_range = {}
    if params.date_from is not None:
        date_range["$gte"] = params.date_from.isoformat().replace("+00:00", "Z")
    if params.date_to is not None:
        date_range["$lte"] = params.date_to.isoformat().replace("+00:00", "Z")
    if date_range:
        query["date_utc"] = date_range

    return {
        "query": query,
        "options": {
            "pagination": False,
            "sort": {"date_utc": "asc"},
            "select": SELECT_FIELDS,
        },
    }


def upstream_cache_key(body: Dict[str, Any]) -> str:
    return json.dumps(body, sort_keys=True, separators=(",", ":"))


def parse_launches(data: Union[Dict[str, Any], List[Any]]) -> List[LaunchRecord]:
    """Accepts either a paginated ``{"docs": [...]}`` envelope or a bare list."""
    docs = data.get("docs", []) if isinstance(data, dict) else data
    if not isinstance(docs, list):
        raise UpstreamPayloadError("Launch query response has no document list")

    records = []
    for doc in docs:
        try:
            records.append(LaunchRecord.from_spacex(doc))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unparsable launch document: {e}")
    return records


class SpaceXClient:
    """
    Launch data source backed by api.spacexdata.com.

    Usage:
        client = SpaceXClient(settings.SPACEX_BASE_URL, CacheNamespace(store, UPSTREAM_PREFIX))
        records = await client.fetch_launches(params)
        await client.aclose()
    """

    def __init__(
        self,
        base_url: str,
        cache: CacheNamespace,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.query_url = f"{base_url.rstrip('/')}/launches/query"
        self.cache = cache
        self.client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": "LaunchCache/1.0"},
        )

    async def fetch_launches(self, params: LaunchQueryParameters) -> List[LaunchRecord]:
        body = build_query_body(params)
        key = upstream_cache_key(body)

        raw, hit = self.cache.try_get(key)
        if hit:
            return parse_launches(self._decode(raw))

        resp = await self.client.post(self.query_url, json=body)
        resp.raise_for_status()
        records = parse_launches(self._decode(resp.text))
        # Only well-formed payloads are cached
        self.cache.set(key, resp.text)
        logger.info(f"Fetched {len(records)} launches from {self.query_url}")
        return records

    @staticmethod
    def _decode(raw: str) -> Any:
        try:
            return json.loads(raw)
        except ValueError as e:
            raise UpstreamPayloadError(f"Invalid JSON from launch provider: {e}") from e

    async def aclose(self):
        await self.client.aclose()
