"""
Launch Query Engine

Filters, sorts and truncates launch records from a data source and builds
the result served to clients. The data source is any object with an async
``fetch_launches(params)``; its errors propagate to the caller untouched.
"""

import logging
from typing import Iterable, List, Protocol

from launchcache.models.launch import LaunchQueryResult, LaunchRecord
from launchcache.services.query_params import SORT_DESC, LaunchQueryParameters

logger = logging.getLogger(__name__)


class LaunchDataSource(Protocol):
    async def fetch_launches(self, params: LaunchQueryParameters) -> List[LaunchRecord]:
        """Return candidate records, possibly pre-filtered server-side."""
        ...


def filter_launches(records: Iterable[LaunchRecord], params: LaunchQueryParameters) -> List[LaunchRecord]:
    return [r for r in records if params.matches(r)]


def sort_launches(records: Iterable[LaunchRecord], sort: str) -> List[LaunchRecord]:
    """Stable sort by launch date; equal dates keep input order in both directions."""
    return sorted(records, key=lambda r: r.date_utc, reverse=(sort == SORT_DESC))


async def query_launches(params: LaunchQueryParameters, source: LaunchDataSource) -> LaunchQueryResult:
    candidates = await source.fetch_launches(params)
    matched = filter_launches(candidates, params)
    # Truncate only after sorting
    launches = sort_launches(matched, params.sort)[:params.limit]
    logger.info(f"Launch query matched {len(matched)} of {len(candidates)} records, returning {len(launches)}")
    return LaunchQueryResult(count=len(launches), filters=params.describe(), launches=launches)
