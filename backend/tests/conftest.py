"""
Shared fixtures for launch cache tests.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from launchcache.models.launch import LaunchRecord
from launchcache.services.cache_store import CacheNamespace, CacheStore, RESPONSE_PREFIX, UPSTREAM_PREFIX
from launchcache.services.orchestrator import LaunchQueryService


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


class FakeDataSource:
    """In-memory data source that records how often it was asked."""

    def __init__(self, records: List[LaunchRecord], error: Optional[Exception] = None):
        self.records = records
        self.error = error
        self.calls = 0

    async def fetch_launches(self, params):
        self.calls += 1
        # Yield so concurrent callers interleave like real I/O
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return list(self.records)


def make_launch(launch_id: str, name: str, date_utc: datetime, success=None, upcoming=False) -> LaunchRecord:
    return LaunchRecord(id=launch_id, name=name, date_utc=date_utc, success=success, upcoming=upcoming)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return CacheStore(ttl_seconds=60, clock=clock)


@pytest.fixture
def launch_records():
    """Five launches, three of which have 'falcon' in the name."""
    return [
        make_launch("l-ratsat", "RatSat", datetime(2008, 9, 28, 23, 15, tzinfo=timezone.utc), success=True),
        make_launch("l-fh-demo", "Falcon Heavy Test Flight", datetime(2018, 2, 6, 20, 45, tzinfo=timezone.utc), success=True),
        make_launch("l-falconsat", "FalconSat", datetime(2006, 3, 24, 22, 30, tzinfo=timezone.utc), success=False),
        make_launch("l-ussf44", "USSF-44", datetime(2030, 11, 1, 13, 41, tzinfo=timezone.utc), upcoming=True),
        make_launch("l-f9-demo", "Falcon 9 Test Flight", datetime(2010, 6, 4, 18, 45, tzinfo=timezone.utc), success=True),
    ]


@pytest.fixture
def data_source(launch_records):
    return FakeDataSource(launch_records)


@pytest.fixture
def launch_service(data_source, store):
    return LaunchQueryService(data_source, CacheNamespace(store, RESPONSE_PREFIX))


@pytest.fixture
def upstream_cache(store):
    return CacheNamespace(store, UPSTREAM_PREFIX)
