"""
In-memory TTL cache shared by every request.

Holds both raw upstream payloads and rendered query responses, each in its
own key namespace. Entries expire lazily: an expired entry is only removed
when a later read finds it. There is no background sweeper and no size bound.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

RESPONSE_PREFIX = "RESP:"
UPSTREAM_PREFIX = "UP:"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    stored_at: datetime
    payload: str


class CacheStore:
    """
    Thread-safe string -> payload cache with a store-wide TTL.

    Callers never lock: every operation takes the internal lock for the
    duration of a dict lookup/update only.
    """

    def __init__(
        self,
        ttl_seconds: int,
        clock: Callable[[], datetime] = utcnow,
        log: Optional[logging.Logger] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._log = log or logger
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._expired = 0

    def try_get(self, key: str) -> Tuple[Optional[str], bool]:
        """
        Return ``(payload, True)`` on a fresh hit, ``(None, False)`` otherwise.
        An expired entry is dropped as a side effect.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and (now - entry.stored_at).total_seconds() <= self.ttl_seconds:
                self._hits += 1
                hit = True
            else:
                hit = False
                expired = entry is not None and self._remove_if_same(key, entry)
                self._misses += 1
                if expired:
                    self._expired += 1

        if hit:
            self._log.info(f"Cache HIT: {key}")
            return entry.payload, True
        if entry is not None:
            self._log.info(f"Cache EXPIRED: {key}")
        self._log.info(f"Cache MISS: {key}")
        return None, False

    def set(self, key: str, payload: str) -> None:
        """Insert or overwrite; last writer wins."""
        entry = CacheEntry(stored_at=self._clock(), payload=payload)
        with self._lock:
            self._entries[key] = entry

    def _remove_if_same(self, key: str, expected: CacheEntry) -> bool:
        # Caller holds the lock. Only the exact expired entry is removed,
        # never a newer one written for the same key.
        if self._entries.get(key) is expected:
            del self._entries[key]
            return True
        return False

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "expired": self._expired,
                "ttl_seconds": self.ttl_seconds,
            }


class CacheNamespace:
    """Prefixed view over a CacheStore so different payload kinds never share keys."""

    def __init__(self, store: CacheStore, prefix: str):
        self.store = store
        self.prefix = prefix

    def key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def try_get(self, key: str) -> Tuple[Optional[str], bool]:
        return self.store.try_get(self.key(key))

    def set(self, key: str, payload: str) -> None:
        self.store.set(self.key(key), payload)
