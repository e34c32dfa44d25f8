"""Single-slot in-memory cache with a time-based freshness check."""

from __future__ import annotations

import time
from typing import Callable

from moutai_index.forecast.models import CacheEntry

DEFAULT_TTL_SECONDS = 300


def epoch_millis() -> int:
    return int(time.time() * 1000)


class StalenessCache:
    """Holds the last successful fetch result.

    Empty until the first put; every put replaces the entry. There is no
    invalidation: staleness is computed on read from the entry timestamp.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        self.ttl_ms = ttl_seconds * 1000
        self.clock = clock
        self._entry: CacheEntry | None = None

    def get(self) -> CacheEntry | None:
        return self._entry

    def put(self, entry: CacheEntry) -> None:
        self._entry = entry

    def is_fresh(self, entry: CacheEntry, now_ms: int) -> bool:
        return now_ms - entry.fetched_at_ms < self.ttl_ms

    def fresh_entry(self) -> CacheEntry | None:
        """Return the cached entry if it is still inside the freshness window."""
        entry = self._entry
        if entry is not None and self.is_fresh(entry, self.clock()):
            return entry
        return None
