"""
In-memory, TTL-based cache of normalized place records keyed by country.

The cache is an explicit object handed to `fetch_place_records`; nothing in
the matching core reaches for it implicitly.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Iterable, Optional, Tuple

from domain.models import PlaceRecord

logger = logging.getLogger(__name__)

Records = Tuple[PlaceRecord, ...]


class RecordsCache:
    def __init__(
        self,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, Records]] = {}

    def _expired(self, loaded_at: float) -> bool:
        if self.ttl_seconds <= 0:
            return False
        return (self._clock() - loaded_at) > self.ttl_seconds

    def get(self, country: str) -> Optional[Records]:
        """Return cached records for a country, or None when missing/expired."""
        with self._lock:
            entry = self._entries.get(country)
            if entry is None:
                logger.debug("records cache miss %s", country)
                return None
            loaded_at, records = entry
            if self._expired(loaded_at):
                logger.debug("records cache expired %s", country)
                del self._entries[country]
                return None
        logger.debug("records cache hit %s (%d records)", country, len(records))
        return records

    def put(self, country: str, records: Iterable[PlaceRecord]) -> Records:
        stored = tuple(records)
        with self._lock:
            self._entries[country] = (self._clock(), stored)
        logger.debug("records cache store %s (%d records)", country, len(stored))
        return stored

    def get_or_load(self, country: str, loader: Callable[[], Iterable[PlaceRecord]]) -> Records:
        """Return cached records, loading and storing them on a miss.

        The loader runs outside the lock; concurrent misses may both load,
        and the last one to finish wins.
        """
        cached = self.get(country)
        if cached is not None:
            return cached
        return self.put(country, loader())

    def invalidate(self, country: Optional[str] = None) -> None:
        """Drop one country's records, or everything when no country is given."""
        with self._lock:
            if country is None:
                self._entries.clear()
            else:
                self._entries.pop(country, None)
