"""
data.weather.cache – TTL-bounded in-memory key/value store.

One instance per (value type, TTL): the WeatherService keeps a forecast
cache (3 h) and an observation cache (15 min).  Entries expire lazily: a
read at or past the TTL is a miss, but the stale entry stays in memory
until the next put for the same key replaces it.  The key space is the
set of service-area geokeys, so it stays small.

All access goes through a lock so a cache can be shared between worker
threads.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class _CacheEntry(Generic[T]):
    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """
    Usage
    -----
    cache: TTLCache[WeatherForecast] = TTLCache(ttl_seconds=3 * 3600)
    cache.put("qd66hrh:7", forecast)
    cache.get("qd66hrh:7")   # → forecast until 3 h have passed, then None
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _CacheEntry[T]] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self._ttl:
                return None
            return entry.value

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, stored_at=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict:
        with self._lock:
            return {"size": len(self._entries), "keys": list(self._entries)}
