"""Simple in-memory TTL cache. No Redis needed for a single client session.

Staleness is evaluated lazily on read; nothing is ever expired in the
background. Stale entries stay readable so callers can fall back to them
when the remote API is down.
"""

import time
from typing import Any, Callable, NamedTuple


class CacheEntry(NamedTuple):
    data: Any
    age_seconds: float
    is_fresh: bool


class TTLCache:
    def __init__(self, ttl_seconds: float = 30, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> CacheEntry | None:
        if key not in self._store:
            return None
        timestamp, value = self._store[key]
        age = self._clock() - timestamp
        return CacheEntry(value, age, age < self.ttl_seconds)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = (self._clock(), value)

    def invalidate(self, keys: list[str] | None = None) -> None:
        """Drop the given keys, or everything when no keys are given."""
        if keys is None:
            self._store.clear()
            return
        for key in keys:
            self._store.pop(key, None)

    def info(self) -> dict[str, dict]:
        """Age (whole seconds) and freshness of every entry."""
        now = self._clock()
        return {
            key: {"age": round(now - timestamp), "fresh": (now - timestamp) < self.ttl_seconds}
            for key, (timestamp, _) in self._store.items()
        }

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return key in self._store
