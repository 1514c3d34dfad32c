"""In-process TTL result cache.

Memoizes expensive per-handle and per-query upstream lookups for a
fixed number of seconds. Entries are only evicted when a read finds
them expired; there is no size bound. A TTL of 0 disables caching:
nothing is stored and every read is a miss.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar
import logging
import time

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    expirations: int = 0

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
        }


class ResultCache(Generic[T]):
    """Key -> (stored_at, value) map with TTL expiry.

    Example:
        cache = ResultCache(ttl_seconds=300)
        cache.set("social:instagram:profile:alice", snapshot)
        cache.get("social:instagram:profile:alice")  # snapshot, or None once expired
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
        name: str = "results",
    ):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._name = name
        self._entries: dict[str, tuple[float, T]] = {}
        self._stats = CacheStats()

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def get(self, key: str) -> Optional[T]:
        """Cached value for key, or None on a miss (absent, expired or disabled)."""
        if not self.enabled:
            self._stats.misses += 1
            return None

        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            return None

        stored_at, value = entry
        if self._clock() - stored_at > self._ttl:
            del self._entries[key]
            self._stats.expirations += 1
            self._stats.misses += 1
            return None

        self._stats.hits += 1
        logger.debug("%s cache hit for %s", self._name, key)
        return value

    def set(self, key: str, value: T) -> None:
        if not self.enabled:
            return
        self._entries[key] = (self._clock(), value)

    def invalidate(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
