"""
In-Process Cache Store

Key/value store with per-entry write timestamps, used as the storefront's
read-through data cache.

- Entries are valid while now - stored_at < ttl; expired entries are misses
  even though they stay in the map until overwritten or deleted
- No size bound and no eviction beyond TTL lapse
- One instance per process, created at app startup and cleared at shutdown
- Concurrent misses on the same key are not deduplicated: each caller
  runs the producer and the last write wins
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class CacheEntry:
    """Cached value with the time it was stored."""
    key: str
    value: Any
    stored_at: float

    def is_fresh(self, ttl: float, now: float) -> bool:
        return now - self.stored_at < ttl


@dataclass
class CacheStats:
    """Cache operation statistics."""
    hits: int = 0
    misses: int = 0
    writes: int = 0
    deletes: int = 0
    producer_errors: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class CacheStore:
    """
    Unbounded in-memory cache with TTL checked on read.

    Usage:
        cache = CacheStore(default_ttl=300)

        product = await cache.fetch_with_cache(
            "product_5", ttl=1800, producer=lambda: client.get("/wp/v2/products/5")
        )

        cache.delete("product_5")
    """

    def __init__(
        self,
        default_ttl: float = 300.0,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the store.

        Args:
            default_ttl: TTL in seconds used when get() is called without one
            enabled: When False every lookup misses and nothing is stored
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.default_ttl = default_ttl
        self.enabled = enabled
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._stats = CacheStats()

    def _lookup(self, key: str, ttl: Optional[float]) -> Optional[CacheEntry]:
        if not self.enabled:
            return None

        entry = self._entries.get(key)
        ttl = self.default_ttl if ttl is None else ttl

        if entry is None or not entry.is_fresh(ttl, self._clock()):
            self._stats.misses += 1
            return None

        self._stats.hits += 1
        return entry

    # =========================================================================
    # Core Operations
    # =========================================================================

    def get(self, key: str, ttl: Optional[float] = None) -> Optional[Any]:
        """
        Get a fresh value from cache.

        Returns None when the key is absent, expired, or the cache is disabled.
        """
        entry = self._lookup(key, ttl)
        return entry.value if entry else None

    def set(self, key: str, value: Any) -> None:
        """Store a value stamped with the current time."""
        if not self.enabled:
            return

        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())
        self._stats.writes += 1

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it was present."""
        removed = self._entries.pop(key, None) is not None
        if removed:
            self._stats.deletes += 1
        return removed

    def delete_prefix(self, prefix: str) -> int:
        """Delete all keys starting with prefix. Returns count deleted."""
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]

        self._stats.deletes += len(doomed)
        if doomed:
            logger.debug(f"Deleted {len(doomed)} keys with prefix {prefix}")
        return len(doomed)

    def clear(self) -> int:
        """Remove every entry. Returns count removed."""
        count = len(self._entries)
        self._entries.clear()
        self._stats.deletes += count
        return count

    def keys(self) -> List[str]:
        """Keys physically present, including expired ones."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    # =========================================================================
    # Read-through
    # =========================================================================

    async def fetch_with_cache(
        self,
        key: str,
        ttl: float,
        producer: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Return the cached value for key, or produce and store it.

        The producer runs only on a miss. If it raises, nothing is stored
        and the exception propagates unchanged.
        """
        entry = self._lookup(key, ttl)
        if entry is not None:
            return entry.value

        try:
            value = await producer()
        except Exception:
            self._stats.producer_errors += 1
            raise

        self.set(key, value)
        return value

    # =========================================================================
    # Monitoring
    # =========================================================================

    def get_stats(self) -> Dict:
        """Get cache statistics."""
        return {
            "enabled": self.enabled,
            "entries": len(self._entries),
            "hits": self._stats.hits,
            "misses": self._stats.misses,
            "writes": self._stats.writes,
            "deletes": self._stats.deletes,
            "producer_errors": self._stats.producer_errors,
            "hit_rate_percent": round(self._stats.hit_rate * 100, 2),
        }
