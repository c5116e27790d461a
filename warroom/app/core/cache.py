"""Response cache with per-entry TTL and lazy expiry.

Entries live in a mapping injected at construction, which keeps tests
isolated and leaves room for a shared store in multi-instance deployments.
All operations are synchronous: they complete between event-loop suspension
points, so no lock is taken.
"""

import base64
import json
import time
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from warroom.app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TTL = 300.0  # 5 minutes


@dataclass
class CacheEntry(Generic[T]):
    """A cached payload with its creation time and TTL (seconds)."""

    data: T
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """An entry is valid while ``now - timestamp <= ttl``."""
        return now - self.timestamp > self.ttl


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


def generate_key(endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build a deterministic cache key from an endpoint and its parameters.

    Parameters are sorted by name before serialization, so logically equal
    parameter sets map to the same key regardless of insertion order.

    Example:
        >>> generate_key("mentions", {"b": 2, "a": 1}) == generate_key("mentions", {"a": 1, "b": 2})
        True
    """
    ordered = {key: (params or {})[key] for key in sorted(params or {})}
    serialized = json.dumps(ordered, separators=(",", ":"), default=str)
    encoded = base64.b64encode(serialized.encode("utf-8")).decode("ascii")
    return f"{endpoint}:{encoded}"


class ResponseCache:
    """In-memory TTL cache for upstream responses.

    No size bound is enforced; growth is limited only by TTL eviction
    through ``get`` and the periodic ``cleanup`` sweep.

    Usage:
        cache = ResponseCache()
        key = cache.generate_key("mentions", {"q": "brand"})
        data = cache.get(key)
        if data is None:
            data = await fetch()
            cache.set(key, data, ttl=120)
    """

    def __init__(
        self,
        store: Optional[MutableMapping[str, CacheEntry[Any]]] = None,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store: MutableMapping[str, CacheEntry[Any]] = store if store is not None else {}
        self._default_ttl = default_ttl
        self._clock = clock
        self._stats = CacheStats()

    generate_key = staticmethod(generate_key)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def get(self, key: str) -> Any:
        """Return the cached payload, or None on a miss.

        Reading an expired entry evicts it.
        """
        entry = self._store.get(key)
        if entry is None:
            self._stats.misses += 1
            return None

        if entry.is_expired(self._clock()):
            del self._store[key]
            self._stats.misses += 1
            self._stats.expirations += 1
            logger.info("Cache expired and removed", extra={"key": key})
            return None

        self._stats.hits += 1
        logger.debug("Cache hit", extra={"key": key})
        return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        """Store ``data`` under ``key``, overwriting any previous entry.

        Args:
            key: Cache key, usually from ``generate_key``
            data: Payload to store
            ttl: Time-to-live in seconds (defaults to the cache default)
        """
        ttl = self._default_ttl if ttl is None else ttl
        self._store[key] = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)
        logger.debug("Cache set", extra={"key": key, "ttl": ttl})

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns whether it was present."""
        if self._store.pop(key, None) is None:
            return False
        logger.info("Cache deleted", extra={"key": key})
        return True

    def clear(self) -> int:
        """Remove every entry; returns how many were dropped."""
        size = len(self._store)
        self._store.clear()
        logger.info("Cache cleared", extra={"items_removed": size})
        return size

    def cleanup(self) -> int:
        """Evict all expired entries.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.is_expired(now)]
        for key in expired:
            del self._store[key]
        self._stats.expirations += len(expired)

        if expired:
            logger.info("Cache cleanup completed", extra={"items_removed": len(expired)})
        return len(expired)

    def get_stats(self) -> dict[str, Any]:
        return {
            "size": len(self._store),
            "hits": self._stats.hits,
            "misses": self._stats.misses,
            "expirations": self._stats.expirations,
            "hit_rate": f"{self._stats.hit_rate:.2%}",
        }


# Global cache instance (singleton pattern)
_cache_instance: ResponseCache | None = None


def get_cache() -> ResponseCache:
    """Get or create the process-wide response cache."""
    global _cache_instance

    if _cache_instance is None:
        # Import settings here to keep module import light for tests
        from warroom.app.core.config import settings

        _cache_instance = ResponseCache(default_ttl=settings.cache_default_ttl)
    return _cache_instance


def reset_cache() -> None:
    """Reset the global cache instance.

    This is primarily useful for testing.
    """
    global _cache_instance
    _cache_instance = None
