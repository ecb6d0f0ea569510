"""Response cache for OPA query results."""

import hashlib
import json
import threading
from typing import Any, Protocol, runtime_checkable

import structlog
from cachetools import LRUCache, TTLCache

logger = structlog.get_logger()


@runtime_checkable
class Cache(Protocol):
    """Structural contract for a cache usable by PolicyClient.

    The client only reads and writes; clearing is left to the owner.
    """

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


def make_cache_key(resource_path: str, input_data: Any = None) -> str:
    """Generate a cache key from a normalized resource path and query input.

    Keys are stable across dict ordering and object identity.

    Raises:
        TypeError: if the input is not plain JSON data
    """
    content = f"{resource_path}:{json.dumps(input_data, sort_keys=True)}"
    return f"{resource_path}:{hashlib.sha256(content.encode()).hexdigest()[:32]}"


class DecisionCache:
    """LRU + TTL cache for query responses.

    Thread-safe implementation using cachetools.
    """

    def __init__(self, maxsize: int = 10000, ttl_seconds: float | None = 300):
        """Initialize the cache.

        Args:
            maxsize: Maximum number of entries
            ttl_seconds: Time-to-live in seconds, None for a plain LRU cache
        """
        if ttl_seconds is None:
            self._cache: LRUCache[str, Any] = LRUCache(maxsize=maxsize)
        else:
            self._cache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any:
        """Get a cached response, or None."""
        with self._lock:
            result = self._cache.get(key)
            if result is not None:
                self._hits += 1
                logger.debug("Cache hit", key=key[:16])
            else:
                self._misses += 1
            return result

    def set(self, key: str, value: Any) -> None:
        """Cache a response."""
        with self._lock:
            self._cache[key] = value
            logger.debug("Cache set", key=key[:16])

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            logger.info("Cache cleared", entries=count)
            return count

    def invalidate(self, resource: str) -> int:
        """Drop entries cached for one resource.

        Args:
            resource: Resource in dot or slash notation

        Returns:
            Number of entries removed
        """
        prefix = f"{resource.replace('.', '/')}:"
        with self._lock:
            keys_to_remove = [k for k in self._cache if k.startswith(prefix)]
            for key in keys_to_remove:
                del self._cache[key]
            logger.info(
                "Cache invalidated", resource=resource, entries=len(keys_to_remove)
            )
            return len(keys_to_remove)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = self._hits / total if total > 0 else 0.0
            return {
                "size": len(self._cache),
                "maxsize": self._cache.maxsize,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 3),
            }
