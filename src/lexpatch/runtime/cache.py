"""Bounded cache for interpolation results.

Architecture:
    - Insertion-ordered OrderedDict; overflow evicts the oldest entry
    - Optional read "touch" re-inserts hits to approximate recency
    - Thread-safe using threading.RLock
    - Keys are immutable tuples built from a canonical context snapshot

Cache Key Structure:
    (template, context_snapshot)
    - template: str
    - context_snapshot: tuple[tuple[str, str], ...] sorted by key, each value
      rendered with repr() so that 5 and "5" produce different keys

The merged translation tree is NOT part of the key. Owners must call
clear() whenever the tree changes.

Python 3.13+.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Mapping
from threading import RLock
from typing import Any

from .cache_config import CacheConfig

__all__ = ["InterpolationCache"]

type _ContextSnapshot = tuple[tuple[str, str], ...]
type _CacheKey = tuple[str, _ContextSnapshot]


class InterpolationCache:
    """Bounded cache for resolved template strings.

    Transparent to caller: returns None on cache miss.

    Attributes:
        maxsize: Maximum number of cache entries
        hits: Number of cache hits (for metrics)
        misses: Number of cache misses (for metrics)
    """

    __slots__ = ("_cache", "_hits", "_lock", "_maxsize", "_misses", "_touch_on_read")

    def __init__(self, config: CacheConfig | None = None) -> None:
        """Initialize interpolation cache.

        Args:
            config: Cache configuration (default: CacheConfig())
        """
        config = config or CacheConfig()
        self._cache: OrderedDict[_CacheKey, str] = OrderedDict()
        self._maxsize = config.size
        self._touch_on_read = config.touch_on_read
        self._lock = RLock()
        self._hits = 0
        self._misses = 0

    def get(self, template: str, context: Mapping[str, Any] | None) -> str | None:
        """Get cached result if exists.

        Args:
            template: Template text
            context: Interpolation variables

        Returns:
            Cached resolved string or None
        """
        key = self.make_key(template, context)

        with self._lock:
            value = self._cache.get(key)
            if value is None:
                self._misses += 1
                return None

            if self._touch_on_read:
                self._cache.move_to_end(key)
            self._hits += 1
            return value

    def put(self, template: str, context: Mapping[str, Any] | None, result: str) -> None:
        """Store result in cache, evicting the oldest entry if full.

        Args:
            template: Template text
            context: Interpolation variables
            result: Resolved string
        """
        key = self.make_key(template, context)

        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self._maxsize:
                self._cache.popitem(last=False)

            self._cache[key] = result

    def clear(self) -> None:
        """Clear all cached entries and reset metrics."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> dict[str, int | float]:
        """Get cache statistics.

        Returns:
            Dict with keys:
            - size (int): Current number of cached entries
            - maxsize (int): Maximum cache capacity
            - hits (int): Number of cache hits
            - misses (int): Number of cache misses
            - hit_rate (float): Hit rate as percentage (0.0-100.0)
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0

            return {
                "size": len(self._cache),
                "maxsize": self._maxsize,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
            }

    @staticmethod
    def make_key(template: str, context: Mapping[str, Any] | None) -> _CacheKey:
        """Create immutable cache key from template and context.

        Sorting is required for correctness: {"a": 1, "b": 2} and
        {"b": 2, "a": 1} must map to the same entry.
        """
        if not context:
            return (template, ())
        snapshot = tuple(sorted((str(k), repr(v)) for k, v in context.items()))
        return (template, snapshot)

    def __len__(self) -> int:
        """Get current cache size."""
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        """Check whether a (template, context) pair is cached, without touching it."""
        match key:
            case (str() as template, Mapping() | None as context):
                with self._lock:
                    return self.make_key(template, context) in self._cache
            case _:
                return False

    @property
    def maxsize(self) -> int:
        """Maximum cache size."""
        return self._maxsize

    @property
    def hits(self) -> int:
        """Number of cache hits."""
        with self._lock:
            return self._hits

    @property
    def misses(self) -> int:
        """Number of cache misses."""
        with self._lock:
            return self._misses
