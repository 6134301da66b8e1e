"""Cache configuration for the interpolation engine.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from lexpatch.constants import DEFAULT_CACHE_SIZE

__all__ = ["CacheConfig"]


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Immutable configuration for interpolation result caching.

    Attributes:
        size: Maximum cache entries (default: 2000).
        touch_on_read: Re-insert entries on a cache hit so that frequently
            read entries survive eviction (default: True). When False the
            cache is strictly first-in-first-out.

    Example:
        >>> from lexpatch.runtime.interpolation import Interpolator
        >>> interpolator = Interpolator(cache=CacheConfig(size=500))
        >>> interpolator.get_cache_stats()["maxsize"]
        500
    """

    size: int = DEFAULT_CACHE_SIZE
    touch_on_read: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If size is not positive.
        """
        if self.size <= 0:
            msg = "size must be positive"
            raise ValueError(msg)
