"""lexpatch runtime package.

Provides the merge engine and the cached interpolation engine.

Python 3.13+.
"""

from .cache import InterpolationCache
from .cache_config import CacheConfig
from .interpolation import (
    BoundInterpolator,
    Interpolator,
    resolve_plurals,
    resolve_references,
    resolve_variables,
)
from .merge import (
    deep_merge,
    deep_merge_all,
    get_nested_value,
    has_nested_value,
    set_nested_value,
)

__all__ = [
    "BoundInterpolator",
    "CacheConfig",
    "InterpolationCache",
    "Interpolator",
    "deep_merge",
    "deep_merge_all",
    "get_nested_value",
    "has_nested_value",
    "resolve_plurals",
    "resolve_references",
    "resolve_variables",
    "set_nested_value",
]
