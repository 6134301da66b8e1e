"""Placeholder resolution for translation strings.

Three placeholder kinds are resolved in a fixed order, because later stages
may consume text produced by earlier ones:

1. References ``{{ref:dotted.path}}`` - looked up in the fully merged tree
2. Plurals ``{{plural:countKey|singular|plural}}`` - binary choice on count
3. Variables ``{name}`` - substituted from the context

Misses never raise. A missing reference renders as ``[dotted.path]`` and is
logged; a missing variable keeps its ``{name}`` placeholder so the gap is
visible in the UI.

Interpolator instances own their result cache. The cache key ignores the
translation tree, so the owner must call clear_cache() whenever the tree it
interpolates against changes.

Python 3.13+.
"""

from __future__ import annotations

import logging
import numbers
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .cache import InterpolationCache
from .cache_config import CacheConfig
from .merge import get_nested_value

__all__ = [
    "BoundInterpolator",
    "Interpolator",
    "resolve_plurals",
    "resolve_references",
    "resolve_variables",
]

logger = logging.getLogger(__name__)

_REFERENCE_PATTERN: re.Pattern[str] = re.compile(r"\{\{ref:([a-zA-Z0-9_.]+)\}\}")
_PLURAL_PATTERN: re.Pattern[str] = re.compile(r"\{\{plural:(\w+)\|([^|]+)\|([^}]+)\}\}")
_VARIABLE_PATTERN: re.Pattern[str] = re.compile(r"\{(\w+)\}")


def resolve_references(template: str, translations: Mapping[str, Any]) -> str:
    """Resolve ``{{ref:path}}`` placeholders against a translation tree.

    Args:
        template: String containing reference placeholders
        translations: Fully merged tree to look references up in

    Returns:
        String with references resolved; unresolvable ones become ``[path]``

    Example:
        >>> resolve_references("Win the {{ref:cups.cl}}!", {"cups": {"cl": "UEFA CL"}})
        'Win the UEFA CL!'
    """
    if "{{ref:" not in template:
        return template

    def _replace(match: re.Match[str]) -> str:
        path = match.group(1)
        value = get_nested_value(translations, path)
        if value is None:
            logger.warning("Reference not found: %s", path)
            return f"[{path}]"
        if not isinstance(value, str):
            logger.warning("Reference is not a string: %s", path)
            return f"[{path}]"
        return value

    return _REFERENCE_PATTERN.sub(_replace, template)


def resolve_plurals(template: str, context: Mapping[str, Any]) -> str:
    """Resolve ``{{plural:count|singular|plural}}`` placeholders.

    Only a binary choice is made: singular when the count equals 1, plural
    otherwise. A count that is missing or not a number (booleans included)
    selects the singular form.

    Example:
        >>> resolve_plurals("{{plural:count|goal|goals}}", {"count": 5})
        'goals'
    """
    if "{{plural:" not in template:
        return template

    def _replace(match: re.Match[str]) -> str:
        count_key, singular, plural = match.groups()
        count = context.get(count_key)
        if not isinstance(count, numbers.Number) or isinstance(count, bool):
            return singular
        return singular if count == 1 else plural

    return _PLURAL_PATTERN.sub(_replace, template)


def resolve_variables(template: str, context: Mapping[str, Any]) -> str:
    """Resolve ``{name}`` placeholders from context.

    Placeholders without a (non-None) value are kept verbatim.

    Example:
        >>> resolve_variables("{team} vs {rival}", {"team": "Ajax"})
        'Ajax vs {rival}'
    """
    if "{" not in template:
        return template

    def _replace(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        if value is None:
            return match.group(0)
        return str(value)

    return _VARIABLE_PATTERN.sub(_replace, template)


class Interpolator:
    """Cached, three-stage template resolver.

    Example:
        >>> interpolator = Interpolator()
        >>> tree = {"competition": {"championsLeague": "UEFA CL"}}
        >>> interpolator.interpolate("Win the {{ref:competition.championsLeague}}!", {}, tree)
        'Win the UEFA CL!'
    """

    __slots__ = ("_cache",)

    def __init__(self, cache: CacheConfig | None = None) -> None:
        """Initialize interpolator.

        Args:
            cache: Cache configuration (default: CacheConfig())
        """
        self._cache = InterpolationCache(cache)

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"Interpolator(cache_size={len(self._cache)}, maxsize={self._cache.maxsize})"

    def interpolate(
        self,
        template: str,
        context: Mapping[str, Any] | None = None,
        translations: Mapping[str, Any] | None = None,
        use_cache: bool = True,
    ) -> str:
        """Resolve references, plurals and variables in a template.

        Args:
            template: Template string; non-string or empty values are
                returned unchanged
            context: Variables for plural and variable placeholders
            translations: Fully merged tree for reference placeholders
            use_cache: Read from and write to the result cache (default: True)

        Returns:
            Fully resolved string
        """
        if not template or not isinstance(template, str):
            return template

        context = context or {}

        if use_cache:
            cached = self._cache.get(template, context)
            if cached is not None:
                return cached

        result = resolve_references(template, translations or {})
        result = resolve_plurals(result, context)
        result = resolve_variables(result, context)

        if use_cache:
            self._cache.put(template, context, result)

        return result

    def interpolate_batch(
        self,
        templates: Iterable[str],
        context: Mapping[str, Any] | None = None,
        translations: Mapping[str, Any] | None = None,
    ) -> list[str]:
        """Resolve several templates against one context/tree pair."""
        return [self.interpolate(template, context, translations) for template in templates]

    def bind(self, translations: Mapping[str, Any]) -> BoundInterpolator:
        """Capture a translation tree for repeated two-argument use.

        Example:
            >>> t = Interpolator().bind({"cups": {"cl": "UEFA CL"}})
            >>> t("{{ref:cups.cl}} - {round}", {"round": "Final"})
            'UEFA CL - Final'
        """
        return BoundInterpolator(self, translations)

    def clear_cache(self) -> None:
        """Drop every cached result. Call whenever the merged tree changes."""
        self._cache.clear()
        logger.debug("Interpolation cache cleared")

    def get_cache_stats(self) -> dict[str, int | float]:
        """Get cache statistics (size, maxsize, hits, misses, hit_rate)."""
        return self._cache.get_stats()

    @property
    def cache(self) -> InterpolationCache:
        """Underlying result cache."""
        return self._cache


@dataclass(frozen=True, slots=True)
class BoundInterpolator:
    """Interpolator with a captured translation tree.

    Attributes:
        interpolator: Interpolator doing the work (and owning the cache)
        translations: Tree used for reference placeholders
    """

    interpolator: Interpolator
    translations: Mapping[str, Any]

    def __call__(self, template: str, context: Mapping[str, Any] | None = None) -> str:
        """Resolve template against the captured tree."""
        return self.interpolator.interpolate(template, context, self.translations)
