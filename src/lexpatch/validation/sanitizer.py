"""Sanitization of untrusted translation content.

Every string leaf is cleaned until it stops changing. One pass:

1. Remove control characters other than tab, newline and carriage return
2. Remove dangerous patterns (script/iframe/object/embed/style elements,
   link/meta tags, javascript:/vbscript:/data:text/html URIs, inline event
   handlers, CSS expression(), HTML comments), repeated until none is left
3. Strip remaining HTML tags with bleach (or escape them, or leave them,
   per SanitizeMode)

Stripping a tag can join the text around it into a new dangerous pattern
("java<b>script:"), so passes repeat until the output is stable. A string
that is still changing after _MAX_PASSES passes is dropped. Surrounding
whitespace is then trimmed and the result truncated to the maximum length.

Object keys go through the same pipeline with a shorter length limit; keys
that end up empty are dropped. Subtrees nested deeper than the configured
limit become None.

Content-safety problems are never raised: untrusted content degrades rather
than blocks. Namespace filtering is repeated here independently of
PatchValidator, since the two may run from different call sites.

Python 3.13+.
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

import bleach

from lexpatch.constants import (
    MAX_KEY_LENGTH,
    MAX_NESTING_DEPTH,
    MAX_STRING_LENGTH,
    PATCHABLE_NAMESPACES,
)
from lexpatch.core.tree import TranslationTree
from lexpatch.enums import SanitizeMode

__all__ = [
    "Sanitizer",
    "escape_html",
    "filter_protected_namespaces",
    "is_protected_namespace",
    "is_valid_translation_string",
    "remove_dangerous_patterns",
    "sanitize_object",
    "sanitize_patch",
    "sanitize_string",
    "strip_html_tags",
]

logger = logging.getLogger(__name__)

# Order matters: whole elements go before bare opening tags, and
# url(javascript:...) before the bare javascript: scheme.
_DANGEROUS_PATTERN_SOURCES: tuple[tuple[str, int], ...] = (
    (r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script\s*>", re.IGNORECASE),
    (r"<(iframe|object|embed|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL),
    (r"<(?:script|iframe|object|embed|style|link|meta)\b[^>]*>?", re.IGNORECASE),
    (r"url\s*\(\s*['\"]?\s*javascript:", re.IGNORECASE),
    (r"javascript:", re.IGNORECASE),
    (r"vbscript:", re.IGNORECASE),
    (r"data:\s*text/html", re.IGNORECASE),
    (r"\bon\w+\s*=", re.IGNORECASE),
    (r"expression\s*\(", re.IGNORECASE),
    (r"<!--.*?-->", re.DOTALL),
)

_CONTROL_CHAR_PATTERN_SOURCE = r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]"

_MAX_PASSES = 8


class Sanitizer:
    """Cleans untrusted translation trees.

    Compiled patterns are private to each instance. Markup goes through
    ``bleach.clean`` with an empty tag allow-list; a fresh cleaner is built
    per call, so one Sanitizer can be shared across threads.

    Example:
        >>> Sanitizer().sanitize_string("<script>alert(1)</script>hello")
        'hello'
        >>> Sanitizer().sanitize({"countries": {"br": "<b>Brasil</b>"}, "ui": {}})
        {'countries': {'br': 'Brasil'}, 'ui': {}}
    """

    __slots__ = (
        "_control_char_pattern",
        "_dangerous_patterns",
        "_max_depth",
        "_max_key_length",
        "_max_string_length",
        "_mode",
        "_patchable_namespaces",
        "_remove_control_chars",
    )

    def __init__(
        self,
        *,
        patchable_namespaces: Iterable[str] = PATCHABLE_NAMESPACES,
        mode: SanitizeMode = SanitizeMode.STRIP,
        max_string_length: int = MAX_STRING_LENGTH,
        max_key_length: int = MAX_KEY_LENGTH,
        max_depth: int = MAX_NESTING_DEPTH,
        remove_control_chars: bool = True,
    ) -> None:
        """Initialize sanitizer.

        Args:
            patchable_namespaces: Allow-list of top-level namespaces
            mode: Treatment of markup left after dangerous patterns are removed
            max_string_length: Truncation length for string values
            max_key_length: Truncation length for object keys
            max_depth: Deepest nesting level kept; deeper subtrees become None
            remove_control_chars: Strip non-printable control characters

        Raises:
            ValueError: If a length or depth limit is not positive
        """
        if max_string_length <= 0 or max_key_length <= 0:
            msg = "length limits must be positive"
            raise ValueError(msg)
        if max_depth < 0:
            msg = "max_depth must be non-negative"
            raise ValueError(msg)

        self._patchable_namespaces = frozenset(patchable_namespaces)
        self._mode = mode
        self._max_string_length = max_string_length
        self._max_key_length = max_key_length
        self._max_depth = max_depth
        self._remove_control_chars = remove_control_chars

        self._dangerous_patterns = tuple(
            re.compile(source, flags) for source, flags in _DANGEROUS_PATTERN_SOURCES
        )
        self._control_char_pattern = re.compile(_CONTROL_CHAR_PATTERN_SOURCE)

    @property
    def patchable_namespaces(self) -> frozenset[str]:
        """Allow-list of top-level namespaces."""
        return self._patchable_namespaces

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    @staticmethod
    def escape_html(value: str) -> str:
        """Escape markup as entities; entities already present are kept."""
        if not any(char in value for char in "<>&"):
            return value
        return bleach.clean(value, tags=[])

    @staticmethod
    def strip_html_tags(value: str) -> str:
        """Remove every tag and comment, keeping text content unescaped."""
        if "<" not in value and "&" not in value:
            return value
        return html.unescape(bleach.clean(value, tags=[], strip=True))

    def remove_dangerous_patterns(self, value: str) -> str:
        """Remove script-capable markup, URIs and handlers.

        Removal repeats until nothing matches, so a pattern rebuilt from the
        pieces around a removed one ("javajavascript:script:") goes too.
        """
        while True:
            cleaned = value
            for pattern in self._dangerous_patterns:
                cleaned = pattern.sub("", cleaned)
            if cleaned == value:
                return cleaned
            value = cleaned

    def _clean_pass(self, value: str, mode: SanitizeMode) -> str:
        if self._remove_control_chars:
            value = self._control_char_pattern.sub("", value)
        value = self.remove_dangerous_patterns(value)

        match mode:
            case SanitizeMode.STRIP:
                return self.strip_html_tags(value)
            case SanitizeMode.ESCAPE:
                return self.escape_html(value)
            case SanitizeMode.NONE:
                return value

    def sanitize_string(
        self,
        value: str,
        *,
        max_length: int | None = None,
        mode: SanitizeMode | None = None,
    ) -> str:
        """Run a single string through the sanitization pipeline.

        Args:
            value: String to sanitize
            max_length: Override the configured maximum length
            mode: Override the configured markup mode

        Returns:
            Sanitized string; empty if cleaning never settles
        """
        mode = mode or self._mode
        result = value
        for _ in range(_MAX_PASSES):
            cleaned = self._clean_pass(result, mode)
            if cleaned == result:
                break
            result = cleaned
        else:
            logger.warning(
                "Dropping string still changing after %d sanitization passes", _MAX_PASSES
            )
            return ""

        result = result.strip()

        limit = self._max_string_length if max_length is None else max_length
        if len(result) > limit:
            result = result[:limit]

        return result

    def sanitize_key(self, key: object) -> str:
        """Sanitize an object key (same pipeline, key length limit)."""
        return self.sanitize_string(str(key), max_length=self._max_key_length)

    def is_valid_translation_string(self, value: object) -> bool:
        """Check that a value is a non-empty, bounded string with no dangerous content."""
        if not isinstance(value, str):
            return False
        if not value or len(value) > self._max_string_length:
            return False
        return not any(pattern.search(value) for pattern in self._dangerous_patterns)

    # ------------------------------------------------------------------
    # Trees
    # ------------------------------------------------------------------

    def sanitize_value(self, value: Any, depth: int = 0) -> Any:
        """Recursively sanitize any tree value.

        Args:
            value: Value to sanitize
            depth: Nesting level of value (0 for the tree root)

        Returns:
            Sanitized value; None for over-deep subtrees and unsupported types
        """
        if depth > self._max_depth:
            logger.warning("Maximum nesting depth %d exceeded, dropping subtree", self._max_depth)
            return None

        match value:
            case None:
                return None
            case str():
                return self.sanitize_string(value)
            case bool() | int() | float():
                return value
            case list() | tuple():
                return [self.sanitize_value(item, depth + 1) for item in value]
            case Mapping():
                result: TranslationTree = {}
                for key, child in value.items():
                    clean_key = self.sanitize_key(key)
                    if not clean_key:
                        logger.debug("Dropping key that is empty after sanitization: %r", key)
                        continue
                    result[clean_key] = self.sanitize_value(child, depth + 1)
                return result
            case _:
                logger.debug("Replacing unsupported value type %s with None", type(value).__name__)
                return None

    def sanitize(self, tree: object) -> TranslationTree | None:
        """Sanitize a whole tree.

        Returns:
            Cleaned tree, or None if the input is not a mapping or nothing
            survives cleaning
        """
        if not isinstance(tree, Mapping):
            logger.error("Content must be a mapping, got %s", type(tree).__name__)
            return None

        sanitized = self.sanitize_value(tree)
        if not sanitized:
            logger.error("Content is empty after sanitization")
            return None

        return sanitized

    def is_protected_namespace(self, namespace: str) -> bool:
        """Check whether a namespace is outside the patchable allow-list."""
        return namespace not in self._patchable_namespaces

    def filter_protected_namespaces(self, tree: Mapping[str, Any]) -> TranslationTree:
        """Return a copy of tree without protected top-level namespaces."""
        result: TranslationTree = {}
        for namespace, value in tree.items():
            if self.is_protected_namespace(namespace):
                logger.warning("Skipping protected namespace: %s", namespace)
                continue
            result[namespace] = value
        return result

    def sanitize_content(self, tree: object) -> TranslationTree | None:
        """Sanitize a tree and drop protected namespaces.

        Returns:
            Cleaned, namespace-filtered tree, or None if nothing survives
        """
        sanitized = self.sanitize(tree)
        if sanitized is None:
            return None

        filtered = self.filter_protected_namespaces(sanitized)
        if not filtered:
            logger.warning("Content has no patchable namespaces after filtering")
            return None

        return filtered


_DEFAULT_SANITIZER = Sanitizer()


def sanitize_string(
    value: str,
    *,
    max_length: int = MAX_STRING_LENGTH,
    mode: SanitizeMode = SanitizeMode.STRIP,
) -> str:
    """Sanitize a single string with default settings.

    Example:
        >>> sanitize_string("<script>alert(1)</script>hello")
        'hello'
    """
    return _DEFAULT_SANITIZER.sanitize_string(value, max_length=max_length, mode=mode)


def sanitize_object(value: Any) -> Any:
    """Recursively sanitize any value with default settings."""
    return _DEFAULT_SANITIZER.sanitize_value(value)


def sanitize_patch(tree: object) -> TranslationTree | None:
    """Sanitize a tree with default settings (None on total rejection)."""
    return _DEFAULT_SANITIZER.sanitize(tree)


def escape_html(value: str) -> str:
    """Escape HTML-significant characters as entities."""
    return _DEFAULT_SANITIZER.escape_html(value)


def strip_html_tags(value: str) -> str:
    """Remove every tag and comment, keeping text content unescaped."""
    return _DEFAULT_SANITIZER.strip_html_tags(value)


def remove_dangerous_patterns(value: str) -> str:
    """Remove script-capable markup, URIs and handlers."""
    return _DEFAULT_SANITIZER.remove_dangerous_patterns(value)


def is_valid_translation_string(value: object) -> bool:
    """Check a value against the default string limits and dangerous patterns."""
    return _DEFAULT_SANITIZER.is_valid_translation_string(value)


def is_protected_namespace(namespace: str) -> bool:
    """Check whether a namespace is outside the default allow-list."""
    return _DEFAULT_SANITIZER.is_protected_namespace(namespace)


def filter_protected_namespaces(tree: Mapping[str, Any]) -> TranslationTree:
    """Drop namespaces outside the default allow-list."""
    return _DEFAULT_SANITIZER.filter_protected_namespaces(tree)
