"""Shared constants for lexpatch.

Centralized limits and defaults used across the validation, runtime and
localization packages. Placing constants here avoids circular imports and
provides a single source of truth.

Constants are grouped by domain:
- Depth limits: Recursion protection for validation and sanitization
- Content limits: Size constraints for untrusted patch content
- Cache limits: Memory bounds for the interpolation cache
- Loader defaults: Base language, remote TTL, storage layout

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Depth limits
    "MAX_DEPTH",
    "MAX_NESTING_DEPTH",
    # Content limits
    "MAX_STRING_LENGTH",
    "MAX_KEY_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_PATCH_SIZE",
    "PATCH_SIZE_WARNING_THRESHOLD",
    # Namespaces
    "PATCHABLE_NAMESPACES",
    # Cache limits
    "DEFAULT_CACHE_SIZE",
    # Loader defaults
    "BASE_LANGUAGE",
    "DEFAULT_REMOTE_TTL",
    "DEFAULT_STORAGE_PREFIX",
    "REMOTE_CONTENT_FILENAME",
    "DEFAULT_PATCH_VERSION",
]

# ============================================================================
# DEPTH LIMITS
# ============================================================================

# Hard ceiling for validator recursion. Anything deeper is reported as a
# validation error instead of surfacing as RecursionError.
MAX_DEPTH: int = 100

# Sanitizer nesting cap. Subtrees below this depth are replaced by None.
MAX_NESTING_DEPTH: int = 10

# ============================================================================
# CONTENT LIMITS
# ============================================================================

# Maximum length of any translation string (validation and truncation).
MAX_STRING_LENGTH: int = 2000

# Maximum length of a sanitized object key.
MAX_KEY_LENGTH: int = 100

# Maximum length of metadata.name.
MAX_NAME_LENGTH: int = 100

# metadata.description above this length produces a warning.
MAX_DESCRIPTION_LENGTH: int = 500

# Serialized patch size limits, measured in characters of compact JSON.
MAX_PATCH_SIZE: int = 5 * 1024 * 1024
PATCH_SIZE_WARNING_THRESHOLD: int = 1024 * 1024

# ============================================================================
# NAMESPACES
# ============================================================================

# Top-level namespaces a patch may modify. Everything else (ui, attributes,
# training, mechanics, ...) is protected.
PATCHABLE_NAMESPACES: frozenset[str] = frozenset({
    "leagues",
    "cups",
    "competitionNames",
    "competition",
    "trophy",
    "trophies",
    "trophiesSection",
    "award",
    "awardsSection",
    "awardGroups",
    "countries",
    "nationality",
    "continents",
    "tier",
    "careerTiers",
})

# ============================================================================
# CACHE LIMITS
# ============================================================================

# Default maximum interpolation cache entries.
DEFAULT_CACHE_SIZE: int = 2000

# ============================================================================
# LOADER DEFAULTS
# ============================================================================

# Language every other language falls back to.
BASE_LANGUAGE: str = "en"

# Remote snapshot freshness window, in seconds (24 hours).
DEFAULT_REMOTE_TTL: float = 24 * 60 * 60

# Prefix for every persisted storage key.
DEFAULT_STORAGE_PREFIX: str = "lexpatch"

# Remote endpoint layout: {base_url}/{language}/content.json
REMOTE_CONTENT_FILENAME: str = "content.json"

# Version stamped on documents synthesized by the loader.
DEFAULT_PATCH_VERSION: str = "1.0.0"
