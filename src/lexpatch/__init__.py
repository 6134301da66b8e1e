"""lexpatch - layered translations with safe community patches.

Merges shipped translation bundles, remote content and community-authored
patch documents into one translation tree, then resolves cross-references,
plurals and variables at read time. Untrusted patch content is validated
against a namespace allow-list and sanitized before it can reach the tree.

Public API:
    TranslationLoader - Layered loading, patch application and translation lookup
    LoaderConfig - Loader configuration
    PatchValidator / validate_patch - Structural validation of patch documents
    Sanitizer - Content sanitization and namespace filtering
    Interpolator - Cached reference/plural/variable resolution
    deep_merge - Non-mutating recursive merge of translation trees

Exceptions:
    LexPatchError - Base exception class
    DepthLimitExceededError - Recursion limit reached during traversal
    RemoteFetchError - Non-2xx response from the remote endpoint

Submodules:
    lexpatch.validation - Patch validation and sanitization
    lexpatch.runtime - Merge engine, interpolation and its cache
    lexpatch.localization - Loader, storage/fetch adapters, result types
    lexpatch.diagnostics - Error codes, validation results, exceptions
"""

# Essential Public API - Minimal exports for clean namespace
from .diagnostics import (
    DepthLimitExceededError,
    LexPatchError,
    PatchErrorCode,
    RemoteFetchError,
    ValidationError,
    ValidationResult,
)
from .localization import LoadedTranslations, LoaderConfig, MemoryStorage, TranslationLoader
from .runtime import CacheConfig, Interpolator, deep_merge
from .validation import PatchValidator, Sanitizer, create_patch_template, validate_patch

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("lexpatch")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "CacheConfig",
    "DepthLimitExceededError",
    "Interpolator",
    "LexPatchError",
    "LoadedTranslations",
    "LoaderConfig",
    "MemoryStorage",
    "PatchErrorCode",
    "PatchValidator",
    "RemoteFetchError",
    "Sanitizer",
    "TranslationLoader",
    "ValidationError",
    "ValidationResult",
    "__version__",
    "create_patch_template",
    "deep_merge",
    "validate_patch",
]
