"""Diagnostic system for lexpatch.

Provides patch validation codes, structured validation results and the
exception hierarchy.

Python 3.13+. Zero external dependencies.
"""

from .codes import PatchErrorCode
from .errors import DepthLimitExceededError, LexPatchError, RemoteFetchError
from .validation import ValidationError, ValidationResult

__all__ = [
    "DepthLimitExceededError",
    "LexPatchError",
    "PatchErrorCode",
    "RemoteFetchError",
    "ValidationError",
    "ValidationResult",
]
