"""Core utilities shared by the validation, runtime and localization layers.

Exports:
    DepthGuard: Context manager for recursion depth limiting
    DepthLimitExceededError: Exception raised when depth limit exceeded
    TranslationTree / TranslationValue: Tree type aliases
    is_node / is_leaf / is_text / is_absent: Tree discriminators

Python 3.13+.
"""

from .depth_guard import DepthGuard, DepthLimitExceededError
from .tree import (
    TranslationTree,
    TranslationValue,
    is_absent,
    is_leaf,
    is_node,
    is_text,
    split_path,
)

__all__ = [
    "DepthGuard",
    "DepthLimitExceededError",
    "TranslationTree",
    "TranslationValue",
    "is_absent",
    "is_leaf",
    "is_node",
    "is_text",
    "split_path",
]
