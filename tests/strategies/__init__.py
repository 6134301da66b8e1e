"""Hypothesis strategies for lexpatch property-based testing.

Strategies are organized by domain:

- trees: translation trees, patch documents and hostile strings

Usage:
    from tests.strategies.trees import translation_trees, valid_patch_documents

Event-Emitting Strategies (HypoFuzz-Optimized):
    These strategies emit hypothesis.event() calls for coverage-guided fuzzing:
    - translation_trees, valid_patch_documents, hostile_strings
"""

from .trees import (
    NAMESPACES,
    hostile_strings,
    safe_texts,
    translation_keys,
    translation_trees,
    valid_patch_documents,
)

__all__ = [
    "NAMESPACES",
    "hostile_strings",
    "safe_texts",
    "translation_keys",
    "translation_trees",
    "valid_patch_documents",
]
