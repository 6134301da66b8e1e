"""Deterministic recursive merging of translation trees.

Rules:
    - Mappings are merged recursively
    - Lists are replaced entirely (never concatenated or diffed)
    - Any other value is overwritten by later sources
    - None in a source never overwrites an existing value

Inputs are never mutated. The result shares unmodified subtrees with its
inputs, so callers must not mutate the result in place if the inputs are
still in use.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from lexpatch.core.tree import TranslationTree, is_absent, is_node, split_path

__all__ = [
    "deep_merge",
    "deep_merge_all",
    "get_nested_value",
    "has_nested_value",
    "set_nested_value",
]


def deep_merge(base: Mapping[str, Any], *sources: Mapping[str, Any] | None) -> TranslationTree:
    """Merge sources into base, later sources taking precedence at every leaf.

    Args:
        base: Tree to start from (shallow-copied, never mutated)
        *sources: Trees applied in order; non-mapping sources are skipped

    Returns:
        A new merged tree

    Example:
        >>> deep_merge({"a": {"x": "1", "y": "2"}}, {"a": {"y": "3"}})
        {'a': {'x': '1', 'y': '3'}}
    """
    result: TranslationTree = dict(base)

    for source in sources:
        if not is_node(source):
            continue

        for key, incoming in source.items():
            if is_absent(incoming):
                continue

            existing = result.get(key)
            match existing, incoming:
                case Mapping(), Mapping():
                    result[key] = deep_merge(existing, incoming)
                case _:
                    result[key] = incoming

    return result


def deep_merge_all(*sources: Mapping[str, Any] | None) -> TranslationTree:
    """Merge all sources into a fresh, empty tree."""
    return deep_merge({}, *sources)


def get_nested_value(tree: Mapping[str, Any], path: str) -> Any:
    """Get a value from a tree using dot notation.

    Args:
        tree: Tree to traverse
        path: Dot-separated path (e.g., "competition.championsLeague")

    Returns:
        The value at the path, or None if any segment is missing

    Example:
        >>> get_nested_value({"competition": {"cl": "UEFA CL"}}, "competition.cl")
        'UEFA CL'
    """
    current: Any = tree
    for segment in split_path(path):
        if not is_node(current):
            return None
        current = current.get(segment)
    return current


def has_nested_value(tree: Mapping[str, Any], path: str) -> bool:
    """Check whether every segment of a dotted path exists.

    Unlike get_nested_value, a path that holds None counts as present.
    """
    current: Any = tree
    for segment in split_path(path):
        if not is_node(current) or segment not in current:
            return False
        current = current[segment]
    return True


def set_nested_value(tree: Mapping[str, Any], path: str, value: Any) -> TranslationTree:
    """Set a value in a tree using dot notation, returning a new tree.

    Intermediate nodes are created as needed. Only the nodes along ``path``
    are copied; the input tree is left untouched. A non-mapping value found
    along the path is replaced by a new node.

    Example:
        >>> set_nested_value({"a": {"b": "1"}}, "a.c", "2")
        {'a': {'b': '1', 'c': '2'}}
    """
    segments = split_path(path)
    result: TranslationTree = dict(tree)
    current = result

    for segment in segments[:-1]:
        child = current.get(segment)
        copied: TranslationTree = dict(child) if is_node(child) else {}
        current[segment] = copied
        current = copied

    current[segments[-1]] = value
    return result
