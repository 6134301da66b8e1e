"""Translation tree model.

A translation tree is plain JSON-shaped data: a node is a mapping from
namespace/key names to values, a leaf is a text string. Lists are opaque
leaves (replaced wholesale, never merged). ``None`` marks an absent value.

Rather than wrapping every node in a class, the tree stays a ``dict`` so that
JSON documents, bundles and remote payloads can be used directly. The
``TypeIs`` guards below give merge/sanitize/validate a single, type-checked
way to discriminate nodes from leaves inside ``match`` statements.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeIs

__all__ = [
    "TranslationTree",
    "TranslationValue",
    "is_absent",
    "is_leaf",
    "is_node",
    "is_text",
    "split_path",
]

type TranslationValue = (
    str | int | float | bool | None | list[TranslationValue] | dict[str, TranslationValue]
)
"""Any value that can appear inside a translation tree."""

type TranslationTree = dict[str, TranslationValue]
"""Nested mapping of namespace/key names to translation values."""


def is_node(value: object) -> TypeIs[Mapping[str, Any]]:
    """Check if value is an interior node (a mapping)."""
    return isinstance(value, Mapping)


def is_text(value: object) -> TypeIs[str]:
    """Check if value is a text leaf."""
    return isinstance(value, str)


def is_absent(value: object) -> TypeIs[None]:
    """Check if value marks an absent entry."""
    return value is None


def is_leaf(value: object) -> bool:
    """Check if value is a leaf: present and not a node.

    Text, numbers, booleans and lists are all leaves; lists are never
    traversed by the merge engine.
    """
    return value is not None and not isinstance(value, Mapping)


def split_path(path: str) -> list[str]:
    """Split a dot-separated path into its segments.

    Example:
        >>> split_path("competition.championsLeague")
        ['competition', 'championsLeague']
    """
    return path.split(".")
