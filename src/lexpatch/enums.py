"""Enumerations for lexpatch type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from enum import IntEnum, StrEnum


class SourceOrigin(StrEnum):
    """Kind of layer contributing to a merged translation tree.

    StrEnum provides automatic string conversion: str(SourceOrigin.PATCH) == "patch"
    """

    BUNDLE = "bundle"
    """Content shipped with the application and registered in-process."""

    REMOTE = "remote"
    """Content fetched from the remote endpoint (or its persisted snapshot)."""

    PATCH = "patch"
    """Community patch persisted through the storage collaborator."""


class LayerPriority(IntEnum):
    """Merge priority of each layer; higher values win at every leaf."""

    BASE_BUNDLE = 0
    LANGUAGE_BUNDLE = 1
    REMOTE = 2
    PATCH = 3


class SanitizeMode(StrEnum):
    """How the sanitizer treats markup left after dangerous patterns are removed."""

    STRIP = "strip"
    """Remove remaining tags entirely (default)."""

    ESCAPE = "escape"
    """Replace markup characters with HTML entities."""

    NONE = "none"
    """Leave remaining markup untouched."""


__all__ = [
    "LayerPriority",
    "SanitizeMode",
    "SourceOrigin",
]
