"""Type aliases for the localization domain.

Provides semantic type aliases used throughout the localization package
and by user code when annotating TranslationLoader call sites.

Python 3.13+. Zero external dependencies.
"""

from collections.abc import Callable

__all__ = [
    "Clock",
    "LanguageCode",
    "StorageKey",
    "TranslationKey",
]

type LanguageCode = str
"""Language code (e.g., 'en', 'tr', 'pt-BR')."""

type TranslationKey = str
"""Dot-separated path into a translation tree (e.g., 'competition.championsLeague')."""

type StorageKey = str
"""Key under which the storage collaborator persists one value."""

type Clock = Callable[[], float]
"""Zero-argument callable returning the current time in epoch seconds."""
