"""Layered translation loading package.

Submodules:
    types        - PEP 695 type aliases (LanguageCode, TranslationKey, StorageKey, Clock)
    adapters     - StorageAdapter/BatchStorage/Fetcher protocols, MemoryStorage,
                   HttpxFetcher
    loading      - LoaderConfig, StorageKeys, TranslationSource,
                   LoadedTranslations, PatchInfo
    orchestrator - TranslationLoader (layer merging and patch management)

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

from lexpatch.enums import LayerPriority, SourceOrigin
from lexpatch.localization.adapters import (
    BatchStorage,
    FetchedResponse,
    Fetcher,
    FetchResponse,
    HttpxFetcher,
    MemoryStorage,
    StorageAdapter,
)
from lexpatch.localization.loading import (
    LoadedTranslations,
    LoaderConfig,
    PatchInfo,
    StorageKeys,
    TranslationSource,
)
from lexpatch.localization.orchestrator import TranslationLoader
from lexpatch.localization.types import Clock, LanguageCode, StorageKey, TranslationKey

__all__ = [
    # Main orchestrator
    "TranslationLoader",
    "LoaderConfig",
    # Collaborators
    "StorageAdapter",
    "BatchStorage",
    "Fetcher",
    "FetchResponse",
    "MemoryStorage",
    "HttpxFetcher",
    "FetchedResponse",
    # Load results
    "LayerPriority",
    "LoadedTranslations",
    "PatchInfo",
    "SourceOrigin",
    "StorageKeys",
    "TranslationSource",
    # Type aliases
    "Clock",
    "LanguageCode",
    "StorageKey",
    "TranslationKey",
]
