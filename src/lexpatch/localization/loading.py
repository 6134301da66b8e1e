"""Loader configuration and result types.

Components:
    LoaderConfig - Immutable loader configuration, validated at construction
    StorageKeys - Layout of persisted entries under a configurable prefix
    TranslationSource - Immutable record of one layer that contributed to a load
    LoadedTranslations - Immutable result of one load
    PatchInfo - Which persisted patches apply to the active language

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass

from lexpatch.constants import (
    BASE_LANGUAGE,
    DEFAULT_REMOTE_TTL,
    DEFAULT_STORAGE_PREFIX,
    REMOTE_CONTENT_FILENAME,
)
from lexpatch.core.tree import TranslationTree
from lexpatch.enums import LayerPriority, SourceOrigin
from lexpatch.locale_utils import validate_language_code
from lexpatch.localization.types import LanguageCode, StorageKey

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Configuration
    "LoaderConfig",
    "StorageKeys",
    # Load results
    "TranslationSource",
    "LoadedTranslations",
    "PatchInfo",
]


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    """Configuration for TranslationLoader.

    Attributes:
        language: Initially active language
        base_language: Language whose bundle is the lowest layer
        remote_base_url: Base URL of the remote content endpoint; None
            disables the remote layer
        remote_ttl: Seconds a persisted remote snapshot stays fresh
        storage_prefix: Prefix of every persisted key

    Raises:
        ValueError: If a language code is unsafe, remote_ttl is negative or
            storage_prefix is empty
    """

    language: LanguageCode = BASE_LANGUAGE
    base_language: LanguageCode = BASE_LANGUAGE
    remote_base_url: str | None = None
    remote_ttl: float = DEFAULT_REMOTE_TTL
    storage_prefix: str = DEFAULT_STORAGE_PREFIX

    def __post_init__(self) -> None:
        validate_language_code(self.language)
        validate_language_code(self.base_language)
        if self.remote_ttl < 0:
            msg = f"remote_ttl must be non-negative, got {self.remote_ttl}"
            raise ValueError(msg)
        if not self.storage_prefix:
            msg = "storage_prefix must be a non-empty string"
            raise ValueError(msg)

    def remote_url(self, language: LanguageCode) -> str | None:
        """URL of the remote content document for language, if remote is enabled.

        Example:
            >>> LoaderConfig(remote_base_url="https://cdn.example.com/i18n/").remote_url("tr")
            'https://cdn.example.com/i18n/tr/content.json'
        """
        if not self.remote_base_url:
            return None
        return f"{self.remote_base_url.rstrip('/')}/{language}/{REMOTE_CONTENT_FILENAME}"


@dataclass(frozen=True, slots=True)
class StorageKeys:
    """Persisted key layout.

    Example:
        >>> StorageKeys("game").remote("tr")
        'game:remote:tr'
    """

    prefix: str = DEFAULT_STORAGE_PREFIX

    def remote(self, language: LanguageCode) -> StorageKey:
        return f"{self.prefix}:remote:{language}"

    def remote_timestamp(self, language: LanguageCode) -> StorageKey:
        return f"{self.prefix}:remote-ts:{language}"

    def language_patch(self, language: LanguageCode) -> StorageKey:
        return f"{self.prefix}:patch:{language}"

    @property
    def universal_patch(self) -> StorageKey:
        return f"{self.prefix}:universal-patch"


@dataclass(frozen=True, slots=True)
class TranslationSource:
    """One layer that contributed to a merged tree.

    Attributes:
        origin: Kind of layer
        priority: Merge priority (higher wins)
        timestamp: When remote content was fetched, in epoch seconds
        version: Patch document version, when known
    """

    origin: SourceOrigin
    priority: int
    timestamp: float | None = None
    version: str | None = None

    @classmethod
    def bundle(cls, *, base: bool) -> TranslationSource:
        priority = LayerPriority.BASE_BUNDLE if base else LayerPriority.LANGUAGE_BUNDLE
        return cls(origin=SourceOrigin.BUNDLE, priority=priority)

    @classmethod
    def remote(cls, timestamp: float | None) -> TranslationSource:
        return cls(origin=SourceOrigin.REMOTE, priority=LayerPriority.REMOTE, timestamp=timestamp)

    @classmethod
    def patch(cls, version: str | None = None) -> TranslationSource:
        return cls(origin=SourceOrigin.PATCH, priority=LayerPriority.PATCH, version=version)


@dataclass(frozen=True, slots=True)
class LoadedTranslations:
    """Result of TranslationLoader.load_translations().

    Attributes:
        data: Fully merged translation tree
        sources: Contributing layers, lowest priority first
        language: Language the load was performed for
        loaded_at: Completion time in epoch seconds
    """

    data: TranslationTree
    sources: tuple[TranslationSource, ...]
    language: LanguageCode
    loaded_at: float

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        origins = ", ".join(str(origin) for origin in self.origins)
        return (
            f"LoadedTranslations(language={self.language!r}, "
            f"namespaces={len(self.data)}, sources=[{origins}])"
        )

    @property
    def origins(self) -> tuple[SourceOrigin, ...]:
        """Origin of each contributing layer, in merge order."""
        return tuple(source.origin for source in self.sources)

    def has_origin(self, origin: SourceOrigin) -> bool:
        """Check whether any layer of the given kind contributed."""
        return any(source.origin == origin for source in self.sources)


@dataclass(frozen=True, slots=True)
class PatchInfo:
    """Which persisted patches apply to the active language.

    Attributes:
        universal: A universal patch with a universal section is stored
        language_specific: A standalone language patch, or a languages
            section for the active language, is stored
    """

    universal: bool
    language_specific: bool

    @property
    def any(self) -> bool:
        """Whether any patch applies."""
        return self.universal or self.language_specific
