"""Layered translation loading with community patches.

TranslationLoader folds up to four layers into one tree, lowest priority
first:

    0. bundle for the base language
    1. bundle for the active language (skipped when it is the base language)
    2. remote content (fresh persisted snapshot, else a fetch, else the stale
       snapshot)
    3. local patches (universal document, then the standalone language patch)

Key architectural decisions:
- Collaborators are injected (storage, fetcher, validator, sanitizer,
  interpolator, clock); there is no module-level singleton
- Optional layers degrade: a failing remote or a corrupt persisted patch is
  logged and skipped, load_translations() still returns
- Concurrent loads for one language share a single in-flight task
- Every completed load and every patch apply/clear empties the interpolation
  cache, since cached results embed resolved references

Python 3.13+.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx

from lexpatch.constants import DEFAULT_PATCH_VERSION
from lexpatch.core.tree import TranslationTree
from lexpatch.diagnostics import (
    PatchErrorCode,
    RemoteFetchError,
    ValidationError,
    ValidationResult,
)
from lexpatch.locale_utils import validate_language_code
from lexpatch.localization.adapters import (
    BatchStorage,
    Fetcher,
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
from lexpatch.localization.types import Clock, LanguageCode, StorageKey, TranslationKey
from lexpatch.runtime.interpolation import Interpolator
from lexpatch.runtime.merge import deep_merge_all, get_nested_value, has_nested_value
from lexpatch.validation.patch import PatchValidator
from lexpatch.validation.sanitizer import Sanitizer

__all__ = ["TranslationLoader"]

logger = logging.getLogger(__name__)

type _Layer = tuple[TranslationSource, TranslationTree]

_REMOTE_HEADERS = {"Accept": "application/json"}


class TranslationLoader:
    """Loads, merges and serves translations for one active language.

    Example:
        >>> loader = TranslationLoader(LoaderConfig(language="tr"))
        >>> loader.register_bundle("en", {"ui": {"play": "Play"}})
        >>> loader.register_bundle("tr", {"ui": {"play": "Oyna"}})
        >>> loaded = asyncio.run(loader.load_translations())
        >>> loader.translate("ui.play")
        'Oyna'

    Attributes:
        language: Active language
        last_loaded: Result of the most recent completed load, if any
    """

    __slots__ = (
        "_bundles",
        "_clock",
        "_config",
        "_fetcher",
        "_interpolator",
        "_keys",
        "_language",
        "_last_loaded",
        "_pending",
        "_sanitizer",
        "_storage",
        "_validator",
    )

    def __init__(
        self,
        config: LoaderConfig | None = None,
        *,
        storage: StorageAdapter | None = None,
        fetcher: Fetcher | None = None,
        validator: PatchValidator | None = None,
        sanitizer: Sanitizer | None = None,
        interpolator: Interpolator | None = None,
        clock: Clock = time.time,
    ) -> None:
        """Initialize loader.

        Args:
            config: Loader configuration (default: LoaderConfig())
            storage: Persistence for remote snapshots and patches
                (default: a fresh MemoryStorage)
            fetcher: HTTP collaborator for the remote layer (default: an
                HttpxFetcher when remote_base_url is configured)
            validator: Patch validator (default: PatchValidator())
            sanitizer: Content sanitizer (default: Sanitizer())
            interpolator: Template resolver owning the result cache
                (default: Interpolator())
            clock: Time source in epoch seconds (default: time.time)
        """
        self._config = config or LoaderConfig()
        self._language: LanguageCode = self._config.language
        self._storage: StorageAdapter = storage if storage is not None else MemoryStorage()
        if fetcher is None and self._config.remote_base_url:
            fetcher = HttpxFetcher()
        self._fetcher = fetcher
        self._validator = validator or PatchValidator()
        self._sanitizer = sanitizer or Sanitizer()
        self._interpolator = interpolator or Interpolator()
        self._clock = clock
        self._keys = StorageKeys(self._config.storage_prefix)
        self._bundles: dict[LanguageCode, TranslationTree] = {}
        self._pending: dict[LanguageCode, asyncio.Task[LoadedTranslations]] = {}
        self._last_loaded: LoadedTranslations | None = None

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"TranslationLoader(language={self._language!r}, "
            f"bundles={sorted(self._bundles)}, loaded={self._last_loaded is not None})"
        )

    # ------------------------------------------------------------------
    # Properties and queries
    # ------------------------------------------------------------------

    @property
    def language(self) -> LanguageCode:
        """Active language."""
        return self._language

    @property
    def config(self) -> LoaderConfig:
        """Loader configuration."""
        return self._config

    @property
    def interpolator(self) -> Interpolator:
        """Interpolator used by translate()."""
        return self._interpolator

    @property
    def storage_keys(self) -> StorageKeys:
        """Persisted key layout."""
        return self._keys

    @property
    def last_loaded(self) -> LoadedTranslations | None:
        """Result of the most recent completed load for the active language."""
        return self._last_loaded

    @property
    def translations(self) -> TranslationTree:
        """Merged tree of the most recent load (empty before the first load)."""
        if self._last_loaded is None:
            return {}
        return self._last_loaded.data

    def get_registered_languages(self) -> list[LanguageCode]:
        """Languages with a registered bundle, sorted."""
        return sorted(self._bundles)

    def has_translation(self, key: TranslationKey) -> bool:
        """Check whether a dotted key exists in the merged tree, even with a None value."""
        return has_nested_value(self.translations, key)

    def translate(self, key: TranslationKey, context: Mapping[str, Any] | None = None) -> str:
        """Resolve a dotted key and interpolate it.

        Args:
            key: Dotted path into the merged tree
            context: Variables for plural and variable placeholders

        Returns:
            Interpolated string, or ``[key]`` when the key does not resolve to
            a string
        """
        data = self.translations
        value = get_nested_value(data, key)
        if not isinstance(value, str):
            logger.warning("Missing translation for key '%s' (language: %s)", key, self._language)
            return f"[{key}]"
        return self._interpolator.interpolate(value, context, data)

    # ------------------------------------------------------------------
    # Bundles and language
    # ------------------------------------------------------------------

    def register_bundle(self, language: LanguageCode, tree: Mapping[str, Any]) -> None:
        """Register the shipped translation tree for a language.

        Bundles are trusted application content: they are neither validated
        nor sanitized. Registering again replaces the previous bundle.

        Raises:
            ValueError: If language is not a safe language code
            TypeError: If tree is not a mapping
        """
        validate_language_code(language)
        if not isinstance(tree, Mapping):
            msg = f"Bundle for '{language}' must be a mapping, got {type(tree).__name__}"
            raise TypeError(msg)
        self._bundles[language] = dict(tree)
        logger.debug("Registered bundle for %s (%d namespaces)", language, len(tree))

    def set_language(self, language: LanguageCode) -> None:
        """Switch the active language. Takes effect at the next load.

        Raises:
            ValueError: If language is empty or contains path separators
        """
        validate_language_code(language)
        if language != self._language:
            logger.info("Active language changed: %s -> %s", self._language, language)
            self._language = language

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_translations(self) -> LoadedTranslations:
        """Load and merge every layer for the active language.

        Concurrent calls for the same language share one in-flight load.
        Cancelling one caller does not cancel the shared load.

        Returns:
            LoadedTranslations for the language active when the load started
        """
        language = self._language
        task = self._pending.get(language)
        if task is None:
            task = asyncio.create_task(self._load(language))
            self._pending[language] = task
            task.add_done_callback(lambda done: self._forget_pending(language, done))
        else:
            logger.debug("Joining in-flight load for %s", language)
        return await asyncio.shield(task)

    def _forget_pending(
        self, language: LanguageCode, task: asyncio.Task[LoadedTranslations]
    ) -> None:
        if self._pending.get(language) is task:
            del self._pending[language]

    async def _load(self, language: LanguageCode) -> LoadedTranslations:
        layers: list[_Layer] = []
        base_language = self._config.base_language

        base_bundle = self._bundles.get(base_language)
        if base_bundle is not None:
            layers.append((TranslationSource.bundle(base=True), base_bundle))
        elif language != base_language:
            logger.warning("No bundle registered for base language %s", base_language)

        if language != base_language:
            bundle = self._bundles.get(language)
            if bundle is not None:
                layers.append((TranslationSource.bundle(base=False), bundle))
            else:
                logger.debug("No bundle registered for %s", language)

        remote = await self._load_remote(language)
        if remote is not None:
            layers.append(remote)

        layers.extend(await self._load_patches(language))

        result = LoadedTranslations(
            data=deep_merge_all(*(tree for _, tree in layers)),
            sources=tuple(source for source, _ in layers),
            language=language,
            loaded_at=self._clock(),
        )

        if language == self._language:
            self._last_loaded = result
        else:
            logger.debug("Language changed during load of %s; result not retained", language)
        self._interpolator.clear_cache()

        logger.info(
            "Loaded translations for %s from %d source(s): %s",
            language,
            len(layers),
            ", ".join(str(origin) for origin in result.origins) or "none",
        )
        return result

    async def _load_remote(self, language: LanguageCode) -> _Layer | None:
        url = self._config.remote_url(language)
        if url is None or self._fetcher is None:
            return None

        content_key = self._keys.remote(language)
        timestamp_key = self._keys.remote_timestamp(language)

        cached = await self._read_tree(content_key)
        timestamp = await self._read_timestamp(timestamp_key)
        now = self._clock()

        if cached is not None and timestamp is not None and now - timestamp < self._config.remote_ttl:
            logger.debug("Using cached remote content for %s (age %.0fs)", language, now - timestamp)
            return TranslationSource.remote(timestamp), cached

        fetched = await self._fetch_remote(url)
        if fetched is not None:
            await self._write_pair(
                {
                    content_key: json.dumps(fetched, ensure_ascii=False),
                    timestamp_key: repr(now),
                }
            )
            return TranslationSource.remote(now), fetched

        if cached is not None:
            logger.warning("Falling back to cached remote content for %s", language)
            return TranslationSource.remote(timestamp), cached

        return None

    async def _fetch_remote(self, url: str) -> TranslationTree | None:
        """Fetch, sanitize and namespace-filter the remote document."""
        assert self._fetcher is not None  # checked by _load_remote
        try:
            response = await self._fetcher.fetch(url, headers=_REMOTE_HEADERS)
            if not 200 <= response.status < 300:
                raise RemoteFetchError(url, response.status)
            payload = response.json()
        except (RemoteFetchError, httpx.HTTPError, OSError, ValueError) as e:
            logger.warning("Failed to load remote translations: %s", e)
            return None

        content = self._sanitizer.sanitize_content(payload)
        if content is None:
            logger.warning("Remote content from %s has no usable translations", url)
        return content

    async def _load_patches(self, language: LanguageCode) -> list[_Layer]:
        layers: list[_Layer] = []

        document = await self._read_tree(self._keys.universal_patch)
        if document is not None:
            result = self._validator.validate(document)
            if result.valid:
                source = TranslationSource.patch(document["metadata"]["version"])
                languages = document.get("languages") or {}
                for section in (document.get("universal"), languages.get(language)):
                    if section is None:
                        continue
                    content = self._sanitizer.sanitize_content(section)
                    if content is not None:
                        layers.append((source, content))
            else:
                logger.warning(
                    "Ignoring invalid persisted universal patch:\n%s",
                    result.format(include_warnings=False),
                )

        language_patch = await self._read_tree(self._keys.language_patch(language))
        if language_patch is not None:
            content = self._sanitizer.sanitize_content(language_patch)
            if content is not None:
                layers.append((TranslationSource.patch(), content))

        return layers

    # ------------------------------------------------------------------
    # Patches
    # ------------------------------------------------------------------

    async def apply_universal_patch(self, document: object) -> ValidationResult:
        """Validate and persist a universal patch document.

        The document is stored as given and sanitized on every load. An
        invalid document is rejected as a whole and nothing is persisted.

        Returns:
            The validation result (with its warnings on success)
        """
        result = self._validator.validate(document)
        if not result.valid:
            logger.warning("Rejected universal patch with %d error(s)", result.error_count)
            return result

        assert isinstance(document, Mapping)  # guaranteed by a valid result
        await self._storage.set(
            self._keys.universal_patch, json.dumps(document, ensure_ascii=False)
        )
        self._interpolator.clear_cache()
        logger.info(
            "Applied universal patch '%s' v%s",
            document["metadata"]["name"],
            document["metadata"]["version"],
        )
        return result

    async def apply_language_patch(
        self, language: LanguageCode, tree: Mapping[str, Any]
    ) -> ValidationResult:
        """Validate and persist a patch for one language.

        The tree is wrapped into a minimal patch document for validation and
        must keep some patchable content once sanitized. Like the universal
        patch, it is stored as given and sanitized on every load.

        Returns:
            The validation result; SANITIZE_FAILED when nothing survives
            sanitization

        Raises:
            ValueError: If language is not a safe language code
        """
        validate_language_code(language)
        document = {
            "metadata": {"version": DEFAULT_PATCH_VERSION, "name": f"{language} patch"},
            "languages": {language: tree},
        }
        result = self._validator.validate(document)
        if not result.valid:
            logger.warning(
                "Rejected %s patch with %d error(s)", language, result.error_count
            )
            return result

        content = self._sanitizer.sanitize_content(tree)
        if content is None:
            logger.warning("Rejected %s patch: no content left after sanitization", language)
            return ValidationResult.failure(
                ValidationError(
                    path=f"languages.{language}",
                    message="Patch has no content left after sanitization",
                    code=PatchErrorCode.SANITIZE_FAILED,
                ),
                warnings=result.warnings,
            )

        await self._storage.set(
            self._keys.language_patch(language), json.dumps(tree, ensure_ascii=False)
        )
        self._interpolator.clear_cache()
        logger.info("Applied %s patch (%d namespaces)", language, len(content))
        return result

    async def clear_patches(self) -> None:
        """Remove the universal patch and the active language's patch."""
        await self._remove_pair(
            (self._keys.universal_patch, self._keys.language_patch(self._language))
        )
        self._interpolator.clear_cache()
        logger.info("Cleared patches for %s", self._language)

    async def clear_remote_cache(self) -> None:
        """Remove the persisted remote snapshot of the active language."""
        await self._remove_pair(
            (self._keys.remote(self._language), self._keys.remote_timestamp(self._language))
        )
        logger.info("Cleared remote cache for %s", self._language)

    async def get_patch_info(self) -> PatchInfo:
        """Report which persisted patches apply to the active language."""
        document = await self._read_tree(self._keys.universal_patch)
        language_patch = await self._read_raw(self._keys.language_patch(self._language))

        universal = False
        in_document = False
        if document is not None:
            universal = document.get("universal") is not None
            languages = document.get("languages")
            in_document = isinstance(languages, Mapping) and languages.get(self._language) is not None

        return PatchInfo(universal=universal, language_specific=language_patch is not None or in_document)

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    async def _read_raw(self, key: StorageKey) -> str | None:
        try:
            return await self._storage.get(key)
        except OSError as e:
            logger.warning("Failed to read '%s' from storage: %s", key, e)
            return None

    async def _read_tree(self, key: StorageKey) -> dict[str, Any] | None:
        """Read and decode a persisted JSON object; anything else is absent."""
        raw = await self._read_raw(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except ValueError as e:
            logger.warning("Ignoring unparsable entry '%s': %s", key, e)
            return None
        if not isinstance(value, dict):
            logger.warning("Ignoring entry '%s': expected an object, got %s", key, type(value).__name__)
            return None
        return value

    async def _read_timestamp(self, key: StorageKey) -> float | None:
        raw = await self._read_raw(key)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            logger.warning("Ignoring unparsable timestamp '%s'", key)
            return None

    async def _write_pair(self, items: Mapping[StorageKey, str]) -> None:
        # Without BatchStorage a failure after the first write leaves it in place.
        try:
            if isinstance(self._storage, BatchStorage):
                await self._storage.set_many(items)
            else:
                for key, value in items.items():
                    await self._storage.set(key, value)
        except OSError as e:
            logger.warning("Failed to persist %s: %s", ", ".join(items), e)

    async def _remove_pair(self, keys: tuple[StorageKey, ...]) -> None:
        if isinstance(self._storage, BatchStorage):
            await self._storage.remove_many(keys)
        else:
            for key in keys:
                await self._storage.remove(key)
