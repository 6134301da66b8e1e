"""Tests for the localization package: LoaderConfig, result types and TranslationLoader.

All async code runs through asyncio.run inside synchronous tests. Remote
content is served by an in-memory stub fetcher; time is a controllable clock.

Python 3.13+.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx
import pytest

from lexpatch.diagnostics import PatchErrorCode
from lexpatch.enums import LayerPriority, SanitizeMode, SourceOrigin
from lexpatch.localization import (
    BatchStorage,
    FetchedResponse,
    LoadedTranslations,
    LoaderConfig,
    MemoryStorage,
    PatchInfo,
    StorageKeys,
    TranslationLoader,
    TranslationSource,
)
from lexpatch.validation import Sanitizer

REMOTE_BASE = "https://cdn.example.com/i18n"
REMOTE_URL_TR = f"{REMOTE_BASE}/tr/content.json"

EN_BUNDLE = {
    "competition": {"cl": "Champions League", "el": "Europa League"},
    "templates": {"final": "{{ref:competition.el}} final"},
    "ui": {"play": "Play", "goals": "{count} {{plural:count|goal|goals}}"},
}
TR_BUNDLE = {"competition": {"cl": "Şampiyonlar Ligi"}, "ui": {"play": "Oyna"}}

UNIVERSAL_PATCH = {
    "metadata": {"version": "1.2.0", "name": "Real names", "author": "modder"},
    "universal": {"competition": {"el": "UEFA Avrupa Ligi"}},
    "languages": {
        "tr": {"countries": {"br": "Brezilya"}},
        "de": {"countries": {"br": "Brasilien"}},
    },
}


class FakeClock:
    """Controllable time source."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class StubFetcher:
    """Fetcher returning (or raising) queued outcomes; the last one repeats."""

    def __init__(self, *outcomes: FetchedResponse | BaseException) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.gate: asyncio.Event | None = None

    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> FetchedResponse:
        self.calls.append((url, dict(headers or {})))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class PlainStorage:
    """StorageAdapter without batch operations."""

    def __init__(self, fail_on_set: str | None = None) -> None:
        self.data: dict[str, str] = {}
        self._fail_on_set = fail_on_set

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if key == self._fail_on_set:
            msg = "disk full"
            raise OSError(msg)
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)


def _ok(payload: Any) -> FetchedResponse:
    return FetchedResponse(status=200, content=json.dumps(payload).encode())


def _loader(
    language: str = "tr",
    *,
    remote: bool = False,
    storage: Any = None,
    fetcher: StubFetcher | None = None,
    clock: FakeClock | None = None,
    bundles: bool = True,
) -> TranslationLoader:
    config = LoaderConfig(
        language=language,
        remote_base_url=REMOTE_BASE if remote else None,
    )
    loader = TranslationLoader(
        config,
        storage=storage if storage is not None else MemoryStorage(),
        fetcher=fetcher,
        clock=clock or FakeClock(),
    )
    if bundles:
        loader.register_bundle("en", EN_BUNDLE)
        loader.register_bundle("tr", TR_BUNDLE)
    return loader


# ============================================================================
# Configuration and value types
# ============================================================================


class TestLoaderConfig:
    """Test LoaderConfig validation and helpers."""

    def test_defaults(self) -> None:
        """Defaults: English, no remote, one day TTL."""
        config = LoaderConfig()

        assert config.language == "en"
        assert config.base_language == "en"
        assert config.remote_base_url is None
        assert config.remote_ttl == 86_400
        assert config.storage_prefix == "lexpatch"

    def test_remote_url(self) -> None:
        """Remote URL is {base}/{language}/content.json, trailing slash tolerated."""
        assert LoaderConfig(remote_base_url=REMOTE_BASE + "/").remote_url("tr") == REMOTE_URL_TR
        assert LoaderConfig().remote_url("tr") is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"language": "../x"},
            {"base_language": ""},
            {"remote_ttl": -1},
            {"storage_prefix": ""},
        ],
    )
    def test_invalid(self, kwargs: dict[str, Any]) -> None:
        """Invalid settings raise ValueError."""
        with pytest.raises(ValueError):
            LoaderConfig(**kwargs)


class TestStorageKeys:
    """Test the persisted key layout."""

    def test_layout(self) -> None:
        """Keys follow {prefix}:{kind}:{language}."""
        keys = StorageKeys("game")

        assert keys.remote("tr") == "game:remote:tr"
        assert keys.remote_timestamp("tr") == "game:remote-ts:tr"
        assert keys.language_patch("tr") == "game:patch:tr"
        assert keys.universal_patch == "game:universal-patch"


class TestResultTypes:
    """Test LoadedTranslations and PatchInfo."""

    def test_loaded_translations_origins(self) -> None:
        """origins/has_origin summarize the sources."""
        loaded = LoadedTranslations(
            data={"a": "b"},
            sources=(TranslationSource.bundle(base=True), TranslationSource.patch("1.0.0")),
            language="en",
            loaded_at=1.0,
        )

        assert loaded.origins == (SourceOrigin.BUNDLE, SourceOrigin.PATCH)
        assert loaded.has_origin(SourceOrigin.PATCH)
        assert not loaded.has_origin(SourceOrigin.REMOTE)
        assert "bundle, patch" in repr(loaded)

    def test_patch_info_any(self) -> None:
        """any is true when either kind applies."""
        assert not PatchInfo(universal=False, language_specific=False).any
        assert PatchInfo(universal=False, language_specific=True).any


# ============================================================================
# Bundles and language
# ============================================================================


class TestBundlesAndLanguage:
    """Test bundle registration and language switching."""

    def test_layering_bundles(self) -> None:
        """The active-language bundle overrides the base bundle leaf by leaf."""
        loader = _loader()

        loaded = asyncio.run(loader.load_translations())

        assert loaded.data["competition"] == {"cl": "Şampiyonlar Ligi", "el": "Europa League"}
        assert loaded.data["ui"]["play"] == "Oyna"
        assert [s.priority for s in loaded.sources] == [
            LayerPriority.BASE_BUNDLE,
            LayerPriority.LANGUAGE_BUNDLE,
        ]
        assert loaded.language == "tr"
        assert loaded.loaded_at == 1_000.0
        assert loader.last_loaded is loaded

    def test_base_language_loads_single_bundle(self) -> None:
        """With the base language active only one bundle layer exists."""
        loaded = asyncio.run(_loader("en").load_translations())

        assert loaded.data == EN_BUNDLE
        assert len(loaded.sources) == 1

    def test_missing_base_bundle_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        """A missing base bundle is logged when another language is active."""
        loader = _loader(bundles=False)
        loader.register_bundle("tr", TR_BUNDLE)

        with caplog.at_level(logging.WARNING):
            loaded = asyncio.run(loader.load_translations())

        assert loaded.data == TR_BUNDLE
        assert "base language" in caplog.text

    def test_missing_base_bundle_silent_for_base(self, caplog: pytest.LogCaptureFixture) -> None:
        """No warning when the base language itself is active."""
        with caplog.at_level(logging.WARNING):
            loaded = asyncio.run(_loader("en", bundles=False).load_translations())

        assert loaded.data == {}
        assert "base language" not in caplog.text

    def test_register_bundle_validation(self) -> None:
        """Bundles need a safe code and a mapping."""
        loader = _loader(bundles=False)

        with pytest.raises(ValueError):
            loader.register_bundle("en/..", {})
        with pytest.raises(TypeError):
            loader.register_bundle("en", ["not", "a", "tree"])  # type: ignore[arg-type]

    def test_registered_languages(self) -> None:
        """Registered languages are listed sorted."""
        assert _loader().get_registered_languages() == ["en", "tr"]

    def test_set_language(self) -> None:
        """The next load uses the new language."""
        loader = _loader()
        loader.register_bundle("de", {"ui": {"play": "Spielen"}})

        loader.set_language("de")
        loaded = asyncio.run(loader.load_translations())

        assert loader.language == "de"
        assert loaded.language == "de"
        assert loader.translate("ui.play") == "Spielen"

    @pytest.mark.parametrize("code", ["", "../../etc", "tr/x", "t r"])
    def test_set_language_rejects_unsafe(self, code: str) -> None:
        """Unsafe language codes raise ValueError and change nothing."""
        loader = _loader()

        with pytest.raises(ValueError):
            loader.set_language(code)
        assert loader.language == "tr"


class TestLookup:
    """Test has_translation and translate."""

    def test_before_first_load(self) -> None:
        """Nothing resolves before a load."""
        loader = _loader()

        assert loader.translations == {}
        assert not loader.has_translation("ui.play")

    def test_has_translation(self) -> None:
        """Dotted keys resolve against the merged tree."""
        loader = _loader()
        asyncio.run(loader.load_translations())

        assert loader.has_translation("ui.play")
        assert loader.has_translation("competition")
        assert not loader.has_translation("ui.missing")
        assert not loader.has_translation("ui.play.deeper")

    def test_has_translation_with_null_value(self) -> None:
        """A key holding None exists but does not translate."""
        loader = _loader()
        loader.register_bundle("en", {**EN_BUNDLE, "ui": {**EN_BUNDLE["ui"], "retired": None}})
        asyncio.run(loader.load_translations())

        assert loader.translations["ui"]["retired"] is None
        assert loader.has_translation("ui.retired")
        assert not loader.has_translation("ui.retired.deeper")
        assert loader.translate("ui.retired") == "[ui.retired]"

    def test_translate_interpolates(self) -> None:
        """translate resolves references, plurals and variables."""
        loader = _loader()
        asyncio.run(loader.load_translations())

        assert loader.translate("templates.final") == "Europa League final"
        assert loader.translate("ui.goals", {"count": 1}) == "1 goal"
        assert loader.translate("ui.goals", {"count": 4}) == "4 goals"

    def test_translate_missing_key(self, caplog: pytest.LogCaptureFixture) -> None:
        """Missing keys render as [key] and are logged."""
        loader = _loader()
        asyncio.run(loader.load_translations())

        with caplog.at_level(logging.WARNING):
            assert loader.translate("ui.missing") == "[ui.missing]"
        assert "ui.missing" in caplog.text

    def test_translate_non_string_node(self) -> None:
        """Keys pointing at nodes are not translations."""
        loader = _loader()
        asyncio.run(loader.load_translations())

        assert loader.translate("competition") == "[competition]"


# ============================================================================
# Remote layer
# ============================================================================


class TestRemoteLayer:
    """Test fetching, snapshot reuse and fallback."""

    def test_fetch_sanitize_persist(self) -> None:
        """Fetched content is sanitized, filtered, merged and persisted."""
        storage = MemoryStorage()
        fetcher = StubFetcher(
            _ok({"countries": {"br": "<script>x</script>Brasil"}, "ui": {"play": "Hacked"}})
        )
        loader = _loader(remote=True, storage=storage, fetcher=fetcher)

        loaded = asyncio.run(loader.load_translations())

        assert fetcher.calls == [(REMOTE_URL_TR, {"Accept": "application/json"})]
        assert loaded.data["countries"] == {"br": "Brasil"}
        assert loaded.data["ui"]["play"] == "Oyna"
        assert loaded.sources[-1] == TranslationSource.remote(1_000.0)
        assert json.loads(storage.snapshot()["lexpatch:remote:tr"]) == {"countries": {"br": "Brasil"}}
        assert float(storage.snapshot()["lexpatch:remote-ts:tr"]) == 1_000.0

    def test_remote_overrides_bundles(self) -> None:
        """Remote content sits above both bundles."""
        fetcher = StubFetcher(_ok({"competition": {"cl": "UEFA Şampiyonlar Ligi"}}))
        loaded = asyncio.run(_loader(remote=True, fetcher=fetcher).load_translations())

        assert loaded.data["competition"]["cl"] == "UEFA Şampiyonlar Ligi"

    def test_fresh_snapshot_reused(self) -> None:
        """A snapshot younger than the TTL is used without fetching."""
        storage = MemoryStorage(
            {
                "lexpatch:remote:tr": json.dumps({"countries": {"br": "Cached"}}),
                "lexpatch:remote-ts:tr": "1000.0",
            }
        )
        fetcher = StubFetcher(_ok({"countries": {"br": "Fresh"}}))
        loader = _loader(remote=True, storage=storage, fetcher=fetcher, clock=FakeClock(4_600.0))

        loaded = asyncio.run(loader.load_translations())

        assert fetcher.calls == []
        assert loaded.data["countries"]["br"] == "Cached"
        assert loaded.sources[-1].timestamp == 1_000.0

    def test_stale_snapshot_refetched(self) -> None:
        """A snapshot at or beyond the TTL triggers a fetch."""
        storage = MemoryStorage(
            {
                "lexpatch:remote:tr": json.dumps({"countries": {"br": "Cached"}}),
                "lexpatch:remote-ts:tr": "1000.0",
            }
        )
        fetcher = StubFetcher(_ok({"countries": {"br": "Fresh"}}))
        clock = FakeClock(1_000.0 + 86_400.0)
        loader = _loader(remote=True, storage=storage, fetcher=fetcher, clock=clock)

        loaded = asyncio.run(loader.load_translations())

        assert len(fetcher.calls) == 1
        assert loaded.data["countries"]["br"] == "Fresh"
        assert float(storage.snapshot()["lexpatch:remote-ts:tr"]) == clock.now

    @pytest.mark.parametrize(
        "outcome",
        [
            FetchedResponse(status=500, content=b""),
            FetchedResponse(status=404, content=b"{}"),
            FetchedResponse(status=200, content=b"<html>"),
            httpx.ConnectError("connection refused"),
            OSError("network unreachable"),
        ],
    )
    def test_failure_falls_back_to_snapshot(self, outcome: FetchedResponse | Exception) -> None:
        """Any fetch failure falls back to the stale snapshot."""
        storage = MemoryStorage(
            {
                "lexpatch:remote:tr": json.dumps({"countries": {"br": "Cached"}}),
                "lexpatch:remote-ts:tr": "1.0",
            }
        )
        loader = _loader(
            remote=True, storage=storage, fetcher=StubFetcher(outcome), clock=FakeClock(1e6)
        )

        loaded = asyncio.run(loader.load_translations())

        assert loaded.data["countries"]["br"] == "Cached"
        assert loaded.sources[-1] == TranslationSource.remote(1.0)

    def test_failure_without_snapshot_omits_layer(self, caplog: pytest.LogCaptureFixture) -> None:
        """Without a snapshot the remote layer is skipped, the load still succeeds."""
        loader = _loader(remote=True, fetcher=StubFetcher(FetchedResponse(503, b"")))

        with caplog.at_level(logging.WARNING):
            loaded = asyncio.run(loader.load_translations())

        assert not loaded.has_origin(SourceOrigin.REMOTE)
        assert loaded.data["ui"]["play"] == "Oyna"
        assert "503" in caplog.text

    def test_payload_with_only_protected_namespaces(self) -> None:
        """A payload that filters to nothing is treated as a failed fetch."""
        storage = MemoryStorage()
        fetcher = StubFetcher(_ok({"ui": {"play": "Hacked"}}))
        loader = _loader(remote=True, storage=storage, fetcher=fetcher)

        loaded = asyncio.run(loader.load_translations())

        assert not loaded.has_origin(SourceOrigin.REMOTE)
        assert "lexpatch:remote:tr" not in storage

    def test_no_remote_configured(self) -> None:
        """Without a base URL no fetch happens."""
        fetcher = StubFetcher(_ok({"countries": {"br": "x"}}))
        loaded = asyncio.run(_loader(fetcher=fetcher).load_translations())

        assert fetcher.calls == []
        assert not loaded.has_origin(SourceOrigin.REMOTE)

    def test_plain_storage_sequential_writes(self) -> None:
        """Storage without batch support gets one write per key."""
        storage = PlainStorage()
        assert not isinstance(storage, BatchStorage)

        loader = _loader(remote=True, storage=storage, fetcher=StubFetcher(_ok({"cups": {"fa": "FA"}})))
        asyncio.run(loader.load_translations())

        assert set(storage.data) == {"lexpatch:remote:tr", "lexpatch:remote-ts:tr"}

    def test_persist_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """A failing write keeps the fetched content for this load."""
        storage = PlainStorage(fail_on_set="lexpatch:remote-ts:tr")
        loader = _loader(remote=True, storage=storage, fetcher=StubFetcher(_ok({"cups": {"fa": "FA"}})))

        with caplog.at_level(logging.WARNING):
            loaded = asyncio.run(loader.load_translations())

        assert loaded.data["cups"] == {"fa": "FA"}
        assert "disk full" in caplog.text
        # Without batch support the first write of the pair stays behind.
        assert "lexpatch:remote:tr" in storage.data

    def test_clear_remote_cache(self) -> None:
        """clear_remote_cache drops the snapshot and its timestamp."""
        storage = MemoryStorage(
            {"lexpatch:remote:tr": "{}", "lexpatch:remote-ts:tr": "1.0", "other": "x"}
        )
        asyncio.run(_loader(storage=storage).clear_remote_cache())

        assert storage.snapshot() == {"other": "x"}


class TestSingleFlight:
    """Test concurrent load de-duplication."""

    def test_concurrent_loads_share_one_fetch(self) -> None:
        """Two overlapping loads produce one fetch and one result."""

        async def scenario() -> tuple[LoadedTranslations, LoadedTranslations, StubFetcher]:
            fetcher = StubFetcher(_ok({"countries": {"br": "Brasil"}}))
            fetcher.gate = asyncio.Event()
            loader = _loader(remote=True, fetcher=fetcher)

            first = asyncio.create_task(loader.load_translations())
            second = asyncio.create_task(loader.load_translations())
            await asyncio.sleep(0)
            fetcher.gate.set()
            a, b = await asyncio.gather(first, second)
            return a, b, fetcher

        a, b, fetcher = asyncio.run(scenario())

        assert a is b
        assert len(fetcher.calls) == 1

    def test_sequential_loads_are_independent(self) -> None:
        """A completed load is not reused by the next call."""
        loader = _loader()

        async def scenario() -> tuple[LoadedTranslations, LoadedTranslations]:
            return await loader.load_translations(), await loader.load_translations()

        a, b = asyncio.run(scenario())

        assert a is not b
        assert a.data == b.data


# ============================================================================
# Patches
# ============================================================================


class TestUniversalPatch:
    """Test applying and loading universal patches."""

    def test_apply_and_load(self) -> None:
        """Universal then language section are merged on top."""
        storage = MemoryStorage()
        loader = _loader(storage=storage, clock=FakeClock(500.0))

        async def scenario() -> LoadedTranslations:
            result = await loader.apply_universal_patch(UNIVERSAL_PATCH)
            assert result.valid
            return await loader.load_translations()

        loaded = asyncio.run(scenario())

        assert loaded.data == {
            "competition": {"cl": "Şampiyonlar Ligi", "el": "UEFA Avrupa Ligi"},
            "templates": {"final": "{{ref:competition.el}} final"},
            "ui": {"play": "Oyna", "goals": "{count} {{plural:count|goal|goals}}"},
            "countries": {"br": "Brezilya"},
        }
        assert loaded.origins == (
            SourceOrigin.BUNDLE,
            SourceOrigin.BUNDLE,
            SourceOrigin.PATCH,
            SourceOrigin.PATCH,
        )
        assert loaded.sources[-1].version == "1.2.0"
        assert loaded.sources[-1].priority == LayerPriority.PATCH
        assert json.loads(storage.snapshot()["lexpatch:universal-patch"]) == UNIVERSAL_PATCH

    def test_patch_sanitized_on_load(self) -> None:
        """Markup in a stored patch never reaches the tree."""
        patch = {
            "metadata": {"version": "1.0.0", "name": "x"},
            "universal": {"cups": {"fa": '<img src=x onerror="alert(1)">FA Cup'}},
        }
        loader = _loader()

        async def scenario() -> LoadedTranslations:
            await loader.apply_universal_patch(patch)
            return await loader.load_translations()

        assert asyncio.run(scenario()).data["cups"] == {"fa": "FA Cup"}

    def test_invalid_patch_not_persisted(self) -> None:
        """A patch touching a protected namespace is rejected entirely."""
        storage = MemoryStorage()
        loader = _loader(storage=storage)
        patch = {
            "metadata": {"version": "1.0.0", "name": "x"},
            "universal": {"countries": {"br": "Brasil"}, "ui": {"play": "Hacked"}},
        }

        result = asyncio.run(loader.apply_universal_patch(patch))

        assert not result.valid
        assert result.has_code(PatchErrorCode.PROTECTED_NAMESPACE)
        assert len(storage) == 0

    def test_unserializable_patch_not_persisted(self) -> None:
        """A document json cannot encode is rejected instead of raising on store."""
        storage = MemoryStorage()
        loader = _loader(storage=storage)
        patch = {
            "metadata": {"version": "1.0.0", "name": "x", "author": {"a", "b"}},
            "universal": {"countries": {"br": "Brasil"}},
        }

        result = asyncio.run(loader.apply_universal_patch(patch))

        assert not result.valid
        assert result.has_code(PatchErrorCode.PATCH_NOT_SERIALIZABLE)
        assert len(storage) == 0

    def test_tampered_stored_patch_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        """An invalid document found in storage is skipped as a whole."""
        tampered = {"metadata": {"version": "1.0.0", "name": "x"}, "universal": {"ui": {"play": "Hacked"}}}
        storage = MemoryStorage({"lexpatch:universal-patch": json.dumps(tampered)})

        with caplog.at_level(logging.WARNING):
            loaded = asyncio.run(_loader(storage=storage).load_translations())

        assert loaded.data["ui"]["play"] == "Oyna"
        assert not loaded.has_origin(SourceOrigin.PATCH)
        assert "PROTECTED_NAMESPACE" in caplog.text

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", "null"])
    def test_unparsable_stored_patch_ignored(self, raw: str) -> None:
        """Corrupt stored JSON is treated as absent."""
        storage = MemoryStorage({"lexpatch:universal-patch": raw, "lexpatch:patch:tr": raw})

        loaded = asyncio.run(_loader(storage=storage).load_translations())

        assert not loaded.has_origin(SourceOrigin.PATCH)

    def test_apply_clears_interpolation_cache(self) -> None:
        """Cached results never outlive a patch."""
        loader = _loader()

        async def scenario() -> tuple[str, str]:
            await loader.load_translations()
            before = loader.translate("templates.final")
            await loader.apply_universal_patch(UNIVERSAL_PATCH)
            assert loader.interpolator.get_cache_stats()["size"] == 0
            await loader.load_translations()
            return before, loader.translate("templates.final")

        before, after = asyncio.run(scenario())

        assert before == "Europa League final"
        assert after == "UEFA Avrupa Ligi final"


class TestLanguagePatch:
    """Test standalone language patches."""

    def test_apply_and_load(self) -> None:
        """The language patch is stored as given and wins over the universal patch."""
        storage = MemoryStorage()
        loader = _loader(storage=storage)
        patch = {"countries": {"br": "<b>Brezilya!</b>"}}

        async def scenario() -> LoadedTranslations:
            await loader.apply_universal_patch(UNIVERSAL_PATCH)
            result = await loader.apply_language_patch("tr", patch)
            assert result.valid
            return await loader.load_translations()

        loaded = asyncio.run(scenario())

        assert loaded.data["countries"] == {"br": "Brezilya!"}
        assert json.loads(storage.snapshot()["lexpatch:patch:tr"]) == patch
        assert loaded.sources[-1] == TranslationSource.patch()

    def test_escape_mode_escapes_once(self) -> None:
        """Stored patches are sanitized on load only, so entities are not doubled."""
        loader = TranslationLoader(
            LoaderConfig(language="tr"),
            sanitizer=Sanitizer(mode=SanitizeMode.ESCAPE),
            clock=FakeClock(),
        )
        loader.register_bundle("en", EN_BUNDLE)

        async def scenario() -> LoadedTranslations:
            result = await loader.apply_language_patch("tr", {"cups": {"tj": "Tom & Jerry"}})
            assert result.valid
            await loader.load_translations()
            return await loader.load_translations()

        assert asyncio.run(scenario()).data["cups"] == {"tj": "Tom &amp; Jerry"}

    def test_patch_for_other_language_not_loaded(self) -> None:
        """Only the active language's patch is merged."""
        loader = _loader()

        async def scenario() -> LoadedTranslations:
            await loader.apply_language_patch("de", {"countries": {"br": "Brasilien"}})
            return await loader.load_translations()

        assert "countries" not in asyncio.run(scenario()).data

    def test_protected_namespace_rejected(self) -> None:
        """Language patches obey the allow-list."""
        result = asyncio.run(_loader().apply_language_patch("tr", {"ui": {"play": "x"}}))

        assert result.errors[0].code == PatchErrorCode.PROTECTED_NAMESPACE
        assert result.errors[0].path == "languages.tr.ui"

    def test_sanitize_failure(self) -> None:
        """A patch with nothing left after sanitization is rejected."""
        storage = MemoryStorage()
        result = asyncio.run(_loader(storage=storage).apply_language_patch("tr", {}))

        assert [e.code for e in result.errors] == [PatchErrorCode.SANITIZE_FAILED]
        assert len(storage) == 0

    def test_unsafe_language_code(self) -> None:
        """Unsafe codes raise before anything is validated."""
        with pytest.raises(ValueError):
            asyncio.run(_loader().apply_language_patch("../tr", {"countries": {}}))


class TestClearAndInfo:
    """Test clear_patches and get_patch_info."""

    def test_patch_info_lifecycle(self) -> None:
        """Patch info follows apply and clear."""
        storage = MemoryStorage()
        loader = _loader(storage=storage)

        async def scenario() -> list[PatchInfo]:
            infos = [await loader.get_patch_info()]
            await loader.apply_universal_patch(UNIVERSAL_PATCH)
            infos.append(await loader.get_patch_info())
            loader.set_language("it")
            infos.append(await loader.get_patch_info())
            loader.set_language("tr")
            await loader.clear_patches()
            infos.append(await loader.get_patch_info())
            return infos

        infos = asyncio.run(scenario())

        assert infos == [
            PatchInfo(universal=False, language_specific=False),
            PatchInfo(universal=True, language_specific=True),
            PatchInfo(universal=True, language_specific=False),
            PatchInfo(universal=False, language_specific=False),
        ]

    def test_language_patch_counts_as_specific(self) -> None:
        """A standalone language patch sets language_specific."""
        loader = _loader()

        async def scenario() -> PatchInfo:
            await loader.apply_language_patch("tr", {"countries": {"br": "Brezilya"}})
            return await loader.get_patch_info()

        assert asyncio.run(scenario()) == PatchInfo(universal=False, language_specific=True)

    def test_clear_patches(self) -> None:
        """clear_patches removes both patches and the next load reverts."""
        storage = MemoryStorage()
        loader = _loader(storage=storage)

        async def scenario() -> LoadedTranslations:
            await loader.apply_universal_patch(UNIVERSAL_PATCH)
            await loader.apply_language_patch("tr", {"countries": {"br": "Brezilya"}})
            await loader.load_translations()
            await loader.clear_patches()
            return await loader.load_translations()

        loaded = asyncio.run(scenario())

        assert len(storage) == 0
        assert "countries" not in loaded.data
        assert loaded.data["competition"]["el"] == "Europa League"

    def test_clear_patches_plain_storage(self) -> None:
        """Removal works key by key on storage without batch support."""
        storage = PlainStorage()
        storage.data = {"lexpatch:universal-patch": "{}", "lexpatch:patch:tr": "{}", "x": "1"}

        asyncio.run(_loader(storage=storage).clear_patches())

        assert storage.data == {"x": "1"}
