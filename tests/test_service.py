"""Tests for the FolderRanker facade and request handling."""

import asyncio

import pytest

import shelfmark
from shelfmark import DirectoryBackend, FolderSource, Settings, StaticFolderSource
from shelfmark._providers import HashingProvider


@pytest.fixture
def settings():
    return Settings(SEMANTIC_MODEL="hashing-32", CACHE_DIR=None, DEFAULT_K=5)


@pytest.fixture
def engine(settings, fruit_folders):
    return shelfmark.load(
        StaticFolderSource(fruit_folders),
        settings,
        provider_factory=lambda: HashingProvider(32),
    )


def _handle(engine, request):
    return asyncio.run(engine.handle(request))


def test_load_registers_both_methods(engine):
    assert list(engine.methods) == ["tfidf", "hashing-32"]
    assert isinstance(engine, shelfmark.FolderRanker)


def test_suggest_request(engine):
    response = _handle(engine, {"action": "SUGGEST", "queryText": "apple pie"})
    folders = response["folders"]
    assert [f["folderId"] for f in folders] == ["A", "B"]
    assert folders[0]["name"] == "Fruit"
    assert folders[0]["score"] > folders[1]["score"] == 0.0


def test_suggest_with_method_and_k(engine):
    response = _handle(engine, {
        "action": "SUGGEST", "queryText": "rocket engine",
        "methodId": "hashing-32", "k": 1,
    })
    assert [f["folderId"] for f in response["folders"]] == ["B"]


def test_rebuild_request(engine):
    assert _handle(engine, {"action": "REBUILD", "methodId": "tfidf"}) == {"ok": True}
    assert _handle(engine, {"action": "REBUILD"}) == {"ok": True}
    fset = asyncio.run(engine.cache.get("tfidf"))
    assert fset.generation == 2


def test_invalidate_request(engine):
    _handle(engine, {"action": "REBUILD"})
    assert _handle(engine, {"action": "INVALIDATE"}) == {"ok": True}
    assert asyncio.run(engine.cache.get("tfidf")) is None


def test_rebuild_empty_source_then_suggest(settings):
    engine = shelfmark.load(StaticFolderSource([]), settings)
    assert _handle(engine, {"action": "REBUILD"}) == {"ok": True}
    assert _handle(engine, {"action": "SUGGEST", "queryText": "apple"}) == {"folders": []}


@pytest.mark.parametrize("request_, fragment", [
    ({"action": "DANCE"}, "Unknown action"),
    ({}, "Unknown action"),
    ({"action": "SUGGEST"}, "queryText"),
    ({"action": "SUGGEST", "queryText": "x", "k": "3"}, "k must be an integer"),
    ({"action": "SUGGEST", "queryText": "x", "k": 0}, "k must be > 0"),
    ({"action": "SUGGEST", "queryText": "x", "methodId": "nope"}, "Unknown method"),
    ({"action": "REBUILD", "methodId": "nope"}, "Unknown method"),
])
def test_bad_requests(engine, request_, fragment):
    response = _handle(engine, request_)
    assert set(response) == {"error"}
    assert fragment in response["error"]


def test_provider_failure_becomes_error(settings, fruit_folders):
    def factory():
        raise RuntimeError("weights missing")

    engine = shelfmark.load(StaticFolderSource(fruit_folders), settings, provider_factory=factory)
    response = _handle(engine, {"action": "SUGGEST", "queryText": "x", "methodId": "hashing-32"})
    assert "weights missing" in response["error"]


def test_cache_dir_uses_directory_backend(tmp_path, fruit_folders):
    settings = Settings(CACHE_DIR=tmp_path)
    engine = shelfmark.load(StaticFolderSource(fruit_folders), settings)
    assert isinstance(engine.cache.backend, DirectoryBackend)
    asyncio.run(engine.rebuild())
    assert (tmp_path / "centroids%3Atfidf.msgpack").exists()

    # A fresh engine on the same directory reuses the stored fingerprints.
    again = shelfmark.load(StaticFolderSource([FolderSource("Z", "Other", ("zzz",))]), settings)
    results = asyncio.run(again.suggest("apple"))
    assert results[0].folder_id == "A"
    assert again.cache.builds == 0
