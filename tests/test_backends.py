"""Tests for cache backends."""

import asyncio
import os

import pytest

from shelfmark import DirectoryBackend, MemoryBackend, PersistenceError


def test_memory_backend():
    backend = MemoryBackend()

    async def scenario():
        assert await backend.read("k") is None
        await backend.write("k", b"one")
        await backend.write("k", b"two")
        assert await backend.read("k") == b"two"
        await backend.delete("k")
        await backend.delete("k")
        return await backend.read("k")

    assert asyncio.run(scenario()) is None
    assert len(backend) == 0


def test_directory_backend_round_trip(tmp_path):
    backend = DirectoryBackend(tmp_path / "cache")

    async def scenario():
        assert await backend.read("centroids:tfidf") is None
        await backend.write("centroids:tfidf", b"\x00\x01payload")
        return await backend.read("centroids:tfidf")

    assert asyncio.run(scenario()) == b"\x00\x01payload"


def test_directory_backend_keys_are_file_safe(tmp_path):
    backend = DirectoryBackend(tmp_path)
    path = backend.path_for("centroids:intfloat/multilingual-e5-small")
    assert path.parent == tmp_path
    assert "/" not in path.name


def test_directory_backend_leaves_no_temp_files(tmp_path):
    backend = DirectoryBackend(tmp_path)
    asyncio.run(backend.write("a", b"1"))
    asyncio.run(backend.write("a", b"2"))
    assert os.listdir(tmp_path) == [backend.path_for("a").name]


def test_directory_backend_delete(tmp_path):
    backend = DirectoryBackend(tmp_path)

    async def scenario():
        await backend.write("a", b"1")
        await backend.delete("a")
        await backend.delete("a")
        return await backend.read("a")

    assert asyncio.run(scenario()) is None


def test_directory_backend_write_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    backend = DirectoryBackend(blocker)
    with pytest.raises(PersistenceError, match="Failed to write"):
        asyncio.run(backend.write("a", b"1"))
