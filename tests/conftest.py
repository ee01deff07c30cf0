"""Shared fixtures for shelfmark tests."""

import pytest

from shelfmark import FolderSource, MemoryBackend, StaticFolderSource
from shelfmark._cache import FingerprintCache
from shelfmark._centroid import CentroidBuilder
from shelfmark._embedder import EmbedderAdapter
from shelfmark._methods import LexicalMethod, MethodRegistry, SemanticMethod
from shelfmark._providers import HashingProvider
from shelfmark._tokenizer import Tokenizer
from shelfmark._vectorizer import LexicalVectorizer

HASHING_MODEL = "hashing-64"


class CountingSource(StaticFolderSource):
    """StaticFolderSource that records how often it was enumerated."""

    def __init__(self, folders=()):
        super().__init__(folders)
        self.calls = 0

    def list_folders(self):
        self.calls += 1
        return super().list_folders()


@pytest.fixture
def tokenizer():
    return Tokenizer()


@pytest.fixture
def lexical(tokenizer):
    return LexicalMethod(LexicalVectorizer(tokenizer))


@pytest.fixture
def semantic():
    adapter = EmbedderAdapter(HASHING_MODEL, lambda: HashingProvider(64))
    return SemanticMethod(adapter)


@pytest.fixture
def methods(lexical, semantic):
    return MethodRegistry([lexical, semantic])


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def cache(backend, methods):
    return FingerprintCache(backend, CentroidBuilder(max_items=3), methods)


@pytest.fixture
def fruit_folders():
    return [
        FolderSource("A", "Fruit", ("apple", "banana")),
        FolderSource("B", "Space", ("rocket", "engine")),
        FolderSource("C", "Empty", ()),
    ]


@pytest.fixture
def source(fruit_folders):
    return CountingSource(fruit_folders)


@pytest.fixture
def make_source():
    """Factory for sources that count their enumerations."""
    return CountingSource
