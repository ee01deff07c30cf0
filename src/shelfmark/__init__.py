"""Shelfmark: rank folders against a document by lexical or semantic similarity."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from ._backends import DirectoryBackend, MemoryBackend
from ._config import Settings
from ._errors import (
    DimensionMismatch,
    EmbeddingProviderError,
    PersistenceError,
    ShelfmarkError,
    UnknownMethodError,
)
from ._logging import configure_logging
from ._methods import LEXICAL_METHOD_ID
from ._sources import BookmarkTreeSource, StaticFolderSource
from ._stop_words import STOP_WORDS
from ._types import (
    CorpusStatistics,
    DenseVector,
    Document,
    FingerprintSet,
    FolderFingerprint,
    FolderSource,
    RankedResult,
    Role,
    SparseVector,
)

if TYPE_CHECKING:
    from ._backends import CacheBackend
    from ._cache import FolderSourceProvider
    from ._embedder import EmbeddingProvider

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "load",
    "BookmarkTreeSource",
    "configure_logging",
    "CorpusStatistics",
    "DenseVector",
    "DimensionMismatch",
    "DirectoryBackend",
    "Document",
    "EmbeddingProviderError",
    "FingerprintSet",
    "FolderFingerprint",
    "FolderRanker",
    "FolderSource",
    "LEXICAL_METHOD_ID",
    "MemoryBackend",
    "PersistenceError",
    "RankedResult",
    "Role",
    "Settings",
    "ShelfmarkError",
    "SparseVector",
    "StaticFolderSource",
    "STOP_WORDS",
    "UnknownMethodError",
]


def load(
    source: FolderSourceProvider,
    settings: Settings | None = None,
    *,
    backend: CacheBackend | None = None,
    provider_factory: Callable[[], EmbeddingProvider] | None = None,
) -> "FolderRanker":
    """Build a ready-to-use FolderRanker.

    Registers the lexical method and one semantic method for
    ``settings.SEMANTIC_MODEL``. The semantic provider is only created on
    first use, so nothing is downloaded unless that method is requested.

    Args:
        source: Where folders come from.
        settings: Defaults to ``Settings()`` (environment / .env).
        backend: Defaults to a DirectoryBackend on ``settings.CACHE_DIR``,
            or a MemoryBackend when that is unset.
        provider_factory: Builds the embedding provider. Defaults to a
            sentence-transformers model named ``settings.SEMANTIC_MODEL``.
    """
    from ._cache import FingerprintCache
    from ._centroid import CentroidBuilder
    from ._embedder import EmbedderAdapter
    from ._methods import LexicalMethod, MethodRegistry, SemanticMethod
    from ._providers import SentenceTransformerProvider
    from ._service import FolderRanker
    from ._tokenizer import Tokenizer
    from ._vectorizer import LexicalVectorizer

    if settings is None:
        settings = Settings()
    if backend is None:
        if settings.CACHE_DIR is not None:
            backend = DirectoryBackend(settings.CACHE_DIR)
        else:
            backend = MemoryBackend()
    if provider_factory is None:
        def provider_factory() -> EmbeddingProvider:
            return SentenceTransformerProvider(
                settings.SEMANTIC_MODEL, device=settings.SEMANTIC_DEVICE,
            )

    tokenizer = Tokenizer(
        stemmer_language=settings.STEMMER_LANGUAGE,
        drop_stop_words=settings.DROP_STOP_WORDS,
    )
    adapter = EmbedderAdapter(
        settings.SEMANTIC_MODEL,
        provider_factory,
        max_chars=settings.MAX_CHARS,
        timeout_seconds=settings.EMBED_TIMEOUT_SECONDS,
    )
    methods = MethodRegistry([
        LexicalMethod(LexicalVectorizer(tokenizer)),
        SemanticMethod(adapter),
    ])
    builder = CentroidBuilder(
        max_items=settings.MAX_ITEMS_PER_FOLDER,
        batch_size=settings.EMBED_BATCH_SIZE,
    )
    cache = FingerprintCache(backend, builder, methods)
    return FolderRanker(settings, methods, cache, source)


# Deferred import so FolderRanker is available as shelfmark.FolderRanker
# without pulling in the engine at module load time.
def __getattr__(name: str):
    if name == "FolderRanker":
        from ._service import FolderRanker
        return FolderRanker
    raise AttributeError(f"module 'shelfmark' has no attribute {name!r}")
