"""Folder centroids: the mean vector of a folder's item titles."""

from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, Sequence

import structlog

from ._errors import DimensionMismatch
from ._types import (
    DenseVector,
    Document,
    FingerprintSet,
    FolderFingerprint,
    Role,
    SparseVector,
)
from ._vectorizer import compute_idf, compute_tfidf

if TYPE_CHECKING:
    from ._methods import AnyMethod
    from ._types import FolderSource, Vector

log = structlog.get_logger(__name__)


def mean_vector(vectors: Sequence[Vector]) -> Vector:
    """Element-wise arithmetic mean.

    Sparse: union of keys, missing entries count as 0.
    Dense: all vectors must have the same length.
    """
    n = len(vectors)
    if n == 0:
        raise ValueError("mean of zero vectors is undefined")

    first = vectors[0]
    if isinstance(first, SparseVector):
        acc: dict[str, float] = defaultdict(float)
        for v in vectors:
            if not isinstance(v, SparseVector):
                raise DimensionMismatch("Cannot average sparse and dense vectors")
            for term, w in v.items():
                acc[term] += w
        return SparseVector({term: w / n for term, w in acc.items()})

    dim = first.dimension
    sums = [0.0] * dim
    for v in vectors:
        if not isinstance(v, DenseVector):
            raise DimensionMismatch("Cannot average sparse and dense vectors")
        if v.dimension != dim:
            raise DimensionMismatch(
                f"Vectors must be of the same length: {v.dimension} != {dim}"
            )
        for i, x in enumerate(v):
            sums[i] += x
    return DenseVector(tuple(s / n for s in sums))


def _empty_vector(method: AnyMethod) -> Vector:
    return SparseVector() if method.lexical else DenseVector()


class CentroidBuilder:
    """Builds folder fingerprints for one method.

    Only the first ``max_items`` non-blank titles of a folder, in source
    order, contribute. Selection is deterministic so that two rebuilds of
    an unchanged source give identical fingerprints.
    """

    __slots__ = ("max_items", "batch_size")

    def __init__(self, max_items: int = 3, batch_size: int = 32) -> None:
        if max_items <= 0:
            raise ValueError(f"max_items must be > 0, got {max_items}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        self.max_items = max_items
        self.batch_size = batch_size

    def select_titles(self, folder: FolderSource) -> list[str]:
        titles: list[str] = []
        for title in folder.items:
            if title and not title.isspace():
                titles.append(title)
                if len(titles) == self.max_items:
                    break
        return titles

    async def build_fingerprint(
        self, folder: FolderSource, method: AnyMethod
    ) -> FolderFingerprint:
        titles = self.select_titles(folder)
        vectors = await self._vectorize(titles, method)
        return self._fingerprint(folder, vectors, method)

    async def build_all_fingerprints(
        self, folders: Iterable[FolderSource], method: AnyMethod
    ) -> FingerprintSet:
        """Fingerprint every folder, in source order.

        Titles of all folders are vectorized in batches of ``batch_size``.
        In lexical mode the per-folder mean TF vectors then yield the
        corpus IDF, and each stored centroid is the TF-IDF weighted mean.
        Folders without items don't count towards the IDF corpus size.
        """
        snapshot = list(folders)
        build_log = log.bind(
            action="build_all", method_id=method.method_id, n_folders=len(snapshot),
        )
        start = time.monotonic()

        selected = [self.select_titles(f) for f in snapshot]
        flat = [t for titles in selected for t in titles]
        flat_vectors = await self._vectorize(flat, method)

        fingerprints: list[FolderFingerprint] = []
        offset = 0
        for folder, titles in zip(snapshot, selected):
            vectors = flat_vectors[offset:offset + len(titles)]
            offset += len(titles)
            fingerprints.append(self._fingerprint(folder, vectors, method))

        statistics = None
        if method.lexical:
            statistics = compute_idf(
                [fp.vector for fp in fingerprints if fp.sample_size > 0]
            )
            fingerprints = [
                replace(fp, vector=compute_tfidf(fp.vector, statistics))
                if fp.sample_size > 0 else fp
                for fp in fingerprints
            ]

        build_log.info(
            "Built folder fingerprints.",
            n_titles=len(flat),
            n_empty=sum(1 for fp in fingerprints if fp.sample_size == 0),
            vocabulary=len(statistics) if statistics is not None else None,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return FingerprintSet(
            method_id=method.method_id,
            fingerprints=tuple(fingerprints),
            corpus_statistics=statistics,
            built_at=datetime.now(timezone.utc).isoformat(),
        )

    # -- Internal methods --

    async def _vectorize(self, titles: list[str], method: AnyMethod) -> list[Vector]:
        vectors: list[Vector] = []
        for i in range(0, len(titles), self.batch_size):
            batch = [Document(t, Role.PASSAGE) for t in titles[i:i + self.batch_size]]
            vectors.extend(await method.vectorize(batch))
        return vectors

    def _fingerprint(
        self, folder: FolderSource, vectors: Sequence[Vector], method: AnyMethod
    ) -> FolderFingerprint:
        if not vectors:
            vector = _empty_vector(method)
        else:
            vector = mean_vector(vectors)
        return FolderFingerprint(
            folder_id=folder.folder_id,
            name=folder.name,
            vector=vector,
            sample_size=len(vectors),
        )
