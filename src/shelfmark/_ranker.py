"""Cosine ranking of cached folder fingerprints against a query."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from ._errors import DimensionMismatch, PersistenceError
from ._types import Document, RankedResult, Role, check_comparable

if TYPE_CHECKING:
    from ._cache import FingerprintCache, FolderSourceProvider
    from ._methods import AnyMethod, MethodRegistry
    from ._types import FingerprintSet, Vector

log = structlog.get_logger(__name__)


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine similarity; exactly 0.0 when either vector has zero norm.

    Raises DimensionMismatch for vectors of different kinds or lengths,
    zero vectors included.
    """
    check_comparable(a, b)
    norm_a = a.norm()
    norm_b = b.norm()
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return a.dot(b) / (norm_a * norm_b)


class SimilarityRanker:
    """Scores a query against every non-empty folder of one method.

    A ``rank`` running alongside a ``rebuild`` uses whichever complete
    set ``ensure`` hands back, old or new.
    """

    def __init__(
        self,
        cache: FingerprintCache,
        methods: MethodRegistry,
        source: FolderSourceProvider,
    ) -> None:
        self._cache = cache
        self._methods = methods
        self._source = source

    async def rank(
        self, query_text: str, method_id: str, k: int
    ) -> list[RankedResult]:
        if k <= 0:
            raise ValueError(f"k must be > 0, got {k}")
        method = self._methods.get(method_id)
        rank_log = log.bind(action="rank", method_id=method_id, k=k)
        start = time.monotonic()

        fset = await self._fingerprints(method_id)
        if fset.method_id != method_id:
            rank_log.error(
                "Fingerprint set belongs to another method.",
                set_method_id=fset.method_id,
            )
            raise DimensionMismatch(
                f"Fingerprints for {fset.method_id!r} requested as {method_id!r}"
            )

        candidates = [fp for fp in fset.fingerprints if fp.sample_size > 0]
        if not candidates:
            rank_log.info("No qualifying folders.", n_folders=len(fset))
            return []

        query = await self._query_vector(query_text, method, fset)

        scored: list[RankedResult] = []
        for fp in candidates:
            try:
                score = cosine_similarity(query, fp.vector)
            except DimensionMismatch:
                rank_log.error(
                    "Query and folder vectors are not comparable.",
                    folder_id=fp.folder_id,
                    query_dim=query.dimension,
                    folder_dim=fp.vector.dimension,
                )
                raise
            scored.append(RankedResult(fp.folder_id, fp.name, score))

        # sorted() is stable: equal scores keep fingerprint order.
        scored = sorted(scored, key=lambda r: r.score, reverse=True)[:k]

        rank_log.info(
            "Ranked folders.",
            n_candidates=len(candidates),
            n_results=len(scored),
            top_score=round(scored[0].score, 4),
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return scored

    # -- Internal methods --

    async def _fingerprints(self, method_id: str) -> FingerprintSet:
        try:
            return await self._cache.ensure(method_id, self._source)
        except PersistenceError as e:
            log.warning(
                "Cache unusable; rebuilding once.",
                method_id=method_id, error=str(e),
            )
            return await self._cache.rebuild(method_id, self._source)

    async def _query_vector(
        self, query_text: str, method: AnyMethod, fset: FingerprintSet
    ) -> Vector:
        [vector] = await method.vectorize([Document(query_text, Role.QUERY)])
        if method.lexical:
            # Weighted by the cached corpus only; the query never adds to it.
            return method.weigh(vector, fset.corpus_statistics)
        return vector
