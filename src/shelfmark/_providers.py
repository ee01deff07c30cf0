"""Embedding providers consumed by EmbedderAdapter."""

from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING, Sequence

import structlog

from ._hash import bucket_and_sign
from ._tokenizer import Tokenizer

if TYPE_CHECKING:
    from sentence_transformers import SentenceTransformer

log = structlog.get_logger(__name__)


class SentenceTransformerProvider:
    """sentence-transformers model, loaded on first use.

    Pooling and L2 normalization are done by the model; encoding runs in
    a worker thread so the event loop is not blocked.
    """

    def __init__(
        self,
        model_name: str,
        *,
        device: str | None = None,
        normalize: bool = True,
    ) -> None:
        self.model_name = model_name
        self.device = device
        self.normalize = normalize
        self._model: SentenceTransformer | None = None

    @property
    def model(self) -> SentenceTransformer:
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            log.info("Loading sentence-transformers model.", model=self.model_name)
            self._model = SentenceTransformer(self.model_name, device=self.device)
        return self._model

    def _encode(self, texts: list[str]) -> list[list[float]]:
        embeddings = self.model.encode(
            texts,
            normalize_embeddings=self.normalize,
            convert_to_numpy=True,
            show_progress_bar=False,
        )
        return embeddings.tolist()

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        return await asyncio.to_thread(self._encode, list(texts))


class HashingProvider:
    """Deterministic feature-hashing embedder.

    Needs no model download, so it serves tests and offline setups. Each
    token adds +/-1 to an FNV-1a bucket; the result is L2-normalized.
    """

    def __init__(self, dimension: int = 256, tokenizer: Tokenizer | None = None):
        if dimension <= 0:
            raise ValueError(f"dimension must be > 0, got {dimension}")
        self.dimension = dimension
        self._tokenizer = tokenizer or Tokenizer()

    def embed_text(self, text: str) -> list[float]:
        vec = [0.0] * self.dimension
        for token in self._tokenizer.tokenize(text):
            idx, sign = bucket_and_sign(token, self.dimension)
            vec[idx] += sign
        norm = math.sqrt(sum(v * v for v in vec))
        if norm == 0.0:
            return vec
        return [v / norm for v in vec]

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        return [self.embed_text(t) for t in texts]
