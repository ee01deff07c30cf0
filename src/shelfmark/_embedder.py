"""Uniform embed(documents) contract over an external embedding provider."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Protocol, Sequence

import structlog

from ._errors import DimensionMismatch, EmbeddingProviderError
from ._types import DenseVector, Document, Role

log = structlog.get_logger(__name__)

PrefixRule = Callable[[str, Role], str]


class EmbeddingProvider(Protocol):
    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        ...


def passthrough(text: str, role: Role) -> str:
    return text


def e5_prefix(text: str, role: Role) -> str:
    """E5 models are asymmetric: queries and passages get distinct prefixes."""
    return f"{role.value}: {text}"


def prefix_rule_for(model_id: str) -> PrefixRule:
    """Pick the query/passage convention for a model id."""
    if "e5" in model_id.lower():
        return e5_prefix
    return passthrough


class EmbedderAdapter:
    """Wraps one embedding provider for one model id.

    The provider is created by ``provider_factory`` on the first call to
    :meth:`embed` and reused afterwards. Every text in a batch is cut to
    ``max_chars`` characters before the prefix is applied.
    """

    __slots__ = (
        "_model_id", "_factory", "_provider", "_max_chars",
        "_timeout", "_prefix", "_log",
    )

    def __init__(
        self,
        model_id: str,
        provider_factory: Callable[[], EmbeddingProvider],
        *,
        max_chars: int = 1000,
        timeout_seconds: float | None = 30.0,
        prefix_rule: PrefixRule | None = None,
    ) -> None:
        if max_chars <= 0:
            raise ValueError(f"max_chars must be > 0, got {max_chars}")
        self._model_id = model_id
        self._factory = provider_factory
        self._provider: EmbeddingProvider | None = None
        self._max_chars = max_chars
        self._timeout = timeout_seconds
        self._prefix = prefix_rule or prefix_rule_for(model_id)
        self._log = log.bind(model_id=model_id)

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def provider(self) -> EmbeddingProvider:
        if self._provider is None:
            self._log.info("Initializing embedding provider.")
            try:
                self._provider = self._factory()
            except Exception as e:
                raise EmbeddingProviderError(
                    f"Could not initialize provider for {self._model_id!r}: {e}"
                ) from e
        return self._provider

    def prepare(self, documents: Sequence[Document]) -> list[str]:
        """Truncate then prefix, in input order."""
        return [
            self._prefix(doc.text[:self._max_chars], doc.role)
            for doc in documents
        ]

    async def embed(self, documents: Sequence[Document]) -> list[DenseVector]:
        if not documents:
            return []
        texts = self.prepare(documents)
        provider = self.provider
        embed_log = self._log.bind(action="embed", batch_size=len(texts))

        start = time.monotonic()
        try:
            if self._timeout is None:
                raw = await provider.embed_batch(texts)
            else:
                raw = await asyncio.wait_for(
                    provider.embed_batch(texts), timeout=self._timeout,
                )
        except asyncio.TimeoutError as e:
            embed_log.warning("Embedding provider timed out.", timeout_s=self._timeout)
            raise EmbeddingProviderError(
                f"Embedding provider timed out after {self._timeout}s"
            ) from e
        except EmbeddingProviderError:
            raise
        except Exception as e:
            embed_log.error("Embedding provider failed.", error=str(e))
            raise EmbeddingProviderError(f"Embedding provider failed: {e}") from e

        if len(raw) != len(texts):
            raise DimensionMismatch(
                f"Provider returned {len(raw)} vectors for {len(texts)} texts"
            )
        vectors = [DenseVector(tuple(v)) for v in raw]
        dims = {len(v) for v in vectors}
        if len(dims) > 1:
            raise DimensionMismatch(
                f"Provider returned vectors of inconsistent length: {sorted(dims)}"
            )

        embed_log.debug(
            "Embedded batch.",
            dimension=vectors[0].dimension,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return vectors
