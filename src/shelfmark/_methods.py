"""Vectorization methods selectable by method id."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Sequence, Union

from ._errors import UnknownMethodError
from ._types import CorpusStatistics, Document, SparseVector
from ._vectorizer import compute_tfidf

if TYPE_CHECKING:
    from ._embedder import EmbedderAdapter
    from ._types import DenseVector
    from ._vectorizer import LexicalVectorizer

LEXICAL_METHOD_ID = "tfidf"


class LexicalMethod:
    """TF-IDF over tokenized titles. Produces sparse vectors."""

    lexical = True

    def __init__(
        self,
        vectorizer: LexicalVectorizer,
        method_id: str = LEXICAL_METHOD_ID,
    ) -> None:
        self.method_id = method_id
        self.vectorizer = vectorizer

    async def vectorize(self, documents: Sequence[Document]) -> list[SparseVector]:
        # Roles make no difference to term counts.
        return self.vectorizer.vectorize_batch(doc.text for doc in documents)

    def weigh(self, tf: SparseVector, idf: CorpusStatistics | None) -> SparseVector:
        return compute_tfidf(tf, idf or CorpusStatistics())


class SemanticMethod:
    """Dense embeddings from one model; the method id is the model id."""

    lexical = False

    def __init__(self, adapter: EmbedderAdapter) -> None:
        self.method_id = adapter.model_id
        self.adapter = adapter

    async def vectorize(self, documents: Sequence[Document]) -> list[DenseVector]:
        return await self.adapter.embed(documents)


AnyMethod = Union[LexicalMethod, SemanticMethod]


class MethodRegistry:
    """Method id -> method."""

    def __init__(self, methods: Sequence[AnyMethod] = ()) -> None:
        self._methods: dict[str, AnyMethod] = {}
        for m in methods:
            self.register(m)

    def register(self, method: AnyMethod) -> None:
        if method.method_id in self._methods:
            raise ValueError(f"method {method.method_id!r} already registered")
        self._methods[method.method_id] = method

    def get(self, method_id: str) -> AnyMethod:
        try:
            return self._methods[method_id]
        except KeyError:
            raise UnknownMethodError(
                f"Unknown method {method_id!r}; "
                f"registered: {sorted(self._methods)}"
            ) from None

    def __contains__(self, method_id: object) -> bool:
        return method_id in self._methods

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)
