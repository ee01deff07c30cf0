"""Term-frequency / inverse-document-frequency engine."""

from __future__ import annotations

import math
from collections import Counter
from typing import TYPE_CHECKING, Iterable, Sequence

from ._types import CorpusStatistics, SparseVector

if TYPE_CHECKING:
    from ._tokenizer import Tokenizer


def term_frequency(tokens: Sequence[str]) -> SparseVector:
    """Relative frequency of each term. No tokens -> empty vector."""
    total = len(tokens)
    if total == 0:
        return SparseVector()
    counts = Counter(tokens)
    return SparseVector({term: n / total for term, n in counts.items()})


def compute_idf(corpus: Sequence[SparseVector]) -> CorpusStatistics:
    """Smoothed IDF: ln((N + 1) / (1 + df)) + 1.

    A term present in every document gets exactly 1.0; rarer terms get
    more. Never negative, never divides by zero.
    """
    n_docs = len(corpus)
    df: Counter[str] = Counter()
    for vec in corpus:
        df.update(vec.weights.keys())
    return CorpusStatistics({
        term: math.log((n_docs + 1) / (1 + count)) + 1.0
        for term, count in df.items()
    })


def compute_tfidf(tf: SparseVector, idf: CorpusStatistics) -> SparseVector:
    """Weight tf by idf. Terms outside the idf vocabulary are dropped."""
    weights: dict[str, float] = {}
    for term, w in idf.items():
        f = tf.get(term)
        if f > 0.0:
            weights[term] = f * w
    return SparseVector(weights)


class LexicalVectorizer:
    """Binds a Tokenizer to the TF / TF-IDF functions."""

    __slots__ = ("_tokenizer",)

    def __init__(self, tokenizer: Tokenizer) -> None:
        self._tokenizer = tokenizer

    @property
    def tokenizer(self) -> Tokenizer:
        return self._tokenizer

    def vectorize(self, text: str) -> SparseVector:
        return term_frequency(self._tokenizer.tokenize(text))

    def vectorize_batch(self, texts: Iterable[str]) -> list[SparseVector]:
        return [self.vectorize(t) for t in texts]

    def weigh(self, text: str, idf: CorpusStatistics) -> SparseVector:
        return compute_tfidf(self.vectorize(text), idf)
