"""Data structures for shelfmark."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union

from ._errors import DimensionMismatch


class Role(str, Enum):
    """How a document takes part in a comparison."""

    QUERY = "query"
    PASSAGE = "passage"


@dataclass(slots=True, frozen=True)
class Document:
    text: str
    role: Role = Role.PASSAGE


def check_comparable(a: Vector, b: Vector) -> None:
    """Raise DimensionMismatch unless ``a`` and ``b`` live in the same space."""
    if a.kind != b.kind:
        raise DimensionMismatch(
            f"Cannot compare a {a.kind} vector with a {b.kind} vector"
        )
    if a.dimension != b.dimension:
        raise DimensionMismatch(
            f"Vectors must be of the same length: {a.dimension} != {b.dimension}"
        )


@dataclass(slots=True, frozen=True)
class SparseVector:
    """Term -> weight mapping. Only weights > 0 are kept."""

    weights: dict[str, float] = field(default_factory=dict)

    kind = "sparse"

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", {
            term: float(w) for term, w in self.weights.items() if w > 0
        })

    @property
    def dimension(self) -> int | None:
        # Vocabulary based: any two sparse vectors are comparable.
        return None

    def __len__(self) -> int:
        return len(self.weights)

    def __iter__(self) -> Iterator[str]:
        return iter(self.weights)

    def get(self, term: str, default: float = 0.0) -> float:
        return self.weights.get(term, default)

    def items(self):
        return self.weights.items()

    def dot(self, other: Vector) -> float:
        check_comparable(self, other)
        small, large = self.weights, other.weights
        if len(small) > len(large):
            small, large = large, small
        return sum(w * large.get(t, 0.0) for t, w in small.items())

    def norm(self) -> float:
        return math.sqrt(sum(w * w for w in self.weights.values()))

    def is_zero(self) -> bool:
        return not self.weights


@dataclass(slots=True, frozen=True)
class DenseVector:
    """Fixed-length embedding produced by one semantic method."""

    values: tuple[float, ...] = ()

    kind = "dense"

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))

    @property
    def dimension(self) -> int:
        return len(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[float]:
        return iter(self.values)

    def __getitem__(self, i: int) -> float:
        return self.values[i]

    def dot(self, other: Vector) -> float:
        check_comparable(self, other)
        return math.fsum(a * b for a, b in zip(self.values, other.values))

    def norm(self) -> float:
        return math.sqrt(math.fsum(v * v for v in self.values))

    def is_zero(self) -> bool:
        return all(v == 0.0 for v in self.values)


Vector = Union[SparseVector, DenseVector]


@dataclass(slots=True, frozen=True)
class CorpusStatistics:
    """Inverse-document-frequency weights for one lexical rebuild."""

    idf: dict[str, float] = field(default_factory=dict)

    def __contains__(self, term: object) -> bool:
        return term in self.idf

    def __len__(self) -> int:
        return len(self.idf)

    def get(self, term: str, default: float = 0.0) -> float:
        return self.idf.get(term, default)

    def items(self):
        return self.idf.items()


@dataclass(slots=True, frozen=True)
class FolderSource:
    folder_id: str
    name: str
    items: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(slots=True, frozen=True)
class FolderFingerprint:
    folder_id: str
    name: str
    vector: Vector
    sample_size: int  # 0 = no usable items, never ranked


@dataclass(slots=True, frozen=True)
class FingerprintSet:
    method_id: str
    fingerprints: tuple[FolderFingerprint, ...]
    corpus_statistics: CorpusStatistics | None = None
    generation: int = 1
    built_at: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fingerprints", tuple(self.fingerprints))

    def __len__(self) -> int:
        return len(self.fingerprints)


@dataclass(slots=True, frozen=True)
class RankedResult:
    folder_id: str
    name: str
    score: float

    def to_dict(self) -> dict[str, object]:
        return {"folderId": self.folder_id, "name": self.name, "score": self.score}
