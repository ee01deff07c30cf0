"""FingerprintSet <-> bytes, with format version and SHA-256 verification."""

from __future__ import annotations

import hashlib
from typing import Any

import msgpack

from ._errors import PersistenceError
from ._types import (
    CorpusStatistics,
    DenseVector,
    FingerprintSet,
    FolderFingerprint,
    SparseVector,
)

FORMAT_VERSION = 1


def _pack(obj: Any) -> bytes:
    # Floats are always written as float64 so vectors round-trip exactly.
    return msgpack.packb(obj, use_bin_type=True, use_single_float=False)


def _unpack(data: bytes) -> Any:
    return msgpack.unpackb(data, raw=False)


def _encode_fingerprint(fp: FolderFingerprint) -> dict[str, Any]:
    if isinstance(fp.vector, SparseVector):
        vector: Any = dict(fp.vector.weights)
    else:
        vector = list(fp.vector.values)
    return {
        "folder_id": fp.folder_id,
        "name": fp.name,
        "kind": fp.vector.kind,
        "vector": vector,
        "sample_size": fp.sample_size,
    }


def _decode_fingerprint(raw: dict[str, Any]) -> FolderFingerprint:
    kind = raw["kind"]
    if kind == "sparse":
        vector: Any = SparseVector(dict(raw["vector"]))
    elif kind == "dense":
        vector = DenseVector(tuple(raw["vector"]))
    else:
        raise PersistenceError(f"Unknown vector kind {kind!r}")
    return FolderFingerprint(
        folder_id=raw["folder_id"],
        name=raw["name"],
        vector=vector,
        sample_size=int(raw["sample_size"]),
    )


def serialize(fset: FingerprintSet) -> bytes:
    stats = fset.corpus_statistics
    payload = _pack({
        "method_id": fset.method_id,
        "generation": fset.generation,
        "built_at": fset.built_at,
        "corpus_statistics": dict(stats.idf) if stats is not None else None,
        "fingerprints": [_encode_fingerprint(fp) for fp in fset.fingerprints],
    })
    return _pack({
        "format": FORMAT_VERSION,
        "sha256": hashlib.sha256(payload).hexdigest(),
        "payload": payload,
    })


def deserialize(data: bytes) -> FingerprintSet:
    """Decode bytes written by :func:`serialize`.

    Raises:
        PersistenceError: Undecodable bytes, an unsupported format
            version, or a checksum mismatch.
    """
    try:
        envelope = _unpack(data)
        version = envelope.get("format")
        if version != FORMAT_VERSION:
            raise PersistenceError(
                f"Expected cache format {FORMAT_VERSION!r}, got {version!r}"
            )
        payload = envelope["payload"]
        actual = hashlib.sha256(payload).hexdigest()
        expected = envelope["sha256"]
        if actual != expected:
            raise PersistenceError(
                f"Checksum mismatch: expected {expected[:16]}..., "
                f"got {actual[:16]}..."
            )
        raw = _unpack(payload)
        stats = raw["corpus_statistics"]
        return FingerprintSet(
            method_id=raw["method_id"],
            fingerprints=tuple(_decode_fingerprint(fp) for fp in raw["fingerprints"]),
            corpus_statistics=CorpusStatistics(dict(stats)) if stats is not None else None,
            generation=int(raw["generation"]),
            built_at=raw["built_at"],
        )
    except PersistenceError:
        raise
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise PersistenceError(f"Cannot decode fingerprint set: {e}") from e
