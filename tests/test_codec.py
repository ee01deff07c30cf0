"""Tests for FingerprintSet serialization and integrity checks."""

import msgpack
import pytest

from shelfmark import (
    CorpusStatistics,
    DenseVector,
    FingerprintSet,
    FolderFingerprint,
    PersistenceError,
    SparseVector,
)
from shelfmark._codec import FORMAT_VERSION, deserialize, serialize


@pytest.fixture
def sparse_set():
    return FingerprintSet(
        method_id="tfidf",
        fingerprints=(
            FolderFingerprint("A", "Fruit", SparseVector({"appl": 0.1 + 0.2, "banana": 1 / 3}), 2),
            FolderFingerprint("C", "Empty", SparseVector(), 0),
        ),
        corpus_statistics=CorpusStatistics({"appl": 1.4054651081081644, "banana": 1.0}),
        generation=4,
        built_at="2026-10-19T00:00:00+00:00",
    )


@pytest.fixture
def dense_set():
    return FingerprintSet(
        method_id="intfloat/multilingual-e5-small",
        fingerprints=(
            FolderFingerprint("1", "Work", DenseVector((0.1, -2.5e-300, 1e300, 1 / 7)), 3),
            FolderFingerprint("2", "Nothing", DenseVector(), 0),
        ),
    )


def test_round_trip_sparse(sparse_set):
    assert deserialize(serialize(sparse_set)) == sparse_set


def test_round_trip_dense(dense_set):
    restored = deserialize(serialize(dense_set))
    assert restored == dense_set
    assert restored.fingerprints[0].vector.values[3] == 1 / 7
    assert restored.corpus_statistics is None


def test_round_trip_empty_set():
    empty = FingerprintSet(method_id="tfidf", fingerprints=(), corpus_statistics=CorpusStatistics())
    assert deserialize(serialize(empty)) == empty


def test_serialize_is_deterministic(sparse_set):
    assert serialize(sparse_set) == serialize(sparse_set)


def test_garbage_bytes():
    with pytest.raises(PersistenceError, match="Cannot decode"):
        deserialize(b"\xc1not msgpack")


def test_version_mismatch(sparse_set):
    envelope = msgpack.unpackb(serialize(sparse_set), raw=False)
    envelope["format"] = FORMAT_VERSION + 1
    with pytest.raises(PersistenceError, match="cache format"):
        deserialize(msgpack.packb(envelope, use_bin_type=True))


def test_checksum_mismatch(sparse_set):
    envelope = msgpack.unpackb(serialize(sparse_set), raw=False)
    envelope["payload"] = envelope["payload"] + b"tampered"
    with pytest.raises(PersistenceError, match="Checksum mismatch"):
        deserialize(msgpack.packb(envelope, use_bin_type=True))


def test_unknown_vector_kind(sparse_set):
    import hashlib

    envelope = msgpack.unpackb(serialize(sparse_set), raw=False)
    payload = msgpack.unpackb(envelope["payload"], raw=False)
    payload["fingerprints"][0]["kind"] = "quantum"
    envelope["payload"] = msgpack.packb(payload, use_bin_type=True)
    envelope["sha256"] = hashlib.sha256(envelope["payload"]).hexdigest()
    with pytest.raises(PersistenceError, match="Unknown vector kind"):
        deserialize(msgpack.packb(envelope, use_bin_type=True))
