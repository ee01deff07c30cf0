"""Tests for TF, IDF and TF-IDF weighting."""

import math

import pytest

from shelfmark import CorpusStatistics, SparseVector
from shelfmark._vectorizer import compute_idf, compute_tfidf, term_frequency


def test_tf_sums_to_one():
    tf = term_frequency(["a", "b", "a", "c", "a"])
    assert sum(w for _, w in tf.items()) == pytest.approx(1.0)
    assert tf.get("a") == pytest.approx(0.6)


def test_tf_empty_tokens():
    tf = term_frequency([])
    assert len(tf) == 0
    assert tf.is_zero()


def test_idf_term_in_every_document_is_one():
    corpus = [
        SparseVector({"t": 0.5, "x": 0.5}),
        SparseVector({"t": 1.0}),
        SparseVector({"t": 0.2, "y": 0.8}),
    ]
    idf = compute_idf(corpus)
    assert idf.get("t") == 1.0


def test_idf_rare_terms_weigh_more():
    corpus = [
        SparseVector({"t": 0.5, "x": 0.5}),
        SparseVector({"t": 1.0}),
        SparseVector({"t": 1.0}),
    ]
    idf = compute_idf(corpus)
    assert idf.get("x") == pytest.approx(math.log(4 / 2) + 1)
    assert idf.get("x") > idf.get("t") >= 1.0


def test_idf_empty_corpus():
    assert len(compute_idf([])) == 0


def test_tfidf_drops_out_of_vocabulary_terms():
    idf = CorpusStatistics({"apple": 2.0, "banana": 1.5})
    tf = SparseVector({"apple": 0.5, "pie": 0.5})
    weighted = compute_tfidf(tf, idf)
    assert dict(weighted.items()) == {"apple": 1.0}


def test_tfidf_no_recognized_terms():
    idf = CorpusStatistics({"apple": 2.0})
    assert compute_tfidf(SparseVector({"pie": 1.0}), idf).is_zero()


def test_lexical_vectorizer(lexical):
    vec = lexical.vectorizer.vectorize("rocket rocket engine")
    assert len(vec) == 2
    assert sum(w for _, w in vec.items()) == pytest.approx(1.0)


def test_lexical_vectorizer_weigh(lexical):
    tokens = lexical.vectorizer.tokenizer.tokenize("rocket")
    idf = CorpusStatistics({tokens[0]: 3.0})
    weighted = lexical.vectorizer.weigh("rocket science", idf)
    assert dict(weighted.items()) == {tokens[0]: pytest.approx(1.5)}
