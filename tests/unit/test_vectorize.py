# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""Tests for TF-IDF vectorization."""

import math

import numpy as np

from bubblefield.models import SpaceNode
from bubblefield.vectorize import TfidfVectorizer, tokenize, vectorize_spaces


class TestTokenize:
    """Tests for the word tokenizer."""

    def test_lowercases_and_splits_punctuation(self):
        assert tokenize("Jazz-Music, LIVE!") == ["jazz", "music", "live"]

    def test_drops_stopwords(self):
        assert tokenize("The art of the deal") == ["art", "deal"]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize("  ...  ") == []


class TestTfidfVectorizer:
    """Tests for the corpus model."""

    def test_vocabulary_in_first_seen_order(self):
        vectorizer = TfidfVectorizer().fit(["Rock music", "Jazz music", "rock"])
        assert vectorizer.vocabulary == ["rock", "music", "jazz"]

    def test_idf_smoothing(self):
        vectorizer = TfidfVectorizer().fit(["jazz music", "rock music"])
        idf = dict(zip(vectorizer.vocabulary, vectorizer.idf))
        assert math.isclose(idf["music"], 1 + math.log(2 / 3))
        assert math.isclose(idf["jazz"], 1.0)

    def test_term_frequency_is_raw_count(self):
        vectorizer = TfidfVectorizer()
        matrix = vectorizer.fit_transform(["jazz jazz", "rock"])
        jazz = vectorizer.term_index["jazz"]
        assert math.isclose(matrix[0, jazz], 2 * vectorizer.idf[jazz])
        assert matrix[1, jazz] == 0.0

    def test_weights_are_non_negative(self):
        matrix = TfidfVectorizer().fit_transform(["a b c", "b c", "c"])
        assert np.all(matrix >= 0)

    def test_empty_corpus(self):
        vectorizer = TfidfVectorizer()
        matrix = vectorizer.fit_transform([])
        assert matrix.shape == (0, 0)
        assert vectorizer.vocabulary == []

    def test_transform_one_ignores_unknown_terms(self):
        vectorizer = TfidfVectorizer().fit(["jazz music"])
        vector = vectorizer.transform_one("jazz opera")
        assert vector.shape == (2,)
        assert vector[vectorizer.term_index["music"]] == 0.0
        assert vector[vectorizer.term_index["jazz"]] > 0.0


class TestVectorizeSpaces:
    """Tests for vectorizing whole space sets."""

    def test_empty(self):
        assert vectorize_spaces([]) == {}

    def test_one_vector_per_space(self, three_spaces):
        vectors = vectorize_spaces(three_spaces)
        assert set(vectors) == {s.id for s in three_spaces}
        lengths = {len(v) for v in vectors.values()}
        assert len(lengths) == 1

    def test_space_without_terms_is_zero(self):
        spaces = [
            SpaceNode(id="a", name="Jazz", tags=["music"]),
            SpaceNode(id="b", name="The", tags=["of", "and"]),
        ]
        vectors = vectorize_spaces(spaces)
        assert vectors["b"] == [0.0, 0.0]
        assert any(v > 0 for v in vectors["a"])

    def test_deterministic(self, corpus):
        spaces = corpus(12)
        assert vectorize_spaces(spaces) == vectorize_spaces(spaces)
