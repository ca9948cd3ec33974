# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# TF-IDF feature vectors for spaces.

"""
TF-IDF vectorization of space metadata.

Each space becomes one document (its name followed by its tags). Weights are

    tf(t, d)  = number of occurrences of t in d
    idf(t)    = 1 + ln(N / (1 + df(t)))

which stays positive for any N >= 1, so all vectors are non-negative and
cosine similarities fall in [0, 1].

The vocabulary is ordered by first occurrence across the corpus, never by
hash order, so identical input always yields identical vectors.
"""

import logging
import math
import re
from collections import Counter
from typing import Dict, Iterable, List, Sequence

import numpy as np

from .models import SpaceNode

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[^\w]+", re.UNICODE)

STOPWORDS = frozenset("""
a about above after again against all am an and any are as at be because been
before being below between both but by can could did do does doing down during
each few for from further had has have having he her here hers herself him
himself his how i if in into is it its itself just me more most my myself no
nor not now of off on once only or other our ours ourselves out over own same
she should so some such than that the their theirs them themselves then there
these they this those through to too under until up very was we were what when
where which while who whom why will with would you your yours yourself
yourselves
""".split())


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens with stopwords removed."""
    return [
        token for token in _TOKEN_SPLIT.split(text.lower())
        if token and token not in STOPWORDS
    ]


class TfidfVectorizer:
    """
    Corpus-level TF-IDF model.

    Usage:
        vectorizer = TfidfVectorizer()
        matrix = vectorizer.fit_transform(["jazz music", "rock music"])
        vectorizer.vocabulary   # ['jazz', 'music', 'rock']
    """

    def __init__(self):
        self.vocabulary: List[str] = []
        self.term_index: Dict[str, int] = {}
        self.idf = np.zeros(0)
        self.n_documents = 0

    def fit(self, documents: Sequence[str]) -> 'TfidfVectorizer':
        self.vocabulary = []
        self.term_index = {}
        self.n_documents = len(documents)
        doc_freq: Counter = Counter()

        for doc in documents:
            terms = tokenize(doc)
            for term in terms:
                if term not in self.term_index:
                    self.term_index[term] = len(self.vocabulary)
                    self.vocabulary.append(term)
            doc_freq.update(set(terms))

        self.idf = np.array(
            [1.0 + math.log(self.n_documents / (1.0 + doc_freq[t]))
             for t in self.vocabulary],
            dtype=np.float64,
        )
        return self

    def transform_one(self, document: str) -> np.ndarray:
        """Vector for one document over the fitted vocabulary.

        Terms outside the vocabulary are ignored.
        """
        vector = np.zeros(len(self.vocabulary), dtype=np.float64)
        for term, count in Counter(tokenize(document)).items():
            idx = self.term_index.get(term)
            if idx is not None:
                vector[idx] = count * self.idf[idx]
        return vector

    def transform(self, documents: Iterable[str]) -> np.ndarray:
        rows = [self.transform_one(doc) for doc in documents]
        if not rows:
            return np.zeros((0, len(self.vocabulary)), dtype=np.float64)
        return np.vstack(rows)

    def fit_transform(self, documents: Sequence[str]) -> np.ndarray:
        return self.fit(documents).transform(documents)


def vectorize_spaces(spaces: Sequence[SpaceNode]) -> Dict[object, List[float]]:
    """
    Compute a feature vector for every space.

    Args:
        spaces: Spaces in a stable order; the order fixes the vocabulary.

    Returns:
        Mapping of space id to its TF-IDF vector. Empty for an empty corpus.
    """
    if not spaces:
        return {}

    vectorizer = TfidfVectorizer()
    matrix = vectorizer.fit_transform([space.document() for space in spaces])
    logger.debug("Vocabulary of %d terms over %d spaces",
                 len(vectorizer.vocabulary), len(spaces))

    return {space.id: matrix[i].tolist() for i, space in enumerate(spaces)}
