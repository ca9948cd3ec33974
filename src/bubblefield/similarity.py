# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Cosine similarity graph between spaces.

"""
Similarity graph construction.

Every unordered pair of spaces is compared, so the cost is O(n^2 * d).
That is fine for the tens to low hundreds of spaces a canvas holds and is
a known scaling limit rather than something to optimize here.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import DEFAULT_SIMILARITY_THRESHOLD, DEFAULT_SIMILAR_SPACE_THRESHOLD
from .config import validate_threshold
from .models import SimilarityEdge, SpaceNode
from .vectorize import TfidfVectorizer

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors.

    Returns 0.0 for empty vectors, mismatched lengths and zero norms.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.size == 0 or a.shape != b.shape:
        return 0.0
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def similarity_matrix(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """Pairwise cosine similarities; the diagonal is left at 0.

    Vectors are compared only with vectors of the same length; pairs of
    different lengths score 0, matching :func:`cosine_similarity`.
    """
    n = len(vectors)
    sims = np.zeros((n, n), dtype=np.float64)
    if n < 2:
        return sims

    groups: Dict[int, List[int]] = {}
    for i, vec in enumerate(vectors):
        groups.setdefault(len(vec), []).append(i)
    if len(groups) > 1:
        logger.debug("Vectors of %d different lengths; only equal lengths are compared",
                     len(groups))

    for dim, indices in groups.items():
        if dim == 0 or len(indices) < 2:
            continue
        sims[np.ix_(indices, indices)] = _cosine_block(
            np.asarray([vectors[i] for i in indices], dtype=np.float64))

    np.fill_diagonal(sims, 0.0)
    return sims


def _cosine_block(matrix: np.ndarray) -> np.ndarray:
    """Symmetric cosine matrix of equal-length rows; zero rows score 0."""
    norms = np.linalg.norm(matrix, axis=1)
    safe = np.where(norms == 0, 1.0, norms)
    normalized = matrix / safe[:, np.newaxis]
    block = normalized @ normalized.T
    block = (block + block.T) / 2.0
    block[norms == 0, :] = 0.0
    block[:, norms == 0] = 0.0
    return np.clip(block, -1.0, 1.0)


def build_similarity_graph(
    spaces: Sequence[SpaceNode],
    threshold: Optional[float] = None
) -> List[SimilarityEdge]:
    """
    Build the full similarity edge set.

    Args:
        spaces: Spaces carrying feature vectors.
        threshold: Minimum similarity for an edge (inclusive). Defaults to
                   DEFAULT_SIMILARITY_THRESHOLD.

    Returns:
        A fresh edge list replacing any previous one.

    Raises:
        ValueError: threshold outside [0, 1]. Raised before any work.
    """
    if threshold is None:
        threshold = DEFAULT_SIMILARITY_THRESHOLD
    threshold = validate_threshold(threshold)

    n = len(spaces)
    if n < 2:
        return []

    sims = similarity_matrix([space.feature_vector for space in spaces])

    edges: List[SimilarityEdge] = []
    for i in range(n):
        for j in range(i + 1, n):
            weight = float(sims[i, j])
            if weight >= threshold:
                edges.append(SimilarityEdge(
                    space_a=spaces[i].id,
                    space_b=spaces[j].id,
                    weight=min(1.0, max(0.0, weight)),
                ))

    logger.debug("%d edges from %d pairs at threshold %.3f",
                 len(edges), n * (n - 1) // 2, threshold)
    return edges


def find_similar(
    name: str,
    tags: Sequence[str],
    spaces: Sequence[SpaceNode],
    threshold: Optional[float] = None
) -> List[Tuple[object, str, float]]:
    """
    Find existing spaces resembling a candidate that is not stored yet.

    TF-IDF is refit over the existing spaces plus the candidate, so the
    candidate's terms take part in the idf weighting.

    Returns:
        (space_id, name, similarity) tuples with similarity >= threshold,
        most similar first.
    """
    if threshold is None:
        threshold = DEFAULT_SIMILAR_SPACE_THRESHOLD
    threshold = validate_threshold(threshold)

    if not spaces:
        return []

    candidate = " ".join([name] + list(tags))
    documents = [space.document() for space in spaces] + [candidate]
    matrix = TfidfVectorizer().fit_transform(documents)
    candidate_vector = matrix[-1]

    matches = []
    for i, space in enumerate(spaces):
        score = cosine_similarity(candidate_vector, matrix[i])
        if score >= threshold:
            matches.append((space.id, space.name, score))

    matches.sort(key=lambda m: m[2], reverse=True)
    return matches
