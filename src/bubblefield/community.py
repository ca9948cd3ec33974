# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Louvain community detection over the similarity graph.

"""
Modularity-based partitioning of the similarity graph (Louvain method).

The algorithm alternates two phases:
1. Local moving: each node joins the neighbouring community with the best
   modularity gain, until a full sweep moves nothing.
2. Aggregation: communities collapse into super-nodes (A' = P^T A P) and
   phase 1 runs again on the coarser graph.

Results are deterministic. Nodes are swept in input order, candidate
communities are tried in ascending id, a node only leaves its community
for a strictly better gain, and equal gains go to the lowest id. Final ids
are numbered 0..k-1 in order of first appearance over the input nodes.

The resolution parameter scales the null-model term: values above 1.0
yield more, smaller communities; values below 1.0 yield fewer, larger ones.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy import sparse

from .config import DEFAULT_RESOLUTION
from .models import Community, SimilarityEdge

logger = logging.getLogger(__name__)

# Gains closer than this are ties
GAIN_TOLERANCE = 1e-12
MAX_SWEEPS = 1000


@dataclass
class DetectionResult:
    """Output of community detection."""
    assignments: Dict[object, int] = field(default_factory=dict)
    communities: List[Community] = field(default_factory=list)
    modularity: float = 0.0
    levels: int = 0

    @property
    def cluster_count(self) -> int:
        return len(self.communities)


def build_adjacency(
    node_ids: Sequence[object],
    edges: Sequence[SimilarityEdge]
) -> sparse.csr_matrix:
    """
    Symmetric weighted adjacency matrix indexed like ``node_ids``.

    Edges with unknown endpoints or non-positive weight are dropped;
    duplicate pairs keep their highest weight.
    """
    index = {node_id: i for i, node_id in enumerate(node_ids)}
    weights: Dict[Tuple[int, int], float] = {}

    for edge in edges:
        i = index.get(edge.space_a)
        j = index.get(edge.space_b)
        if i is None or j is None or i == j or edge.weight <= 0:
            continue
        key = (min(i, j), max(i, j))
        if key in weights:
            logger.debug("Duplicate edge %r-%r", edge.space_a, edge.space_b)
        weights[key] = max(weights.get(key, 0.0), float(edge.weight))

    n = len(node_ids)
    if not weights:
        return sparse.csr_matrix((n, n), dtype=np.float64)

    rows, cols, data = [], [], []
    for (i, j), w in weights.items():
        rows += [i, j]
        cols += [j, i]
        data += [w, w]
    return sparse.csr_matrix((data, (rows, cols)), shape=(n, n),
                             dtype=np.float64)


def modularity(
    adjacency: sparse.spmatrix,
    labels: Sequence[int],
    resolution: float = DEFAULT_RESOLUTION
) -> float:
    """
    Newman modularity with resolution:

        Q = in / 2m - resolution * sum_c (tot_c / 2m)^2
    """
    adjacency = sparse.coo_matrix(adjacency)
    labels = np.asarray(labels, dtype=np.int64)
    degrees = np.asarray(adjacency.sum(axis=1)).ravel()
    two_m = degrees.sum()
    if two_m == 0 or labels.size == 0:
        return 0.0

    same = labels[adjacency.row] == labels[adjacency.col]
    internal = adjacency.data[same].sum()
    totals = np.bincount(labels, weights=degrees)
    return float(internal / two_m - resolution * np.sum(totals ** 2) / two_m ** 2)


def _renumber(labels: np.ndarray) -> np.ndarray:
    """Relabel to 0..k-1 in order of first appearance."""
    mapping: Dict[int, int] = {}
    out = np.empty_like(labels)
    for i, label in enumerate(labels):
        label = int(label)
        if label not in mapping:
            mapping[label] = len(mapping)
        out[i] = mapping[label]
    return out


def _local_moving(
    graph: sparse.csr_matrix,
    resolution: float
) -> Tuple[np.ndarray, bool]:
    """Phase 1 on ``graph``. Returns (labels, whether anything moved)."""
    n = graph.shape[0]
    degrees = np.asarray(graph.sum(axis=1)).ravel()
    two_m = degrees.sum()
    labels = np.arange(n)
    totals = degrees.copy()
    indptr, indices, data = graph.indptr, graph.indices, graph.data

    moved_any = False
    for _ in range(MAX_SWEEPS):
        moved = False
        for i in range(n):
            k_i = degrees[i]
            current = labels[i]

            links: Dict[int, float] = {}
            for ptr in range(indptr[i], indptr[i + 1]):
                j = indices[ptr]
                if j == i:
                    continue
                c = int(labels[j])
                links[c] = links.get(c, 0.0) + data[ptr]

            totals[current] -= k_i
            best = current
            best_gain = (links.get(current, 0.0)
                         - resolution * totals[current] * k_i / two_m)

            for c in sorted(links):
                if c == current:
                    continue
                gain = links[c] - resolution * totals[c] * k_i / two_m
                if gain > best_gain + GAIN_TOLERANCE:
                    best, best_gain = c, gain

            totals[best] += k_i
            if best != current:
                labels[i] = best
                moved = True
                moved_any = True

        if not moved:
            break

    return labels, moved_any


def detect_communities(
    node_ids: Sequence[object],
    edges: Sequence[SimilarityEdge],
    resolution: float = DEFAULT_RESOLUTION,
    max_levels: int = 10
) -> DetectionResult:
    """
    Partition the similarity graph.

    Args:
        node_ids: Every space id; isolated ones become singleton communities.
        edges: Weighted similarity edges.
        resolution: Community granularity (> 0).
        max_levels: Cap on local-moving/aggregation rounds.

    Returns:
        DetectionResult covering every node exactly once.
    """
    if resolution <= 0:
        raise ValueError(f"resolution must be positive, got {resolution}")

    node_ids = list(node_ids)
    n = len(node_ids)
    if n == 0:
        return DetectionResult()

    adjacency = build_adjacency(node_ids, edges)
    membership = np.arange(n)
    graph = adjacency
    levels = 0

    if graph.nnz > 0:
        for _ in range(max_levels):
            labels, moved = _local_moving(graph, resolution)
            if not moved:
                break
            labels = _renumber(labels)
            membership = labels[membership]
            levels += 1

            count = int(labels.max()) + 1
            if count == graph.shape[0]:
                break
            projection = sparse.csr_matrix(
                (np.ones(len(labels)), (np.arange(len(labels)), labels)),
                shape=(len(labels), count),
            )
            graph = (projection.T @ graph @ projection).tocsr()

    membership = _renumber(membership)
    assignments = {node_ids[i]: int(membership[i]) for i in range(n)}

    communities = [Community(id=c) for c in range(int(membership.max()) + 1)]
    for node_id, c in assignments.items():
        communities[c].members.add(node_id)

    score = modularity(adjacency, membership, resolution)
    logger.debug("Louvain: %d communities (largest %d) after %d levels, Q=%.4f",
                 len(communities), max(c.size for c in communities), levels, score)
    return DetectionResult(assignments=assignments, communities=communities,
                           modularity=score, levels=levels)
