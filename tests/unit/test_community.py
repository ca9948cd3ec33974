# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""Tests for Louvain community detection."""

import numpy as np
import pytest

from bubblefield.community import build_adjacency, detect_communities, modularity
from bubblefield.models import SimilarityEdge


def two_cliques(bridge=0.1):
    """Two 4-cliques joined by one weak edge."""
    edges = []
    for group in ([0, 1, 2, 3], [4, 5, 6, 7]):
        for a in group:
            for b in group:
                if a < b:
                    edges.append(SimilarityEdge(f"n{a}", f"n{b}", 1.0))
    edges.append(SimilarityEdge("n3", "n4", bridge))
    return [f"n{i}" for i in range(8)], edges


class TestBuildAdjacency:
    """Tests for the sparse adjacency matrix."""

    def test_symmetric(self):
        ids, edges = two_cliques()
        adjacency = build_adjacency(ids, edges).toarray()
        assert np.array_equal(adjacency, adjacency.T)
        assert adjacency[3, 4] == pytest.approx(0.1)
        assert np.all(np.diag(adjacency) == 0.0)

    def test_ignores_unknown_endpoints_and_non_positive_weights(self):
        edges = [
            SimilarityEdge("a", "ghost", 0.9),
            SimilarityEdge("a", "b", 0.0),
            SimilarityEdge("b", "c", 0.5),
        ]
        adjacency = build_adjacency(["a", "b", "c"], edges)
        assert adjacency.nnz == 2
        assert adjacency[1, 2] == pytest.approx(0.5)

    def test_duplicate_pairs_keep_highest_weight(self):
        edges = [SimilarityEdge("a", "b", 0.4), SimilarityEdge("b", "a", 0.7)]
        adjacency = build_adjacency(["a", "b"], edges)
        assert adjacency[0, 1] == pytest.approx(0.7)
        assert adjacency[1, 0] == pytest.approx(0.7)


class TestModularity:
    """Tests for the modularity score."""

    def test_empty_graph(self):
        assert modularity(build_adjacency(["a", "b"], []), [0, 1]) == 0.0

    def test_clique_split_beats_trivial_partitions(self):
        ids, edges = two_cliques()
        adjacency = build_adjacency(ids, edges)
        split = modularity(adjacency, [0, 0, 0, 0, 1, 1, 1, 1])
        assert split > modularity(adjacency, [0] * 8)
        assert split > modularity(adjacency, list(range(8)))

    def test_single_community_is_zero(self):
        ids, edges = two_cliques()
        assert modularity(build_adjacency(ids, edges), [0] * 8) == pytest.approx(0.0)


class TestDetectCommunities:
    """Tests for the full Louvain run."""

    def test_empty(self):
        result = detect_communities([], [])
        assert result.assignments == {}
        assert result.cluster_count == 0

    def test_single_node(self):
        result = detect_communities(["solo"], [])
        assert result.assignments == {"solo": 0}
        assert result.cluster_count == 1

    def test_three_spaces(self):
        edges = [SimilarityEdge("jazz-lovers", "jazz-fans", 0.75)]
        result = detect_communities(["jazz-lovers", "jazz-fans", "hiking"], edges)
        assert result.assignments["jazz-lovers"] == result.assignments["jazz-fans"]
        assert result.assignments["hiking"] != result.assignments["jazz-lovers"]
        assert result.cluster_count == 2

    def test_two_cliques(self):
        ids, edges = two_cliques()
        result = detect_communities(ids, edges)
        assert result.cluster_count == 2
        first = {result.assignments[f"n{i}"] for i in range(4)}
        second = {result.assignments[f"n{i}"] for i in range(4, 8)}
        assert first == {0}
        assert second == {1}
        assert [c.size for c in result.communities] == [4, 4]
        assert result.modularity > 0.3

    def test_isolated_nodes_are_singletons(self):
        edges = [SimilarityEdge("a", "b", 0.9)]
        result = detect_communities(["a", "b", "c", "d"], edges)
        assert result.assignments["a"] == result.assignments["b"]
        assert len({result.assignments["c"], result.assignments["d"],
                    result.assignments["a"]}) == 3

    def test_ids_are_dense_and_cover_every_node(self):
        ids, edges = two_cliques()
        ids = ids + ["x", "y"]
        result = detect_communities(ids, edges)
        assert set(result.assignments) == set(ids)
        assert set(result.assignments.values()) == set(range(result.cluster_count))
        members = [m for c in result.communities for m in c.members]
        assert sorted(members) == sorted(ids)

    def test_ids_numbered_by_first_appearance(self):
        ids, edges = two_cliques()
        result = detect_communities(ids[::-1], edges)
        assert result.assignments["n7"] == 0
        assert result.assignments["n0"] == 1

    def test_deterministic(self):
        ids, edges = two_cliques()
        first = detect_communities(ids, edges)
        second = detect_communities(ids, edges)
        assert first.assignments == second.assignments
        assert first.modularity == second.modularity

    def test_edge_order_does_not_matter(self):
        ids, edges = two_cliques()
        forward = detect_communities(ids, edges)
        backward = detect_communities(ids, list(reversed(edges)))
        assert forward.assignments == backward.assignments

    def test_beats_singleton_partition(self):
        ids, edges = two_cliques(bridge=0.6)
        result = detect_communities(ids, edges)
        adjacency = build_adjacency(ids, edges)
        assert result.modularity >= modularity(adjacency, list(range(len(ids))))

    def test_high_resolution_splits_more(self):
        ids, edges = two_cliques()
        coarse = detect_communities(ids, edges, resolution=1.0)
        fine = detect_communities(ids, edges, resolution=10.0)
        assert fine.cluster_count >= coarse.cluster_count
        assert fine.cluster_count == len(ids)

    @pytest.mark.parametrize("resolution", [0.0, -1.0])
    def test_invalid_resolution(self, resolution):
        with pytest.raises(ValueError):
            detect_communities(["a"], [], resolution=resolution)
