# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Recomputation pipeline over a SpaceStore.

Stages, in the order callers should run them after a structural change
(space added, tags edited, threshold changed):

    recompute_vectors -> recompute_similarities -> recompute_clusters
    -> recompute_layout

Each stage reads everything it needs first, computes in memory, and then
commits a single batch to the store. A failing read therefore leaves the
store untouched, and a failing write leaves it at its previous state when
the store honours batch semantics. Running a later stage alone is allowed
and works on whatever vectors/edges are currently stored.

Runs are serialized per pipeline instance by a re-entrant lock.

Usage:
    from bubblefield.pipeline import RecomputePipeline
    from bubblefield.store import InMemorySpaceStore

    pipeline = RecomputePipeline(InMemorySpaceStore(spaces))
    summary = pipeline.recompute_all()
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from .community import detect_communities
from .config import (SIMILARITY_THRESHOLD_KEY, PipelineConfig,
                     validate_threshold)
from .layout import LayoutEngine
from .presence import active_user_counts
from .similarity import build_similarity_graph, find_similar
from .store import SpaceStore
from .vectorize import vectorize_spaces

logger = logging.getLogger(__name__)


class PipelineError(RuntimeError):
    """The storage collaborator failed during a pipeline stage."""


class RecomputePipeline:
    """The four recomputation operations plus the space-creation flow."""

    def __init__(
        self,
        store: SpaceStore,
        config: Optional[PipelineConfig] = None,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.config = config or PipelineConfig()
        self.config.validate()
        self.clock = clock
        self.layout_engine = LayoutEngine(self.config.layout)
        self._lock = threading.RLock()

    # -- collaborator access -------------------------------------------------

    def _call(self, action: str, fn: Callable, *args) -> Any:
        try:
            return fn(*args)
        except Exception as e:
            logger.error("Store failed to %s: %s", action, e)
            raise PipelineError(f"failed to {action}: {e}") from e

    # -- configuration -------------------------------------------------------

    def get_similarity_threshold(self) -> float:
        """Stored threshold, or the configured default when none is stored."""
        stored = self._call("read config", self.store.get_config,
                            SIMILARITY_THRESHOLD_KEY)
        if stored is None:
            return self.config.similarity_threshold
        return validate_threshold(stored, SIMILARITY_THRESHOLD_KEY)

    def set_similarity_threshold(self, threshold: float) -> float:
        threshold = validate_threshold(threshold)
        with self._lock:
            self._call("write config", self.store.set_config,
                       SIMILARITY_THRESHOLD_KEY, threshold)
        logger.info("Similarity threshold set to %.3f", threshold)
        return threshold

    # -- stages --------------------------------------------------------------

    def recompute_vectors(self) -> Dict[str, int]:
        """Vectorize every space and store the vectors."""
        with self._lock:
            start = time.time()
            spaces = self._call("list spaces", self.store.list_spaces)
            vectors = vectorize_spaces(spaces)
            if vectors:
                self._call("write vectors", self.store.write_vectors, vectors)
            logger.info("Vectorized %d spaces in %.3fs", len(vectors),
                        time.time() - start)
            return {"count": len(vectors)}

    def recompute_similarities(self, threshold: Optional[float] = None) -> Dict[str, int]:
        """Rebuild the whole similarity edge set.

        Raises:
            ValueError: threshold outside [0, 1]; nothing is read or written.
        """
        if threshold is not None:
            threshold = validate_threshold(threshold)
        with self._lock:
            start = time.time()
            if threshold is None:
                threshold = self.get_similarity_threshold()
            spaces = self._call("list spaces", self.store.list_spaces)
            edges = build_similarity_graph(spaces, threshold)
            self._call("replace similarity edges",
                       self.store.replace_similarity_edges, edges)
            logger.info("Built %d similarity links over %d spaces (threshold %.3f) in %.3fs",
                        len(edges), len(spaces), threshold, time.time() - start)
            return {"link_count": len(edges)}

    def recompute_clusters(self) -> Dict[str, int]:
        """Detect communities and store a cluster id for every space."""
        with self._lock:
            start = time.time()
            spaces = self._call("list spaces", self.store.list_spaces)
            edges = self._call("list similarity edges",
                               self.store.list_similarity_edges)
            result = detect_communities([s.id for s in spaces], edges,
                                        resolution=self.config.resolution,
                                        max_levels=self.config.max_levels)
            if result.assignments:
                self._call("write clusters", self.store.write_clusters,
                           result.assignments)
            logger.info("Found %d clusters (modularity %.4f) in %.3fs",
                        result.cluster_count, result.modularity,
                        time.time() - start)
            return {"cluster_count": result.cluster_count}

    def recompute_layout(self) -> Dict[str, bool]:
        """Lay out every space and store all positions in one batch."""
        with self._lock:
            spaces = self._call("list spaces", self.store.list_spaces)
            edges = self._call("list similarity edges",
                               self.store.list_similarity_edges)
            activity = None
            if self.config.derive_presence:
                records = self._call("list presence records",
                                     self.store.list_presence_records)
                activity = active_user_counts(records, now=self.clock(),
                                              window=self.config.presence_window)
            if not spaces:
                return {"ok": True}

            result = self.layout_engine.layout(spaces, edges, activity)
            self._call("write layout", self.store.write_layout, result.updates)
            return {"ok": True}

    def recompute_all(self, threshold: Optional[float] = None) -> Dict[str, Any]:
        """Run all four stages in order."""
        if threshold is not None:
            threshold = validate_threshold(threshold)
        with self._lock:
            summary: Dict[str, Any] = {}
            summary.update(self.recompute_vectors())
            summary.update(self.recompute_similarities(threshold))
            summary.update(self.recompute_clusters())
            summary.update(self.recompute_layout())
            return summary

    # -- space creation ------------------------------------------------------

    def find_similar_spaces(
        self,
        name: str,
        tags: Sequence[str],
        threshold: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """Existing spaces resembling a prospective one, most similar first."""
        if threshold is None:
            threshold = self.config.similar_space_threshold
        threshold = validate_threshold(threshold)
        spaces = self._call("list spaces", self.store.list_spaces)
        return [
            {"space_id": space_id, "name": space_name, "similarity": score}
            for space_id, space_name, score in find_similar(name, tags, spaces, threshold)
        ]

    def create_space_and_recluster(
        self,
        name: str,
        tags: Sequence[str],
        color: str = ""
    ) -> Any:
        """
        Create a space and rerun the full pipeline.

        A space whose trimmed, case-folded name matches an existing one is
        not created again; the existing id is returned and nothing is
        recomputed.
        """
        normalized = name.strip().casefold()
        with self._lock:
            spaces = self._call("list spaces", self.store.list_spaces)
            for space in spaces:
                if space.name.strip().casefold() == normalized:
                    logger.info("Space %r already exists as %s", name, space.id)
                    return space.id

            space_id = self._call("create space", self.store.create_space,
                                  name, list(tags), color)
            self.recompute_all()
            return space_id
