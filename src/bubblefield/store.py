# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Storage collaborator for the recomputation pipeline.

The pipeline never owns persistence; it reads whole collections from a
SpaceStore and hands back one batch per stage. Implementations must apply
each batch all-or-nothing from the caller's point of view.

Backends:
- InMemorySpaceStore: dictionaries, copy-on-write batches
- JsonLinesSpaceStore: the in-memory store snapshotted to a JSON Lines file

Usage:
    from bubblefield.store import JsonLinesSpaceStore

    store = JsonLinesSpaceStore("spaces.jsonl")
    spaces = store.list_spaces()
"""

import copy
import logging
import os
import tempfile
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .io import ConfigEntry, read_records, write_records
from .models import (LayoutUpdate, PresenceRecord, SimilarityEdge, SpaceId,
                     SpaceNode)

logger = logging.getLogger(__name__)


class SpaceStore(ABC):
    """Abstract base class for space storage."""

    @abstractmethod
    def list_spaces(self) -> List[SpaceNode]:
        """All spaces in a stable order."""
        pass

    @abstractmethod
    def list_similarity_edges(self) -> List[SimilarityEdge]:
        pass

    @abstractmethod
    def list_presence_records(self) -> List[PresenceRecord]:
        pass

    @abstractmethod
    def get_config(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set_config(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def write_vectors(self, vectors: Dict[SpaceId, List[float]]) -> None:
        """Replace feature vectors of the given spaces in one batch."""
        pass

    @abstractmethod
    def replace_similarity_edges(self, edges: Sequence[SimilarityEdge]) -> None:
        """Drop every stored edge and store ``edges`` instead."""
        pass

    @abstractmethod
    def write_clusters(self, assignments: Dict[SpaceId, int]) -> None:
        pass

    @abstractmethod
    def write_layout(self, updates: Sequence[LayoutUpdate]) -> None:
        """Store position and cluster id of every update in one batch."""
        pass

    @abstractmethod
    def create_space(self, name: str, tags: Sequence[str], color: str = "") -> SpaceId:
        pass


class InMemorySpaceStore(SpaceStore):
    """
    Dictionary-backed store.

    Reads return copies. Every write builds the new state aside and swaps
    it in, so a rejected batch leaves nothing behind.
    """

    def __init__(
        self,
        spaces: Iterable[SpaceNode] = (),
        edges: Iterable[SimilarityEdge] = (),
        presence: Iterable[PresenceRecord] = (),
        config: Optional[Dict[str, Any]] = None
    ):
        self._spaces: Dict[SpaceId, SpaceNode] = {s.id: copy.deepcopy(s) for s in spaces}
        self._edges: List[SimilarityEdge] = list(edges)
        self._presence: List[PresenceRecord] = list(presence)
        self._config: Dict[str, Any] = dict(config or {})

    # -- reads ---------------------------------------------------------------

    def list_spaces(self) -> List[SpaceNode]:
        return [copy.deepcopy(s) for s in self._spaces.values()]

    def list_similarity_edges(self) -> List[SimilarityEdge]:
        return list(self._edges)

    def list_presence_records(self) -> List[PresenceRecord]:
        return list(self._presence)

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def count(self) -> int:
        return len(self._spaces)

    # -- batched writes ------------------------------------------------------

    def _updated_spaces(self, ids: Iterable[SpaceId]) -> Dict[SpaceId, SpaceNode]:
        """Copy of the space table; raises KeyError for unknown ids."""
        missing = [space_id for space_id in ids if space_id not in self._spaces]
        if missing:
            raise KeyError(f"unknown space ids: {missing!r}")
        return {space_id: copy.copy(s) for space_id, s in self._spaces.items()}

    def _commit(self, spaces=None, edges=None, presence=None, config=None) -> None:
        previous = (self._spaces, self._edges, self._presence, self._config)
        if spaces is not None:
            self._spaces = spaces
        if edges is not None:
            self._edges = edges
        if presence is not None:
            self._presence = presence
        if config is not None:
            self._config = config
        try:
            self._persist()
        except Exception:
            self._spaces, self._edges, self._presence, self._config = previous
            raise

    def _persist(self) -> None:
        """Hook for durable backends, called after each swap."""

    def set_config(self, key: str, value: Any) -> None:
        config = dict(self._config)
        config[key] = value
        self._commit(config=config)

    def write_vectors(self, vectors: Dict[SpaceId, List[float]]) -> None:
        spaces = self._updated_spaces(vectors)
        for space_id, vector in vectors.items():
            spaces[space_id].feature_vector = [float(v) for v in vector]
        self._commit(spaces=spaces)

    def replace_similarity_edges(self, edges: Sequence[SimilarityEdge]) -> None:
        self._commit(edges=list(edges))

    def write_clusters(self, assignments: Dict[SpaceId, int]) -> None:
        spaces = self._updated_spaces(assignments)
        for space_id, cluster_id in assignments.items():
            spaces[space_id].cluster_id = int(cluster_id)
        self._commit(spaces=spaces)

    def write_layout(self, updates: Sequence[LayoutUpdate]) -> None:
        spaces = self._updated_spaces(u.space_id for u in updates)
        for update in updates:
            space = spaces[update.space_id]
            space.position = copy.copy(update.position)
            space.cluster_id = update.cluster_id
        self._commit(spaces=spaces)

    def create_space(self, name: str, tags: Sequence[str], color: str = "") -> SpaceId:
        space = SpaceNode(id=uuid.uuid4().hex, name=name, tags=list(tags), color=color)
        spaces = dict(self._spaces)
        spaces[space.id] = space
        self._commit(spaces=spaces)
        logger.debug("Created space %s (%s)", space.id, name)
        return space.id

    def record_presence(
        self,
        space_id: SpaceId,
        user_id: str,
        now: Optional[float] = None
    ) -> None:
        """Upsert the heartbeat of ``user_id`` in ``space_id``."""
        if space_id not in self._spaces:
            raise KeyError(f"unknown space id: {space_id!r}")
        now = time.time() if now is None else now
        presence = [p for p in self._presence
                    if not (p.space_id == space_id and p.user_id == user_id)]
        presence.append(PresenceRecord(space_id=space_id, last_seen=now,
                                       user_id=user_id))
        self._commit(presence=presence)


class JsonLinesSpaceStore(InMemorySpaceStore):
    """
    In-memory store persisted as a JSON Lines snapshot.

    Each batch rewrites the whole file through a temporary file and
    ``os.replace``, so readers see either the old or the new snapshot.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        spaces, edges, presence, config = [], [], [], {}
        with open(self.path, 'r', encoding='utf-8') as f:
            for record in read_records(f):
                if isinstance(record, SpaceNode):
                    spaces.append(record)
                elif isinstance(record, SimilarityEdge):
                    edges.append(record)
                elif isinstance(record, PresenceRecord):
                    presence.append(record)
                elif isinstance(record, ConfigEntry):
                    config[record.key] = record.value
                else:
                    logger.debug("Ignoring %s record in %s",
                                 type(record).__name__, self.path)
        self._spaces = {s.id: s for s in spaces}
        self._edges = edges
        self._presence = presence
        self._config = config
        logger.debug("Loaded %d spaces, %d edges from %s",
                     len(spaces), len(edges), self.path)

    def _persist(self) -> None:
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=self.path.name,
                                        suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                write_records([ConfigEntry(k, v) for k, v in self._config.items()], f)
                write_records(self._spaces.values(), f)
                write_records(self._edges, f)
                write_records(self._presence, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
