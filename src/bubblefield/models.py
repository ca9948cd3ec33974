# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Data model shared by every pipeline stage.

"""
Records exchanged between the recomputation pipeline and its storage
collaborator.

Every record has ``to_dict``/``from_dict`` so it can travel through the
JSON Lines codec in :mod:`bubblefield.io`.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Set

SpaceId = Hashable


@dataclass
class Position:
    """A point on the canvas."""
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> 'Position':
        d = d or {}
        return cls(x=float(d.get("x", 0.0)), y=float(d.get("y", 0.0)))


@dataclass
class SpaceNode:
    """A topic space. ``feature_vector`` and ``cluster_id`` are pipeline-owned."""
    id: SpaceId
    name: str
    tags: List[str] = field(default_factory=list)
    feature_vector: List[float] = field(default_factory=list)
    cluster_id: Optional[int] = None
    position: Position = field(default_factory=Position)
    active_user_count: int = 0
    color: str = ""

    def document(self) -> str:
        """Text the vectorizer sees: the name followed by the tags."""
        return " ".join([self.name] + list(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "space",
            "id": self.id,
            "name": self.name,
            "tags": list(self.tags),
            "feature_vector": list(self.feature_vector),
            "cluster_id": self.cluster_id,
            "position": self.position.to_dict(),
            "active_user_count": self.active_user_count,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SpaceNode':
        cluster_id = d.get("cluster_id")
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            tags=list(d.get("tags", [])),
            feature_vector=[float(v) for v in d.get("feature_vector", [])],
            cluster_id=int(cluster_id) if cluster_id is not None else None,
            position=Position.from_dict(d.get("position")),
            active_user_count=max(0, int(d.get("active_user_count", 0))),
            color=d.get("color", ""),
        )


@dataclass
class SimilarityEdge:
    """Undirected weighted link between two distinct spaces."""
    space_a: SpaceId
    space_b: SpaceId
    weight: float

    def __post_init__(self):
        if self.space_a == self.space_b:
            raise ValueError(f"self edge on space {self.space_a!r}")

    def key(self) -> frozenset:
        """Order-independent identity of the pair."""
        return frozenset((self.space_a, self.space_b))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "edge",
            "space_a": self.space_a,
            "space_b": self.space_b,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SimilarityEdge':
        return cls(space_a=d["space_a"], space_b=d["space_b"],
                   weight=float(d["weight"]))


@dataclass
class Community:
    """A cluster of spaces produced by community detection."""
    id: int
    members: Set[SpaceId] = field(default_factory=set)

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass
class PresenceRecord:
    """Heartbeat of one user in one space. ``last_seen`` is epoch seconds."""
    space_id: SpaceId
    last_seen: float
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "presence",
            "space_id": self.space_id,
            "last_seen": self.last_seen,
            "user_id": self.user_id,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'PresenceRecord':
        return cls(space_id=d["space_id"], last_seen=float(d["last_seen"]),
                   user_id=d.get("user_id"))


@dataclass
class LayoutUpdate:
    """Final placement of one space, as handed to the update sink."""
    space_id: SpaceId
    position: Position
    cluster_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "layout",
            "space_id": self.space_id,
            "position": self.position.to_dict(),
            "cluster_id": self.cluster_id,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'LayoutUpdate':
        return cls(space_id=d["space_id"],
                   position=Position.from_dict(d.get("position")),
                   cluster_id=int(d.get("cluster_id", 0)))
