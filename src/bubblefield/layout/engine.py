# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Layout engine: seeding, simulation and collision resolution.

"""
Bubble layout for the space canvas.

Phases, in order:
1. Cluster placement on a ring around the origin.
2. Member seeding on a circle around each cluster center.
3. Force simulation (see :mod:`bubblefield.layout.forces`).
4. Hard collision resolution (see :mod:`bubblefield.layout.collision`).

The engine is deterministic: the same spaces, edges and activity counts
always give the same positions.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..community import build_adjacency
from ..config import LayoutConfig
from ..models import LayoutUpdate, Position, SimilarityEdge, SpaceNode
from ..presence import bubble_radius
from .bodies import BodyArray, PhysicsBody
from .collision import max_overlap, resolve_collisions
from .forces import simulate
from .seeding import cluster_centers, seed_bodies

logger = logging.getLogger(__name__)


@dataclass
class LayoutResult:
    """Final placement plus diagnostics of the collision pass.

    ``bodies`` holds the final simulation state, one body per update.
    """
    updates: List[LayoutUpdate] = field(default_factory=list)
    collision_passes: int = 0
    residual_overlap: float = 0.0
    bodies: List[PhysicsBody] = field(default_factory=list)

    def positions(self) -> Dict[object, Tuple[float, float]]:
        return {u.space_id: (u.position.x, u.position.y) for u in self.updates}


class LayoutEngine:
    """
    Computes positions for every space.

    Usage:
        engine = LayoutEngine()
        result = engine.layout(spaces, edges, activity={"s1": 3})
        for update in result.updates:
            ...
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self.config.validate()

    def radius_for(self, active_user_count: int) -> float:
        return bubble_radius(active_user_count, self.config.base_radius,
                             self.config.radius_scale)

    def build_bodies(
        self,
        spaces: Sequence[SpaceNode],
        activity: Optional[Dict[object, int]] = None
    ) -> BodyArray:
        """Phases 1 and 2: bodies with radii, targets and seeded positions.

        Spaces without a cluster id are placed in cluster 0.
        """
        if activity is None:
            counts = [space.active_user_count for space in spaces]
        else:
            counts = [activity.get(space.id, 0) for space in spaces]
        radii = [self.radius_for(count) for count in counts]
        clusters = [space.cluster_id if space.cluster_id is not None else 0
                    for space in spaces]

        bodies = BodyArray.create([space.id for space in spaces], radii, clusters)
        centers = cluster_centers(clusters, self.config.cluster_ring_radius)
        seed_bodies(bodies, centers, self.config)
        return bodies

    def layout(
        self,
        spaces: Sequence[SpaceNode],
        edges: Sequence[SimilarityEdge] = (),
        activity: Optional[Dict[object, int]] = None
    ) -> LayoutResult:
        """
        Lay out all spaces.

        Args:
            spaces: Spaces with their cluster ids.
            edges: Similarity edges; edges to unknown spaces are ignored.
            activity: Active user count per space id. When omitted, each
                      space's own ``active_user_count`` is used.

        Returns:
            LayoutResult with one update per space, in input order.

        Raises:
            FloatingPointError: the simulation produced a non-finite position.
        """
        if not spaces:
            return LayoutResult()

        bodies = self.build_bodies(spaces, activity)

        # A lone body has no pairs to act on it
        if len(bodies) > 1:
            weights = build_adjacency(bodies.ids, edges).toarray()
            simulate(bodies, weights, self.config)

        if not bodies.is_finite():
            raise FloatingPointError("layout simulation produced non-finite positions")

        passes = resolve_collisions(bodies, self.config.separation_padding,
                                    self.config.collision_passes)
        residual = max_overlap(bodies, self.config.separation_padding)
        # Dense all-similar clusters of 20+ spaces can hit the pass cap
        if residual > 1e-3:
            logger.warning("Residual overlap %.2f after %d collision passes",
                           residual, passes)

        updates = [
            LayoutUpdate(
                space_id=body_id,
                position=Position(float(bodies.positions[i, 0]),
                                  float(bodies.positions[i, 1])),
                cluster_id=int(bodies.clusters[i]),
            )
            for i, body_id in enumerate(bodies.ids)
        ]
        logger.info("Laid out %d spaces in %d clusters (%d collision passes)",
                    len(updates), len(set(bodies.clusters.tolist())), passes)
        return LayoutResult(updates=updates, collision_passes=passes,
                            residual_overlap=residual,
                            bodies=[bodies.body(i) for i in range(len(bodies))])
