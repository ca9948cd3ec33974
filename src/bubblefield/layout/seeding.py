# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Initial placement: cluster ring and per-cluster circles.

"""
Circular seeding for the layout.

Cluster centers sit evenly on one ring around the origin; the members of
each cluster then sit evenly on a smaller circle around their center.
"""

import math
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from ..config import LayoutConfig
from .bodies import BodyArray


def cluster_centers(
    cluster_ids: Sequence[int],
    ring_radius: float
) -> Dict[int, Tuple[float, float]]:
    """Distinct cluster ids, ascending, evenly spaced on a ring."""
    distinct = sorted(set(int(c) for c in cluster_ids))
    count = len(distinct)
    centers: Dict[int, Tuple[float, float]] = {}
    for k, cluster_id in enumerate(distinct):
        angle = 2 * math.pi * k / count
        centers[cluster_id] = (ring_radius * math.cos(angle),
                               ring_radius * math.sin(angle))
    return centers


def member_circle_radius(
    avg_radius: float,
    member_count: int,
    config: LayoutConfig
) -> float:
    """clamp(min, max, avg_radius * factor + member_count * spacing)"""
    raw = avg_radius * config.seed_radius_factor + member_count * config.seed_member_spacing
    return min(config.seed_max_radius, max(config.seed_min_radius, raw))


def seed_bodies(
    bodies: BodyArray,
    centers: Dict[int, Tuple[float, float]],
    config: LayoutConfig
) -> None:
    """Set targets to cluster centers and place members on their circles."""
    members: Dict[int, List[int]] = defaultdict(list)
    for i, cluster_id in enumerate(bodies.clusters):
        members[int(cluster_id)].append(i)

    for cluster_id, indices in members.items():
        cx, cy = centers[cluster_id]
        count = len(indices)
        avg_radius = float(bodies.radii[indices].mean())
        radius = member_circle_radius(avg_radius, count, config)

        for k, i in enumerate(indices):
            angle = 2 * math.pi * k / count
            bodies.positions[i] = (cx + radius * math.cos(angle),
                                   cy + radius * math.sin(angle))
            bodies.targets[i] = (cx, cy)
