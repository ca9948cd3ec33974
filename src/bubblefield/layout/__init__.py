# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Bubble layout.

"""
Layout of spaces on the canvas.

Provides:
- Cluster ring placement and per-cluster seeding
- NumPy force simulation (repulsion, collision spring, edge attraction,
  cluster centering, damping)
- Hard collision resolution
"""

from .bodies import BodyArray, PhysicsBody
from .collision import max_overlap, resolve_collisions
from .engine import LayoutEngine, LayoutResult
from .forces import net_forces, simulate, step
from .seeding import cluster_centers, member_circle_radius, seed_bodies

__all__ = [
    'BodyArray',
    'PhysicsBody',
    'LayoutEngine',
    'LayoutResult',
    'cluster_centers',
    'member_circle_radius',
    'seed_bodies',
    'net_forces',
    'step',
    'simulate',
    'resolve_collisions',
    'max_overlap',
]
