# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Dense per-run simulation state.

"""
Physics bodies stored as dense NumPy arrays.

Each space gets a stable index for the duration of one layout run; the
``index`` table maps space ids to that index once, so the simulation
never looks bodies up by id while iterating.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from ..models import Position


@dataclass
class PhysicsBody:
    """Snapshot of one body."""
    position: Position
    velocity: Position
    target_position: Position
    radius: float


@dataclass
class BodyArray:
    """Structure-of-arrays state for ``len(ids)`` bodies."""
    ids: List[object]
    positions: np.ndarray
    velocities: np.ndarray
    targets: np.ndarray
    radii: np.ndarray
    clusters: np.ndarray
    index: Dict[object, int] = field(init=False)

    def __post_init__(self):
        self.index = {body_id: i for i, body_id in enumerate(self.ids)}

    @classmethod
    def create(
        cls,
        ids: Sequence[object],
        radii: Sequence[float],
        clusters: Sequence[int]
    ) -> 'BodyArray':
        """Bodies at the origin, at rest, with no target."""
        n = len(ids)
        return cls(
            ids=list(ids),
            positions=np.zeros((n, 2), dtype=np.float64),
            velocities=np.zeros((n, 2), dtype=np.float64),
            targets=np.zeros((n, 2), dtype=np.float64),
            radii=np.asarray(radii, dtype=np.float64).reshape(n),
            clusters=np.asarray(clusters, dtype=np.int64).reshape(n),
        )

    def __len__(self) -> int:
        return len(self.ids)

    def body(self, i: int) -> PhysicsBody:
        return PhysicsBody(
            position=Position(*map(float, self.positions[i])),
            velocity=Position(*map(float, self.velocities[i])),
            target_position=Position(*map(float, self.targets[i])),
            radius=float(self.radii[i]),
        )

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.positions)))
