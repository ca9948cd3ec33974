# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Multi-force simulation with NumPy acceleration.

"""
Force simulation for bubble layout.

Per iteration, four contributions are added to each body's velocity:
- repulsion between every pair, repulsion / d^2, plus a linear collision
  spring collision_strength * overlap when d < r_a + r_b + collision_padding
- attraction along similarity edges, d * attraction * weight
- centering toward the body's cluster center, centering_strength * offset
then positions integrate (p += v) and velocities decay (v *= damping).

The iteration count is fixed; there is no convergence test and no
velocity clamp. Positions are only read while forces are accumulated, so
all pairs are evaluated at once with (n, n) arrays.
"""

import numpy as np

from ..config import LayoutConfig
from .bodies import BodyArray


def net_forces(
    bodies: BodyArray,
    weights: np.ndarray,
    config: LayoutConfig
) -> np.ndarray:
    """
    Net force on every body for the current positions.

    Args:
        bodies: Simulation state.
        weights: (n, n) symmetric edge weights, zero where no edge.
        config: Force constants.

    Returns:
        (n, 2) force array.
    """
    pos = bodies.positions
    delta = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]  # p_j - p_i
    dist = np.sqrt(np.sum(delta ** 2, axis=2))
    # Coincident points: fall back to a small positive distance
    dist = np.where(dist > 0, dist, config.min_distance)
    unit = delta / dist[:, :, np.newaxis]

    push = config.repulsion / dist ** 2
    min_sep = (bodies.radii[:, np.newaxis] + bodies.radii[np.newaxis, :]
               + config.collision_padding)
    push += config.collision_strength * np.maximum(min_sep - dist, 0.0)
    np.fill_diagonal(push, 0.0)

    pull = config.attraction * weights * dist
    np.fill_diagonal(pull, 0.0)

    forces = np.sum(unit * (pull - push)[:, :, np.newaxis], axis=1)
    forces += config.centering_strength * (bodies.targets - pos)
    return forces


def step(bodies: BodyArray, weights: np.ndarray, config: LayoutConfig) -> None:
    """Advance the simulation by one iteration, in place."""
    bodies.velocities += net_forces(bodies, weights, config)
    bodies.positions += bodies.velocities
    bodies.velocities *= config.damping


def simulate(bodies: BodyArray, weights: np.ndarray, config: LayoutConfig) -> None:
    """Run ``config.iterations`` steps."""
    for _ in range(config.iterations):
        step(bodies, weights, config)
