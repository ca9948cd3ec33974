# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Hard collision resolution pass.

"""
Strict separation of overlapping bubbles.

Runs after the force simulation. Each pass walks every pair in index
order and, when two bubbles are closer than r_a + r_b + padding, moves
both apart by half the overlap along the line joining them. Moves apply
immediately, so later pairs in the same pass see updated positions.
Stops after a pass that moves nothing or after ``max_passes``; the result
is best-effort when the cap is reached.
"""

import math
from typing import Tuple

import numpy as np
from scipy.spatial.distance import pdist

from .bodies import BodyArray

# Overlaps smaller than this count as resolved
OVERLAP_TOLERANCE = 1e-6
_GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def _fallback_direction(i: int, j: int) -> Tuple[float, float]:
    """Deterministic unit vector for coincident bodies."""
    angle = _GOLDEN_ANGLE * (i + 1) * (j + 1)
    return math.cos(angle), math.sin(angle)


def resolve_collisions(bodies: BodyArray, padding: float, max_passes: int) -> int:
    """
    Push overlapping bodies apart in place.

    Returns:
        Number of passes executed (0 when max_passes is 0).
    """
    n = len(bodies)
    if n < 2:
        return 0

    xs = bodies.positions[:, 0].tolist()
    ys = bodies.positions[:, 1].tolist()
    radii = bodies.radii.tolist()

    passes = 0
    for _ in range(max_passes):
        passes += 1
        moved = False
        for i in range(n):
            for j in range(i + 1, n):
                dx = xs[j] - xs[i]
                dy = ys[j] - ys[i]
                dist = math.hypot(dx, dy)
                min_dist = radii[i] + radii[j] + padding
                if dist >= min_dist - OVERLAP_TOLERANCE:
                    continue

                if dist > 0:
                    ux, uy = dx / dist, dy / dist
                else:
                    ux, uy = _fallback_direction(i, j)
                shift = (min_dist - dist) * 0.5

                xs[i] -= ux * shift
                ys[i] -= uy * shift
                xs[j] += ux * shift
                ys[j] += uy * shift
                moved = True

        if not moved:
            break

    bodies.positions[:, 0] = xs
    bodies.positions[:, 1] = ys
    return passes


def max_overlap(bodies: BodyArray, padding: float) -> float:
    """Largest remaining violation of r_a + r_b + padding, or 0.0."""
    n = len(bodies)
    if n < 2:
        return 0.0
    distances = pdist(bodies.positions)
    rows, cols = np.triu_indices(n, k=1)
    required = bodies.radii[rows] + bodies.radii[cols] + padding
    return float(max(0.0, np.max(required - distances)))
