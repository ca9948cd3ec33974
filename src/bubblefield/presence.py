# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Live occupancy and bubble size.

"""
Presence-derived activity counts and the canonical bubble radius.

The canvas renderer draws each space as a circle of radius

    base + sqrt(max(1, active_users)) * scale

and the layout must separate circles of exactly that size, so this module
is the single place the formula is written down.
"""

import math
import time
from collections import Counter
from typing import Dict, Iterable, Optional

from .config import PRESENCE_WINDOW_SECONDS
from .models import PresenceRecord

BASE_BUBBLE_RADIUS = 70.0
BUBBLE_RADIUS_SCALE = 22.0


def bubble_radius(
    active_user_count: int,
    base: float = BASE_BUBBLE_RADIUS,
    scale: float = BUBBLE_RADIUS_SCALE
) -> float:
    """Radius of a space's bubble. Monotonic in the activity count."""
    return base + math.sqrt(max(1, active_user_count)) * scale


def active_user_counts(
    records: Iterable[PresenceRecord],
    now: Optional[float] = None,
    window: float = PRESENCE_WINDOW_SECONDS
) -> Dict[object, int]:
    """
    Count fresh heartbeats per space.

    A record counts when ``last_seen > now - window``; spaces without any
    fresh record are absent from the result.
    """
    if now is None:
        now = time.time()
    cutoff = now - window
    counts: Counter = Counter(
        record.space_id for record in records if record.last_seen > cutoff
    )
    return dict(counts)
