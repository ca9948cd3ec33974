# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""Tests for presence-derived activity counts."""

from bubblefield.models import PresenceRecord
from bubblefield.presence import active_user_counts

NOW = 1_700_000_000.0


class TestActiveUserCounts:
    """Tests for the heartbeat window."""

    def test_counts_fresh_records_per_space(self):
        records = [
            PresenceRecord("a", NOW - 1, "u1"),
            PresenceRecord("a", NOW - 10, "u2"),
            PresenceRecord("b", NOW - 29, "u1"),
        ]
        assert active_user_counts(records, now=NOW) == {"a": 2, "b": 1}

    def test_window_boundary_is_exclusive(self):
        records = [PresenceRecord("a", NOW - 30, "u1")]
        assert active_user_counts(records, now=NOW) == {}

    def test_stale_spaces_absent(self):
        records = [
            PresenceRecord("a", NOW - 120, "u1"),
            PresenceRecord("b", NOW, "u2"),
        ]
        assert active_user_counts(records, now=NOW) == {"b": 1}

    def test_custom_window(self):
        records = [PresenceRecord("a", NOW - 45, "u1")]
        assert active_user_counts(records, now=NOW, window=60) == {"a": 1}

    def test_empty(self):
        assert active_user_counts([], now=NOW) == {}
