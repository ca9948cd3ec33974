# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""Shared fixtures: small synthetic space corpora."""

import pytest

from bubblefield.models import SpaceNode
from bubblefield.store import InMemorySpaceStore

TOPICS = [
    ["music", "jazz", "saxophone"],
    ["hiking", "mountains", "trails"],
    ["cooking", "recipes", "baking"],
    ["python", "programming", "code"],
    ["astronomy", "telescopes", "stars"],
    ["gardening", "plants", "soil"],
    ["chess", "openings", "tactics"],
    ["photography", "cameras", "lenses"],
    ["cycling", "bikes", "racing"],
    ["films", "cinema", "directors"],
]


def build_corpus(n, n_topics=len(TOPICS)):
    """``n`` spaces cycling through ``n_topics`` tag sets, unique names."""
    return [
        SpaceNode(id=f"s{i}", name=f"Room{i}", tags=list(TOPICS[i % n_topics]))
        for i in range(n)
    ]


@pytest.fixture
def three_spaces():
    """Two spaces sharing every tag and one sharing none."""
    return [
        SpaceNode(id="jazz-lovers", name="Jazz Lovers",
                  tags=["music", "jazz", "saxophone"]),
        SpaceNode(id="jazz-fans", name="Jazz Fans",
                  tags=["music", "jazz", "saxophone"]),
        SpaceNode(id="hiking", name="Mountain Hiking",
                  tags=["outdoors", "trails"]),
    ]


@pytest.fixture
def corpus():
    return build_corpus


@pytest.fixture
def store(three_spaces):
    return InMemorySpaceStore(three_spaces)
