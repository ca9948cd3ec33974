# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Topic space clustering and canvas layout.

"""
Offline recomputation pipeline for topic spaces on an infinite canvas.

Stages:
- vectorize: TF-IDF feature vectors from space names and tags
- similarity: thresholded cosine-similarity graph
- community: Louvain modularity partitioning
- layout: cluster ring seeding, force simulation, collision resolution

The pipeline module ties the stages to a SpaceStore collaborator.
"""

from .community import DetectionResult, detect_communities, modularity
from .config import LayoutConfig, PipelineConfig, load_config
from .layout import LayoutEngine, LayoutResult
from .models import (Community, LayoutUpdate, Position, PresenceRecord,
                     SimilarityEdge, SpaceNode)
from .pipeline import PipelineError, RecomputePipeline
from .presence import active_user_counts, bubble_radius
from .similarity import build_similarity_graph, cosine_similarity, find_similar
from .store import InMemorySpaceStore, JsonLinesSpaceStore, SpaceStore
from .vectorize import TfidfVectorizer, tokenize, vectorize_spaces

__version__ = "0.1.0"

__all__ = [
    'Community',
    'DetectionResult',
    'InMemorySpaceStore',
    'JsonLinesSpaceStore',
    'LayoutConfig',
    'LayoutEngine',
    'LayoutResult',
    'LayoutUpdate',
    'PipelineConfig',
    'PipelineError',
    'Position',
    'PresenceRecord',
    'RecomputePipeline',
    'SimilarityEdge',
    'SpaceNode',
    'SpaceStore',
    'TfidfVectorizer',
    'active_user_counts',
    'bubble_radius',
    'build_similarity_graph',
    'cosine_similarity',
    'detect_communities',
    'find_similar',
    'load_config',
    'modularity',
    'tokenize',
    'vectorize_spaces',
]
