# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Pipeline configuration.

Every tunable constant of the recomputation pipeline lives here so call
sites never repeat literals. Values can be overridden from a YAML file:

    similarity_threshold: 0.35
    resolution: 1.2
    layout:
      iterations: 200
      collision_passes: 30

Usage:
    from bubblefield.config import load_config

    config = load_config("bubblefield.yaml")
    config.validate()
"""

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.3
DEFAULT_SIMILAR_SPACE_THRESHOLD = 0.5
DEFAULT_RESOLUTION = 1.0
PRESENCE_WINDOW_SECONDS = 30.0
SIMILARITY_THRESHOLD_KEY = "similarity_threshold"


def validate_threshold(value: float, name: str = "threshold") -> float:
    """Return ``value`` as float, raising ValueError outside [0, 1]."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")
    return value


@dataclass
class LayoutConfig:
    """Constants of the four layout phases."""
    # Phase 1: cluster ring
    cluster_ring_radius: float = 500.0
    # Phase 2: seeding circle radius = clamp(min, max, avg*factor + n*spacing)
    seed_min_radius: float = 140.0
    seed_max_radius: float = 300.0
    seed_radius_factor: float = 1.4
    seed_member_spacing: float = 18.0
    # Phase 3: force simulation
    iterations: int = 160
    repulsion: float = 6500.0
    collision_padding: float = 36.0
    collision_strength: float = 0.8
    attraction: float = 0.01
    centering_strength: float = 0.001
    damping: float = 0.9
    min_distance: float = 1.0
    # Phase 4: hard collision resolution
    separation_padding: float = 20.0
    collision_passes: int = 20
    # Bubble radius = base_radius + sqrt(max(1, active)) * radius_scale
    base_radius: float = 70.0
    radius_scale: float = 22.0

    def validate(self) -> None:
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")
        if self.collision_passes < 0:
            raise ValueError(
                f"collision_passes must be >= 0, got {self.collision_passes}")
        if not 0.0 < self.damping <= 1.0:
            raise ValueError(f"damping must be within (0, 1], got {self.damping}")
        if self.min_distance <= 0:
            raise ValueError(
                f"min_distance must be positive, got {self.min_distance}")
        if self.seed_min_radius > self.seed_max_radius:
            raise ValueError("seed_min_radius must not exceed seed_max_radius")
        if self.base_radius <= 0 or self.radius_scale < 0:
            raise ValueError("bubble radius constants must be positive")


@dataclass
class PipelineConfig:
    """Top-level configuration for a recomputation run."""
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    similar_space_threshold: float = DEFAULT_SIMILAR_SPACE_THRESHOLD
    resolution: float = DEFAULT_RESOLUTION
    max_levels: int = 10
    presence_window: float = PRESENCE_WINDOW_SECONDS
    derive_presence: bool = True
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    def validate(self) -> None:
        validate_threshold(self.similarity_threshold, "similarity_threshold")
        validate_threshold(self.similar_space_threshold,
                           "similar_space_threshold")
        if self.resolution <= 0:
            raise ValueError(f"resolution must be positive, got {self.resolution}")
        if self.max_levels < 1:
            raise ValueError(f"max_levels must be >= 1, got {self.max_levels}")
        if self.presence_window < 0:
            raise ValueError("presence_window must be >= 0")
        self.layout.validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> 'PipelineConfig':
        """Build a config from a plain mapping, rejecting unknown keys."""
        d = dict(d or {})
        layout_values = d.pop("layout", None) or {}
        _check_keys(cls, d, "pipeline")
        _check_keys(LayoutConfig, layout_values, "layout")
        return cls(layout=LayoutConfig(**layout_values), **d)


def _check_keys(config_cls, values: Dict[str, Any], section: str) -> None:
    known = {f.name for f in fields(config_cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"unknown {section} config keys: {', '.join(unknown)}")


def load_config(path: Optional[Union[str, Path]] = None) -> PipelineConfig:
    """Load and validate a config file. ``None`` gives the defaults."""
    if path is None:
        config = PipelineConfig()
    else:
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at top level")
        config = PipelineConfig.from_dict(data)
        logger.debug("Loaded config from %s", path)
    config.validate()
    return config
