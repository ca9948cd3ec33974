# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""Tests for pipeline configuration loading."""

import pytest

from bubblefield.config import (LayoutConfig, PipelineConfig, load_config,
                                validate_threshold)


class TestValidateThreshold:
    def test_bounds_inclusive(self):
        assert validate_threshold(0) == 0.0
        assert validate_threshold(1) == 1.0
        assert validate_threshold("0.25") == 0.25

    @pytest.mark.parametrize("value", [-0.5, 1.0001, "high", None])
    def test_rejects(self, value):
        with pytest.raises(ValueError):
            validate_threshold(value)


class TestLoadConfig:
    """Tests for YAML config files."""

    def test_defaults(self):
        config = load_config()
        assert config.similarity_threshold == 0.3
        assert config.resolution == 1.0
        assert config.layout == LayoutConfig()

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "bubblefield.yaml"
        path.write_text(
            "similarity_threshold: 0.35\n"
            "resolution: 1.5\n"
            "layout:\n"
            "  iterations: 40\n"
            "  collision_passes: 5\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.similarity_threshold == 0.35
        assert config.resolution == 1.5
        assert config.layout.iterations == 40
        assert config.layout.collision_passes == 5
        assert config.layout.repulsion == 6500.0

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == PipelineConfig()

    def test_unknown_keys(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("similarity_treshold: 0.4\n", encoding="utf-8")
        with pytest.raises(ValueError, match="similarity_treshold"):
            load_config(path)

    def test_unknown_layout_keys(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("layout:\n  gravity: 3\n", encoding="utf-8")
        with pytest.raises(ValueError, match="gravity"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("similarity_threshold: 4\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_to_dict_round_trip(self):
        config = PipelineConfig(resolution=2.0, layout=LayoutConfig(iterations=10))
        assert PipelineConfig.from_dict(config.to_dict()) == config
