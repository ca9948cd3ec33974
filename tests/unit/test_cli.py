# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""Tests for the command line interface."""

import io
import json

import pytest

from bubblefield.cli import main
from bubblefield.io import read_records, write_records
from bubblefield.models import LayoutUpdate
from bubblefield.store import JsonLinesSpaceStore


@pytest.fixture
def store_file(tmp_path, three_spaces):
    path = tmp_path / "spaces.jsonl"
    with open(path, "w", encoding="utf-8") as f:
        write_records(three_spaces, f)
    return path


class TestCli:
    """End-to-end runs against a JSON Lines store file."""

    def test_recompute_all(self, store_file, capsys):
        assert main(["recompute", str(store_file)]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["link_count"] == 1
        assert summary["cluster_count"] == 2

        spaces = JsonLinesSpaceStore(store_file).list_spaces()
        assert all(s.cluster_id is not None for s in spaces)

    def test_single_stage(self, store_file, capsys):
        assert main(["recompute", str(store_file), "--stage", "vectors"]) == 0
        assert json.loads(capsys.readouterr().out) == {"count": 3}
        assert main(["recompute", str(store_file), "--stage", "similarities",
                     "--threshold", "0.95"]) == 0
        assert json.loads(capsys.readouterr().out) == {"link_count": 0}

    def test_invalid_threshold_fails(self, store_file):
        before = store_file.read_text(encoding="utf-8")
        assert main(["recompute", str(store_file), "--threshold", "2"]) == 1
        assert store_file.read_text(encoding="utf-8") == before

    def test_similar(self, store_file, capsys):
        assert main(["similar", str(store_file), "--name", "Jazz Club",
                     "--tags", "music", "jazz"]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["exists"] is True
        assert {m["space_id"] for m in result["similar_spaces"]} == {"jazz-lovers", "jazz-fans"}

    def test_add_and_export_layout(self, store_file, capsys):
        assert main(["add", str(store_file), "--name", "Trail Runners",
                     "--tags", "outdoors", "trails"]) == 0
        space_id = json.loads(capsys.readouterr().out)["space_id"]

        assert main(["export-layout", str(store_file)]) == 0
        updates = list(read_records(io.StringIO(capsys.readouterr().out)))
        assert len(updates) == 4
        assert all(isinstance(u, LayoutUpdate) for u in updates)
        assert space_id in {u.space_id for u in updates}

    def test_set_threshold(self, store_file, capsys):
        assert main(["set-threshold", str(store_file), "0.45"]) == 0
        assert json.loads(capsys.readouterr().out) == {"similarity_threshold": 0.45}
        assert JsonLinesSpaceStore(store_file).get_config("similarity_threshold") == 0.45

    def test_bad_config_file(self, store_file, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text("resolution: -1\n", encoding="utf-8")
        assert main(["--config", str(config), "recompute", str(store_file)]) == 1
