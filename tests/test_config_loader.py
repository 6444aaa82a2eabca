"""Tests for the configuration loader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from inspector.compile_pipeline import PipelineConfig
from inspector.config_loader import AppConfig, build_action_config, load_config
from inspector.diagnostics import GradeScale

_SAMPLE = Path(__file__).resolve().parent.parent / "config" / "inspector.json"


def test_defaults_without_path():
    cfg = load_config()
    assert cfg == AppConfig()
    assert cfg.actions.symlink_mode == 0o760
    assert cfg.score_log == Path("grades.txt")


def test_bundled_sample_matches_defaults():
    assert load_config(_SAMPLE) == AppConfig()


def test_missing_config_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.json")


def test_partial_config(tmp_path: Path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({
        "score_log": "out/scores.txt",
        "pipeline": {"compiler": ["clang", "-Weverything"], "compile_timeout": None},
        "grading": {"clean_score": 12},
    }))

    cfg = load_config(path)

    assert cfg.score_log == Path("out/scores.txt")
    assert cfg.pipeline == PipelineConfig(compiler=("clang", "-Weverything"), compile_timeout=None)
    assert cfg.grading == GradeScale(clean_score=12)


def test_action_config_octal_mode():
    assert build_action_config({"symlink_mode": "644"}).symlink_mode == 0o644


def test_invalid_json_raises_value_error(tmp_path: Path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        load_config(path)
