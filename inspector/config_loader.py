"""
Configuration loader for the inspector.

Parses an optional JSON config file, constructs all sub-configs,
and provides a single AppConfig object handed to every worker.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from inspector.compile_pipeline import PipelineConfig
from inspector.diagnostics import GradeScale, build_grade_scale
from inspector.score_log import DEFAULT_SCORE_LOG


@dataclass(frozen=True)
class ActionConfig:
    """Parameters of the per-entry mutating actions."""

    symlink_mode: int = 0o760
    marker_suffix: str = "_file.txt"
    marker_text: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration object aggregating all sub-configs."""

    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    grading: GradeScale = field(default_factory=GradeScale)
    actions: ActionConfig = field(default_factory=ActionConfig)
    score_log: Path = DEFAULT_SCORE_LOG


def build_pipeline_config(pipeline_cfg: dict) -> PipelineConfig:
    """Construct PipelineConfig from the parsed config pipeline block."""
    defaults = PipelineConfig()
    timeout = pipeline_cfg.get("compile_timeout", defaults.compile_timeout)
    return PipelineConfig(
        compiler=tuple(pipeline_cfg.get("compiler", defaults.compiler)),
        filter=tuple(pipeline_cfg.get("filter", defaults.filter)),
        source_suffixes=tuple(pipeline_cfg.get("source_suffixes", defaults.source_suffixes)),
        compile_timeout=float(timeout) if timeout is not None else None,
    )


def build_action_config(actions_cfg: dict) -> ActionConfig:
    """Construct ActionConfig; symlink_mode is an octal string such as "760"."""
    return ActionConfig(
        symlink_mode=int(str(actions_cfg.get("symlink_mode", "760")), 8),
        marker_suffix=actions_cfg.get("marker_suffix", "_file.txt"),
        marker_text=actions_cfg.get("marker_text", ""),
    )


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Load and parse a JSON configuration file.

    Without a path the built-in defaults are used.
    """
    if config_path is None:
        return AppConfig()
    if not config_path.is_file():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        raw = json.load(f)

    return AppConfig(
        pipeline=build_pipeline_config(raw.get("pipeline", {})),
        grading=build_grade_scale(raw.get("grading", {})),
        actions=build_action_config(raw.get("actions", {})),
        score_log=Path(raw.get("score_log", str(DEFAULT_SCORE_LOG))),
    )
