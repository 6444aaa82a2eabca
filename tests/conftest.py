"""Shared fixtures: stand-in compiler and diagnostic filter scripts."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from inspector.compile_pipeline import PipelineConfig

# Echoes the source to stderr, as a compiler would echo diagnostics.
# Anything on stdout must never reach the grader.
_FAKE_COMPILER = """\
import sys
with open(sys.argv[-1], encoding="utf-8") as f:
    text = f.read()
sys.stdout.write("stdout error warning warning\\n")
sys.stderr.write(text)
sys.exit(1 if "error" in text else 0)
"""

# Writes a warning, then hangs until killed.
_HANGING_COMPILER = """\
import sys, time
sys.stderr.write("main.c:1:1: warning: stalled\\n")
sys.stderr.flush()
time.sleep(60)
"""

# Closes its diagnostic stream at once, then hangs until killed.
_SILENT_HANGING_COMPILER = """\
import os, time
os.close(2)
time.sleep(60)
"""

_FILTER = """\
import re, sys
while True:
    line = sys.stdin.readline()
    if not line:
        break
    if re.search("error|warning", line):
        sys.stdout.write(line)
        sys.stdout.flush()
"""


def _script(tmp_path: Path, name: str, body: str) -> str:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return str(path)


@pytest.fixture
def fake_pipeline(tmp_path: Path) -> PipelineConfig:
    """PipelineConfig driven by Python stand-ins for the compiler and filter."""
    tools = tmp_path / "_tools"
    tools.mkdir()
    return PipelineConfig(
        compiler=(sys.executable, _script(tools, "cc.py", _FAKE_COMPILER)),
        filter=(sys.executable, _script(tools, "filter.py", _FILTER)),
        compile_timeout=30.0,
    )


@pytest.fixture
def hanging_pipeline(tmp_path: Path) -> PipelineConfig:
    tools = tmp_path / "_tools"
    tools.mkdir()
    return PipelineConfig(
        compiler=(sys.executable, _script(tools, "hang.py", _HANGING_COMPILER)),
        filter=(sys.executable, _script(tools, "filter.py", _FILTER)),
        compile_timeout=2.0,
    )


@pytest.fixture
def silent_hanging_pipeline(tmp_path: Path) -> PipelineConfig:
    tools = tmp_path / "_tools"
    tools.mkdir()
    return PipelineConfig(
        compiler=(sys.executable, _script(tools, "silent.py", _SILENT_HANGING_COMPILER)),
        filter=(sys.executable, _script(tools, "filter.py", _FILTER)),
        compile_timeout=2.0,
    )


class MemorySink:
    """Score sink that keeps records in memory."""

    def __init__(self) -> None:
        self.records = []

    def append(self, record) -> None:
        self.records.append(record)


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()
