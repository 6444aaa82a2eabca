"""
Entity worker: inspects one target inside its own process.

The worker blocks on the shared start gate, then gathers the fields its
options ask for, performs the single action for its kind of entry and
prints one report. Metadata lookups that fail leave their field out and
add a note instead of aborting the report.
"""

from __future__ import annotations

import os
import sys
import time
from typing import Protocol

from inspector.compile_pipeline import CompilePipeline
from inspector.config_loader import AppConfig
from inspector.entity import TargetSpec
from inspector.errors import SubprocessSpawnError
from inspector.filesystem import (
    EntityKind,
    basename,
    count_files_with_suffix,
    count_lines,
    directory_size,
    symlink_target_size,
)
from inspector.report import InspectionReport, print_report
from inspector.score_log import ScoreSink


class StartGate(Protocol):
    def wait(self, timeout: float | None = None) -> bool: ...


def _lstat(path: str, report: InspectionReport) -> os.stat_result | None:
    try:
        return os.lstat(path)
    except OSError as exc:
        report.add_note("entry status", exc)
        return None


def _chmod_link(path: str, mode: int) -> None:
    # Linux has no lchmod; there the mode lands on the link's target
    if os.chmod in os.supports_follow_symlinks:
        os.chmod(path, mode, follow_symlinks=False)
    else:
        os.chmod(path, mode)


def _inspect_directory(spec: TargetSpec, config: AppConfig, report: InspectionReport) -> bool:
    opts = spec.options
    st = _lstat(spec.path, report)
    if opts.name:
        report.name = basename(spec.path)
    if opts.size:
        try:
            report.size = directory_size(spec.path)
        except OSError as exc:
            report.add_note("directory size", exc)
    if opts.permissions and st is not None:
        report.permissions = st.st_mode & 0o777
    if opts.c_files:
        try:
            report.c_files = count_files_with_suffix(spec.path, ".c")
        except OSError as exc:
            report.add_note(".c file count", exc)

    marker = os.path.join(spec.path, basename(spec.path) + config.actions.marker_suffix)
    try:
        with open(marker, "w", encoding="utf-8") as f:
            f.write(config.actions.marker_text + "\n")
    except OSError as exc:
        report.outcome.append(f"Error creating file {marker}: {exc.strerror or exc}")
        return False
    report.outcome.append(f"Successfully created file {marker}")
    return True


def _inspect_symlink(spec: TargetSpec, config: AppConfig, report: InspectionReport) -> bool:
    opts = spec.options
    if opts.link:
        try:
            os.unlink(spec.path)
        except OSError as exc:
            report.outcome.append(f"Error deleting symbolic link: {exc.strerror or exc}")
            return False
        report.outcome.append("Symbolic link deleted.")
        return True

    st = _lstat(spec.path, report)
    if opts.name:
        report.name = basename(spec.path)
    if opts.size and st is not None:
        report.size = st.st_size
    if opts.permissions and st is not None:
        report.permissions = st.st_mode & 0o777
    if opts.target_size:
        try:
            report.target_size = symlink_target_size(spec.path)
        except OSError as exc:
            report.target_size_error = exc.strerror or str(exc)

    mode = config.actions.symlink_mode
    try:
        _chmod_link(spec.path, mode)
    except OSError as exc:
        report.outcome.append(f"Error changing permissions: {exc.strerror or exc}")
        return False
    report.outcome.append(f"Changed permissions to {mode:o}")
    return True


def _grade_source(spec: TargetSpec, config: AppConfig, sink: ScoreSink, report: InspectionReport) -> bool:
    pipeline = CompilePipeline(spec.path, sink, config.pipeline, config.grading)
    try:
        result = pipeline.run()
    except SubprocessSpawnError as exc:
        report.outcome.append(f"Error: {exc}")
        return False
    except OSError as exc:
        report.outcome.append(f"Error recording score: {exc.strerror or exc}")
        return False

    record = result.record
    for status in result.statuses:
        line = status.describe()
        report.outcome.append(f"Abnormal termination: {line}" if status.abnormal else line)
    if result.timed_out:
        report.outcome.append(
            f"Compile timed out after {config.pipeline.compile_timeout:g}s; "
            "score computed from partial diagnostics"
        )
    report.outcome.append(f"Errors: {record.error_count}, warnings: {record.warning_count}")
    report.outcome.append(f"Score: {record.score}")
    return True


def _inspect_file(spec: TargetSpec, config: AppConfig, sink: ScoreSink, report: InspectionReport) -> bool:
    opts = spec.options
    st = _lstat(spec.path, report)
    if opts.name:
        report.name = basename(spec.path)
    if st is not None:
        if opts.size:
            report.size = st.st_size
        if opts.hard_links:
            report.hard_links = st.st_nlink
        if opts.modified:
            report.modified = time.ctime(st.st_mtime)
        if opts.permissions:
            report.permissions = st.st_mode & 0o777

    if opts.link:
        try:
            os.symlink(spec.path, opts.link_name)
        except OSError as exc:
            report.outcome.append(f"Error creating symbolic link {opts.link_name}: {exc.strerror or exc}")
            return False
        report.outcome.append(f"Created symbolic link {opts.link_name} -> {spec.path}")
        return True

    if config.pipeline.is_source(spec.path):
        return _grade_source(spec, config, sink, report)

    try:
        report.line_count = count_lines(spec.path)
    except OSError as exc:
        report.add_note("line count", exc)
    return True


def inspect_entry(spec: TargetSpec, config: AppConfig, sink: ScoreSink) -> tuple[InspectionReport, bool]:
    """Gather the report for one target and perform its action. Returns (report, ok)."""
    report = InspectionReport(path=spec.path, kind=spec.kind)
    if spec.kind is EntityKind.DIRECTORY:
        ok = _inspect_directory(spec, config, report)
    elif spec.kind is EntityKind.SYMLINK:
        ok = _inspect_symlink(spec, config, report)
    else:
        ok = _inspect_file(spec, config, sink, report)
    return report, ok


def run_worker(spec: TargetSpec, gate: StartGate, config: AppConfig, sink: ScoreSink) -> int:
    """Wait for the start gate, inspect the target, print its report. Returns the exit code."""
    gate.wait()
    report, ok = inspect_entry(spec, config, sink)
    print_report(report)
    return 0 if ok else 1


def worker_main(spec: TargetSpec, gate: StartGate, config: AppConfig, sink: ScoreSink) -> None:
    """Process entry point."""
    sys.exit(run_worker(spec, gate, config, sink))
