"""
Inspector CLI — concurrent filesystem inspection and source grading.

Commands:
  inspect   Inspect targets in parallel, one worker process per target
  grade     Compile and grade a single source file
  grades    Show the score log
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from inspector import __version__
from inspector.compile_pipeline import CompilePipeline
from inspector.config_loader import AppConfig, load_config
from inspector.errors import SubprocessSpawnError
from inspector.orchestrator import Orchestrator
from inspector.report import print_error, print_score_table
from inspector.score_log import ScoreLog

_console = Console(highlight=False, emoji=False)


def _resolve_config(
    config_path: Path | None,
    score_log: Path | None = None,
    timeout: float | None = None,
) -> AppConfig:
    """Load AppConfig and apply command-line overrides, exiting on failure."""
    try:
        cfg = load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        _console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(2)

    if score_log is not None:
        cfg = replace(cfg, score_log=score_log)
    if timeout is not None:
        cfg = replace(cfg, pipeline=replace(cfg.pipeline, compile_timeout=timeout))
    return cfg


def _pair_targets(tokens: tuple[str, ...]) -> list[tuple[str, str | None]]:
    """Attach each option string to the path before it."""
    pairs: list[tuple[str, str | None]] = []
    for token in tokens:
        if token == "-" and pairs and pairs[-1][1] is None:
            # bare "-": no fields, only the action
            pairs[-1] = (pairs[-1][0], token)
        elif token.startswith("-") and len(token) > 1:
            if not pairs or pairs[-1][1] is not None:
                raise click.UsageError(f"Option string '{token}' does not follow a target path.")
            pairs[-1] = (pairs[-1][0], token)
        else:
            pairs.append((token, None))
    return pairs


@click.group()
@click.version_option(__version__, prog_name="inspector")
def cli() -> None:
    """Inspector — concurrent filesystem inspection and source grading."""


@cli.command(
    "inspect",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="Path to a JSON config")
@click.option("--score-log", default=None, type=click.Path(path_type=Path), help="Score log to append to")
@click.option("--timeout", default=None, type=float, help="Compile timeout in seconds")
@click.argument("targets", nargs=-1, required=True, type=click.UNPROCESSED)
def cmd_inspect(
    config_path: Path | None,
    score_log: Path | None,
    timeout: float | None,
    targets: tuple[str, ...],
) -> None:
    """
    Inspect TARGETS, each a path optionally followed by an option string.

    \b
    Directory:      -n name  -d size  -a access rights  -c .c file count
    Symbolic link:  -n name  -d size  -a access rights  -t target size  -l delete
    Regular file:   -n name  -d size  -h hard links  -m modified  -a access rights
                    -l=NAME create a symbolic link called NAME

    Targets without an option string are prompted for interactively.
    """
    cfg = _resolve_config(config_path, score_log, timeout)
    pairs = _pair_targets(targets)

    summary = Orchestrator(cfg).run(pairs)

    if summary.setup_failed:
        sys.exit(1)


@cli.command("grade")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="Path to a JSON config")
@click.option("--score-log", default=None, type=click.Path(path_type=Path), help="Score log to append to")
@click.option("--timeout", default=None, type=float, help="Compile timeout in seconds")
def cmd_grade(source: Path, config_path: Path | None, score_log: Path | None, timeout: float | None) -> None:
    """Compile SOURCE, grade its diagnostics and append the score to the log."""
    cfg = _resolve_config(config_path, score_log, timeout)
    pipeline = CompilePipeline(str(source), ScoreLog(cfg.score_log), cfg.pipeline, cfg.grading)
    try:
        result = pipeline.run()
    except SubprocessSpawnError as exc:
        print_error(str(source), str(exc))
        sys.exit(1)

    record = result.record
    if record.text:
        _console.print(escape(record.text.rstrip("\n")))
    for status in result.abnormal:
        _console.print(f"[yellow]Abnormal termination:[/yellow] {escape(status.describe())}")
    if result.timed_out:
        _console.print("[yellow]Compile timed out; score computed from partial diagnostics[/yellow]")
    _console.print(
        f"[bold]{escape(record.source_name)}[/bold]  "
        f"errors=[bold]{record.error_count}[/bold]  "
        f"warnings=[bold]{record.warning_count}[/bold]  "
        f"score=[bold]{record.score}[/bold]"
    )
    _console.print(f"[dim]Score appended to {escape(str(cfg.score_log))}[/dim]")


@cli.command("grades")
@click.option("--score-log", default=None, type=click.Path(path_type=Path), help="Score log to read")
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="Path to a JSON config")
def cmd_grades(score_log: Path | None, config_path: Path | None) -> None:
    """Show every score recorded in the score log."""
    cfg = _resolve_config(config_path, score_log)
    print_score_table(ScoreLog(cfg.score_log).entries(), str(cfg.score_log))


if __name__ == "__main__":
    cli()
