"""
Report generation for inspected entries and graded sources.

Inspection reports are rendered to a single block of text and written
with one call, so reports from concurrent workers never interleave
line by line. The score log summary is rich-formatted.
"""

from __future__ import annotations

import signal
from dataclasses import dataclass, field

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inspector.filesystem import EntityKind
from inspector.score_log import ScoreEntry

DELIMITER = "-" * 42

_TRIADS: tuple[tuple[str, int], ...] = (("User", 6), ("Group", 3), ("Others", 0))

_console = Console(highlight=False, soft_wrap=True, emoji=False)
_err_console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)


def format_permissions(mode: int) -> str:
    """Render the low nine mode bits as owner/group/other read/write/exec lines."""
    blocks: list[str] = []
    for title, shift in _TRIADS:
        bits = (mode >> shift) & 0o7
        blocks.append(
            f"{title}:\n"
            f"\tRead - {'yes' if bits & 0o4 else 'no'}\n"
            f"\tWrite - {'yes' if bits & 0o2 else 'no'}\n"
            f"\tExec - {'yes' if bits & 0o1 else 'no'}\n"
        )
    return "\n".join(blocks)


def describe_returncode(returncode: int) -> str:
    """Describe a child's return code as a normal exit or a signal termination."""
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"terminated by signal {name}"
    return f"exited with code {returncode}"


@dataclass
class InspectionReport:
    """Metadata gathered for one entry. Unset fields are not rendered."""

    path: str
    kind: EntityKind
    name: str | None = None
    size: int | None = None
    permissions: int | None = None
    hard_links: int | None = None
    c_files: int | None = None
    target_size: int | None = None
    target_size_error: str | None = None
    modified: str | None = None
    line_count: int | None = None
    notes: list[str] = field(default_factory=list)
    outcome: list[str] = field(default_factory=list)

    def add_note(self, what: str, exc: OSError) -> None:
        self.notes.append(f"Could not read {what}: {exc.strerror or exc}")

    def render(self) -> str:
        label = self.kind.label
        lines = [DELIMITER, f"{label} path: {self.path}"]
        if self.name is not None:
            lines.append(f"{label} name: {self.name}")
        if self.size is not None:
            total = "total size" if self.kind is EntityKind.DIRECTORY else "size"
            lines.append(f"{label} {total}: {self.size}")
        if self.hard_links is not None:
            lines.append(f"Hard link count: {self.hard_links}")
        if self.modified is not None:
            lines.append(f"Last modified: {self.modified}")
        if self.permissions is not None:
            lines.append("Permissions:")
            lines.append(format_permissions(self.permissions).rstrip("\n"))
        if self.c_files is not None:
            lines.append(f"Total number of .c files: {self.c_files}")
        if self.target_size is not None:
            lines.append(f"Symbolic link target size: {self.target_size}")
        elif self.target_size_error is not None:
            lines.append(f"Symbolic link target size: unavailable ({self.target_size_error})")
        if self.line_count is not None:
            lines.append(f"Number of lines: {self.line_count}")
        lines.extend(self.notes)
        lines.extend(self.outcome)
        lines.append(DELIMITER)
        return "\n".join(lines) + "\n"


def print_report(report: InspectionReport) -> None:
    """Write the whole report in one call."""
    _console.print(report.render(), markup=False, end="")


def print_error(path: str, message: str) -> None:
    _err_console.print(f"[bold red]Error:[/bold red] {escape(path)}: {escape(message)}")


def print_line(text: str) -> None:
    _console.print(text, markup=False)


def print_score_table(entries: list[ScoreEntry], log_name: str) -> None:
    """Print the score log as a table followed by a short summary."""
    if not entries:
        _console.print(f"[dim]No scores recorded in {escape(log_name)}.[/dim]")
        return

    table = Table(
        box=box.SIMPLE,
        show_header=True,
        header_style="bold dim",
        padding=(0, 1),
    )
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Source", min_width=20)
    table.add_column("Score", width=6, justify="right")

    for index, entry in enumerate(entries, start=1):
        color = "green" if entry.score >= 8 else "yellow" if entry.score >= 3 else "red"
        table.add_row(str(index), escape(entry.name), f"[{color}]{entry.score}[/{color}]")

    _console.print(table)
    mean = sum(e.score for e in entries) / len(entries)
    _console.print("[bold]--- Score Summary ---[/bold]")
    _console.print(f"  Sources graded: [bold]{len(entries)}[/bold]")
    _console.print(f"  Mean score    : [bold]{mean:.2f}[/bold]")
    _console.print()
