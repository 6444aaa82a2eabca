"""
Append-only score log shared by every worker process.

Each graded source adds one "<name>: <score>" line. Lines are written
with a single write on a file opened in append mode, so concurrent
workers never truncate or split each other's entries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from inspector.diagnostics import DiagnosticRecord

DEFAULT_SCORE_LOG = Path("grades.txt")

_ENTRY_RE = re.compile(r"^(?P<name>.+): (?P<score>-?\d+)$")


class ScoreSink(Protocol):
    """Anything that accepts graded records."""

    def append(self, record: DiagnosticRecord) -> None: ...


@dataclass(frozen=True)
class ScoreEntry:
    name: str
    score: int


@dataclass(frozen=True)
class ScoreLog:
    """Score sink backed by a text file."""

    path: Path = DEFAULT_SCORE_LOG

    def append(self, record: DiagnosticRecord) -> None:
        line = record.log_line() + "\n"
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)

    def entries(self) -> list[ScoreEntry]:
        """
        Read back every well-formed entry in file order.

        The log is not versioned and may hold arbitrary prior content;
        lines that do not parse are ignored.
        """
        if not self.path.is_file():
            return []
        result: list[ScoreEntry] = []
        with open(self.path, encoding="utf-8", errors="replace") as f:
            for line in f:
                match = _ENTRY_RE.match(line.rstrip("\n"))
                if match:
                    result.append(ScoreEntry(match["name"], int(match["score"])))
        return result
