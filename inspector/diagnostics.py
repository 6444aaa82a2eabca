"""
Diagnostic classification and grading for compiled sources.

Turns the filtered compiler diagnostics of one source file into
error and warning counts, and maps those counts to a score between
the configured error score and the clean score.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Whitespace plus sentence punctuation; "warning:" must tokenize to "warning"
_TOKEN_SEPARATORS = re.compile(r"[\s.,;:!?]+")

_WARNING_TOKEN = "warning"
_ERROR_MARKER = "error"


@dataclass(frozen=True)
class GradeScale:
    """Score bounds used when grading a compile."""

    error_score: int = 1
    clean_score: int = 10
    floor_score: int = 2
    warning_cap: int = 10


@dataclass(frozen=True)
class DiagnosticRecord:
    """Classified output of one compile attempt."""

    source_name: str
    text: str
    error_count: int
    warning_count: int
    score: int

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def log_line(self) -> str:
        return f"{self.source_name}: {self.score}"


def _tokenize(text: str) -> list[str]:
    return [t for t in _TOKEN_SEPARATORS.split(text) if t]


def count_diagnostics(text: str) -> tuple[int, int]:
    """
    Return (error_count, warning_count) for a block of diagnostic text.

    Warnings are whole tokens equal to "warning". Errors are occurrences
    of the substring "error" anywhere in the text.
    """
    warnings = sum(1 for token in _tokenize(text) if token == _WARNING_TOKEN)
    errors = text.count(_ERROR_MARKER)
    return errors, warnings


def score_from_counts(error_count: int, warning_count: int, scale: GradeScale) -> int:
    """
    Map diagnostic counts to a score.

    Any error yields the error score. A clean compile yields the clean
    score. Past the warning cap the floor score applies; below it the
    score slides linearly from the floor towards the clean score.
    """
    if error_count > 0:
        return scale.error_score
    if warning_count == 0:
        return scale.clean_score
    if warning_count > scale.warning_cap:
        return scale.floor_score
    span = scale.clean_score - scale.floor_score
    return scale.floor_score + (span * (scale.warning_cap - warning_count)) // scale.warning_cap


def classify(source_name: str, text: str, scale: GradeScale | None = None) -> DiagnosticRecord:
    """Classify diagnostic text for the named source into a DiagnosticRecord."""
    scale = scale or GradeScale()
    errors, warnings = count_diagnostics(text)
    return DiagnosticRecord(
        source_name=source_name,
        text=text,
        error_count=errors,
        warning_count=warnings,
        score=score_from_counts(errors, warnings, scale),
    )


def build_grade_scale(grading_cfg: dict) -> GradeScale:
    """Construct GradeScale from the parsed config grading block."""
    return GradeScale(
        error_score=int(grading_cfg.get("error_score", 1)),
        clean_score=int(grading_cfg.get("clean_score", 10)),
        floor_score=int(grading_cfg.get("floor_score", 2)),
        warning_cap=int(grading_cfg.get("warning_cap", 10)),
    )
