"""
Error types raised by the inspector.

Each error is local to one target: the orchestrator reports it against
that target's path and carries on with the rest.
"""

from __future__ import annotations


class InspectorError(Exception):
    """Base class for every inspector failure."""


class ResolutionError(InspectorError):
    """Target path does not exist or is not a file, directory or symlink."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class OptionError(InspectorError):
    """Option string contains a flag that is not valid for the target."""

    def __init__(self, option_string: str, bad_char: str, kind: str | None = None) -> None:
        where = f" for {kind}" if kind else ""
        super().__init__(f"invalid option '{bad_char}'{where} in '{option_string}'")
        self.option_string = option_string
        self.bad_char = bad_char


class SubprocessSpawnError(InspectorError):
    """A worker or pipeline child process could not be created."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"failed to start {step}: {cause}")
        self.step = step
        self.cause = cause
