"""
Target specifications built by the orchestrator before any worker runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from inspector.filesystem import EntityKind, classify_kind
from inspector.options import (
    InspectOptions,
    parse_option_string,
    prompt_link_name,
    prompt_options,
)


@dataclass(frozen=True)
class TargetSpec:
    """One command-line target: what it is and what to do with it."""

    path: str
    kind: EntityKind
    options: InspectOptions


def build_target_spec(
    path: str,
    option_string: str | None,
    prompt: Callable[..., str] | None = None,
) -> TargetSpec:
    """
    Resolve a target and settle its options.

    A missing option string, or a link request without a name, is
    completed through the interactive prompt. Raises ResolutionError
    or OptionError.
    """
    kind = classify_kind(path)
    prompt_kwargs = {"prompt": prompt} if prompt is not None else {}
    if option_string is None:
        options = prompt_options(path, kind, **prompt_kwargs)
    else:
        options = parse_option_string(option_string, kind)
        if kind is EntityKind.FILE and options.needs_link_name:
            options = prompt_link_name(options, **prompt_kwargs)
    return TargetSpec(path=path, kind=kind, options=options)
