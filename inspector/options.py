"""
Per-target option strings: parsing and the interactive menu.

An option string looks like "-nda" or "-nl=backup.lnk". Which letters
are accepted depends on the kind of entry being inspected.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

import click

from inspector.errors import OptionError
from inspector.filesystem import EntityKind

_MENU: dict[EntityKind, tuple[tuple[str, str], ...]] = {
    EntityKind.DIRECTORY: (
        ("n", "Name"),
        ("d", "Size of directory"),
        ("a", "Access rights"),
        ("c", "Total number of files with the .c extension"),
    ),
    EntityKind.SYMLINK: (
        ("n", "Name"),
        ("d", "Size of link"),
        ("a", "Access rights"),
        ("t", "Size of target file"),
        ("l", "Delete link"),
    ),
    EntityKind.FILE: (
        ("n", "Name"),
        ("d", "Size"),
        ("h", "Hard link count"),
        ("m", "Time of last modification"),
        ("a", "Access rights"),
        ("l", "Create symbolic link"),
    ),
}

VALID_FLAGS: dict[EntityKind, str] = {
    kind: "".join(flag for flag, _ in entries) for kind, entries in _MENU.items()
}


@dataclass(frozen=True)
class InspectOptions:
    """Which fields to report and which optional action to take."""

    name: bool = False
    size: bool = False
    permissions: bool = False
    hard_links: bool = False
    modified: bool = False
    c_files: bool = False
    target_size: bool = False
    link: bool = False
    link_name: str | None = None

    @property
    def needs_link_name(self) -> bool:
        return self.link and not self.link_name


_FLAG_FIELDS = {
    "n": "name",
    "d": "size",
    "a": "permissions",
    "h": "hard_links",
    "m": "modified",
    "c": "c_files",
    "t": "target_size",
    "l": "link",
}


def parse_option_string(option_string: str, kind: EntityKind) -> InspectOptions:
    """
    Parse an option string for an entry of the given kind.

    Raises OptionError naming the first character that is not accepted.
    """
    flags, eq, link_name = option_string.partition("=")
    if not flags.startswith("-"):
        raise OptionError(option_string, flags[:1] or option_string[:1], kind.value)

    valid = VALID_FLAGS[kind]
    selected: dict[str, bool] = {}
    for ch in flags[1:]:
        if ch not in valid:
            raise OptionError(option_string, ch, kind.value)
        selected[_FLAG_FIELDS[ch]] = True

    if eq and not (selected.get("link") and kind is EntityKind.FILE):
        raise OptionError(option_string, "=", kind.value)

    return InspectOptions(**selected, link_name=link_name or None)


def menu_text(path: str, kind: EntityKind) -> str:
    lines = [f"{kind.label} path: {path}", f"This is a {kind.label.lower()}", "Options:"]
    lines.extend(f"-{flag}: {label}" for flag, label in _MENU[kind])
    return "\n".join(lines)


def prompt_options(
    path: str,
    kind: EntityKind,
    prompt: Callable[..., str] = click.prompt,
) -> InspectOptions:
    """Show the option menu for an entry and ask until a valid string is given."""
    click.echo(menu_text(path, kind))

    def _convert(value: str) -> InspectOptions:
        try:
            return parse_option_string(value.strip(), kind)
        except OptionError as exc:
            raise click.BadParameter(str(exc)) from exc

    options = prompt(f"Enter options (-[{'/'.join(VALID_FLAGS[kind])}])", value_proc=_convert)
    if kind is EntityKind.FILE and options.needs_link_name:
        options = prompt_link_name(options, prompt)
    return options


def prompt_link_name(
    options: InspectOptions,
    prompt: Callable[..., str] = click.prompt,
) -> InspectOptions:
    link_name = prompt("Name of the symbolic link to create")
    return replace(options, link_name=link_name.strip())
