"""Tests for option string parsing, prompting and target specs."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from inspector.entity import TargetSpec, build_target_spec
from inspector.errors import OptionError, ResolutionError
from inspector.filesystem import EntityKind
from inspector.options import (
    VALID_FLAGS,
    InspectOptions,
    menu_text,
    parse_option_string,
    prompt_options,
)


def _scripted_prompt(*answers: str):
    """A prompt stand-in that feeds answers through value_proc like click.prompt."""
    queue = list(answers)
    asked: list[str] = []

    def _prompt(text, value_proc=None, **_kwargs):
        while True:
            asked.append(text)
            answer = queue.pop(0)
            if value_proc is None:
                return answer
            try:
                return value_proc(answer)
            except click.BadParameter:
                continue

    _prompt.asked = asked
    return _prompt


# ── parse_option_string ────────────────────────────────────────────────────


def test_valid_flags_per_kind():
    assert VALID_FLAGS[EntityKind.DIRECTORY] == "ndac"
    assert VALID_FLAGS[EntityKind.SYMLINK] == "ndatl"
    assert VALID_FLAGS[EntityKind.FILE] == "ndhmal"


def test_parse_directory_flags():
    opts = parse_option_string("-nac", EntityKind.DIRECTORY)
    assert opts == InspectOptions(name=True, permissions=True, c_files=True)


def test_parse_file_flags():
    opts = parse_option_string("-dhm", EntityKind.FILE)
    assert opts.size and opts.hard_links and opts.modified
    assert not opts.name


def test_parse_only_dash_requests_nothing():
    assert parse_option_string("-", EntityKind.FILE) == InspectOptions()


def test_parse_link_with_name():
    opts = parse_option_string("-nl=alias", EntityKind.FILE)
    assert opts.link is True
    assert opts.link_name == "alias"
    assert opts.needs_link_name is False


def test_parse_link_without_name_needs_prompt():
    opts = parse_option_string("-l", EntityKind.FILE)
    assert opts.needs_link_name is True


def test_parse_unknown_flag_names_character():
    with pytest.raises(OptionError) as info:
        parse_option_string("-nz", EntityKind.FILE)
    assert info.value.bad_char == "z"
    assert "'z'" in str(info.value)


def test_parse_flag_invalid_for_kind():
    # -c only applies to directories
    with pytest.raises(OptionError) as info:
        parse_option_string("-c", EntityKind.SYMLINK)
    assert info.value.bad_char == "c"


def test_parse_missing_dash():
    with pytest.raises(OptionError) as info:
        parse_option_string("nd", EntityKind.DIRECTORY)
    assert info.value.bad_char == "n"


def test_parse_link_name_on_symlink_rejected():
    with pytest.raises(OptionError) as info:
        parse_option_string("-l=name", EntityKind.SYMLINK)
    assert info.value.bad_char == "="


# ── prompt_options ─────────────────────────────────────────────────────────


def test_menu_text_lists_kind_flags():
    text = menu_text("some/dir", EntityKind.DIRECTORY)
    assert "Directory path: some/dir" in text
    assert "-c: Total number of files with the .c extension" in text
    assert "-t:" not in text


def test_prompt_retries_until_valid():
    prompt = _scripted_prompt("-x", "nd", "-nd")
    opts = prompt_options("d", EntityKind.DIRECTORY, prompt=prompt)
    assert opts == InspectOptions(name=True, size=True)
    assert len(prompt.asked) == 3


def test_prompt_asks_for_link_name():
    prompt = _scripted_prompt("-l", "alias ")
    opts = prompt_options("f.txt", EntityKind.FILE, prompt=prompt)
    assert opts.link_name == "alias"


# ── build_target_spec ──────────────────────────────────────────────────────


def test_build_spec_from_option_string(tmp_path: Path):
    spec = build_target_spec(str(tmp_path), "-n")
    assert spec == TargetSpec(str(tmp_path), EntityKind.DIRECTORY, InspectOptions(name=True))


def test_build_spec_prompts_without_option_string(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_text("x")
    spec = build_target_spec(str(f), None, prompt=_scripted_prompt("-h"))
    assert spec.options == InspectOptions(hard_links=True)


def test_build_spec_prompts_for_missing_link_name(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_text("x")
    spec = build_target_spec(str(f), "-l", prompt=_scripted_prompt("copy"))
    assert spec.options.link_name == "copy"


def test_build_spec_missing_target(tmp_path: Path):
    with pytest.raises(ResolutionError):
        build_target_spec(str(tmp_path / "missing"), "-n")


def test_build_spec_bad_option(tmp_path: Path):
    with pytest.raises(OptionError):
        build_target_spec(str(tmp_path), "-nt")
