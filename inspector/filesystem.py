"""
Filesystem lookups used while inspecting an entry.

Nothing here follows symbolic links unless the lookup is explicitly
about a link's target.
"""

from __future__ import annotations

import os
import stat
from enum import Enum

from inspector.errors import ResolutionError


class EntityKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"

    @property
    def label(self) -> str:
        return {"file": "Regular file", "directory": "Directory", "symlink": "Symbolic link"}[self.value]


def basename(path: str) -> str:
    """Return the part after the last '/', or the whole path if there is none."""
    trimmed = path.rstrip("/") or path
    _head, sep, tail = trimmed.rpartition("/")
    return tail if sep and tail else trimmed


def classify_kind(path: str) -> EntityKind:
    """Determine the kind of the entry at path without dereferencing links."""
    try:
        mode = os.lstat(path).st_mode
    except OSError as exc:
        raise ResolutionError(path, exc.strerror or str(exc)) from exc

    if stat.S_ISLNK(mode):
        return EntityKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntityKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntityKind.FILE
    raise ResolutionError(path, "not a regular file, directory or symbolic link")


def _raise(exc: OSError) -> None:
    raise exc


def directory_size(root: str) -> int:
    """
    Total size in bytes of every regular file beneath root.

    Physical traversal: symlinks are neither followed nor counted.
    Raises OSError if any part of the tree cannot be read, rather than
    returning a partial total.
    """
    total = 0
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise, followlinks=False):
        for filename in filenames:
            st = os.lstat(os.path.join(dirpath, filename))
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
    return total


def count_files_with_suffix(directory: str, suffix: str = ".c") -> int:
    """Count immediate regular-file children whose name ends with suffix."""
    with os.scandir(directory) as entries:
        return sum(
            1 for entry in entries
            if entry.name.endswith(suffix) and entry.is_file(follow_symlinks=False)
        )


def symlink_target_size(link_path: str) -> int:
    """
    Size of the file a symlink points to.

    Relative targets are resolved against the link's own directory.
    Raises OSError when the link cannot be read or the target is missing.
    """
    target = os.readlink(link_path)
    resolved = os.path.join(os.path.dirname(link_path), target)
    return os.stat(resolved).st_size


def count_lines(path: str) -> int:
    """Number of newline characters in a file, as wc -l counts them."""
    lines = 0
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            lines += chunk.count(b"\n")
    return lines
