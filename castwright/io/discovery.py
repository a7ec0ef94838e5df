"""Screenplay file discovery under a project directory.

Responsibilities:
- Walk a project tree recursively, skipping hidden files and directories.
- Filter candidates by `*.ext` patterns, case-insensitively.
- Return a deterministic, name-sorted file list.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence


def extension_filter(patterns: Sequence[str]) -> frozenset[str] | None:
    """Return lowercase extensions selected by `patterns`.

    Returns `None` when every file is a candidate: no patterns were given,
    or at least one pattern is not a simple `*.ext` suffix wildcard.
    """

    extensions: set[str] = set()
    for pattern in patterns:
        if not pattern.startswith("*.") or len(pattern) == 2:
            return None
        extensions.add(pattern[2:].lower())
    return frozenset(extensions) or None


def discover_files(root: Path, patterns: Sequence[str]) -> list[Path]:
    """Find candidate screenplay files below `root`.

    Args:
        root: Directory to search recursively.
        patterns: Glob-style patterns such as `*.fountain`.

    Returns:
        Regular files sorted by file name, with the full path as tie-break.
        A missing root yields an empty list.
    """

    if not root.is_dir():
        return []

    extensions = extension_filter(patterns)
    found: list[Path] = []
    for directory, subdirectories, filenames in os.walk(root):
        subdirectories[:] = [name for name in subdirectories if not name.startswith(".")]
        for filename in filenames:
            if filename.startswith("."):
                continue
            path = Path(directory) / filename
            if not path.is_file():
                continue
            if extensions is not None and not any(
                filename.lower().endswith(f".{extension}") for extension in extensions
            ):
                continue
            found.append(path)

    return sorted(found, key=lambda path: (path.name, str(path)))
