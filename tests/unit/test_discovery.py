"""Unit tests for screenplay file discovery."""

from __future__ import annotations

from pathlib import Path

from castwright.io.discovery import discover_files, extension_filter


def _touch(path: Path) -> Path:
    """Create a small file, including parent directories."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("INT. ROOM - DAY\n", encoding="utf-8")
    return path


def test_extension_filter_reads_suffix_wildcards() -> None:
    """Only `*.ext` patterns should produce an extension filter."""

    assert extension_filter(["*.fountain", "*.FDX"]) == frozenset({"fountain", "fdx"})
    assert extension_filter([]) is None
    assert extension_filter(["*.fountain", "episode-*"]) is None
    assert extension_filter(["*"]) is None


def test_discover_files_filters_by_extension_recursively(tmp_path: Path) -> None:
    """Matching files in nested folders should be found case-insensitively."""

    _touch(tmp_path / "b.fountain")
    _touch(tmp_path / "season1" / "a.FOUNTAIN")
    _touch(tmp_path / "notes.md")

    found = discover_files(tmp_path, ["*.fountain"])

    assert [path.name for path in found] == ["a.FOUNTAIN", "b.fountain"]


def test_discover_files_skips_hidden_files_and_directories(tmp_path: Path) -> None:
    """Dotfiles and anything under dot-directories should be ignored."""

    _touch(tmp_path / "visible.fountain")
    _touch(tmp_path / ".draft.fountain")
    _touch(tmp_path / ".git" / "ignored.fountain")

    assert [path.name for path in discover_files(tmp_path, ["*.fountain"])] == [
        "visible.fountain"
    ]


def test_non_suffix_pattern_makes_every_file_a_candidate(tmp_path: Path) -> None:
    """A pattern that is not `*.ext` should disable extension filtering."""

    _touch(tmp_path / "one.fountain")
    _touch(tmp_path / "two.txt")

    found = discover_files(tmp_path, ["*.fountain", "EP*"])

    assert [path.name for path in found] == ["one.fountain", "two.txt"]
    assert [path.name for path in discover_files(tmp_path, [])] == ["one.fountain", "two.txt"]


def test_discover_files_sorts_by_name_then_full_path(tmp_path: Path) -> None:
    """Equal file names in different folders should be ordered by full path."""

    second = _touch(tmp_path / "b" / "scene.fountain")
    first = _touch(tmp_path / "a" / "scene.fountain")
    earliest = _touch(tmp_path / "z" / "act.fountain")

    assert discover_files(tmp_path, ["*.fountain"]) == [earliest, first, second]


def test_missing_root_yields_no_files(tmp_path: Path) -> None:
    """A root that does not exist should produce an empty list."""

    assert discover_files(tmp_path / "nowhere", ["*.fountain"]) == []
