"""Unit tests for token estimation, scene splitting, and chunk packing."""

from __future__ import annotations

import pytest

from castwright.text.scenes import SceneChunker
from castwright.text.tokens import estimate_tokens


def _line_count(text: str) -> int:
    """Estimate one token per line for readable budget arithmetic."""

    return text.count("\n")


def _scene(index: int, body_lines: int = 2) -> str:
    """Build one scene with a heading and `body_lines` dialogue lines."""

    return f"INT. ROOM {index} - DAY\n" + "".join(
        f"Line {line}.\n" for line in range(body_lines)
    )


def test_estimate_tokens_uses_four_characters_per_token() -> None:
    """Token estimate should be the floor of character count divided by four."""

    assert estimate_tokens("") == 0
    assert estimate_tokens("abc") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("x" * 4001) == 1000


@pytest.mark.parametrize(
    "line",
    [
        "INT. KITCHEN - NIGHT",
        "ext. parking lot - day",
        "  INT./EXT. CAR - MOVING",
        "EXT./INT. HOUSE - CONTINUOUS",
        "INT/EXT BARN",
        "I/E. SHIP - DAY",
        "EST. CITY SKYLINE",
        "INT OFFICE",
        "EXT BEACH",
    ],
)
def test_is_scene_heading_accepts_common_heading_forms(line: str) -> None:
    """Scene heading detection should be case-insensitive and whitespace tolerant."""

    assert SceneChunker().is_scene_heading(line) is True


@pytest.mark.parametrize("line", ["INTERIOR DESIGN", "EXTRA", "JOHN", "", "the int. is here"])
def test_is_scene_heading_rejects_other_lines(line: str) -> None:
    """Lines that merely contain heading letters should not start scenes."""

    assert SceneChunker().is_scene_heading(line) is False


def test_split_scenes_keeps_leading_text_as_implicit_scene() -> None:
    """Text before the first heading should form a scene without a heading."""

    text = "Title: Pilot\n\n" + _scene(1) + _scene(2)

    scenes = SceneChunker().split_scenes(text)

    assert [scene.heading for scene in scenes] == [None, "INT. ROOM 1 - DAY", "INT. ROOM 2 - DAY"]
    assert [scene.index for scene in scenes] == [0, 1, 2]
    assert "".join(scene.text for scene in scenes) == text


def test_split_scenes_without_headings_returns_single_scene() -> None:
    """A document with no headings should be one implicit scene."""

    scenes = SceneChunker().split_scenes("JOHN\nHello.\r\nMARY\nHi.")

    assert len(scenes) == 1
    assert scenes[0].heading is None
    assert scenes[0].text == "JOHN\nHello.\r\nMARY\nHi."


def test_to_chunks_packs_scenes_greedily_under_budget() -> None:
    """Scenes should be packed while the running estimate stays within budget."""

    text = "".join(_scene(index) for index in range(5))
    chunker = SceneChunker(estimator=_line_count)

    chunks = chunker.to_chunks(text, token_budget=6)

    assert [len(chunk.scenes) for chunk in chunks] == [2, 2, 1]
    assert [chunk.token_estimate for chunk in chunks] == [6, 6, 3]
    assert [chunk.index for chunk in chunks] == [0, 1, 2]


def test_to_chunks_reconstructs_document_exactly() -> None:
    """Concatenating chunk texts in order should reproduce the document verbatim."""

    text = "FADE IN:\n\n" + "".join(
        f"INT. SCENE {index} - DAY\n\nCHARACTER_{index}\nHello there, number {index}.\n\n"
        for index in range(10)
    )

    chunks = SceneChunker().to_chunks(text, token_budget=20)

    assert len(chunks) > 1
    assert "".join(chunk.text for chunk in chunks) == text
    for chunk in chunks:
        assert chunk.token_estimate <= 20 or len(chunk.scenes) == 1


def test_to_chunks_emits_single_oversized_scene_unmodified() -> None:
    """A lone scene above budget should be one chunk with the scene text intact."""

    text = "INT. HALL - DAY\n" + "BOB\n" + "Very long line. " * 200 + "\n"

    chunks = SceneChunker().to_chunks(text, token_budget=10)

    assert len(chunks) == 1
    assert chunks[0].text == text
    assert chunks[0].token_estimate > 10


def test_to_chunks_flushes_pending_chunk_before_oversized_scene() -> None:
    """An oversized scene should close the pending chunk and stand alone."""

    text = _scene(0) + _scene(1, body_lines=20) + _scene(2)
    chunker = SceneChunker(estimator=_line_count)

    chunks = chunker.to_chunks(text, token_budget=8)

    assert [[scene.heading for scene in chunk.scenes] for chunk in chunks] == [
        ["INT. ROOM 0 - DAY"],
        ["INT. ROOM 1 - DAY"],
        ["INT. ROOM 2 - DAY"],
    ]
    assert "".join(chunk.text for chunk in chunks) == text


@pytest.mark.parametrize("budget", [0, -5])
def test_to_chunks_rejects_non_positive_budget(budget: int) -> None:
    """A non-positive token budget should raise `ValueError`."""

    with pytest.raises(ValueError, match="token_budget"):
        SceneChunker().to_chunks("INT. A - DAY\n", token_budget=budget)


def test_to_chunks_of_empty_text_is_empty() -> None:
    """Empty input should produce no chunks."""

    assert SceneChunker().to_chunks("", token_budget=100) == []
