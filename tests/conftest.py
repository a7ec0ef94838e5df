"""Shared pytest fixtures for the full Castwright test suite."""

from __future__ import annotations

import json
from typing import Callable

import pytest

from castwright.text.scenes import SceneChunker


class RecordingQuery:
    """Async query function double that records prompt pairs in call order."""

    def __init__(self, respond: Callable[[str], str]) -> None:
        """Initialize with a synchronous `user_prompt -> response` callable."""

        self.respond = respond
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, user_prompt: str, system_prompt: str) -> str:
        """Record the call and return the scripted response."""

        self.calls.append((user_prompt, system_prompt))
        return self.respond(user_prompt)


def cue_names(prompt: str) -> list[str]:
    """Return uppercase dialogue cue lines found in a screenplay prompt."""

    chunker = SceneChunker()
    names: list[str] = []
    for line in prompt.splitlines():
        stripped = line.strip()
        if not stripped or not stripped.isupper() or stripped.endswith(":"):
            continue
        if chunker.is_scene_heading(stripped):
            continue
        names.append(stripped)
    return names


def cue_response(prompt: str) -> str:
    """Return a JSON character array naming every dialogue cue in the prompt."""

    return json.dumps(
        [{"name": name, "description": f"speaks as {name}"} for name in cue_names(prompt)]
    )


@pytest.fixture
def recording_query() -> type[RecordingQuery]:
    """Provide the recording query double class."""

    return RecordingQuery


@pytest.fixture
def cue_responder() -> Callable[[str], str]:
    """Provide the synchronous dialogue-cue responder."""

    return cue_response


@pytest.fixture
def cue_query() -> RecordingQuery:
    """Provide a recording query that answers with the prompt's dialogue cues."""

    return RecordingQuery(cue_response)


@pytest.fixture
def screenplay() -> Callable[..., str]:
    """Provide a builder for small Fountain screenplays with one cue per scene."""

    def build(*speakers: str, lines_per_scene: int = 1) -> str:
        """Build one scene per speaker, each with `lines_per_scene` dialogue lines."""

        parts = ["Title: Test Episode\n\n"]
        for index, speaker in enumerate(speakers, start=1):
            parts.append(f"INT. SCENE {index} - DAY\n\n")
            parts.append("Someone walks in.\n\n")
            parts.append(f"{speaker}\n")
            parts.extend("A line of dialogue.\n" for _ in range(lines_per_scene))
            parts.append("\n")
        return "".join(parts)

    return build
