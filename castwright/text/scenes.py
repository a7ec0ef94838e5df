"""Scene-bounded chunking for screenplay documents.

Responsibilities:
- Split screenplay text into scenes at scene-heading lines.
- Greedily pack scenes into chunks that respect a token budget.
- Keep chunk boundaries deterministic and lossless for reassembly.
"""

from __future__ import annotations

from typing import Callable

from ..models.datatypes import Chunk, Scene
from .tokens import estimate_tokens


class SceneChunker:
    """Create scene-aligned chunks from one screenplay document."""

    SCENE_HEADING_MARKERS = (
        "INT./EXT.",
        "EXT./INT.",
        "INT/EXT",
        "I/E.",
        "INT.",
        "EXT.",
        "EST.",
        "INT ",
        "EXT ",
    )

    def __init__(self, estimator: Callable[[str], int] = estimate_tokens) -> None:
        """Initialize chunker with a token estimation function."""

        self._estimate = estimator

    def is_scene_heading(self, line: str) -> bool:
        """Return whether a line starts a new scene."""

        normalized = line.strip().upper()
        return normalized.startswith(self.SCENE_HEADING_MARKERS)

    def split_scenes(self, text: str) -> list[Scene]:
        """Split text into ordered scenes, keeping line endings verbatim.

        Text before the first heading forms an implicit leading scene with
        `heading=None`.
        """

        scenes: list[Scene] = []
        current_lines: list[str] = []
        current_heading: str | None = None

        for line in text.splitlines(keepends=True):
            if self.is_scene_heading(line):
                if current_lines:
                    scenes.append(
                        Scene(
                            index=len(scenes),
                            heading=current_heading,
                            text="".join(current_lines),
                        )
                    )
                    current_lines = []
                current_heading = line.strip()
            current_lines.append(line)

        if current_lines:
            scenes.append(
                Scene(index=len(scenes), heading=current_heading, text="".join(current_lines))
            )
        return scenes

    def to_chunks(self, text: str, token_budget: int) -> list[Chunk]:
        """Split text into scene-aligned chunks at or below `token_budget`.

        Args:
            text: Full screenplay text.
            token_budget: Maximum estimated tokens per chunk.

        Returns:
            Ordered chunks. A single scene above budget is emitted alone and
            unmodified.
        """

        if token_budget <= 0:
            raise ValueError("token_budget must be a positive integer.")

        chunks: list[Chunk] = []
        pending: list[Scene] = []
        pending_tokens = 0

        def flush() -> None:
            nonlocal pending, pending_tokens
            if pending:
                chunks.append(
                    Chunk(index=len(chunks), scenes=tuple(pending), token_estimate=pending_tokens)
                )
            pending = []
            pending_tokens = 0

        for scene in self.split_scenes(text):
            scene_tokens = self._estimate(scene.text)
            if scene_tokens > token_budget:
                flush()
                chunks.append(
                    Chunk(index=len(chunks), scenes=(scene,), token_estimate=scene_tokens)
                )
                continue
            if pending and pending_tokens + scene_tokens > token_budget:
                flush()
            pending.append(scene)
            pending_tokens += scene_tokens

        flush()
        return chunks
