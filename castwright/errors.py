"""Domain exceptions for extraction pipeline and CLI diagnostics."""

from __future__ import annotations

from pathlib import Path


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ExtractionError(RuntimeError):
    """Base class for character extraction failures."""


class SourceReadError(ExtractionError):
    """Raised when a screenplay file cannot be read or decoded.

    The worker pool treats this as recoverable: the file contributes no
    characters and the run continues.
    """

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize read failure metadata for one source file."""

        super().__init__(f"Could not read screenplay file `{path}`: {reason}")
        self.path = path
        self.reason = reason


class MalformedResponseError(ExtractionError):
    """Raised when an LLM response holds no decodable character list."""

    def __init__(self, detail: str, *, response_excerpt: str = "") -> None:
        """Initialize parse failure metadata with a short response excerpt."""

        super().__init__(f"Could not parse character list from LLM response: {detail}")
        self.detail = detail
        self.response_excerpt = response_excerpt
