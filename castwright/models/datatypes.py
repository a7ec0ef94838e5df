"""Core datatypes shared across Castwright modules.

Responsibilities:
- Represent immutable records exchanged between extraction stages.
- Provide explicit typing for deterministic merging and serialization.

Key types:
- `CharacterRecord`, `CastEntry`, `Scene`, `Chunk`, `IndexedResult`,
  `FileExtraction`, and `ExtractionReport`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, Mapping, TypeVar

_Item = TypeVar("_Item")
_Value = TypeVar("_Value")


@dataclass(frozen=True, slots=True)
class CharacterRecord:
    """One character candidate extracted from an LLM response.

    Attributes:
        name: Normalized uppercase character name, never empty.
        role_description: Optional one-sentence role summary.
        voice_description: Optional freeform TTS casting guidance.
    """

    name: str
    role_description: str | None = None
    voice_description: str | None = None

    @property
    def key(self) -> str:
        """Return the case-insensitive deduplication key for this record."""

        return self.name.lower().strip()


@dataclass(frozen=True, slots=True)
class CastEntry:
    """One resolved cast member in a persisted cast list.

    Attributes:
        name: Character name, unique case-insensitively within a cast.
        performer_hint: Optional human actor reference carried from a prior cast.
        voice_assignments: Ordered provider scheme to opaque voice identifier mapping.
        voice_description: Optional freeform TTS casting guidance.
        extra: Additional persisted keys kept so prior entries round-trip verbatim.
    """

    name: str
    performer_hint: str | None = None
    voice_assignments: Mapping[str, str] = field(default_factory=dict)
    voice_description: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Return the case-insensitive merge key for this entry."""

        return self.name.lower().strip()

    @property
    def primary_voice(self) -> str | None:
        """Return the first assigned voice as `provider://id`, if any."""

        for provider, voice_id in self.voice_assignments.items():
            return f"{provider}://{voice_id}"
        return None


@dataclass(frozen=True, slots=True)
class Scene:
    """A contiguous slice of one screenplay starting at a scene heading.

    Attributes:
        index: 0-based scene index within the document.
        heading: Heading line without line ending, or `None` for the leading scene.
        text: Verbatim scene text including line endings.
    """

    index: int
    heading: str | None
    text: str


@dataclass(frozen=True, slots=True)
class Chunk:
    """A budget-bounded group of consecutive scenes from one document."""

    index: int
    scenes: tuple[Scene, ...]
    token_estimate: int

    @property
    def text(self) -> str:
        """Return the chunk text as the concatenation of its scenes."""

        return "".join(scene.text for scene in self.scenes)


@dataclass(frozen=True, slots=True)
class IndexedResult(Generic[_Item, _Value]):
    """Outcome of one worker pool item tagged with its original input index.

    Attributes:
        index: 0-based position of the item in the pool input.
        item: The work item itself.
        value: Operation result, or `None` when the item failed recoverably.
        error: Recovered exception, or `None` on success.
    """

    index: int
    item: _Item
    value: _Value | None = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the operation completed without a recovered error."""

        return self.error is None


@dataclass(frozen=True, slots=True)
class FileExtraction:
    """Per-file extraction outcome for user-facing reporting."""

    path: Path
    records: tuple[CharacterRecord, ...] = ()
    status: str = "ok"
    detail: str | None = None

    @property
    def label(self) -> str:
        """Return the display label for this file."""

        return self.path.name


@dataclass(frozen=True, slots=True)
class ExtractionReport:
    """Result of one multi-file extraction run.

    Attributes:
        cast: Final merged cast list sorted by name.
        files: Per-file outcomes in discovery order.
        file_patterns: Patterns used for discovery.
    """

    cast: tuple[CastEntry, ...]
    files: tuple[FileExtraction, ...]
    file_patterns: tuple[str, ...] = ()

    @property
    def no_files_found(self) -> bool:
        """Return whether discovery produced no candidate files."""

        return not self.files

    @property
    def extracted_count(self) -> int:
        """Return the number of character records extracted across all files."""

        return sum(len(extraction.records) for extraction in self.files)
