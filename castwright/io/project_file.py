"""`PROJECT.md` front-matter parsing and generation.

Responsibilities:
- Split a project file into YAML front matter and Markdown body.
- Convert the front-matter `cast` list to and from `CastEntry` values.
- Write updated cast lists back while keeping unrelated keys and the body intact.

Key types:
- `ProjectDocument`: parsed front matter plus body text.
- `ProjectFile`: load/save helpers bound to one path on disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from ..models.datatypes import CastEntry
from ..models.voices import voice_assignments_from_uris
from ..parsing import normalize_optional_string, normalize_string_list

DEFAULT_FILE_PATTERNS: tuple[str, ...] = ("*.fountain",)
_DELIMITER = "---"
_CAST_KNOWN_KEYS = frozenset(
    {"character", "actor", "voiceDescription", "voicePrompt", "voices"}
)


@dataclass(frozen=True, slots=True)
class ProjectDocument:
    """Parsed `PROJECT.md` content.

    Attributes:
        front_matter: YAML front-matter mapping in file order.
        body: Markdown body after the closing delimiter, verbatim.
    """

    front_matter: Mapping[str, Any] = field(default_factory=dict)
    body: str = ""

    @property
    def title(self) -> str | None:
        """Return the project title, if set."""

        return normalize_optional_string(self.front_matter.get("title"))

    @property
    def genre(self) -> str | None:
        """Return the project genre, if set."""

        return normalize_optional_string(self.front_matter.get("genre"))

    @property
    def episodes_dir(self) -> str | None:
        """Return the screenplay directory relative to the project file, if set."""

        return normalize_optional_string(self.front_matter.get("episodesDir"))

    def resolved_file_patterns(self) -> tuple[str, ...]:
        """Return `filePattern` values, defaulting to `*.fountain`."""

        try:
            patterns = normalize_string_list(self.front_matter.get("filePattern"))
        except ValueError as exc:
            raise ValueError(
                "Front-matter `filePattern` must be a string or list of strings."
            ) from exc
        return tuple(patterns) or DEFAULT_FILE_PATTERNS

    def cast(self) -> list[CastEntry]:
        """Return the persisted cast list as `CastEntry` values."""

        raw_cast = self.front_matter.get("cast")
        if raw_cast is None:
            return []
        if not isinstance(raw_cast, list):
            raise ValueError("Front-matter `cast` must be a list.")
        return [cast_entry_from_mapping(item, position) for position, item in enumerate(raw_cast)]

    def with_cast(self, cast: Sequence[CastEntry]) -> ProjectDocument:
        """Return a copy whose front-matter `cast` holds `cast`."""

        originals = self._cast_items_by_key()
        front_matter = dict(self.front_matter)
        front_matter["cast"] = [
            cast_entry_to_mapping(entry, originals.get(entry.key)) for entry in cast
        ]
        return replace(self, front_matter=front_matter)

    def _cast_items_by_key(self) -> dict[str, Mapping[str, Any]]:
        """Index the raw front-matter cast items by merge key."""

        raw_cast = self.front_matter.get("cast")
        if not isinstance(raw_cast, list):
            return {}
        items: dict[str, Mapping[str, Any]] = {}
        for item in raw_cast:
            if not isinstance(item, Mapping):
                continue
            name = normalize_optional_string(item.get("character"))
            if name is not None:
                items.setdefault(name.lower().strip(), item)
        return items


def cast_entry_from_mapping(item: object, position: int = 0) -> CastEntry:
    """Build a `CastEntry` from one front-matter cast item.

    `voiceDescription` is preferred over the older `voicePrompt` key. `voices`
    may be a provider mapping or a legacy list of `scheme://id` URIs.
    """

    if not isinstance(item, Mapping):
        raise ValueError(f"Front-matter cast entry {position} must be a mapping.")
    name = normalize_optional_string(item.get("character"))
    if name is None:
        raise ValueError(f"Front-matter cast entry {position} is missing `character`.")

    raw_voices = item.get("voices")
    if raw_voices is None:
        voices: dict[str, str] = {}
    elif isinstance(raw_voices, Mapping):
        voices = {
            str(provider): str(voice_id)
            for provider, voice_id in raw_voices.items()
            if voice_id is not None
        }
    elif isinstance(raw_voices, list):
        voices = voice_assignments_from_uris(str(uri) for uri in raw_voices if uri is not None)
    else:
        raise ValueError(
            f"Front-matter cast entry `{name}` has `voices` that is neither a mapping nor a list."
        )

    return CastEntry(
        name=name,
        performer_hint=normalize_optional_string(item.get("actor")),
        voice_assignments=voices,
        voice_description=normalize_optional_string(
            item.get("voiceDescription") or item.get("voicePrompt")
        ),
        extra={key: value for key, value in item.items() if key not in _CAST_KNOWN_KEYS},
    )


def cast_entry_to_mapping(
    entry: CastEntry, original: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Serialize a `CastEntry` into a front-matter cast item.

    When `original` is the item the entry was read from, it is returned as-is
    if the entry is unchanged. Otherwise its key order is kept and only the
    changed fields are rewritten. A legacy `voices` list is written back
    verbatim while the entry's voice assignments still match it.
    """

    if original is None:
        return _new_cast_item(entry)
    if cast_entry_from_mapping(original) == entry:
        return dict(original)

    item = dict(original)
    item["character"] = entry.name
    _set_or_drop(item, "actor", entry.performer_hint)
    for key in [key for key in item if key not in _CAST_KNOWN_KEYS]:
        if key not in entry.extra:
            del item[key]
    item.update(entry.extra)
    if "voicePrompt" in item and "voiceDescription" not in item:
        _set_or_drop(item, "voicePrompt", entry.voice_description)
    else:
        item.pop("voicePrompt", None)
        _set_or_drop(item, "voiceDescription", entry.voice_description)

    raw_voices = original.get("voices")
    keeps_legacy_list = isinstance(raw_voices, list) and voice_assignments_from_uris(
        str(uri) for uri in raw_voices if uri is not None
    ) == dict(entry.voice_assignments)
    if not keeps_legacy_list:
        _set_or_drop(item, "voices", dict(entry.voice_assignments) or None)
    return item


def _set_or_drop(item: dict[str, Any], key: str, value: Any) -> None:
    """Set `key` in place, or remove it when `value` is `None`."""

    if value is None:
        item.pop(key, None)
    else:
        item[key] = value


def _new_cast_item(entry: CastEntry) -> dict[str, Any]:
    """Build a cast item for an entry with no persisted counterpart."""

    item: dict[str, Any] = {"character": entry.name}
    if entry.performer_hint is not None:
        item["actor"] = entry.performer_hint
    item.update(entry.extra)
    if entry.voice_description is not None:
        item["voiceDescription"] = entry.voice_description
    if entry.voice_assignments:
        item["voices"] = dict(entry.voice_assignments)
    return item


def parse_project(content: str, source_label: str = "PROJECT.md") -> ProjectDocument:
    """Parse project file text into front matter and body.

    Text without an opening `---` line is treated as a body with empty front
    matter.

    Raises:
        ValueError: If the front matter is unterminated, invalid YAML, or not
            a mapping.
    """

    lines = content.splitlines(keepends=True)
    if not lines or lines[0].strip() != _DELIMITER:
        return ProjectDocument(front_matter={}, body=content)

    for closing_index in range(1, len(lines)):
        if lines[closing_index].strip() == _DELIMITER:
            break
    else:
        raise ValueError(f"{source_label} front matter is missing its closing `---` line.")

    try:
        payload = yaml.safe_load("".join(lines[1:closing_index]))
    except yaml.YAMLError as exc:
        raise ValueError(f"{source_label} front matter is not valid YAML: {exc}") from exc
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"{source_label} front matter must be a mapping.")

    body = "".join(lines[closing_index + 1 :])
    return ProjectDocument(front_matter=dict(payload), body=body)


def render_project(document: ProjectDocument) -> str:
    """Render a project document back to `PROJECT.md` text."""

    front_matter = yaml.safe_dump(
        dict(document.front_matter),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=1000,
    )
    return f"{_DELIMITER}\n{front_matter}{_DELIMITER}\n{document.body}"


class ProjectFile:
    """Load and save one `PROJECT.md` file."""

    def __init__(self, path: Path) -> None:
        """Bind helper to a project file path."""

        self.path = path

    @property
    def project_dir(self) -> Path:
        """Return the directory that holds the project file."""

        return self.path.resolve().parent

    def exists(self) -> bool:
        """Return whether the project file exists."""

        return self.path.is_file()

    def load(self) -> ProjectDocument:
        """Read and parse the project file."""

        return parse_project(self.path.read_text(encoding="utf-8"), source_label=str(self.path))

    def save(self, document: ProjectDocument) -> Path:
        """Write the rendered document back to the project file."""

        self.path.write_text(render_project(document), encoding="utf-8")
        return self.path

    def discovery_root(self, document: ProjectDocument) -> Path:
        """Return the directory screenplay discovery should start from."""

        if document.episodes_dir is None:
            return self.project_dir
        return self.project_dir / document.episodes_dir
