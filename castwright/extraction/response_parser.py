"""Lenient parsing of LLM character-list responses.

Responsibilities:
- Locate the JSON array inside chatty responses or Markdown code fences.
- Validate each entry's shape and fail the whole response on any mismatch.
- Normalize character names into canonical uppercase form.
"""

from __future__ import annotations

import json
from typing import Any

from ..errors import MalformedResponseError
from ..models.datatypes import CharacterRecord
from ..text.names import normalize_character_name

_EXCERPT_CHARS = 120
_ROLE_KEYS = ("description", "role")
_VOICE_KEYS = ("voiceDescription", "voice_description")


def _excerpt(response: str) -> str:
    """Return a short single-line excerpt of a response for diagnostics."""

    compact = " ".join(response.split())
    if len(compact) <= _EXCERPT_CHARS:
        return compact
    return f"{compact[: _EXCERPT_CHARS - 3]}..."


def _optional_text(entry: dict[str, Any], keys: tuple[str, ...], position: int) -> str | None:
    """Return the first present string value among `keys`, or `None`."""

    for key in keys:
        if key not in entry or entry[key] is None:
            continue
        value = entry[key]
        if not isinstance(value, str):
            raise MalformedResponseError(
                f"entry {position} field `{key}` must be a string or null."
            )
        stripped = value.strip()
        return stripped or None
    return None


def parse_character_records(response: str) -> list[CharacterRecord]:
    """Parse an LLM response into character records.

    The substring from the first `[` to the last `]` is decoded as JSON. It
    must be an array of objects, each with a string `name`. Entries whose
    name is blank or normalizes to an empty string are dropped.

    Args:
        response: Raw LLM response text.

    Returns:
        Records in response order; duplicates are kept for the caller to resolve.

    Raises:
        MalformedResponseError: If no array is found, the JSON is invalid, or
            any entry has the wrong shape.
    """

    start = response.find("[")
    end = response.rfind("]")
    if start == -1 or end < start:
        raise MalformedResponseError(
            "no JSON array found", response_excerpt=_excerpt(response)
        )

    try:
        payload = json.loads(response[start : end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(
            f"invalid JSON ({exc.msg} at line {exc.lineno})",
            response_excerpt=_excerpt(response),
        ) from exc

    if not isinstance(payload, list):
        raise MalformedResponseError(
            "top-level JSON value is not an array", response_excerpt=_excerpt(response)
        )

    records: list[CharacterRecord] = []
    for position, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise MalformedResponseError(
                f"entry {position} is not an object", response_excerpt=_excerpt(response)
            )
        raw_name = entry.get("name")
        if not isinstance(raw_name, str):
            raise MalformedResponseError(
                f"entry {position} is missing a string `name`",
                response_excerpt=_excerpt(response),
            )

        name = normalize_character_name(raw_name)
        if not name:
            continue
        records.append(
            CharacterRecord(
                name=name,
                role_description=_optional_text(entry, _ROLE_KEYS, position),
                voice_description=_optional_text(entry, _VOICE_KEYS, position),
            )
        )
    return records
