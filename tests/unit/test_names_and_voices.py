"""Unit tests for character name normalization and voice URI helpers."""

from __future__ import annotations

import pytest

from castwright.models.datatypes import CastEntry, CharacterRecord
from castwright.models.voices import provider_from_voice_uri, voice_assignments_from_uris
from castwright.text.names import normalize_character_name


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("JOHN", "JOHN"),
        ("john (V.O.)", "JOHN"),
        ("MARY (CONT'D) (O.S.)", "MARY"),
        ("@McClane", "MCCLANE"),
        ("BOB ^", "BOB"),
        ("  dr.   who  ", "DR. WHO"),
        ("SARAH (into phone) JONES", "SARAH JONES"),
        ("OLD MAN ((whispering))", "OLD MAN"),
        ("JOHN (V.O.", "JOHN"),
        ("(V.O.)", ""),
    ],
)
def test_normalize_character_name(raw: str, expected: str) -> None:
    """Names should lose Fountain markers and parentheticals and be uppercased."""

    assert normalize_character_name(raw) == expected


def test_record_and_entry_keys_are_case_insensitive() -> None:
    """Merge keys should be lowercase and trimmed."""

    assert CharacterRecord(name="Dr. Who").key == "dr. who"
    assert CastEntry(name=" NARRATOR ").key == "narrator"


def test_provider_from_voice_uri() -> None:
    """The provider is the lowercase scheme before `://`."""

    assert provider_from_voice_uri("apple://com.apple.voice.Alex") == "apple"
    assert provider_from_voice_uri("ElevenLabs://abc123") == "elevenlabs"
    assert provider_from_voice_uri("voices/MITCH.vox") is None
    assert provider_from_voice_uri("://missing") is None


def test_voice_assignments_from_uris_keeps_first_voice_per_provider() -> None:
    """Legacy URI lists should collapse to one voice per provider in order."""

    assignments = voice_assignments_from_uris(
        [
            "elevenlabs://first",
            "apple://com.apple.voice.Alex",
            "elevenlabs://second",
            "not-a-uri",
        ]
    )

    assert assignments == {"elevenlabs": "first", "apple": "com.apple.voice.Alex"}
    assert list(assignments) == ["elevenlabs", "apple"]


def test_cast_entry_primary_voice() -> None:
    """The primary voice is the first assignment rendered as a URI."""

    entry = CastEntry(name="ALICE", voice_assignments={"apple": "alex", "elevenlabs": "x"})

    assert entry.primary_voice == "apple://alex"
    assert CastEntry(name="BOB").primary_voice is None
