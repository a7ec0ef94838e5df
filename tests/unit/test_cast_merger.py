"""Unit tests for merging extracted characters into a persisted cast."""

from __future__ import annotations

from castwright.extraction.merger import CastMerger
from castwright.models.datatypes import CastEntry, CharacterRecord


def _records(*names: str) -> list[CharacterRecord]:
    """Build bare records for the given names."""

    return [CharacterRecord(name=name) for name in names]


def test_new_characters_become_fresh_entries_sorted_by_name() -> None:
    """Unknown names should become empty entries in case-insensitive name order."""

    merged = CastMerger().merge([_records("ZED", "amy"), _records("Bob")])

    assert [entry.name for entry in merged] == ["amy", "Bob", "ZED"]
    assert all(entry.voice_assignments == {} for entry in merged)
    assert all(entry.performer_hint is None for entry in merged)


def test_case_insensitive_collapse_keeps_first_mention() -> None:
    """Names differing only by case or padding should collapse to the first mention."""

    merged = CastMerger().merge(
        [
            [CharacterRecord(name="ALICE", voice_description="first")],
            [CharacterRecord(name="alice", voice_description="second"), CharacterRecord(name=" Alice ")],
        ]
    )

    assert merged == [CastEntry(name="ALICE", voice_description="first")]


def test_prior_voice_data_is_preserved_for_known_names() -> None:
    """A known name should keep its prior entry verbatim, voices included."""

    prior = CastEntry(
        name="Alice",
        performer_hint="Jane Doe",
        voice_assignments={"elevenlabs": "voice-1"},
        voice_description="Warm alto.",
        extra={"gender": "F"},
    )

    merged = CastMerger().merge(
        [[CharacterRecord(name="ALICE", voice_description="New guess.")]],
        prior_cast=[prior],
    )

    assert merged == [prior]
    assert merged[0].voice_assignments == {"elevenlabs": "voice-1"}


def test_orphaned_prior_entries_are_retained() -> None:
    """Prior entries absent from this extraction should never be deleted."""

    narrator = CastEntry(name="NARRATOR", voice_assignments={"apple": "alex"})

    merged = CastMerger().merge([_records("BOB")], prior_cast=[narrator])

    assert merged == [CastEntry(name="BOB"), narrator]


def test_empty_extraction_returns_prior_cast_sorted() -> None:
    """With nothing extracted the prior cast should come back sorted."""

    prior = [CastEntry(name="zoe"), CastEntry(name="Adam")]

    assert [entry.name for entry in CastMerger().merge([], prior_cast=prior)] == ["Adam", "zoe"]
    assert CastMerger().merge([]) == []


def test_merge_is_idempotent_against_its_own_output() -> None:
    """Merging the same extraction with its output as prior cast changes nothing."""

    extracted = [
        _records("ALICE", "BOB"),
        [CharacterRecord(name="carl", voice_description="Nasal.")],
    ]
    prior = [CastEntry(name="NARRATOR", voice_assignments={"apple": "alex"})]

    first = CastMerger().merge(extracted, prior_cast=prior)
    second = CastMerger().merge(extracted, prior_cast=first)

    assert second == first


def test_records_with_empty_keys_are_skipped() -> None:
    """Blank names should never produce entries."""

    merged = CastMerger().merge([[CharacterRecord(name="  "), CharacterRecord(name="DAN")]])

    assert [entry.name for entry in merged] == ["DAN"]
