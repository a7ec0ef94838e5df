"""Cast list merging with prior-cast preservation.

Responsibilities:
- Collapse character records across chunks and files case-insensitively.
- Keep prior cast entries verbatim so assigned voices are never lost.
- Produce a deterministic, name-sorted cast list.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..models.datatypes import CastEntry, CharacterRecord


class CastMerger:
    """Merge per-file extraction results into one cast list."""

    def merge(
        self,
        extracted: Iterable[Sequence[CharacterRecord]],
        prior_cast: Sequence[CastEntry] | None = None,
    ) -> list[CastEntry]:
        """Merge extracted records against an optional prior cast.

        Args:
            extracted: Per-file record lists in discovery order.
            prior_cast: Previously persisted cast, if any.

        Returns:
            Cast entries sorted by name, case-insensitive. Known names keep
            their prior entry unchanged; unseen prior entries are retained.
        """

        prior_by_key: dict[str, CastEntry] = {}
        for entry in prior_cast or ():
            prior_by_key.setdefault(entry.key, entry)

        merged: dict[str, CastEntry] = {}
        for records in extracted:
            for record in records:
                key = record.key
                if not key or key in merged:
                    continue
                merged[key] = prior_by_key.get(key) or CastEntry(
                    name=record.name,
                    voice_description=record.voice_description,
                )

        for key, entry in prior_by_key.items():
            merged.setdefault(key, entry)

        return sorted(merged.values(), key=lambda entry: entry.name.casefold())
