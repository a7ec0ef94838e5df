"""Voice description enrichment for cast entries.

Responsibilities:
- Ask the LLM for a short TTS voice description for each cast entry lacking one.
- Leave entries that already carry a description untouched.
- Skip and count entries whose query fails or returns nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from ..llm.prompts import PromptLibrary
from ..llm.query import QueryFunction
from ..models.datatypes import CastEntry
from ..parsing import normalize_optional_string
from ..telemetry.logger import RunLogger


@dataclass(frozen=True, slots=True)
class EnrichResult:
    """Outcome of one enrichment pass.

    Attributes:
        updated_cast: Cast in input order with new descriptions applied.
        enriched_count: Entries that received a description.
        skipped_count: Entries whose query failed or returned empty text.
    """

    updated_cast: tuple[CastEntry, ...]
    enriched_count: int = 0
    skipped_count: int = 0


class VoiceDescriptionEnricher:
    """Generate missing voice descriptions one cast entry at a time."""

    def __init__(
        self,
        prompts: PromptLibrary | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize prompt library and optional logger."""

        self.prompts = prompts or PromptLibrary()
        self.run_logger = run_logger

    async def enrich(
        self,
        cast: Sequence[CastEntry],
        genre: str | None,
        query_fn: QueryFunction,
    ) -> EnrichResult:
        """Fill in `voice_description` for entries that lack one.

        Queries run sequentially in cast order. A failing query never aborts
        the pass; the entry is kept unchanged and counted as skipped.
        """

        system_prompt = self.prompts.voice_description_system_prompt(genre)
        updated: list[CastEntry] = []
        enriched_count = 0
        skipped_count = 0

        for entry in cast:
            if entry.voice_description:
                updated.append(entry)
                continue

            user_prompt = self.prompts.voice_description_prompt(
                entry.name,
                genre=genre,
                gender=normalize_optional_string(entry.extra.get("gender")),
                performer_hint=entry.performer_hint,
            )
            try:
                response = await query_fn(user_prompt, system_prompt)
            except Exception as exc:
                if self.run_logger is not None:
                    self.run_logger.log_item_skipped("enrich", entry.name, type(exc).__name__)
                updated.append(entry)
                skipped_count += 1
                continue

            description = response.strip()
            if not description:
                if self.run_logger is not None:
                    self.run_logger.log_item_skipped("enrich", entry.name, "EmptyResponse")
                updated.append(entry)
                skipped_count += 1
                continue

            updated.append(replace(entry, voice_description=description))
            enriched_count += 1

        return EnrichResult(
            updated_cast=tuple(updated),
            enriched_count=enriched_count,
            skipped_count=skipped_count,
        )
