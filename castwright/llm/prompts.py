"""Prompt template library for LLM-backed casting steps.

Responsibilities:
- Centralize prompt construction for character extraction and voice enrichment.
- Keep prompts deterministic for a given input so response caching stays effective.
"""

from __future__ import annotations


class PromptLibrary:
    """Build prompt strings for supported LLM tasks."""

    def extraction_system_prompt(self) -> str:
        """Return the system prompt requesting a strict JSON character array."""

        return (
            "You are a screenplay analyst. Extract all speaking characters from the "
            "provided screenplay excerpt.\n"
            "Return ONLY a JSON array with this exact format:\n"
            "[\n"
            '  {"name": "CHARACTER_NAME", "description": "brief role description", '
            '"voiceDescription": "optional voice casting notes"},\n'
            "  ...\n"
            "]\n\n"
            "Character names must be UPPERCASE exactly as they appear in dialogue cues, "
            "without extensions such as (V.O.), (O.S.) or (CONT'D).\n"
            "Only include characters with dialogue; exclude action-only characters.\n"
            "Return [] when the excerpt has no dialogue."
        )

    def extraction_prompt(self, screenplay_text: str) -> str:
        """Return the user prompt wrapping one screenplay chunk."""

        return f"Extract characters from this screenplay:\n\n{screenplay_text}"

    def voice_description_system_prompt(self, genre: str | None) -> str:
        """Return the casting-director system prompt for one production genre."""

        genre_label = genre or "unspecified"
        return (
            f"You are a professional voice casting director for a {genre_label} production. "
            "Given a character, generate a concise voice description suitable for "
            "text-to-speech casting. Include vocal pitch, pace, tone, age range, energy "
            "level, and emotional quality. If an actor reference is provided, describe a "
            "voice inspired by that actor's vocal qualities. Respond with ONLY the voice "
            "description text in 1-2 sentences."
        )

    def voice_description_prompt(
        self,
        character: str,
        *,
        genre: str | None = None,
        gender: str | None = None,
        performer_hint: str | None = None,
    ) -> str:
        """Return the user prompt describing one cast member to enrich."""

        lines = [f"Character: {character}"]
        if gender:
            lines.append(f"Gender: {gender}")
        if performer_hint:
            lines.append(f"Actor reference: {performer_hint}")
        if genre:
            lines.append(f"Genre: {genre}")
        lines.append("Generate a voice description for this character.")
        return "\n".join(lines)
