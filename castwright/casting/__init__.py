"""Casting helpers that operate on a merged cast list."""

from .enricher import EnrichResult, VoiceDescriptionEnricher

__all__ = ["EnrichResult", "VoiceDescriptionEnricher"]
