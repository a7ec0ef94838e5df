"""Character extraction components.

This package holds the LLM response parser, the per-file extractor, the
bounded worker pool, and the cast merger.
"""

from .extractor import CharacterExtractor
from .merger import CastMerger
from .response_parser import parse_character_records
from .worker_pool import ExtractionWorkerPool, ProgressCallback, ProgressCounter

__all__ = [
    "CastMerger",
    "CharacterExtractor",
    "ExtractionWorkerPool",
    "ProgressCallback",
    "ProgressCounter",
    "parse_character_records",
]
