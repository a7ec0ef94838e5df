"""Shared typed data models for Castwright.

This package contains dataclasses used across extraction modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    CastEntry,
    CharacterRecord,
    Chunk,
    ExtractionReport,
    FileExtraction,
    IndexedResult,
    Scene,
)

__all__ = [
    "CastEntry",
    "CharacterRecord",
    "Chunk",
    "ExtractionReport",
    "FileExtraction",
    "IndexedResult",
    "Scene",
]
