"""Castwright pipeline package.

This package contains the orchestration facade for extraction and enrichment runs.
"""

from .orchestrator import CastExtractionPipeline

__all__ = ["CastExtractionPipeline"]
