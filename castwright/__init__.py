"""Top-level package for Castwright.

Castwright extracts speaking characters from screenplay files with an LLM and
merges them into a persisted cast list. The main orchestration entry point is
`CastExtractionPipeline`.
"""

from .pipeline import CastExtractionPipeline

__all__ = ["CastExtractionPipeline", "__version__"]

__version__ = "0.1.0"
