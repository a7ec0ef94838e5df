"""Text segmentation and normalization components.

This package provides token estimation, scene-aware chunking, and character
name normalization used before LLM extraction calls.
"""

from .names import normalize_character_name
from .scenes import SceneChunker
from .tokens import estimate_tokens

__all__ = ["SceneChunker", "estimate_tokens", "normalize_character_name"]
