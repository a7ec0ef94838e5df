"""LLM-facing abstractions for character extraction and voice enrichment.

This package defines prompt libraries, the async query-function adapter, and
the rate limiting and cache helpers shared by provider calls.
"""

from .cache import ResponseCache
from .openai_client import OpenAIChatClient, OpenAIProviderError
from .prompts import PromptLibrary
from .query import OpenAIQueryFunction, QueryFunction
from .rate_limiter import RateLimiter

__all__ = [
    "PromptLibrary",
    "OpenAIChatClient",
    "OpenAIProviderError",
    "OpenAIQueryFunction",
    "QueryFunction",
    "RateLimiter",
    "ResponseCache",
]
