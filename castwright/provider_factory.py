"""Provider factory helpers for LLM query functions.

Responsibilities:
- Resolve provider identifiers to concrete async query functions.
- Keep orchestration independent from concrete provider class construction.

Notes:
- Only `openai` (including OpenAI-compatible local servers via `base_url`) is implemented.
"""

from __future__ import annotations

from .llm.openai_client import DEFAULT_OPENAI_BASE_URL
from .llm.query import OpenAIQueryFunction, QueryFunction


class ProviderFactory:
    """Factory for provider-backed query functions used by extraction and enrichment."""

    @staticmethod
    def create_query_function(
        provider_id: str,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        temperature: float = 0.0,
    ) -> QueryFunction:
        """Create a query function for a configured provider identifier."""

        if provider_id == "openai":
            return OpenAIQueryFunction(
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                base_url=base_url or DEFAULT_OPENAI_BASE_URL,
                temperature=temperature,
            )
        raise ValueError(f"Unsupported query provider `{provider_id}`.")
