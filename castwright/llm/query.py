"""Async query-function adapters over blocking provider clients.

Responsibilities:
- Define the `QueryFunction` callable shape shared by extraction and enrichment.
- Run blocking chat requests in worker threads so the event loop keeps dispatching.
- Reuse cached responses for identical prompt pairs within one run.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from .cache import ResponseCache
from .openai_client import DEFAULT_OPENAI_BASE_URL, OpenAIChatClient
from .rate_limiter import RateLimiter

QueryFunction = Callable[[str, str], Awaitable[str]]
"""Async `(user_prompt, system_prompt) -> response_text` callable."""


class OpenAIQueryFunction:
    """OpenAI-backed `QueryFunction` with response caching and request pacing."""

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        provider_id: str = "openai",
        api_key: str | None = None,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        temperature: float = 0.0,
        response_cache: ResponseCache | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize model settings and the shared HTTP client."""

        self.model = model
        self.provider_id = provider_id
        self.temperature = temperature
        self.cache = response_cache if response_cache is not None else ResponseCache()
        self.client = OpenAIChatClient(
            api_key=api_key,
            base_url=base_url,
            rate_limiter=rate_limiter if rate_limiter is not None else RateLimiter(),
        )

    async def __call__(self, user_prompt: str, system_prompt: str) -> str:
        """Return the model response for one prompt pair."""

        cache_key = self.cache.make_key(
            provider=self.provider_id,
            model=self.model,
            operation="query",
            input_identity={"system": system_prompt, "user": user_prompt},
        )
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        response = await asyncio.to_thread(
            self.client.chat_completion_text,
            model=self.model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=self.temperature,
        )
        self.cache.set(cache_key, response)
        return response

    @property
    def cache_hits(self) -> int:
        """Return response cache hit count."""

        return self.cache.hits

    @property
    def cache_misses(self) -> int:
        """Return response cache miss count."""

        return self.cache.misses
