"""Per-file character extraction through an injected LLM query function.

Responsibilities:
- Decide whether a document fits one request or needs scene chunking.
- Query the LLM once per chunk, strictly in chunk order.
- Deduplicate records across chunks with first-seen precedence.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from ..errors import SourceReadError
from ..llm.prompts import PromptLibrary
from ..llm.query import QueryFunction
from ..models.datatypes import CharacterRecord
from ..telemetry.logger import RunLogger
from ..text.scenes import SceneChunker
from ..text.tokens import estimate_tokens
from .response_parser import parse_character_records

DEFAULT_TOKEN_BUDGET = 2000


class CharacterExtractor:
    """Extract speaking characters from one screenplay document."""

    def __init__(
        self,
        query_fn: QueryFunction,
        token_budget: int = DEFAULT_TOKEN_BUDGET,
        chunker: SceneChunker | None = None,
        prompts: PromptLibrary | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize extractor with a query function and per-request budget."""

        if token_budget <= 0:
            raise ValueError("token_budget must be a positive integer.")
        self.query_fn = query_fn
        self.token_budget = token_budget
        self.chunker = chunker or SceneChunker()
        self.prompts = prompts or PromptLibrary()
        self.run_logger = run_logger

    def plan_requests(self, text: str) -> list[str]:
        """Return the request texts a document would be sent as, in order."""

        if not text.strip():
            return []
        if estimate_tokens(text) <= self.token_budget:
            return [text]
        return [chunk.text for chunk in self.chunker.to_chunks(text, self.token_budget)]

    async def extract_text(self, text: str, label: str = "") -> list[CharacterRecord]:
        """Extract deduplicated characters from one document's text.

        Args:
            text: Full screenplay text.
            label: Display label used in log events.

        Returns:
            Records in first-seen order across chunks.
        """

        request_texts = self.plan_requests(text)
        if len(request_texts) > 1 and self.run_logger is not None:
            self.run_logger.log_chunked("extract", label or "text", len(request_texts))

        system_prompt = self.prompts.extraction_system_prompt()
        seen: dict[str, CharacterRecord] = {}
        for request_text in request_texts:
            response = await self.query_fn(
                self.prompts.extraction_prompt(request_text),
                system_prompt,
            )
            for record in parse_character_records(response):
                seen.setdefault(record.key, record)
        return list(seen.values())

    async def extract_file(self, path: Path) -> list[CharacterRecord]:
        """Read one UTF-8 screenplay file and extract its characters.

        Raises:
            SourceReadError: If the file is missing, unreadable, or not UTF-8.
        """

        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise SourceReadError(path, "not valid UTF-8 text") from exc
        except OSError as exc:
            raise SourceReadError(path, exc.strerror or type(exc).__name__) from exc
        return await self.extract_text(text, label=path.name)
