"""Cheap token-cost estimation used for request budgeting."""

from __future__ import annotations

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate the token cost of `text` from its character count.

    This is a budgeting heuristic only; callers must tolerate both over- and
    under-estimation.
    """

    return len(text) // CHARS_PER_TOKEN
