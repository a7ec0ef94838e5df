"""Voice assignment helpers for provider-scoped voice identifiers."""

from __future__ import annotations

from typing import Iterable


def provider_from_voice_uri(voice_uri: str) -> str | None:
    """Return the lowercase provider scheme of a `scheme://id` voice URI.

    Returns `None` for values without `://` or with an empty scheme.
    """

    scheme, separator, _ = voice_uri.partition("://")
    if not separator or not scheme.strip():
        return None
    return scheme.strip().lower()


def voice_assignments_from_uris(voice_uris: Iterable[str]) -> dict[str, str]:
    """Convert legacy voice URI lists into an ordered provider mapping.

    The first voice per provider wins; URIs without a scheme are skipped.
    """

    assignments: dict[str, str] = {}
    for uri in voice_uris:
        provider = provider_from_voice_uri(uri)
        if provider is None or provider in assignments:
            continue
        assignments[provider] = uri.partition("://")[2]
    return assignments
