"""Character name normalization for screenplay cues."""

from __future__ import annotations

import re

_PARENTHETICAL_RE = re.compile(r"\([^()]*\)")
_UNCLOSED_PARENTHETICAL_RE = re.compile(r"\([^()]*$")


def normalize_character_name(raw_name: str) -> str:
    """Normalize a character cue into its canonical uppercase name.

    Strips Fountain markers (`@` forced cue, `^` dual dialogue), removes
    parentheticals such as `(V.O.)`, `(O.S.)` or `(CONT'D)`, collapses
    whitespace, and uppercases. The result may be empty.
    """

    name = raw_name.strip().lstrip("@").rstrip("^").strip()
    previous = None
    while previous != name:
        previous = name
        name = _PARENTHETICAL_RE.sub(" ", name)
    name = _UNCLOSED_PARENTHETICAL_RE.sub(" ", name)
    return " ".join(name.split()).upper()
