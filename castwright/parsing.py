"""Shared parsing helpers for runtime, config, and front-matter value normalization."""

from __future__ import annotations


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer from an int or numeric string.

    Raises:
        ValueError: If the value is a boolean, non-numeric, or below one.
    """

    message = f"`{field_name}` must be a positive integer."
    if isinstance(value, bool):
        raise ValueError(message)
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(message)
        try:
            parsed = int(normalized)
        except ValueError as exc:
            raise ValueError(message) from exc
    if parsed <= 0:
        raise ValueError(message)
    return parsed


def normalize_string_list(value: object) -> list[str]:
    """Normalize a string or list of strings into a list of non-empty strings.

    Used for front-matter keys such as `filePattern` that accept either form.
    """

    if value is None:
        return []
    if isinstance(value, str):
        single = normalize_optional_string(value)
        return [single] if single is not None else []
    if isinstance(value, list | tuple):
        return [
            normalized
            for normalized in (normalize_optional_string(item) for item in value)
            if normalized is not None
        ]
    raise ValueError("Expected a string or a list of strings.")
