"""Shared parsing helpers for configuration and runtime value normalization."""

from __future__ import annotations

from typing import Any


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


def parse_required_boolean(value: object, field_name: str) -> bool:
    """Parse a required boolean value from accepted textual tokens.

    Args:
        value: Value to parse.
        field_name: Field name for an actionable validation error message.

    Raises:
        ValueError: If the token is not one of the accepted boolean values.
    """

    parsed = parse_permissive_boolean(value)
    if parsed is not None:
        return parsed

    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


def parse_string_list(value: Any, field_name: str) -> tuple[str, ...]:
    """Parse an ordered list of non-empty strings, dropping duplicates.

    Order of first occurrence is preserved so pattern lists keep their
    configured precedence.
    """

    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, list | tuple):
        raise ValueError(f"`{field_name}` must be a list of strings.")

    seen: set[str] = set()
    items: list[str] = []
    for raw_item in value:
        item = normalize_optional_string(raw_item)
        if item is None:
            raise ValueError(f"`{field_name}` contains a blank entry.")
        if item in seen:
            continue
        seen.add(item)
        items.append(item)
    return tuple(items)


def mask_secret(value: str | None) -> str:
    """Return a display-safe representation of a secret value."""

    normalized = normalize_optional_string(value)
    if normalized is None:
        return "not set"
    if len(normalized) <= 8:
        return "****"
    return f"{normalized[:4]}...{normalized[-2:]}"
