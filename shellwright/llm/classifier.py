"""Heuristic natural-language detection for raw shell input.

A conservative two-tier check: explicit request keywords first, then
sentence-like filler words on longer inputs. Direct commands such as
`ls -la` or `cd /home` rarely contain either.
"""

from __future__ import annotations


NATURAL_LANGUAGE_INDICATORS: tuple[str, ...] = (
    "create",
    "make",
    "delete",
    "remove",
    "copy",
    "move",
    "show",
    "display",
    "list",
    "find",
    "search",
    "navigate",
    "go to",
    "change to",
    "switch to",
    "how to",
    "can you",
    "please",
    "i want",
    "i need",
    "help me",
)

SENTENCE_FUNCTION_WORDS: tuple[str, ...] = (" a ", " an ", " the ", " to ", " and ", " or ")

_MIN_SENTENCE_TOKENS = 3


def is_natural_language(text: str) -> bool:
    """Return whether raw input reads as a natural-language request."""

    lowered = text.lower()
    if any(indicator in lowered for indicator in NATURAL_LANGUAGE_INDICATORS):
        return True

    if len(text.split()) > _MIN_SENTENCE_TOKENS:
        return any(word in lowered for word in SENTENCE_FUNCTION_WORDS)
    return False
