"""Token usage accounting for provider calls.

Responsibilities:
- Accumulate provider-reported token usage across a session.
- Provide summary output for the interactive shell.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models.datatypes import Usage


@dataclass(slots=True)
class UsageTracker:
    """Collect and summarize session-level token counters."""

    provider_calls: int = 0
    cache_hits: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def add_provider_call(self, usage: Usage | None) -> None:
        """Record one network-backed response and its usage when reported."""

        self.provider_calls += 1
        if usage is None:
            return
        self.prompt_tokens += max(0, usage.prompt_tokens)
        self.completion_tokens += max(0, usage.completion_tokens)

    def add_cache_hit(self) -> None:
        """Record one response served from cache."""

        self.cache_hits += 1

    def summary(self) -> dict[str, int]:
        """Return a summary dictionary for reporting."""

        return {
            "provider_calls": self.provider_calls,
            "cache_hits": self.cache_hits,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.prompt_tokens + self.completion_tokens,
        }
