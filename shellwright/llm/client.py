"""Provider-agnostic LLM client with response caching.

Responsibilities:
- Define the closed provider capability set (`generate`, `name`, `is_available`).
- Serve repeated requests from the LRU cache before any network call.
"""

from __future__ import annotations

from typing import Protocol

from ..models.datatypes import TranslationRequest, TranslationResponse
from .cache import ResponseCache, fingerprint


class ChatProvider(Protocol):
    """Protocol for provider adapters."""

    model: str

    def generate(self, request: TranslationRequest) -> TranslationResponse:
        """Run one request against the provider."""

    def name(self) -> str:
        """Return the provider display name."""

    def is_available(self) -> bool:
        """Return whether credentials are present."""


class LLMClient:
    """Provider adapter wrapped with an optional response cache."""

    def __init__(
        self,
        provider: ChatProvider,
        model: str,
        response_cache: ResponseCache | None = None,
    ) -> None:
        """Initialize the client; a `None` cache disables caching."""

        self.provider = provider
        self.model = model
        self.cache = response_cache
        self.last_cache_hit = False

    def generate(self, request: TranslationRequest) -> TranslationResponse:
        """Return a cached response or dispatch to the provider and cache the result."""

        self.last_cache_hit = False
        if self.cache is None:
            return self.provider.generate(request)

        key = fingerprint(request, self.model)
        cached = self.cache.lookup(key)
        if cached is not None:
            self.last_cache_hit = True
            return cached

        response = self.provider.generate(request)
        self.cache.insert(key, response)
        return response

    def provider_name(self) -> str:
        """Return the wrapped provider display name."""

        return self.provider.name()

    def is_available(self) -> bool:
        """Return whether the wrapped provider has credentials."""

        return self.provider.is_available()

    def cache_size(self) -> int:
        """Return the number of cached responses."""

        if self.cache is None:
            return 0
        return len(self.cache)

    def clear_cache(self) -> None:
        """Drop all cached responses."""

        if self.cache is not None:
            self.cache.clear()
