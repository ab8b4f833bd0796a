"""Provider factory helpers for translation clients.

Responsibilities:
- Resolve provider identities to concrete adapter implementations.
- Keep the translation service independent from adapter construction.

Notes:
- `local:` and `custom:` identities are recognized but have no adapter;
  constructing one fails before any network call.
"""

from __future__ import annotations

from typing import Callable

from .config import LLMConfig
from .errors import ConfigurationError
from .llm.anthropic_client import AnthropicMessagesProvider
from .llm.cache import ResponseCache
from .llm.client import ChatProvider, LLMClient
from .llm.openai_client import OpenAIChatProvider
from .models.datatypes import ProviderKind


_ADAPTERS: dict[ProviderKind, Callable[..., ChatProvider]] = {
    ProviderKind.OPENAI: OpenAIChatProvider,
    ProviderKind.ANTHROPIC: AnthropicMessagesProvider,
}


class ProviderFactory:
    """Factory for provider-backed clients used by the translation service."""

    @staticmethod
    def create_provider(config: LLMConfig) -> ChatProvider:
        """Create an adapter for a resolved provider configuration."""

        adapter_type = _ADAPTERS.get(config.provider.kind)
        if adapter_type is None:
            raise ConfigurationError(
                f"{config.provider.kind.value.capitalize()} provider not yet implemented: "
                f"{config.provider.endpoint or ''}".rstrip()
            )
        return adapter_type(
            api_key=config.api_key,
            model=config.model,
            endpoint=config.endpoint,
            timeout_seconds=config.timeout_seconds,
        )

    @staticmethod
    def create_client(config: LLMConfig) -> LLMClient:
        """Create a cached client for a resolved provider configuration."""

        provider = ProviderFactory.create_provider(config)
        cache = ResponseCache(capacity=config.cache_capacity) if config.enable_cache else None
        return LLMClient(provider=provider, model=config.model, response_cache=cache)
