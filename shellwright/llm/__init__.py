"""LLM-facing components for command translation.

This package holds the natural-language classifier, the prompt template,
provider adapters, and the response cache.
"""

from .anthropic_client import AnthropicMessagesProvider
from .cache import ResponseCache, fingerprint
from .classifier import is_natural_language
from .client import ChatProvider, LLMClient
from .openai_client import OpenAIChatProvider
from .prompts import PromptTemplate, detect_os

__all__ = [
    "AnthropicMessagesProvider",
    "ChatProvider",
    "LLMClient",
    "OpenAIChatProvider",
    "PromptTemplate",
    "ResponseCache",
    "detect_os",
    "fingerprint",
    "is_natural_language",
]
