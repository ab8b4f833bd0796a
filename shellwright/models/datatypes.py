"""Core datatypes shared across shellwright modules.

Responsibilities:
- Represent immutable records exchanged between translation components.
- Provide explicit typing for provider selection and response metadata.

Key types:
- `TranslationRequest`, `TranslationResponse`, `Usage`, `ProviderIdentity`,
  and `ProviderKind`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class TranslationRequest:
    """One semantic request sent to a language model provider.

    Attributes:
        prompt: Fully rendered user prompt.
        max_tokens: Positive completion token budget.
        temperature: Sampling temperature in `[0, 2]`.
        context: Optional system context text.
    """

    prompt: str
    max_tokens: int = 150
    temperature: float = 0.1
    context: str | None = None

    def __post_init__(self) -> None:
        """Validate request bounds at construction time."""

        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int):
            raise ValueError("`max_tokens` must be a positive integer.")
        if self.max_tokens <= 0:
            raise ValueError("`max_tokens` must be a positive integer.")
        if not 0.0 <= float(self.temperature) <= 2.0:
            raise ValueError("`temperature` must be within [0, 2].")


@dataclass(frozen=True, slots=True)
class Usage:
    """Token accounting reported by a provider."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True, slots=True)
class TranslationResponse:
    """Provider output for one request.

    Attributes:
        content: Generated text.
        finish_reason: Provider stop reason, empty string when absent.
        usage: Optional token usage.
    """

    content: str
    finish_reason: str = ""
    usage: Usage | None = None


class ProviderKind(str, Enum):
    """Closed set of provider identities known to the configuration layer."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    LOCAL = "local"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class ProviderIdentity:
    """Selected provider plus its endpoint for `local`/`custom` identities."""

    kind: ProviderKind
    endpoint: str | None = None

    @classmethod
    def parse(cls, value: str) -> "ProviderIdentity":
        """Parse `openai`, `anthropic`, `local:<url>`, or `custom:<url>`."""

        raw = value.strip()
        lowered = raw.lower()
        if lowered == ProviderKind.OPENAI.value:
            return cls(ProviderKind.OPENAI)
        if lowered == ProviderKind.ANTHROPIC.value:
            return cls(ProviderKind.ANTHROPIC)
        for kind in (ProviderKind.LOCAL, ProviderKind.CUSTOM):
            prefix = f"{kind.value}:"
            if lowered.startswith(prefix):
                return cls(kind, raw[len(prefix):])
        raise ValueError(f"Unknown LLM provider: {value}")

    def __str__(self) -> str:
        """Return the configuration token for this identity."""

        if self.endpoint is None:
            return self.kind.value
        return f"{self.kind.value}:{self.endpoint}"

    @property
    def label(self) -> str:
        """Return a human-readable provider label."""

        labels = {
            ProviderKind.OPENAI: "OpenAI",
            ProviderKind.ANTHROPIC: "Anthropic",
            ProviderKind.LOCAL: "Local",
            ProviderKind.CUSTOM: "Custom",
        }
        if self.endpoint is None:
            return labels[self.kind]
        return f"{labels[self.kind]}({self.endpoint})"
