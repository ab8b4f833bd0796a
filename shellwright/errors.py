"""Domain exceptions for translation, provider, and CLI diagnostics.

Error taxonomy:
- `ConfigurationError`: fatal to client construction, never retried.
- `TransportError`: network failure, timeout, or non-2xx provider status.
- `ParseError`: malformed or empty provider response body.
- `CommandStageError`: stage-scoped failure rendered by the CLI.
"""

from __future__ import annotations


class ShellwrightError(RuntimeError):
    """Base class for all shellwright errors."""


class ConfigurationError(ShellwrightError):
    """Raised when settings cannot produce a usable provider client."""


class ProviderError(ShellwrightError):
    """Raised when a single provider `generate` call fails."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
        body: str = "",
    ) -> None:
        """Initialize provider error metadata for diagnostics."""

        super().__init__(message)
        self.provider = provider
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code
        self.body = body


class TransportError(ProviderError):
    """Raised on network failure, timeout, or non-success HTTP status."""


class ParseError(ProviderError):
    """Raised when a provider response body is malformed or empty."""


class CommandStageError(ShellwrightError):
    """Raised when a specific CLI command stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
