"""CLI runtime resolution helpers.

This module isolates config loading, runtime source assembly, secure API-key
lookup, and the confirmation prompt from the command wiring layer.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, Protocol

import typer

from .config import ConfigLoader, RuntimeConfigSources, ShellwrightConfig
from .credentials import create_credential_store
from .errors import CommandStageError, ConfigurationError
from .models.datatypes import ProviderIdentity
from .parsing import normalize_optional_string
from .safety import validate_confirmation
from .telemetry.logger import RunLogger
from .translation import TranslationService


class CredentialStoreProtocol(Protocol):
    """Protocol for secure credential store operations used by runtime resolution."""

    def get_api_key(self) -> str | None:
        """Return currently stored API key, if available."""


def load_config(config_path: Path | None) -> ShellwrightConfig:
    """Load config from an explicit path or the default location.

    An explicit path must exist; the default location is created on first run.
    """

    try:
        if config_path is not None:
            return ConfigLoader.from_yaml(config_path)
        return ConfigLoader.load()
    except FileNotFoundError as exc:
        raise CommandStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ConfigurationError as exc:
        raise CommandStageError(
            stage="config",
            detail=str(exc),
            hint="Fix config schema/values and rerun.",
        ) from exc
    except OSError as exc:
        raise CommandStageError(
            stage="config",
            detail=f"Failed to read config: {exc}",
            hint="Verify file permissions.",
        ) from exc


def _set_runtime_cli_value(
    runtime_cli_values: dict[str, str],
    key: str,
    value: str | None,
) -> None:
    """Set a normalized runtime CLI value when user input is present."""

    normalized = normalize_optional_string(value)
    if normalized is not None:
        runtime_cli_values[key] = normalized


def resolve_runtime_sources(
    config: ShellwrightConfig,
    provider: str | None = None,
    model: str | None = None,
    api_key: str | None = None,
    endpoint: str | None = None,
    env: Mapping[str, str] | None = None,
    credential_store_factory: Callable[[str], CredentialStoreProtocol] = create_credential_store,
) -> RuntimeConfigSources:
    """Assemble CLI, secure-storage, and environment sources for key resolution."""

    runtime_cli_values: dict[str, str] = {}
    _set_runtime_cli_value(runtime_cli_values, "provider", provider)
    _set_runtime_cli_value(runtime_cli_values, "model", model)
    _set_runtime_cli_value(runtime_cli_values, "api_key", api_key)
    _set_runtime_cli_value(runtime_cli_values, "endpoint", endpoint)

    runtime_secure_values: dict[str, str] = {}
    llm_reachable = config.features.enable_llm and not config.features.offline_mode
    provider_token = runtime_cli_values.get("provider", config.llm.provider or "")
    try:
        identity = ProviderIdentity.parse(provider_token)
    except ValueError:
        identity = None
    if llm_reachable and identity is not None and "api_key" not in runtime_cli_values:
        stored_api_key = credential_store_factory(identity.kind.value).get_api_key()
        if stored_api_key is not None:
            runtime_secure_values["api_key"] = stored_api_key

    return RuntimeConfigSources(
        cli=runtime_cli_values,
        secure=runtime_secure_values,
        env=os.environ if env is None else env,
    )


def build_translation_service(
    config: ShellwrightConfig,
    sources: RuntimeConfigSources,
    os_id: str | None = None,
    run_logger: RunLogger | None = None,
) -> TranslationService:
    """Create the translation service; provider settings resolve on first use."""

    return TranslationService(
        features=config.features,
        llm_config_resolver=lambda: config.resolved_llm_config(sources),
        os_id=os_id,
        run_logger=run_logger if run_logger is not None else RunLogger(
            verbose=config.ui.verbose_mode
        ),
    )


def confirm_command(command: str, prompt: Callable[..., str] = typer.prompt) -> bool:
    """Ask for an explicit yes before running a command."""

    response = prompt(f"Run `{command}`? (y/n)", default="n", show_default=False)
    return validate_confirmation(response)
