"""Command-line interface for shellwright.

Responsibilities:
- Expose user-facing commands for translation, safety checks, the
  interactive shell, credentials, and configuration.
- Convert CLI options into runtime sources and delegate to the core.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .aliases import AliasStore
from .cli_rendering import (
    echo_error,
    echo_execution_result,
    echo_hint,
    echo_mapping,
    echo_safety_decision,
    echo_safety_verdict,
    echo_translation,
    exit_with_command_error,
)
from .cli_runtime import (
    build_translation_service,
    confirm_command,
    load_config,
    resolve_runtime_sources,
)
from .config import ConfigLoader, ShellwrightConfig, default_config_dir, default_config_path
from .credentials import create_credential_store
from .errors import CommandStageError, ShellwrightError
from .executor import ShellExecutor
from .models.datatypes import ProviderIdentity
from .parsing import mask_secret, normalize_optional_string
from .safety import SafetyAction, SafetyGate
from .session import ShellSession
from .translation import TranslationState

app = typer.Typer(
    name="shellwright",
    no_args_is_help=True,
    help="Translate natural-language requests into shell commands.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to a YAML config file."),
]
ProviderOption = Annotated[
    str | None,
    typer.Option("--provider", help="Provider id: openai, anthropic, local:<url>, custom:<url>."),
]
ModelOption = Annotated[str | None, typer.Option("--model", help="Model identifier.")]
ApiKeyOption = Annotated[
    str | None,
    typer.Option("--api-key", help="API key for this invocation only."),
]
EndpointOption = Annotated[
    str | None,
    typer.Option("--endpoint", help="Override the provider endpoint URL."),
]
OsOption = Annotated[
    str | None,
    typer.Option("--os", help="Target OS id: linux, macos, windows (default: host)."),
]


def _apply_overrides(
    config: ShellwrightConfig,
    offline: bool | None,
    verbose: bool | None,
) -> ShellwrightConfig:
    """Apply flag overrides that do not belong to provider runtime sources."""

    if offline is not None:
        config.features.offline_mode = offline
    if verbose is not None:
        config.ui.verbose_mode = verbose
    return config


@app.command("translate")
def translate_command(
    request: Annotated[str, typer.Argument(help="Natural-language request.")],
    config_file: ConfigOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    api_key: ApiKeyOption = None,
    endpoint: EndpointOption = None,
    os_id: OsOption = None,
    execute: Annotated[
        bool,
        typer.Option("--execute", help="Run the translated command after safety checks."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Answer yes to the confirmation prompt."),
    ] = False,
    offline: Annotated[
        bool | None,
        typer.Option("--offline/--online", help="Override `features.offline_mode`."),
    ] = None,
    verbose: Annotated[
        bool | None,
        typer.Option("--verbose/--quiet", help="Override `ui.verbose_mode`."),
    ] = None,
) -> None:
    """Translate one natural-language request into a shell command."""

    try:
        config = _apply_overrides(load_config(config_file), offline, verbose)
        sources = resolve_runtime_sources(
            config,
            provider=provider,
            model=model,
            api_key=api_key,
            endpoint=endpoint,
            credential_store_factory=create_credential_store,
        )
        service = build_translation_service(config, sources, os_id=os_id)
        outcome = service.translate(request)
    except ShellwrightError as exc:
        exit_with_command_error("translate", exc)

    colored = config.ui.colored_output
    if outcome.state is not TranslationState.TRANSLATED or outcome.command is None:
        if outcome.error is not None:
            echo_error(str(outcome.error), colored)
        typer.echo("No translation available.")
        raise typer.Exit(code=2)

    echo_translation(outcome.command, outcome.cache_hit, colored)
    decision = SafetyGate(config.safety_policy(), config.ui.confirm_destructive).decide(
        outcome.command
    )
    service.logger.log_event("safety", decision.verdict.value, action=decision.action.value)
    echo_safety_decision(decision, colored)
    if decision.action is SafetyAction.BLOCK:
        raise typer.Exit(code=1)

    if not execute:
        if config.safety.enable_dry_run:
            typer.echo(f"Dry run: {outcome.command}")
        return

    if decision.needs_confirmation and not yes and not confirm_command(outcome.command):
        typer.echo("Cancelled.")
        return

    try:
        result = ShellExecutor().run(outcome.command.split())
    except OSError as exc:
        exit_with_command_error(
            "translate",
            CommandStageError(
                stage="execute",
                detail=f"Failed to execute `{outcome.command}`: {exc}",
                hint="Check that the command exists and is executable.",
            ),
        )
    echo_execution_result(result, colored)
    if not result.succeeded:
        raise typer.Exit(code=result.exit_code)


@app.command("check")
def check_command(
    command: Annotated[str, typer.Argument(help="Shell command to classify.")],
    config_file: ConfigOption = None,
) -> None:
    """Classify a command with the safety gate without running it."""

    try:
        config = load_config(config_file)
    except ShellwrightError as exc:
        exit_with_command_error("check", exc)

    decision = SafetyGate(config.safety_policy(), config.ui.confirm_destructive).decide(command)
    echo_safety_verdict(decision, config.ui.colored_output)
    if decision.action is SafetyAction.BLOCK:
        raise typer.Exit(code=1)


@app.command("shell")
def shell_command(
    config_file: ConfigOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    api_key: ApiKeyOption = None,
    endpoint: EndpointOption = None,
    os_id: OsOption = None,
    offline: Annotated[
        bool | None,
        typer.Option("--offline/--online", help="Override `features.offline_mode`."),
    ] = None,
    verbose: Annotated[
        bool | None,
        typer.Option("--verbose/--quiet", help="Override `ui.verbose_mode`."),
    ] = None,
) -> None:
    """Start the interactive shell."""

    try:
        config = _apply_overrides(load_config(config_file), offline, verbose)
        sources = resolve_runtime_sources(
            config,
            provider=provider,
            model=model,
            api_key=api_key,
            endpoint=endpoint,
            credential_store_factory=create_credential_store,
        )
        service = build_translation_service(config, sources, os_id=os_id)
    except ShellwrightError as exc:
        exit_with_command_error("shell", exc)

    state_dir = config_file.parent if config_file is not None else default_config_dir()
    aliases = AliasStore(state_dir / "aliases.json")
    try:
        aliases.load()
    except (ValueError, OSError) as exc:
        echo_error(f"Ignoring aliases: {exc}", config.ui.colored_output)

    session = ShellSession(
        config,
        service,
        aliases=aliases,
        history_path=state_dir / "history",
    )
    typer.echo(f"shellwright interactive mode - OS: {service.os_id}")
    if config.ui.show_hints:
        echo_hint(
            "Type a command or a request in plain English; `exit` to quit.",
            config.ui.colored_output,
        )
    session.run()


@app.command("credentials")
def credentials_command(
    provider: Annotated[
        str,
        typer.Option("--provider", help="Provider whose key to manage: openai or anthropic."),
    ] = "openai",
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored provider API keys."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            CommandStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    try:
        identity = ProviderIdentity.parse(provider)
    except ValueError as exc:
        exit_with_command_error(
            "credentials",
            CommandStageError(stage="credentials", detail=str(exc)),
        )

    credential_store = create_credential_store(identity.kind.value)
    label = identity.label
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                f"{label} API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                CommandStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                CommandStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    has_stored_key = credential_store.get_api_key() is not None
    status = "present" if has_stored_key else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored {label} API key: {status}")


@app.command("config")
def config_command(
    config_file: ConfigOption = None,
    init: Annotated[
        bool,
        typer.Option("--init", help="Write a default config file and exit."),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing file with `--init`."),
    ] = False,
) -> None:
    """Show the effective configuration, or write defaults with `--init`."""

    target = config_file if config_file is not None else default_config_path()
    if init:
        if target.exists() and not force:
            exit_with_command_error(
                "config",
                CommandStageError(
                    stage="config",
                    detail=f"Config file already exists: `{target}`.",
                    hint="Pass `--force` to overwrite it.",
                ),
            )
        written = ConfigLoader.save(ShellwrightConfig(), target)
        typer.echo(f"Wrote default config to {written}")
        return

    try:
        config = load_config(config_file)
    except ShellwrightError as exc:
        exit_with_command_error("config", exc)

    payload = config.as_dict()
    payload["llm"]["api_key"] = mask_secret(config.llm.api_key)
    echo_mapping(payload)


def main() -> None:
    """Run the shellwright CLI."""

    app()
