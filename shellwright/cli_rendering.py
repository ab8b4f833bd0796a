"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
safety decisions, execution output, and configuration summaries.
"""

from __future__ import annotations

from typing import Any, NoReturn

import typer

from .errors import CommandStageError
from .executor import ExecutionResult
from .safety import SafetyAction, SafetyDecision


def _secho(message: str, colored: bool, fg: str | None = None, err: bool = False) -> None:
    """Print one line, applying color only when enabled."""

    typer.secho(message, fg=fg if colored else None, err=err)


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_error(message: str, colored: bool = True) -> None:
    """Print a non-fatal error inside the interactive loop."""

    _secho(f"[Error] {message}", colored, fg=typer.colors.RED, err=True)


def echo_hint(message: str, colored: bool = True) -> None:
    """Print a dimmed hint line."""

    _secho(f"Hint: {message}", colored, fg=typer.colors.BRIGHT_BLACK)


def echo_translation(command: str, cache_hit: bool, colored: bool = True) -> None:
    """Print a translated command."""

    suffix = " (cached)" if cache_hit else ""
    _secho(f"Translated{suffix}: {command}", colored, fg=typer.colors.CYAN)


def echo_safety_decision(decision: SafetyDecision, colored: bool = True) -> None:
    """Print the safety warning for a decision, if any."""

    warning = decision.warning
    if warning is None:
        return
    color = typer.colors.RED if decision.action is SafetyAction.BLOCK else typer.colors.YELLOW
    _secho(warning, colored, fg=color, err=True)


def echo_safety_verdict(decision: SafetyDecision, colored: bool = True) -> None:
    """Print a verdict/action summary for the `check` command."""

    typer.echo(f"Command: {decision.command}")
    typer.echo(f"Verdict: {decision.verdict.value}")
    typer.echo(f"Action: {decision.action.value}")
    if decision.matched_pattern is not None:
        typer.echo(f"Dangerous pattern: {decision.matched_pattern}")
    if decision.matched_prefix is not None:
        typer.echo(f"Confirmation prefix: {decision.matched_prefix}")
    echo_safety_decision(decision, colored)


def echo_execution_result(result: ExecutionResult, colored: bool = True) -> None:
    """Print captured stdout/stderr and a non-zero exit status."""

    if result.stdout:
        typer.echo(result.stdout, nl=not result.stdout.endswith("\n"))
    if result.stderr:
        typer.echo(result.stderr, nl=not result.stderr.endswith("\n"), err=True)
    if not result.succeeded:
        _secho(
            f"Command exited with status {result.exit_code}",
            colored,
            fg=typer.colors.RED,
            err=True,
        )


def echo_mapping(payload: dict[str, Any], indent: int = 0) -> None:
    """Print a nested mapping as indented `key: value` lines."""

    pad = "  " * indent
    for key, value in payload.items():
        if isinstance(value, dict):
            typer.echo(f"{pad}{key}:")
            echo_mapping(value, indent + 1)
        elif isinstance(value, list | tuple):
            typer.echo(f"{pad}{key}: {', '.join(str(item) for item in value)}")
        else:
            typer.echo(f"{pad}{key}: {value}")


def echo_usage_summary(summary: dict[str, int]) -> None:
    """Print session token usage counters."""

    for key, value in summary.items():
        typer.echo(f"{key}: {value}")
