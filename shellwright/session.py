"""Interactive shell session.

Responsibilities:
- Route each input line: meta commands, alias expansion, translation,
  safety gate, confirmation, and execution.
- Keep the loop alive on every error; nothing here exits the process.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import typer

from .aliases import AliasStore
from .cli_rendering import (
    echo_error,
    echo_execution_result,
    echo_hint,
    echo_safety_decision,
    echo_translation,
    echo_usage_summary,
)
from .cli_runtime import confirm_command
from .config import ShellwrightConfig
from .errors import ShellwrightError
from .executor import ShellExecutor
from .parsing import parse_required_boolean
from .safety import SafetyAction, SafetyGate
from .translation import TranslationService, TranslationState


EXIT_WORDS = frozenset({"exit", "quit"})


class ShellSession:
    """One interactive session over a translation service and a safety gate."""

    def __init__(
        self,
        config: ShellwrightConfig,
        service: TranslationService,
        executor: ShellExecutor | None = None,
        aliases: AliasStore | None = None,
        history_path: Path | None = None,
        prompt: Callable[..., str] = typer.prompt,
    ) -> None:
        """Initialize session state; dry run starts from the safety config."""

        self.config = config
        self.service = service
        self.gate = SafetyGate(config.safety_policy(), config.ui.confirm_destructive)
        self.executor = executor if executor is not None else ShellExecutor()
        self.aliases = aliases
        self.history_path = history_path
        self.dry_run = config.safety.enable_dry_run
        self._prompt = prompt

    @property
    def colored(self) -> bool:
        """Return whether output should use ANSI colors."""

        return self.config.ui.colored_output

    def run(self) -> None:
        """Read lines until `exit`, `quit`, or end of input."""

        while True:
            try:
                line = self._prompt("shellwright", default="", show_default=False)
            except (typer.Abort, EOFError, KeyboardInterrupt):
                typer.echo("\nGoodbye!")
                return
            if not self.handle_line(line):
                typer.echo("Goodbye!")
                return

    def handle_line(self, line: str) -> bool:
        """Handle one input line and return `False` when the session should end."""

        text = line.strip()
        if not text:
            return True
        if text.lower() in EXIT_WORDS:
            return False

        self._append_history(text)
        if self._handle_meta_command(text):
            return True

        argv = text.split()
        if self.aliases is not None:
            argv = self.aliases.expand(argv)
        expanded = " ".join(argv)

        try:
            outcome = self.service.translate(expanded)
        except ShellwrightError as exc:
            echo_error(str(exc), self.colored)
            return True

        if outcome.state is TranslationState.TRANSLATED and outcome.command is not None:
            echo_translation(outcome.command, outcome.cache_hit, self.colored)
            command = outcome.command
        else:
            if outcome.state is TranslationState.PROVIDER_FAILED and self.config.ui.show_hints:
                echo_hint("Translation unavailable; running input as typed.", self.colored)
            command = expanded

        self._run_gated(command, translated=outcome.translated)
        return True

    def _run_gated(self, command: str, translated: bool) -> None:
        """Apply the safety decision and execute when allowed."""

        decision = self.gate.decide(command)
        self.service.logger.log_event(
            "safety", decision.verdict.value, action=decision.action.value
        )
        echo_safety_decision(decision, self.colored)
        if decision.action is SafetyAction.BLOCK:
            return

        if translated and self.dry_run:
            typer.echo(f"Dry run: {command}")
            if self.config.ui.show_hints:
                echo_hint("Use `:dry-run off` to execute translated commands.", self.colored)
            return

        if decision.needs_confirmation and not self._confirm(command):
            typer.echo("Cancelled.")
            return

        try:
            result = self.executor.run(command.split())
        except OSError as exc:
            echo_error(f"Failed to execute `{command}`: {exc}", self.colored)
            return
        echo_execution_result(result, self.colored)

    def _confirm(self, command: str) -> bool:
        """Ask for confirmation; an aborted prompt counts as no."""

        try:
            return confirm_command(command, self._prompt)
        except (typer.Abort, EOFError, KeyboardInterrupt):
            typer.echo()
            return False

    def _handle_meta_command(self, text: str) -> bool:
        """Handle `:`-prefixed and alias commands; return whether one matched."""

        tokens = text.split()
        head = tokens[0]

        if head == ":cache":
            if tokens[1:] == ["clear"]:
                self.service.clear_cache()
                typer.echo("Cache cleared.")
            else:
                typer.echo(f"Cached responses: {self.service.cache_size()}")
            return True

        if head == ":usage":
            echo_usage_summary(self.service.usage.summary())
            return True

        if head == ":dry-run":
            if len(tokens) > 1:
                try:
                    self.dry_run = parse_required_boolean(tokens[1], ":dry-run")
                except ValueError as exc:
                    echo_error(str(exc), self.colored)
                    return True
            typer.echo(f"Dry run: {'on' if self.dry_run else 'off'}")
            return True

        if head == "alias" and self.aliases is not None:
            self._handle_alias(tokens[1:])
            return True

        if head == "unalias" and self.aliases is not None:
            if len(tokens) != 2:
                echo_error("Usage: unalias <name>", self.colored)
            elif self.aliases.remove(tokens[1]):
                typer.echo(f"Removed alias `{tokens[1]}`.")
            else:
                echo_error(f"No alias named `{tokens[1]}`.", self.colored)
            return True

        return False

    def _handle_alias(self, args: list[str]) -> None:
        """List aliases, or add one with `alias <name> <replacement...>`."""

        if self.aliases is None:
            return
        if not args:
            for name, replacement in self.aliases.items():
                typer.echo(f"{name} = {replacement}")
            return
        if len(args) < 2:
            echo_error("Usage: alias <name> <replacement>", self.colored)
            return
        try:
            self.aliases.add(args[0], " ".join(args[1:]))
        except (ValueError, OSError) as exc:
            echo_error(str(exc), self.colored)
            return
        typer.echo(f"Added alias `{args[0]}`.")

    def _append_history(self, text: str) -> None:
        """Append an input line to the history file when history is enabled."""

        if not self.config.features.enable_history or self.history_path is None:
            return
        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            with self.history_path.open("a", encoding="utf-8") as handle:
                handle.write(f"{timestamp}\t{text}\n")
        except OSError as exc:
            echo_error(f"Failed to write history: {exc}", self.colored)
