"""Shell executor used after a command passes the safety gate.

The translation core only produces argument vectors; this module runs
them and captures output.
"""

from __future__ import annotations

from dataclasses import dataclass
import subprocess
from typing import Sequence


COMMAND_NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Captured output of one executed command."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def succeeded(self) -> bool:
        """Return whether the command exited with status zero."""

        return self.exit_code == 0


class ShellExecutor:
    """Run argument vectors with `subprocess` and capture their output."""

    def __init__(self, timeout_seconds: float | None = None) -> None:
        """Initialize executor with an optional per-command timeout."""

        self.timeout_seconds = timeout_seconds

    def run(self, argv: Sequence[str]) -> ExecutionResult:
        """Run one argument vector; a missing binary reports exit code 127."""

        if not argv:
            raise ValueError("Cannot execute an empty argument vector.")
        try:
            completed = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError:
            return ExecutionResult(
                stdout="",
                stderr=f"{argv[0]}: command not found",
                exit_code=COMMAND_NOT_FOUND_EXIT_CODE,
            )
        return ExecutionResult(
            stdout=completed.stdout,
            stderr=completed.stderr,
            exit_code=completed.returncode,
        )
