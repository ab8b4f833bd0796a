"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic event lines for translation activity.
- Route all events through `loguru`, filtered by verbose mode.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic event logs; DEBUG detail only in verbose mode."""

    def __init__(self, sink: TextIO | None = None, verbose: bool = False) -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stderr
        self.verbose = verbose
        _loguru_logger.remove()
        _loguru_logger.add(
            self._sink,
            format="{message}",
            level="DEBUG" if verbose else "WARNING",
            colorize=False,
        )

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[event] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start event."""

        self._emit("DEBUG", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete event."""

        self._emit("DEBUG", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str, **context: object) -> None:
        """Emit a stage-failure event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type, **context)

    def log_fallback(self, stage: str, error_type: str, **context: object) -> None:
        """Emit a warning for an error downgraded to "no translation"."""

        self._emit("WARNING", "fallback", stage, error_type=error_type, **context)

    def log_event(self, stage: str, event: str, **context: object) -> None:
        """Emit a debug-level event such as a cache hit or a safety verdict."""

        self._emit("DEBUG", event, stage, **context)
