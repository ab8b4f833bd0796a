"""Telemetry and observability helpers.

This package tracks token usage and translation events for diagnostics.
"""

from .logger import RunLogger
from .usage_tracker import UsageTracker

__all__ = ["RunLogger", "UsageTracker"]
