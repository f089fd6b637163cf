"""CLI display and formatting utilities."""

from .formatters import (
    ConsoleProgressReporter,
    display_album_status,
    display_execution_result,
    display_plan,
)

__all__ = [
    "ConsoleProgressReporter",
    "display_album_status",
    "display_execution_result",
    "display_plan",
]
