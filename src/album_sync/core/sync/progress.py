"""Progress reporting for album reconciliation runs.

The executor announces each phase with the number of items it will process
and advances once per item. Every change is turned into a ``ProgressUpdate``
and handed to an optional callback, which the CLI uses to print progress.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class ProgressPhase(str, Enum):
    """Phases of a reconciliation run."""

    RESOLVING = "resolving"
    DELETING = "deleting"
    FETCHING = "fetching"
    COMMITTING = "committing"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class ProgressUpdate:
    """Snapshot of a run's progress within one phase."""

    phase: ProgressPhase
    current: int
    total: int
    message: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    elapsed_time: float = 0.0  # Seconds since the first phase started

    @property
    def percentage(self) -> float:
        """Share of the phase's items processed, 0 to 100."""
        return 100.0 * self.current / self.total if self.total else 0.0

    @property
    def is_complete(self) -> bool:
        return self.current >= self.total

    def __str__(self) -> str:
        text = f"[{self.phase.value}] {self.current}/{self.total}"
        return f"{text} - {self.message}" if self.message else text


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressTracker:
    """Counts processed items per phase and reports them to a callback.

    A failing callback is logged and otherwise ignored, so rendering problems
    never interrupt a run.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.phase: Optional[ProgressPhase] = None
        self.current = 0
        self.total = 0
        self._started_at: Optional[float] = None

    def reset(self) -> None:
        """Forget the previous run so elapsed time starts from zero again."""
        self.phase = None
        self.current = 0
        self.total = 0
        self._started_at = None

    def start(self, phase: ProgressPhase, total: int, message: str = "") -> None:
        """Enter ``phase`` expecting ``total`` items."""
        if self._started_at is None:
            self._started_at = time.monotonic()
        self.phase = phase
        self.current = 0
        self.total = total
        self._emit(phase, message)

    def advance(self, message: str = "", **metadata: Any) -> None:
        """Count one processed item of the current phase."""
        self.current += 1
        self._emit(self.phase, message, metadata)

    def complete(self, message: str = "") -> None:
        """Mark every item of the current phase as processed."""
        self.current = self.total
        self._emit(self.phase, message)

    def error(self, message: str) -> None:
        """Report a failure in the current phase."""
        if self.phase is not None:
            self._emit(ProgressPhase.ERROR, message)

    def _emit(
        self,
        phase: Optional[ProgressPhase],
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self.callback is None:
            return

        elapsed = 0.0
        if self._started_at is not None:
            elapsed = time.monotonic() - self._started_at

        update = ProgressUpdate(
            phase=phase or ProgressPhase.RESOLVING,
            current=self.current,
            total=self.total,
            message=message,
            metadata=dict(metadata or {}),
            elapsed_time=elapsed,
        )
        try:
            self.callback(update)
        except Exception:
            logger.exception("Progress callback failed on %s", update)
