"""Plan executor applying a reconciliation plan to an album folder.

Effects happen in a fixed order: stale track files are deleted first so their
names are free, missing tracks are fetched second, and the desired manifest is
committed as the folder's state record last, exactly once. A run interrupted
before the commit leaves the previous record in place, so the next run diffs
against it again instead of trusting partial progress.
"""

import logging
import os
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ...exceptions import AlbumSyncError
from ...models.manifest import Manifest
from ..fetch.base import FetchError, Fetcher
from ..filesystem.paths import album_folder, track_path, validate_track_key
from .progress import ProgressCallback, ProgressPhase, ProgressTracker
from .reconciler import ReconciliationPlan, plan_for_strategy
from .strategy import Strategy

logger = logging.getLogger(__name__)


class PlanExecutionError(AlbumSyncError):
    """Raised when the album folder cannot be brought into shape."""


class StateWriteError(PlanExecutionError):
    """Raised when the state record cannot be written."""


@dataclass
class ExecutionResult:
    """Result of executing a reconciliation plan."""

    deletions_attempted: int = 0
    files_removed: int = 0
    files_already_absent: int = 0
    downloads_attempted: int = 0
    downloads_successful: int = 0
    downloads_failed: int = 0
    failed_keys: List[str] = dataclass_field(default_factory=list)
    errors: List[str] = dataclass_field(default_factory=list)
    state_written: bool = False
    dry_run: bool = False

    @property
    def succeeded(self) -> bool:
        """Check whether every planned effect went through."""
        return not self.errors

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)
        logger.error(error)

    def get_summary(self) -> Dict[str, int]:
        """Get summary statistics."""
        return {
            "deletions_attempted": self.deletions_attempted,
            "files_removed": self.files_removed,
            "files_already_absent": self.files_already_absent,
            "downloads_attempted": self.downloads_attempted,
            "downloads_successful": self.downloads_successful,
            "downloads_failed": self.downloads_failed,
            "errors": len(self.errors),
        }


class PlanExecutor:
    """Applies reconciliation plans under a root directory.

    Fetch failures are reported per track and do not stop the run. The state
    record is still rewritten from the desired manifest afterwards, so a track
    whose fetch failed is recorded as present; ``ExecutionResult.failed_keys``
    lists those tracks.
    """

    def __init__(
        self,
        root: Union[Path, str],
        fetcher: Fetcher,
        media_extension: str = ".mp3",
        state_filename: str = ".album",
        dry_run: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize the plan executor.

        Args:
            root: Directory holding one folder per album
            fetcher: Collaborator producing track files
            media_extension: Extension of track files
            state_filename: Name of the state record inside each album folder
            dry_run: If True, log what would happen without touching anything
            progress_callback: Optional callback for progress updates
        """
        self.root = Path(root)
        self.fetcher = fetcher
        self.media_extension = media_extension
        self.state_filename = state_filename
        self.dry_run = dry_run
        self.progress_tracker = ProgressTracker(callback=progress_callback)

    def execute(self, desired: Manifest, strategy: Strategy) -> ExecutionResult:
        """Reconcile the album folder of ``desired``.

        Args:
            desired: Manifest the album folder should match afterwards
            strategy: Strategy resolved for the album folder

        Returns:
            ExecutionResult with per-track statistics

        Raises:
            InvalidTrackKeyError: If a planned track name is unusable as a path
            PlanExecutionError: If the folder cannot be created or a stale
                track cannot be deleted
            StateWriteError: If the state record cannot be written
        """
        self.progress_tracker.reset()
        self.progress_tracker.start(
            ProgressPhase.RESOLVING, 0, f"Planning {desired.title} ({strategy})"
        )

        plan = plan_for_strategy(desired, strategy)
        folder = album_folder(self.root, desired.title)
        result = ExecutionResult(dry_run=self.dry_run)

        # Reject unusable names before the first filesystem effect
        for key in plan.deletions:
            validate_track_key(key)
        for key, _ in plan.additions:
            validate_track_key(key)

        logger.info(
            "Reconciling %s (%s): %d to remove, %d to fetch",
            folder,
            strategy.kind.value,
            len(plan.deletions),
            len(plan.additions),
        )

        if self.dry_run:
            self._report_dry_run(folder, plan, result)
            return result

        self._ensure_folder(folder)
        self._apply_deletions(folder, plan, result)
        self._apply_additions(folder, plan, result)
        self._commit(folder, desired, result)

        self.progress_tracker.start(ProgressPhase.COMPLETE, 0, "Album reconciled")
        return result

    def _ensure_folder(self, folder: Path) -> None:
        """Create the album folder if it is missing."""
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PlanExecutionError(f"Cannot create album folder {folder}: {e}") from e

    def _apply_deletions(
        self, folder: Path, plan: ReconciliationPlan, result: ExecutionResult
    ) -> None:
        """Delete stale track files in plan order.

        A file that is already gone counts as deleted; any other failure aborts
        the run before the state record is touched.
        """
        self.progress_tracker.start(
            ProgressPhase.DELETING, len(plan.deletions), "Removing stale tracks"
        )

        for key in plan.deletions:
            path = track_path(folder, key, self.media_extension)
            result.deletions_attempted += 1
            try:
                path.unlink()
            except FileNotFoundError:
                logger.debug("Track %s already absent", path)
                result.files_already_absent += 1
            except OSError as e:
                self.progress_tracker.error(f"Cannot delete {path}")
                raise PlanExecutionError(f"Cannot delete track {path}: {e}") from e
            else:
                logger.info("Removed %s", path)
                result.files_removed += 1
            self.progress_tracker.advance(key, key=key)

        self.progress_tracker.complete("Stale tracks removed")

    def _apply_additions(
        self, folder: Path, plan: ReconciliationPlan, result: ExecutionResult
    ) -> None:
        """Fetch missing tracks in plan order, continuing past failures."""
        self.progress_tracker.start(
            ProgressPhase.FETCHING, len(plan.additions), "Fetching tracks"
        )

        for key, source_identifier in plan.additions:
            path = track_path(folder, key, self.media_extension)
            result.downloads_attempted += 1
            try:
                fetched = self.fetcher.fetch(path, source_identifier)
            except FetchError as e:
                fetched = False
                result.add_error(f"Failed to fetch {key!r}: {e}")
            else:
                if not fetched:
                    result.add_error(
                        f"Failed to fetch {key!r} from {source_identifier!r}"
                    )

            if fetched:
                result.downloads_successful += 1
            else:
                result.downloads_failed += 1
                result.failed_keys.append(key)
            self.progress_tracker.advance(key, key=key, fetched=fetched)

        self.progress_tracker.complete("Tracks fetched")

    def _commit(self, folder: Path, desired: Manifest, result: ExecutionResult) -> None:
        """Replace the state record of ``folder`` with ``desired``."""
        self.progress_tracker.start(ProgressPhase.COMMITTING, 1, "Writing state record")

        state_path = folder / self.state_filename
        tmp_path = folder / f"{self.state_filename}.tmp"
        try:
            tmp_path.write_text(desired.render(), encoding="utf-8")
            os.replace(tmp_path, state_path)
        except OSError as e:
            self.progress_tracker.error(f"Cannot write {state_path}")
            raise StateWriteError(f"Cannot write state record {state_path}: {e}") from e

        result.state_written = True
        logger.info("Recorded %d tracks in %s", len(desired), state_path)
        self.progress_tracker.complete("State record written")

    def _report_dry_run(
        self, folder: Path, plan: ReconciliationPlan, result: ExecutionResult
    ) -> None:
        """Log the effects a real run would have."""
        for key in plan.deletions:
            path = track_path(folder, key, self.media_extension)
            logger.info("DRY RUN: Would remove %s", path)
            result.deletions_attempted += 1
        for key, source_identifier in plan.additions:
            path = track_path(folder, key, self.media_extension)
            logger.info("DRY RUN: Would fetch %s to %s", source_identifier, path)
            result.downloads_attempted += 1
        logger.info("DRY RUN: Would write %s", folder / self.state_filename)
