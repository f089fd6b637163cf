"""Strategy resolution for an album folder.

Decides whether an album folder already carries a usable state record
(``REBUILD`` against that baseline) or has to be built from scratch (``NEW``).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ...models.manifest import Manifest
from ..filesystem.paths import InvalidTrackKeyError, album_folder, validate_track_key

logger = logging.getLogger(__name__)


class StrategyKind(str, Enum):
    """How an album folder is reconciled."""

    NEW = "new"  # No usable baseline, fetch everything
    REBUILD = "rebuild"  # Diff against the recorded baseline


@dataclass(frozen=True)
class Strategy:
    """Resolved strategy, with the baseline manifest for rebuilds."""

    kind: StrategyKind
    baseline: Optional[Manifest] = None

    @classmethod
    def new(cls) -> "Strategy":
        """Strategy for an album without a usable baseline."""
        return cls(kind=StrategyKind.NEW)

    @classmethod
    def rebuild(cls, baseline: Manifest) -> "Strategy":
        """Strategy for an album recorded as ``baseline``."""
        return cls(kind=StrategyKind.REBUILD, baseline=baseline)

    def __str__(self) -> str:
        """Human-readable representation of the strategy."""
        if self.baseline is None:
            return self.kind.value
        return f"{self.kind.value} ({len(self.baseline)} recorded tracks)"


class StrategyResolver:
    """Inspects album folders under a root directory."""

    def __init__(self, root: Union[Path, str], state_filename: str = ".album"):
        """Initialize the resolver.

        Args:
            root: Directory holding one folder per album
            state_filename: Name of the state record inside each album folder
        """
        self.root = Path(root)
        self.state_filename = state_filename

    def album_folder(self, title: str) -> Path:
        """Return the folder of album ``title``."""
        return album_folder(self.root, title)

    def state_path(self, title: str) -> Path:
        """Return the state record path of album ``title``."""
        return self.album_folder(title) / self.state_filename

    def load_baseline(self, folder: Path) -> Optional[Manifest]:
        """Read the state record of ``folder``.

        Returns:
            The recorded manifest, titled after the folder, or None if the
            record is missing or unreadable
        """
        state_path = folder / self.state_filename
        try:
            text = state_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read state record %s: %s", state_path, e)
            return None
        return Manifest.from_text(folder.name, text)

    @staticmethod
    def _has_usable_keys(baseline: Manifest) -> bool:
        """Check that every recorded track name is usable as a file name."""
        for key in baseline.keys():
            try:
                validate_track_key(key)
            except InvalidTrackKeyError as e:
                logger.debug("Unusable recorded track name: %s", e)
                return False
        return True

    def resolve(self, desired: Manifest) -> Strategy:
        """Resolve the strategy for reconciling ``desired``.

        A missing, unreadable or corrupt state record (one naming a track that
        cannot be a file name) degrades to ``NEW`` and never fails the run.
        """
        folder = self.album_folder(desired.title)
        if not folder.exists():
            logger.info("Album folder %s does not exist, starting new album", folder)
            return Strategy.new()

        baseline = self.load_baseline(folder)
        if baseline is None or not self._has_usable_keys(baseline):
            logger.warning("Invalid album %s, treating as empty", folder)
            return Strategy.new()

        duplicates = baseline.duplicate_keys()
        if duplicates:
            logger.warning(
                "State record of %s lists %d track name(s) more than once, "
                "their files may be removed without being fetched again: %s",
                folder,
                len(duplicates),
                ", ".join(duplicates),
            )

        if baseline.title != desired.title:
            logger.warning(
                "Recorded album title %r differs from %r", baseline.title, desired.title
            )

        logger.info(
            "Rebuilding album %s from %d recorded tracks", folder, len(baseline)
        )
        return Strategy.rebuild(baseline)
