"""Contract of the fetch collaborator used by the plan executor."""

from pathlib import Path
from typing import Protocol, runtime_checkable

from ...exceptions import AlbumSyncError


class FetchError(AlbumSyncError):
    """Raised when a track cannot be fetched at all."""


@runtime_checkable
class Fetcher(Protocol):
    """Materializes a track file from an opaque source identifier."""

    def fetch(self, destination: Path, source_identifier: str) -> bool:
        """Produce a file at ``destination``; return False on failure."""
        ...
