"""Exception hierarchy shared by the album-sync modules.

Concrete exceptions live next to the code that raises them and derive from
``AlbumSyncError`` so the CLI can report them uniformly.
"""


class AlbumSyncError(Exception):
    """Base exception for all application-specific errors."""
