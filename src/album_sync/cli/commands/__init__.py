"""CLI command modules."""

from .app import AlbumSyncApp
from .plan import plan_command
from .status import status_command
from .sync import sync_command

__all__ = [
    "AlbumSyncApp",
    "plan_command",
    "status_command",
    "sync_command",
]
