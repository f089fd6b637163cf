"""Filesystem layout and inspection of album folders."""

from .paths import (
    MAX_NAME_LENGTH,
    InvalidTrackKeyError,
    album_folder,
    track_path,
    validate_track_key,
)
from .scanner import TrackFileInfo, inspect_album, read_duration

__all__ = [
    "MAX_NAME_LENGTH",
    "InvalidTrackKeyError",
    "album_folder",
    "track_path",
    "validate_track_key",
    "TrackFileInfo",
    "inspect_album",
    "read_duration",
]
