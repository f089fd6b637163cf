"""Derivation of album folders and track file paths.

Track keys and album titles become path components verbatim, so both are
checked against a fixed set of rules instead of being rewritten. A rejected
name aborts the run before any file is touched.
"""

import re
from pathlib import Path

from ...models.manifest import ManifestError

MAX_NAME_LENGTH = 200

# Path separators on any supported platform, plus NUL and other control characters
_FORBIDDEN_CHARS = re.compile(r"[/\\\x00-\x1f\x7f]")


class InvalidTrackKeyError(ManifestError):
    """Raised when a track key or album title cannot be used as a file name."""


def validate_track_key(key: str) -> str:
    """Check that ``key`` is usable as a single path component.

    Args:
        key: Track key or album title

    Returns:
        The key, unchanged

    Raises:
        InvalidTrackKeyError: If the key is empty, ``.``/``..``, too long, or
            contains a path separator or control character
    """
    if not key or key in (".", ".."):
        raise InvalidTrackKeyError(f"Invalid track name: {key!r}")
    if len(key) > MAX_NAME_LENGTH:
        raise InvalidTrackKeyError(
            f"Track name longer than {MAX_NAME_LENGTH} characters: {key[:40]!r}..."
        )
    match = _FORBIDDEN_CHARS.search(key)
    if match:
        raise InvalidTrackKeyError(
            f"Track name {key!r} contains forbidden character {match.group()!r}"
        )
    return key


def album_folder(root: Path, title: str) -> Path:
    """Return the folder holding the album ``title`` under ``root``."""
    return Path(root) / validate_track_key(title)


def track_path(folder: Path, key: str, extension: str) -> Path:
    """Return the file path of track ``key`` inside an album folder.

    Args:
        folder: Album folder
        key: Track key
        extension: Media extension, with or without the leading dot
    """
    if not extension.startswith("."):
        extension = f".{extension}"
    return Path(folder) / f"{validate_track_key(key)}{extension}"
