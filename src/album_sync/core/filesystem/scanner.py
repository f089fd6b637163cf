"""Inspection of the track files recorded for an album folder."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError

from ...models.manifest import Manifest
from .paths import InvalidTrackKeyError, track_path

logger = logging.getLogger(__name__)


@dataclass
class TrackFileInfo:
    """On-disk state of one recorded track."""

    key: str
    source_identifier: str
    path: Optional[Path] = None
    exists: bool = False
    size: Optional[int] = None
    duration: Optional[int] = None  # Duration in seconds
    error: Optional[str] = None

    @property
    def duration_formatted(self) -> str:
        """Get formatted duration string (mm:ss)."""
        if self.duration is None:
            return "Unknown"
        minutes = self.duration // 60
        seconds = self.duration % 60
        return f"{minutes}:{seconds:02d}"


def read_duration(path: Path) -> Optional[int]:
    """Read the duration of an audio file in whole seconds, if mutagen can."""
    try:
        audio_file = MutagenFile(path)
    except MutagenError as e:
        logger.warning("Cannot read audio metadata for %s: %s", path, e)
        return None
    if audio_file is None or not hasattr(audio_file, "info"):
        return None
    length = getattr(audio_file.info, "length", None)
    return int(length) if length else None


def inspect_album(
    folder: Path, manifest: Manifest, extension: str
) -> List[TrackFileInfo]:
    """Report which tracks of ``manifest`` are present in ``folder``.

    Args:
        folder: Album folder
        manifest: Manifest recorded for the folder
        extension: Media extension of track files

    Returns:
        One TrackFileInfo per manifest entry, in manifest order
    """
    infos: List[TrackFileInfo] = []
    for key, value in manifest.entries:
        info = TrackFileInfo(key=key, source_identifier=value)
        try:
            info.path = track_path(folder, key, extension)
        except InvalidTrackKeyError as e:
            info.error = str(e)
            infos.append(info)
            continue

        if info.path.is_file():
            info.exists = True
            info.size = info.path.stat().st_size
            info.duration = read_duration(info.path)
        infos.append(info)

    logger.debug(
        "Inspected %s: %d of %d tracks present",
        folder,
        sum(1 for info in infos if info.exists),
        len(infos),
    )
    return infos
