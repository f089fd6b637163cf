"""Album manifest model and its plain-text format.

A manifest is an ordered list of ``(key, value)`` pairs where the key is a
human-readable track name and the value is an opaque source identifier. The
text form is one ``key=value`` record per line; the album title is never part
of the text and always comes from the surrounding filename or folder name.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, PrivateAttr

from ..exceptions import AlbumSyncError

logger = logging.getLogger(__name__)

Entry = Tuple[str, str]


class ManifestError(AlbumSyncError):
    """Raised when a manifest cannot be read or is unusable."""


def parse_manifest(text: str) -> List[Entry]:
    """Parse manifest text into ordered entries.

    Each line is split once on its first ``=``. Lines without ``=`` are
    dropped. Keys and values are kept exactly as written, whitespace included.

    Args:
        text: Manifest source text

    Returns:
        Ordered list of (key, value) pairs
    """
    entries: List[Entry] = []
    for line in text.split("\n"):
        # Drop the carriage return of CRLF line terminators
        if line.endswith("\r"):
            line = line[:-1]
        key, sep, value = line.partition("=")
        if not sep:
            continue
        entries.append((key, value))
    return entries


def render_manifest(entries: Iterable[Entry]) -> str:
    """Render entries back into manifest text, one ``key=value`` line each."""
    return "".join(f"{key}={value}\n" for key, value in entries)


class Manifest(BaseModel):
    """An album: a title plus its ordered track entries."""

    title: str
    entries: Tuple[Entry, ...] = ()

    model_config = ConfigDict(frozen=True)

    _index: Dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        """Build the first-occurrence-wins key index."""
        index: Dict[str, str] = {}
        for key, value in self.entries:
            index.setdefault(key, value)
        self._index = index

    @classmethod
    def from_text(cls, title: str, text: str) -> "Manifest":
        """Create a manifest from its text form."""
        return cls(title=title, entries=tuple(parse_manifest(text)))

    @classmethod
    def empty(cls, title: str) -> "Manifest":
        """Create a manifest with no entries."""
        return cls(title=title)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Manifest":
        """Load a manifest file, taking the title from the file stem.

        Raises:
            ManifestError: If the file cannot be read or decoded
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(f"Cannot read manifest {path}: {e}") from e

        manifest = cls.from_text(path.stem, text)
        logger.debug("Loaded manifest %s with %d entries", path, len(manifest))
        return manifest

    def lookup(self, key: str) -> Optional[str]:
        """Return the value of the first entry with ``key``, if any."""
        return self._index.get(key)

    def keys(self) -> List[str]:
        """Return entry keys in manifest order, duplicates included."""
        return [key for key, _ in self.entries]

    def duplicate_keys(self) -> List[str]:
        """Return keys that occur more than once, in first-seen order."""
        seen = set()
        duplicates: List[str] = []
        for key, _ in self.entries:
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        return duplicates

    def render(self) -> str:
        """Render this manifest's entries as manifest text."""
        return render_manifest(self.entries)

    def __len__(self) -> int:
        """Number of entries, duplicates included."""
        return len(self.entries)
