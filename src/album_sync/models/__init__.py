"""Models for the album-sync application."""

from .manifest import Entry, Manifest, ManifestError, parse_manifest, render_manifest

__all__ = [
    "Entry",
    "Manifest",
    "ManifestError",
    "parse_manifest",
    "render_manifest",
]
