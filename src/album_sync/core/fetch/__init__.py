"""Fetch collaborators that materialize track files."""

from .base import FetchError, Fetcher
from .ytdlp import YtDlpFetcher

__all__ = [
    "FetchError",
    "Fetcher",
    "YtDlpFetcher",
]
