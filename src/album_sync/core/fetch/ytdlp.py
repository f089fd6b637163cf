"""Fetcher producing track files with the external yt-dlp program.

Each fetch runs yt-dlp into its own temporary directory under the staging
folder (``.sniff`` by default) next to the album folders, then moves the
finished file onto its destination so a track path never holds a partial
download.
"""

import logging
import os
import shutil
import subprocess  # nosec B404
import tempfile
from pathlib import Path
from typing import List, Optional

from ...config import Config
from .base import FetchError

logger = logging.getLogger(__name__)

OUTPUT_STEM = "track"


class YtDlpFetcher:
    """Fetches and transcodes audio tracks through yt-dlp."""

    def __init__(self, config: Config, timeout: Optional[int] = None) -> None:
        """Initialize the fetcher.

        Args:
            config: Application configuration
            timeout: Seconds to wait for one fetch, 0 to wait forever.
                Defaults to ``config.fetch_timeout``.
        """
        self.config = config
        self.timeout = config.fetch_timeout if timeout is None else timeout

    def check_available(self) -> None:
        """Ensure the yt-dlp executable can be found.

        Raises:
            FetchError: If yt-dlp is not on PATH
        """
        if not shutil.which(self.config.yt_dlp_bin):
            raise FetchError(
                f"{self.config.yt_dlp_bin} is not installed or not on PATH"
            )

    def build_command(self, work_dir: Path, source_identifier: str) -> List[str]:
        """Build the yt-dlp command line for one track."""
        source = self.config.source_template.format(ident=source_identifier)
        return [
            self.config.yt_dlp_bin,
            "--quiet",
            "--no-warnings",
            "--no-playlist",
            "--extract-audio",
            "--audio-format",
            self.config.audio_format,
            "--output",
            str(work_dir / f"{OUTPUT_STEM}.%(ext)s"),
            "--",
            source,
        ]

    def fetch(self, destination: Path, source_identifier: str) -> bool:
        """Fetch ``source_identifier`` into ``destination``.

        Args:
            destination: Final track file path, replaced if it exists
            source_identifier: Opaque identifier handed to yt-dlp

        Returns:
            True if the track file was produced, False otherwise

        Raises:
            FetchError: If yt-dlp cannot be started or the staging folder
                cannot be created
        """
        staging_dir = self.config.staging_directory
        try:
            staging_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FetchError(f"Cannot create staging folder {staging_dir}: {e}") from e

        with tempfile.TemporaryDirectory(dir=staging_dir, prefix="fetch-") as tmp:
            work_dir = Path(tmp)
            command = self.build_command(work_dir, source_identifier)
            logger.debug("Running: %s", " ".join(command))

            try:
                completed = subprocess.run(  # nosec B603
                    command,
                    capture_output=True,
                    text=True,
                    errors="replace",
                    timeout=self.timeout or None,
                    check=False,
                )
            except subprocess.TimeoutExpired:
                logger.error(
                    "Fetching %s timed out after %d seconds",
                    source_identifier,
                    self.timeout,
                )
                return False
            except OSError as e:
                raise FetchError(f"Cannot run {self.config.yt_dlp_bin}: {e}") from e

            if completed.returncode != 0:
                logger.error(
                    "yt-dlp failed for %s (exit status %d): %s",
                    source_identifier,
                    completed.returncode,
                    completed.stderr.strip(),
                )
                return False

            produced = work_dir / f"{OUTPUT_STEM}{self.config.media_extension}"
            if not produced.is_file():
                logger.error(
                    "yt-dlp finished but produced no %s file for %s",
                    self.config.media_extension,
                    source_identifier,
                )
                return False

            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                os.replace(produced, destination)
            except OSError as e:
                raise FetchError(f"Cannot move track to {destination}: {e}") from e

        logger.info("Fetched %s to %s", source_identifier, destination)
        return True
