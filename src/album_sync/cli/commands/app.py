"""Application object shared by the CLI commands."""

import logging
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from ...config import get_config
from ...core.fetch import YtDlpFetcher
from ...core.sync import (
    PlanExecutor,
    ProgressCallback,
    Strategy,
    StrategyResolver,
)
from ...models import Manifest

console = Console()
logger = logging.getLogger(__name__)


class AlbumSyncApp:
    """Wires configuration into the reconciliation engine."""

    def __init__(self, config_override: Optional[dict[str, Any]] = None) -> None:
        """Initialize application.

        Args:
            config_override: Optional configuration overrides
        """
        self.config = get_config()
        if config_override:
            for key, value in config_override.items():
                setattr(self.config, key, value)

    @property
    def resolver(self) -> StrategyResolver:
        """Strategy resolver for the configured root directory."""
        return StrategyResolver(self.config.root, self.config.state_filename)

    def create_executor(
        self,
        dry_run: bool = False,
        timeout: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
        needs_fetch: bool = True,
    ) -> PlanExecutor:
        """Create a plan executor fetching through yt-dlp.

        Args:
            dry_run: If True, the executor only reports what it would do
            timeout: Per-track fetch timeout overriding the configured one
            progress_callback: Optional callback for progress updates
            needs_fetch: Whether the plan has tracks to fetch. yt-dlp is only
                required for real runs that fetch something.

        Raises:
            FetchError: If yt-dlp is unavailable for a real run that fetches
        """
        fetcher = YtDlpFetcher(self.config, timeout=timeout)
        if needs_fetch and not dry_run:
            fetcher.check_available()

        return PlanExecutor(
            root=self.config.root,
            fetcher=fetcher,
            media_extension=self.config.media_extension,
            state_filename=self.config.state_filename,
            dry_run=dry_run,
            progress_callback=progress_callback,
        )

    def load_desired(self, album_file: Path) -> Manifest:
        """Load the desired manifest, warning about duplicate track names."""
        desired = Manifest.load(album_file)
        duplicates = desired.duplicate_keys()
        if duplicates:
            logger.warning(
                "Album %s lists %d track name(s) more than once, "
                "only the first entry counts: %s",
                desired.title,
                len(duplicates),
                ", ".join(duplicates),
            )
        return desired

    def resolve(self, desired: Manifest) -> Strategy:
        """Resolve the strategy for ``desired`` under the configured root."""
        with console.status(f"[bold green]Inspecting {desired.title}..."):
            return self.resolver.resolve(desired)
