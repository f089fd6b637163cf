"""Sync command reconciling an album folder with its manifest."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...core.sync import plan_for_strategy
from ...exceptions import AlbumSyncError
from ..display import ConsoleProgressReporter, display_execution_result, display_plan
from .app import AlbumSyncApp

console = Console()
logger = logging.getLogger(__name__)


@click.command("sync")
@click.argument(
    "album_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would change without touching the album folder",
)
@click.option(
    "--timeout",
    type=click.IntRange(min=0),
    default=None,
    help="Seconds to wait for each track fetch (0 waits forever)",
)
@click.option(
    "--audio-format",
    type=str,
    default=None,
    help="Audio format of track files (default: mp3)",
)
@click.option("--quiet", "-q", is_flag=True, help="Don't list every processed track")
@click.pass_obj
def sync_command(
    app: AlbumSyncApp,
    album_file: Path,
    dry_run: bool,
    timeout: Optional[int],
    audio_format: Optional[str],
    quiet: bool,
) -> None:
    """Make an album folder match ALBUM_FILE.

    The album folder is named after ALBUM_FILE without its extension and lives
    under the root directory. Stale tracks are removed, missing tracks are
    fetched, and the manifest is recorded in the folder for the next run.

    Examples:
        # Reconcile ./Blue.album into ./Blue/
        album-sync sync Blue.album

        # Preview the changes only
        album-sync sync Blue.album --dry-run
    """
    if audio_format:
        app.config.audio_format = audio_format.lower().replace(".", "")

    try:
        desired = app.load_desired(album_file)
        strategy = app.resolve(desired)
        plan = plan_for_strategy(desired, strategy)
        display_plan(desired, strategy, plan)

        executor = app.create_executor(
            dry_run=dry_run,
            timeout=timeout,
            progress_callback=ConsoleProgressReporter(verbose=not quiet),
            needs_fetch=bool(plan.additions),
        )
        result = executor.execute(desired, strategy)
    except AlbumSyncError as e:
        logger.debug("Sync of %s failed", album_file, exc_info=True)
        console.print(f"[bold red]❌ Sync failed: {e}[/bold red]")
        raise click.Abort()

    display_execution_result(result)
