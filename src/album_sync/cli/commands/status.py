"""Status command listing the recorded tracks of an album folder."""

from pathlib import Path

import click
from rich.console import Console

from ...core.filesystem import inspect_album
from ...core.sync import StrategyResolver
from ..display import display_album_status
from .app import AlbumSyncApp

console = Console()


@click.command("status")
@click.argument(
    "album_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.pass_obj
def status_command(app: AlbumSyncApp, album_dir: Path) -> None:
    """Show which recorded tracks of ALBUM_DIR are present on disk."""
    album_dir = album_dir.resolve()
    resolver = StrategyResolver(album_dir.parent, app.config.state_filename)

    baseline = resolver.load_baseline(album_dir)
    if baseline is None:
        console.print(
            f"[red]❌ No readable state record "
            f"({app.config.state_filename}) in {album_dir}[/red]"
        )
        raise click.Abort()

    infos = inspect_album(album_dir, baseline, app.config.media_extension)
    display_album_status(baseline.title, infos)
