"""Plan command previewing the changes a sync would make."""

from pathlib import Path

import click
from rich.console import Console

from ...core.sync import plan_for_strategy
from ...exceptions import AlbumSyncError
from ..display import display_plan
from .app import AlbumSyncApp

console = Console()


@click.command("plan")
@click.argument(
    "album_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_obj
def plan_command(app: AlbumSyncApp, album_file: Path) -> None:
    """Show the tracks a sync of ALBUM_FILE would remove and fetch."""
    try:
        desired = app.load_desired(album_file)
        strategy = app.resolve(desired)
    except AlbumSyncError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise click.Abort()

    display_plan(desired, strategy, plan_for_strategy(desired, strategy))
