"""Command-line interface for the album-sync application.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import AlbumSyncApp, plan_command, status_command, sync_command


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the album folders (default: $ALBUM_SYNC_ROOT or cwd)",
)
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: str, root: Optional[Path]) -> None:
    """Album folder synchronization tool.

    Keeps a folder of audio tracks in line with a manifest of
    ``track name=source`` lines.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()

    config_override = {}
    if root is not None:
        config_override["root"] = root

    ctx.obj = AlbumSyncApp(config_override)


cli.add_command(sync_command)
cli.add_command(plan_command)
cli.add_command(status_command)


if __name__ == "__main__":
    cli()
