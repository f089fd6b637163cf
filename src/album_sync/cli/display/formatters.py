"""Display formatters and UI helpers for CLI."""

import logging
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from ...core.filesystem import TrackFileInfo
from ...core.sync import (
    ExecutionResult,
    ProgressPhase,
    ProgressUpdate,
    ReconciliationPlan,
    Strategy,
)
from ...models import Manifest

console = Console()
logger = logging.getLogger(__name__)


def display_plan(
    desired: Manifest, strategy: Strategy, plan: ReconciliationPlan
) -> None:
    """Display the additions and deletions planned for an album.

    Args:
        desired: Desired album manifest
        strategy: Resolved strategy
        plan: Plan computed for the album
    """
    console.print(f"\n[bold cyan]💿 {desired.title}[/bold cyan] ({strategy})")

    if plan.is_empty:
        console.print("  [dim]✓ Album is up to date[/dim]\n")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Action", style="cyan", width=8)
    table.add_column("Track")
    table.add_column("Source", style="dim")

    for key in plan.deletions:
        table.add_row("[red]remove[/red]", key, "")
    for key, source_identifier in plan.additions:
        table.add_row("[green]fetch[/green]", key, source_identifier)

    console.print(table)
    summary = plan.get_summary()
    console.print(
        f"  {summary['deletions']} to remove, {summary['additions']} to fetch "
        f"({summary['replacements']} replaced)\n"
    )


def display_execution_result(result: ExecutionResult) -> None:
    """Display execution results.

    Args:
        result: PlanExecutor result object
    """
    if result.dry_run:
        console.print("\n[yellow]⚠️  DRY RUN - No changes were made[/yellow]\n")
    elif result.succeeded:
        console.print("\n[bold green]✅ Album reconciled[/bold green]\n")
    else:
        console.print(
            "\n[bold yellow]⚠️  Album reconciled with errors[/bold yellow]\n"
        )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", width=30)
    table.add_column("Count", style="green", justify="right")

    table.add_row("Tracks Removed", str(result.files_removed))
    table.add_row("Tracks Already Absent", str(result.files_already_absent))
    table.add_row("Fetches Attempted", str(result.downloads_attempted))
    table.add_row("Fetches Successful", str(result.downloads_successful))
    table.add_row("Fetches Failed", str(result.downloads_failed))
    console.print(table)

    if result.failed_keys:
        console.print(
            f"\n[yellow]⚠️  {len(result.failed_keys)} track(s) recorded but "
            f"not fetched:[/yellow]"
        )
        for key in result.failed_keys[:10]:
            console.print(f"  • {key}")
        if len(result.failed_keys) > 10:
            console.print(f"  ... and {len(result.failed_keys) - 10} more")


def display_album_status(title: str, infos: List[TrackFileInfo]) -> None:
    """Display the on-disk state of every recorded track of an album."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Track")
    table.add_column("Source", style="dim")
    table.add_column("Duration", justify="right")
    table.add_column("Status")

    for number, info in enumerate(infos, start=1):
        if info.error:
            status = "[red]invalid name[/red]"
        elif info.exists:
            status = "[green]present[/green]"
        else:
            status = "[yellow]missing[/yellow]"
        duration = info.duration_formatted if info.exists else ""
        table.add_row(str(number), info.key, info.source_identifier, duration, status)

    console.print(table)
    present = sum(1 for info in infos if info.exists)
    console.print(f"  {present}/{len(infos)} tracks present\n")


class ConsoleProgressReporter:
    """Prints per-track progress of a reconciliation run."""

    def __init__(self, verbose: bool = True):
        """Initialize console reporter.

        Args:
            verbose: Whether to print every processed track
        """
        self.verbose = verbose
        self._last_phase: Optional[ProgressPhase] = None

    def __call__(self, update: ProgressUpdate) -> None:
        """Handle progress update."""
        if update.phase == ProgressPhase.ERROR:
            console.print(f"  [red]✗ {update.message}[/red]")
            return

        if update.phase != self._last_phase:
            self._last_phase = update.phase
            if update.total:
                console.print(f"[bold blue]{update.message}...[/bold blue]")
            return

        if not self.verbose or "key" not in update.metadata:
            return

        if update.metadata.get("fetched") is False:
            console.print(f"  [red]✗[/red] {update}")
        else:
            console.print(f"  [green]✓[/green] {update}")
