"""Rich output formatting helpers."""

from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from secretsync.models import ActionKind, SyncAction
from secretsync.orchestrator import SyncSummary

STATUS_STYLES = {
    ActionKind.CREATE: "green",
    ActionKind.UPDATE: "white",
    ActionKind.DELETE: "red",
}

STATUS_LABELS = {
    ActionKind.CREATE: "New",
    ActionKind.UPDATE: "Existing",
    ActionKind.DELETE: "Deleted",
}


def print_banner(console: Console, target: str, version: str) -> None:
    """Print the startup banner.

    Args:
        console: Rich console for output.
        target: "owner/repository" being reconciled.
        version: Package version string.
    """
    console.print(
        Panel(
            f"[bold cyan]secretsync[/bold cyan] v{version}",
            subtitle=target,
            border_style="cyan",
        )
    )


def create_plan_table(actions: Sequence[SyncAction]) -> Table:
    """Create a table listing each secret and what will happen to it.

    Args:
        actions: Actions from reconciliation.

    Returns:
        Configured Rich Table.
    """
    table = Table(title="Reconciliation Plan")
    table.add_column("Secret", style="cyan")
    table.add_column("Action", style="bold")
    table.add_column("Status")

    for action in actions:
        style = STATUS_STYLES[action.kind]
        table.add_row(
            action.name,
            f"[{style}]{action.kind.value}[/{style}]",
            STATUS_LABELS[action.kind],
        )
    return table


def create_summary_table(summary: SyncSummary) -> Table:
    """Create a per-category table of succeeded and failed names.

    Args:
        summary: Outcome of a run.

    Returns:
        Configured Rich Table.
    """
    table = Table(title="Sync Summary")
    table.add_column("Category", style="cyan")
    table.add_column("Succeeded", style="green")
    table.add_column("Failed", style="red")

    for kind in ActionKind:
        succeeded = ", ".join(summary.succeeded[kind]) or "-"
        failed = "\n".join(f"{name}: {error}" for name, error in summary.failed[kind]) or "-"
        table.add_row(kind.value, succeeded, failed)
    return table
