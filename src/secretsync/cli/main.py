"""CLI entry point."""

import logging
import sys

import click
from rich.console import Console

from secretsync import __version__
from secretsync.cli.output import create_plan_table, create_summary_table, print_banner
from secretsync.config import SyncConfig, load_config
from secretsync.errors import SecretSyncError
from secretsync.github import GitHubClient
from secretsync.manager import SecretsManager, load_manager
from secretsync.orchestrator import SyncSummary

console = Console()


def _fail(message: object) -> None:
    console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def _load(ctx: click.Context) -> tuple[SyncConfig, SecretsManager]:
    """Load configuration, fetch the remote snapshot and reconcile.

    Exits with status 1 on any configuration or fetch error.
    """
    try:
        config = load_config(
            env_file=ctx.obj["env_file"],
            secrets_file=ctx.obj["secrets_file"],
        )
        client = GitHubClient(config)
        manager = load_manager(config.secrets, client)
    except SecretSyncError as e:
        _fail(e)
    return config, manager


def _report(summary: SyncSummary) -> None:
    console.print(create_summary_table(summary))
    if summary.has_failures:
        console.print("[red]Some actions failed.[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] {summary.total} actions applied")


def _apply(manager: SecretsManager, concurrency: int) -> None:
    try:
        summary = manager.run_reconciliation(max_concurrency=concurrency)
    except SecretSyncError as e:
        _fail(e)
    _report(summary)


@click.group()
@click.version_option(version=__version__, prog_name="secretsync")
@click.option("--env-file", type=click.Path(dir_okay=False), help="Path to a .env file.")
@click.option(
    "--secrets-file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with desired secrets (instead of GITHUB_SECRETS).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, env_file: str | None, secrets_file: str | None, verbose: bool) -> None:
    """Sync GitHub Actions repository secrets with a desired set.

    Values are sealed with the repository's public key before upload.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["secrets_file"] = secrets_file


@cli.command()
@click.pass_context
def plan(ctx: click.Context) -> None:
    """Show what a sync would create, update and delete."""
    config, manager = _load(ctx)
    print_banner(console, f"{config.organization}/{config.repository}", __version__)
    actions = manager.list_secrets()
    if not actions:
        console.print("[yellow]Nothing to do.[/yellow]")
        return
    console.print(create_plan_table(actions))


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Max in-flight API calls (default from config).",
)
@click.pass_context
def sync(ctx: click.Context, yes: bool, concurrency: int | None) -> None:
    """Reconcile the repository's secrets with the desired set."""
    config, manager = _load(ctx)
    print_banner(console, f"{config.organization}/{config.repository}", __version__)

    actions = manager.list_secrets()
    if not actions:
        console.print("[yellow]Nothing to do.[/yellow]")
        return
    console.print(create_plan_table(actions))

    if not yes:
        if not click.confirm("Apply these changes?"):
            console.print("[yellow]Cancelled[/yellow]")
            return

    _apply(manager, concurrency or config.max_concurrency)


@cli.command()
@click.option("--dry-run", is_flag=True, help="Browse only, do not apply changes.")
@click.pass_context
def browse(ctx: click.Context, dry_run: bool) -> None:
    """Browse the plan interactively, then apply it on quit."""
    from secretsync.cli.viewer import SecretsViewer

    config, manager = _load(ctx)
    SecretsViewer(manager, console=console).run()

    if dry_run:
        console.print("[yellow]Dry run, no changes applied.[/yellow]")
        return
    _apply(manager, config.max_concurrency)
