"""
quorum-vault CLI main entry point.

Usage:
    quorum-vault [OPTIONS] COMMAND [ARGS]...
"""
from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console

from .. import __version__
from ..logging_utils import configure_logging
from ..settings import get_settings
from .commands import networks, transactions, wallets

console = Console()


@click.group()
@click.version_option(version=__version__, message="%(prog)s %(version)s")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="QUORUM_VAULT_HOME",
    help="Directory holding wallets/, networks/ and the pending transaction",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def cli(ctx, home: Path | None, verbose: bool, json_logs: bool):
    """Assemble multi-signature vault transactions without a server."""
    ctx.ensure_object(dict)

    settings = ctx.obj.get("settings") or get_settings()

    # Override with CLI options
    if home:
        settings = settings.model_copy(update={"home": home})
    if json_logs:
        settings = settings.model_copy(update={"json_logs": True})

    configure_logging(
        logging.DEBUG if verbose else settings.log_level,
        json_format=settings.json_logs,
    )

    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@cli.command()
@click.pass_context
def paths(ctx):
    """Show where configuration and the pending transaction are read from."""
    settings = ctx.obj["settings"]

    console.print("\n[bold blue]quorum-vault paths[/bold blue]\n")
    console.print(f"Home: [cyan]{settings.home}[/cyan]")
    console.print(f"Wallets: [cyan]{settings.wallets_path}[/cyan]")
    console.print(f"Networks: [cyan]{settings.networks_path}[/cyan]")

    pending = settings.pending_path
    marker = "[green]present[/green]" if pending.is_file() else "[dim]none[/dim]"
    console.print(f"Pending transaction: [cyan]{pending}[/cyan] ({marker})")
    console.print()


# Register command groups
cli.add_command(wallets.wallets)
cli.add_command(networks.networks)
cli.add_command(transactions.tx)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
