"""Network configuration commands."""
from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from ...exceptions import VaultError
from ...logging_utils import mask_sensitive_data
from ..context import get_controller

console = Console()


@click.group()
def networks():
    """Inspect configured networks."""
    pass


@networks.command("list")
@click.pass_context
def list_networks(ctx):
    """List all configured networks."""
    registry = get_controller(ctx).networks
    names = registry.list_names()

    if not names:
        console.print("[dim]No networks found[/dim]")
        console.print("[dim]Add a JSON file under the networks/ directory[/dim]")
        return

    table = Table(title="Networks")
    table.add_column("Name", style="cyan")
    table.add_column("RPC URL")
    table.add_column("Chain ID", justify="right")
    table.add_column("Assets", style="yellow")
    table.add_column("Explorer", style="dim")

    for name in names:
        try:
            network = registry.load(name)
        except VaultError as e:
            table.add_row(name, f"[red]invalid: {e.message}[/red]", "", "", "")
            continue

        table.add_row(
            name,
            mask_sensitive_data(network.rpc_url),
            str(network.chain_id) if network.chain_id is not None else "-",
            ", ".join(sorted(network.assets)),
            network.explorer_url or "-",
        )

    console.print(table)
