"""Wallet configuration commands."""
from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from ...exceptions import VaultError
from ...hashing import derive_vault_address
from ..context import RULE, fail, get_controller

console = Console()


@click.group()
def wallets():
    """Inspect configured vault wallets."""
    pass


@wallets.command("list")
@click.pass_context
def list_wallets(ctx):
    """List all configured wallets."""
    registry = get_controller(ctx).wallets
    names = registry.list_names()

    if not names:
        console.print("[dim]No wallets found[/dim]")
        console.print("[dim]Add a JSON file under the wallets/ directory[/dim]")
        return

    table = Table(title="Wallets")
    table.add_column("Name", style="cyan")
    table.add_column("Vault Address", style="green")
    table.add_column("Signers", justify="right")
    table.add_column("Required", style="yellow", justify="right")
    table.add_column("Version")

    for name in names:
        try:
            wallet = registry.load(name)
        except VaultError as e:
            table.add_row(name, f"[red]invalid: {e.message}[/red]", "", "", "")
            continue

        address = derive_vault_address(wallet)
        table.add_row(
            name,
            address[:18] + "...",
            str(len(wallet.active_signers)),
            str(wallet.required_signatures),
            wallet.predicate_version[:12],
        )

    console.print(table)


@wallets.command()
@click.argument("name")
@click.option("-n", "--network", help="Network to show alongside the wallet")
@click.pass_context
def info(ctx, name: str, network: str | None):
    """Show wallet details (address, signers, threshold)."""
    controller = get_controller(ctx)

    try:
        wallet = controller.wallets.load(name)
        network_config = controller.networks.load(network) if network else None
    except VaultError as e:
        fail(e)

    signers = wallet.active_signers

    console.print(f"\n[bold]Wallet: [cyan]{name}[/cyan][/bold]\n")
    console.print(f"[dim]{RULE}[/dim]")

    console.print("  Address:")
    console.print(f"    [green]{derive_vault_address(wallet)}[/green]", soft_wrap=True)
    console.print()

    if network_config is not None:
        console.print("  Network:")
        console.print(f"    {network} ({network_config.rpc_url})")
        console.print()

    console.print("  Predicate Version:")
    console.print(f"    {wallet.predicate_version}")
    console.print()

    console.print(f"  Signers ({len(signers)}):")
    for i, signer in enumerate(signers, start=1):
        console.print(f"    {i}. {signer}", soft_wrap=True)
    console.print()

    console.print("  Signatures Required:")
    console.print(f"    [yellow]{wallet.required_signatures} of {len(signers)}[/yellow]")
    console.print(f"\n[dim]{RULE}[/dim]\n")
