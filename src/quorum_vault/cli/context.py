"""Shared helpers for CLI commands."""
from __future__ import annotations

from typing import NoReturn

import click
from rich.console import Console

from ..exceptions import VaultError
from ..lifecycle import LifecycleController, build_controller
from ..models import PendingProposal
from ..registry import BASE_ASSET, NetworkConfigProvider
from ..settings import VaultSettings

console = Console()

RULE = "─" * 70


def get_settings(ctx: click.Context) -> VaultSettings:
    return ctx.obj["settings"]


def get_controller(ctx: click.Context) -> LifecycleController:
    """Get the lifecycle controller from context, building it on first use."""
    controller = ctx.obj.get("controller")
    if controller is None:
        controller = build_controller(get_settings(ctx))
        ctx.obj["controller"] = controller
    return controller


def fail(error: VaultError) -> NoReturn:
    """Print a vault error and exit with status 1."""
    console.print(f"\n[red]Error: {error.message}[/red]\n")
    if error.details and click.get_current_context().obj.get("verbose"):
        for key, value in error.details.items():
            console.print(f"  [dim]{key}: {value}[/dim]")
    raise click.exceptions.Exit(1)


def describe_asset(networks: NetworkConfigProvider, network_name: str, asset_id: str | None) -> str:
    """Symbol of the asset on the network (e.g. "USDC"), or a shortened id."""
    try:
        network = networks.load(network_name)
    except VaultError:
        # Network config missing or broken: show what the proposal stored
        return asset_id or f"{BASE_ASSET} (default)"
    return network.asset_label(network.resolve_asset(asset_id))


def print_proposal(
    proposal: PendingProposal,
    networks: NetworkConfigProvider,
    title: str = "Pending Transaction",
) -> None:
    """Render the proposal details block used by several commands."""
    intent = proposal.intent
    console.print(f"\n[bold]{title}[/bold]")
    console.print(f"[dim]{RULE}[/dim]")
    console.print("\n  Details:")
    console.print(f"    Wallet: {proposal.wallet_name}")
    console.print(f"    Network: {proposal.network_name}")
    console.print(f"    To: {intent.recipient}")
    console.print(f"    Amount: {intent.amount}")
    console.print(f"    Asset: {describe_asset(networks, proposal.network_name, intent.asset_id)}")
    console.print(f"    Created: {proposal.created_at.isoformat()}")
    console.print("\n  Hash to Sign:")
    console.print(f"    [cyan]{proposal.signing_hash}[/cyan]", soft_wrap=True)
    console.print("\n  Signatures:")
    console.print(
        f"    [yellow]{proposal.unique_count()} of {proposal.required_signatures} required[/yellow]"
    )


def explorer_link(base_url: str | None, transaction_id: str) -> str:
    base = (base_url or "").rstrip("/")
    return f"{base}/tx/{transaction_id}"
