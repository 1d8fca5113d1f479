"""Pending transaction commands: create, sign, send, cancel."""
from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ...exceptions import (
    InsufficientSignaturesError,
    SubmissionError,
    ValidationError,
    VaultError,
)
from ...lifecycle import LifecycleController, require_proposal
from ...models import SignatureEntry, TransactionIntent
from ...signer import KeySigner
from ..context import (
    RULE,
    describe_asset,
    explorer_link,
    fail,
    get_controller,
    get_settings,
    print_proposal,
)

console = Console()


@click.group()
def tx():
    """Create, sign and send the pending transaction."""
    pass


def _intent_from_file(path: Path) -> TransactionIntent:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Transaction file {path} is not valid JSON: {e}", field="file")
    if not isinstance(data, dict):
        raise ValidationError(f"Transaction file {path} must contain a JSON object", field="file")

    return TransactionIntent(
        recipient=data.get("to") or data.get("recipient") or "",
        amount=str(data.get("amount", "")),
        asset_id=data.get("asset_id") or data.get("assetId"),
    )


def _send_and_report(ctx, controller: LifecycleController, **kwargs) -> None:
    """Run controller.send behind a spinner and print the result."""
    with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console, transient=True) as progress:
        progress.add_task("Sending transaction...", total=None)
        proposal = controller.current()
        result = controller.send(**kwargs)

    console.print("\n[bold green]✓ Transaction submitted successfully![/bold green]\n")
    console.print(f"[dim]{RULE}[/dim]")
    console.print("\n  Transaction ID:")
    console.print(f"    [cyan]{result.transaction_id}[/cyan]", soft_wrap=True)
    console.print("\n  Status:")
    console.print(f"    [green]{result.status}[/green]")

    network_name = kwargs.get("network_name") or proposal.network_name
    explorer = controller.networks.load(network_name).explorer_url or get_settings(ctx).default_explorer_url
    console.print(f"\n  View: {explorer_link(explorer, result.transaction_id)}", soft_wrap=True)
    console.print(f"\n[dim]{RULE}[/dim]\n")


def _show_manual_send(signer: str, signature: str) -> None:
    console.print(f"\n[dim]{RULE}[/dim]")
    console.print("\n  Send later with:")
    console.print(f"    quorum-vault tx send -s {signer} -S {signature}\n", soft_wrap=True)


@tx.command()
@click.option("-w", "--wallet", required=True, help="Wallet name")
@click.option("-n", "--network", required=True, help="Network name")
@click.option("-t", "--to", "recipient", help="Recipient address")
@click.option("-a", "--amount", help="Amount to transfer (e.g. 0.001)")
@click.option("--asset", help="Asset ID or symbol (default: ETH)")
@click.option(
    "-f", "--file", "tx_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with to/amount/assetId",
)
@click.option("--replace", "--yes", "-y", "replace", is_flag=True, help="Replace an existing pending transaction without asking")
@click.pass_context
def create(
    ctx,
    wallet: str,
    network: str,
    recipient: str | None,
    amount: str | None,
    asset: str | None,
    tx_file: Path | None,
    replace: bool,
):
    """Create a transaction and print the hash to sign."""
    controller = get_controller(ctx)

    try:
        if tx_file:
            intent = _intent_from_file(tx_file)
        elif recipient and amount:
            intent = TransactionIntent(recipient=recipient, amount=amount, asset_id=asset)
        else:
            raise click.UsageError("--to and --amount are required (or use --file)")

        existing = controller.current()
        if existing is not None and not replace:
            console.print("\n[yellow]There is already a pending transaction:[/yellow]\n")
            console.print(f"  [dim]Wallet: {existing.wallet_name}[/dim]")
            console.print(f"  [dim]To: {existing.intent.recipient}[/dim]")
            console.print(f"  [dim]Amount: {existing.intent.amount}[/dim]")
            console.print(f"  [dim]Signatures: {existing.unique_count()} of {existing.required_signatures}[/dim]")
            console.print(f"  [dim]Created: {existing.created_at.isoformat()}[/dim]\n")

            if not click.confirm("Replace the pending transaction?", default=False):
                console.print('\n[dim]Keeping existing transaction. Use "quorum-vault tx sign" to sign it.[/dim]\n')
                return
            replace = True

        result = controller.create(wallet, network, intent, replace=replace)
    except VaultError as e:
        fail(e)

    console.print("\n[bold green]✓ Transaction created![/bold green]\n")
    console.print(f"[dim]{RULE}[/dim]")

    console.print("\n  Vault Address:")
    console.print(f"    {result.vault_address}", soft_wrap=True)

    console.print("\n  Transaction Details:")
    console.print(f"    To: {intent.recipient}")
    console.print(f"    Amount: {intent.amount}")
    console.print(f"    Asset: {describe_asset(controller.networks, network, intent.asset_id)}")

    console.print("\n  Signatures Required:")
    console.print(f"    [yellow]{result.required_signatures}[/yellow]")

    console.print("\n[bold]  Hash to Sign:[/bold]")
    console.print(f"    [cyan]{result.signing_hash}[/cyan]", soft_wrap=True)

    console.print(f"\n[dim]{RULE}[/dim]")
    console.print("\n  Next Step:")
    console.print("    [dim]Run: quorum-vault tx sign[/dim]\n")


@tx.command("add-signature")
@click.option("-s", "--signer", required=True, help="Signer address")
@click.option("-S", "--signature", required=True, help="Signature over the signing hash")
@click.pass_context
def add_signature(ctx, signer: str, signature: str):
    """Record a signature produced offline by one signer."""
    controller = get_controller(ctx)

    try:
        result = controller.add_signature(signer, signature)
    except VaultError as e:
        fail(e)

    if result.appended:
        console.print(f"\n[green]✓ Signature recorded for {signer}[/green]", soft_wrap=True)
    else:
        console.print(f"\n[yellow]{signer} already signed; keeping the first signature[/yellow]", soft_wrap=True)

    console.print(f"  Signatures: [yellow]{result.unique_count} of {result.required} required[/yellow]")

    if result.threshold_reached:
        console.print("\n[green]  Threshold reached! Run: quorum-vault tx send[/green]\n")
    else:
        console.print(f"\n  Need {result.missing} more signature(s).\n")


@tx.command()
@click.option("-p", "--pk", "private_key", help="Private key (0x...)")
@click.option("--send", "send_now", is_flag=True, help="Send without asking once the threshold is reached")
@click.option("--no-send", is_flag=True, help="Only record the signature, never send")
@click.pass_context
def sign(ctx, private_key: str | None, send_now: bool, no_send: bool):
    """Sign the pending transaction with a private key."""
    controller = get_controller(ctx)

    try:
        proposal = require_proposal(controller)
    except VaultError as e:
        fail(e)

    print_proposal(proposal, controller.networks)

    if not private_key:
        private_key = click.prompt("\nEnter your private key (0x...)", hide_input=True)

    try:
        signer = KeySigner.from_private_key(private_key)
        signature = signer.sign(proposal.signing_hash)
        result = controller.add_signature(signer.address, signature)
    except VaultError as e:
        fail(e)

    console.print("\n[bold green]  Signature created![/bold green]\n")
    console.print(f"[dim]{RULE}[/dim]")
    console.print("\n  Signer Address:")
    console.print(f"    [cyan]{signer.address}[/cyan]", soft_wrap=True)
    console.print("\n  Signature:")
    console.print(f"    [green]{signature}[/green]", soft_wrap=True)

    if not result.appended:
        console.print("\n[yellow]  This signer already signed; the earlier signature is kept.[/yellow]")

    console.print("\n  Signatures:")
    console.print(f"    [yellow]{result.unique_count} of {result.required} required[/yellow]")

    if not result.threshold_reached:
        console.print(f"\n[yellow]  Need {result.missing} more signature(s).[/yellow]")
        console.print('\n  [dim]Run "quorum-vault tx sign" again with another signer.[/dim]\n')
        return

    console.print("\n[green]  Threshold reached! Ready to send.[/green]")

    if no_send or not (send_now or click.confirm("Send transaction now?", default=True)):
        _show_manual_send(signer.address, signature)
        return

    try:
        _send_and_report(ctx, controller)
    except VaultError as e:
        console.print(f"\n[red]Error: {e.message}[/red]")
        console.print("[dim]The signatures are kept; retry with: quorum-vault tx send[/dim]")
        raise click.exceptions.Exit(1)


@tx.command()
@click.pass_context
def status(ctx):
    """Show the pending transaction and whether it can be sent."""
    controller = get_controller(ctx)

    try:
        current = controller.status()
    except VaultError as e:
        fail(e)

    if current.proposal is None:
        console.print("\n[yellow]No pending transaction found.[/yellow]")
        console.print("[dim]Create one first with: quorum-vault tx create[/dim]\n")
        return

    print_proposal(current.proposal, controller.networks)

    if len(current.proposal.signatures):
        table = Table(title="Collected Signatures")
        table.add_column("#", justify="right")
        table.add_column("Signer", style="cyan")
        table.add_column("Signature", style="green")
        for i, entry in enumerate(current.proposal.signatures, start=1):
            signature = entry.signature
            if len(signature) > 22:
                signature = signature[:10] + "..." + signature[-8:]
            table.add_row(str(i), entry.signer, signature)
        console.print()
        console.print(table)

    console.print(f"\n  State: [bold]{current.state.value}[/bold]")
    if current.ready:
        console.print("  [green]Ready to send. Run: quorum-vault tx send[/green]\n")
    else:
        console.print(f"  [yellow]Need {current.missing} more signature(s).[/yellow]\n")


@tx.command()
@click.option("-n", "--network", help="Network name (default: the one used at creation)")
@click.option("-s", "--signer", "signers", multiple=True, help="Signer address (repeatable)")
@click.option("-S", "--signature", "signatures", multiple=True, help="Signature, paired with --signer in order")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def send(ctx, network: str | None, signers: tuple[str, ...], signatures: tuple[str, ...], yes: bool):
    """Send the pending transaction to the network."""
    if len(signers) != len(signatures):
        raise click.UsageError("Each --signer needs a matching --signature")

    controller = get_controller(ctx)
    provided = [SignatureEntry(signer=s, signature=sig) for s, sig in zip(signers, signatures)]

    try:
        proposal = require_proposal(controller)
    except VaultError as e:
        fail(e)

    print_proposal(proposal, controller.networks)

    merged = proposal.signatures.copy()
    merged.merge(provided)
    if merged.unique_count() < proposal.required_signatures:
        fail(InsufficientSignaturesError(have=merged.unique_count(), need=proposal.required_signatures))

    if not yes and not click.confirm("\nSend transaction to blockchain?", default=True):
        console.print("\n[dim]Transaction not sent.[/dim]\n")
        return

    try:
        _send_and_report(ctx, controller, provided_signatures=provided, network_name=network)
    except SubmissionError as e:
        console.print("[dim]The pending transaction and its signatures are kept; retry with: quorum-vault tx send[/dim]")
        fail(e)
    except VaultError as e:
        fail(e)


@tx.command()
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def cancel(ctx, yes: bool):
    """Discard the pending transaction and its signatures."""
    controller = get_controller(ctx)

    try:
        proposal = controller.current()
    except VaultError:
        # An unreadable record can still be discarded
        proposal = None

    if proposal is not None and not yes:
        console.print(
            f"\nPending: {proposal.intent.amount} to {proposal.intent.recipient} "
            f"({proposal.unique_count()} of {proposal.required_signatures} signatures)",
            soft_wrap=True,
        )
        if not click.confirm("Discard the pending transaction?", default=False):
            console.print("\n[dim]Kept.[/dim]\n")
            return

    if controller.cancel():
        console.print("\n[green]✓ Pending transaction cancelled[/green]\n")
    else:
        console.print("\n[dim]No pending transaction to cancel[/dim]\n")
