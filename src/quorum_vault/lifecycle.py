"""
Pending-transaction lifecycle.

Tracks a single proposal from creation through signature collection to
submission or cancellation:

    EMPTY -> PROPOSED -> SIGNING -> READY -> (sent | cancelled) -> EMPTY

PROPOSED/SIGNING/READY are computed from the number of unique signers versus
the wallet threshold; only the proposal itself is persisted.

Store discipline:
- each operation does at most one load and one save
- send touches the store only after the submission client has returned,
  so a failed submission never loses collected signatures and a successful
  one is never left behind to be submitted twice
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from .exceptions import (
    InsufficientSignaturesError,
    NoPendingProposalError,
    ProposalConflictError,
    SigningHashError,
    SigningHashMismatchError,
    SubmissionError,
    ValidationError,
    VaultError,
)
from .hashing import CanonicalSigningHashComputer, SigningContext, SigningHashComputer
from .models import (
    CreateResult,
    PendingProposal,
    ProposalState,
    ProposalStatus,
    SendResult,
    SignatureEntry,
    SignatureResult,
    SignatureSet,
    TransactionIntent,
)
from .registry import FileNetworkRegistry, FileWalletRegistry, NetworkConfigProvider, WalletConfigProvider
from .settings import VaultSettings, get_settings
from .store import FileProposalStore, ProposalStore
from .submission import JsonRpcSubmissionClient, SubmissionClient
from .validators import validate_hex_string

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleController:
    """
    Orchestrates create / add-signature / send / cancel over a single-slot store.

    All collaborators are injected so tests can run against in-memory doubles.
    """

    def __init__(
        self,
        store: ProposalStore,
        wallets: WalletConfigProvider,
        networks: NetworkConfigProvider,
        hash_computer: SigningHashComputer,
        submitter: SubmissionClient,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._wallets = wallets
        self._networks = networks
        self._hash_computer = hash_computer
        self._submitter = submitter
        self._clock = clock or _utcnow

    @property
    def wallets(self) -> WalletConfigProvider:
        return self._wallets

    @property
    def networks(self) -> NetworkConfigProvider:
        return self._networks

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_context(
        self,
        wallet_name: str,
        network_name: str,
        intent: TransactionIntent,
    ) -> SigningContext:
        wallet = self._wallets.load(wallet_name)
        network = self._networks.load(network_name)
        return SigningContext(intent=intent, wallet=wallet, network=network)

    def _compute_hash(self, context: SigningContext) -> str:
        try:
            signing_hash = self._hash_computer.compute(context)
        except VaultError:
            raise
        except Exception as e:
            raise SigningHashError(f"Failed to compute signing hash: {e}") from e
        if not signing_hash:
            raise SigningHashError("Signing hash computer returned an empty hash")
        return signing_hash

    def current(self) -> Optional[PendingProposal]:
        """The stored proposal, or None when the slot is empty."""
        if not self._store.exists():
            return None
        return self._store.load()

    @staticmethod
    def _checked_entry(signer: str, signature: str) -> SignatureEntry:
        """Reject entries that could never be encoded into a witness."""
        signer = (signer or "").strip()
        signature = (signature or "").strip()
        if not signer:
            raise ValidationError("Signer address is required", field="signer")
        if not signature:
            raise ValidationError("Signature is required", field="signature")
        validate_hex_string(signer, field_name="signer")
        validate_hex_string(signature, field_name="signature")
        return SignatureEntry(signer=signer, signature=signature)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(
        self,
        wallet_name: str,
        network_name: str,
        intent: TransactionIntent,
        replace: bool = False,
    ) -> CreateResult:
        """
        Propose a new transaction.

        Args:
            wallet_name: Wallet whose predicate will spend the funds
            network_name: Network the transaction targets
            intent: Recipient, amount and optional asset
            replace: Discard an existing proposal instead of refusing

        Returns:
            CreateResult with the hash every signer must sign

        Raises:
            ProposalConflictError: a proposal exists and replace is False
        """
        existing: Optional[PendingProposal] = None
        if self._store.exists():
            existing = self._store.load()
            if not replace:
                raise ProposalConflictError(
                    "A pending transaction already exists; cancel it or confirm replacement",
                    details=existing.summary(),
                )

        context = self._build_context(wallet_name, network_name, intent)
        signing_hash = self._compute_hash(context)

        if existing is not None:
            self._store.delete()
            logger.info(
                f"Discarded pending transaction for wallet {existing.wallet_name} "
                f"({existing.unique_count()} signatures dropped)"
            )

        proposal = PendingProposal(
            wallet_name=wallet_name,
            network_name=network_name,
            signing_hash=signing_hash,
            intent=intent,
            required_signatures=context.wallet.required_signatures,
            signatures=SignatureSet(),
            created_at=self._clock(),
        )
        self._store.save(proposal)

        logger.info(
            f"Created pending transaction for wallet {wallet_name} on {network_name}: "
            f"{intent.amount} to {intent.recipient}, {proposal.required_signatures} signatures required"
        )

        return CreateResult(
            signing_hash=signing_hash,
            required_signatures=proposal.required_signatures,
            vault_address=context.vault_address,
        )

    def add_signature(self, signer: str, signature: str) -> SignatureResult:
        """
        Record one signer's signature.

        Both values must be hex; the signature is not verified against the
        signing hash. A signer that already signed is ignored (first signature
        wins) and nothing is written.
        """
        entry = self._checked_entry(signer, signature)
        signer = entry.signer

        proposal = self._store.load()
        appended = proposal.signatures.add(entry)

        if appended:
            self._store.save(proposal)
            logger.info(
                f"Signature recorded for {signer}: "
                f"{proposal.unique_count()} of {proposal.required_signatures}"
            )
        else:
            logger.info(f"Signer {signer} already signed; keeping the first signature")

        return SignatureResult(
            unique_count=proposal.unique_count(),
            required=proposal.required_signatures,
            threshold_reached=proposal.is_ready(),
            appended=appended,
        )

    def ready_to_send(self) -> bool:
        """True iff the stored proposal has enough unique signers."""
        return self._store.load().is_ready()

    def state(self) -> ProposalState:
        proposal = self.current()
        if proposal is None:
            return ProposalState.EMPTY
        return proposal.state

    def status(self) -> ProposalStatus:
        proposal = self.current()
        if proposal is None:
            return ProposalStatus(proposal=None, state=ProposalState.EMPTY)
        return ProposalStatus(
            proposal=proposal,
            state=proposal.state,
            unique_count=proposal.unique_count(),
            required=proposal.required_signatures,
        )

    def send(
        self,
        provided_signatures: Optional[Iterable[SignatureEntry]] = None,
        network_name: Optional[str] = None,
    ) -> SendResult:
        """
        Submit the proposal once enough signatures are present.

        Args:
            provided_signatures: Out-of-band signatures merged before the check
            network_name: Submit through this network instead of the stored one

        Returns:
            SendResult with the network transaction id

        Raises:
            InsufficientSignaturesError: threshold not reached; store untouched
            SigningHashMismatchError: configuration changed since creation
            ValidationError: a provided signer or signature is not hex; store untouched
            SubmissionError: network rejected or unreachable; proposal kept
        """
        provided = [self._checked_entry(e.signer, e.signature) for e in provided_signatures or ()]

        proposal = self._store.load()

        merged = 0
        if provided:
            merged = proposal.signatures.merge(provided)

        have = proposal.unique_count()
        need = proposal.required_signatures
        if have < need:
            raise InsufficientSignaturesError(have=have, need=need)

        context = self._build_context(
            proposal.wallet_name,
            network_name or proposal.network_name,
            proposal.intent,
        )
        recomputed = self._compute_hash(context)
        if recomputed != proposal.signing_hash:
            raise SigningHashMismatchError(stored=proposal.signing_hash, recomputed=recomputed)

        signatures = proposal.signatures.all()
        try:
            receipt = self._submitter.submit(context, signatures)
        except Exception as e:
            if merged:
                # Keep out-of-band signatures so a retry needs nothing re-collected
                self._store.save(proposal)
            logger.error(f"Transaction submission failed: {e}")
            if isinstance(e, VaultError):
                raise
            raise SubmissionError(f"Transaction submission failed: {e}") from e

        self._store.delete()
        logger.info(f"Transaction {receipt.transaction_id} submitted ({receipt.status})")

        return SendResult(
            transaction_id=receipt.transaction_id,
            status=receipt.status,
            signatures=signatures,
        )

    def cancel(self) -> bool:
        """Discard the pending proposal. Returns False if there was none."""
        removed = self._store.delete()
        if removed:
            logger.info("Pending transaction cancelled")
        return removed


def build_controller(settings: Optional[VaultSettings] = None) -> LifecycleController:
    """Controller wired to the file-backed store and registries from settings."""
    settings = settings or get_settings()
    return LifecycleController(
        store=FileProposalStore(settings.pending_path),
        wallets=FileWalletRegistry(settings.wallets_path),
        networks=FileNetworkRegistry(settings.networks_path),
        hash_computer=CanonicalSigningHashComputer(),
        submitter=JsonRpcSubmissionClient(timeout=settings.rpc_timeout_seconds),
    )


def require_proposal(controller: LifecycleController) -> PendingProposal:
    """Current proposal or NoPendingProposalError."""
    proposal = controller.current()
    if proposal is None:
        raise NoPendingProposalError()
    return proposal


__all__ = ["LifecycleController", "build_controller", "require_proposal"]
