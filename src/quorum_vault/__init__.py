"""
quorum-vault - Serverless M-of-N transaction assembly for predicate vaults.

One party proposes a transfer, each signer contributes a signature offline,
and once the wallet threshold of distinct signers is reached the transaction
is submitted to the network.

Example usage:
    from quorum_vault import (
        LifecycleController,
        TransactionIntent,
        build_controller,
    )

    controller = build_controller()
    result = controller.create("treasury", "testnet", TransactionIntent("0xabc...", "0.5"))
    controller.add_signature(signer, signature)
    if controller.ready_to_send():
        controller.send()
"""

__version__ = "0.1.0"

from .exceptions import (
    VaultError,
    NotFoundError,
    WalletNotFoundError,
    NetworkNotFoundError,
    NoPendingProposalError,
    ProposalConflictError,
    InsufficientSignaturesError,
    ValidationError,
    ConfigValidationError,
    ProposalFormatError,
    SigningHashMismatchError,
    ExternalFailure,
    SigningHashError,
    SubmissionError,
)

from .models import (
    ProposalState,
    TransactionIntent,
    SignatureEntry,
    SignatureSet,
    PendingProposal,
    CreateResult,
    SignatureResult,
    SubmissionReceipt,
    SendResult,
    ProposalStatus,
)

from .store import ProposalStore, FileProposalStore, InMemoryProposalStore

from .registry import (
    WalletConfig,
    NetworkConfig,
    FileWalletRegistry,
    FileNetworkRegistry,
)

from .hashing import SigningContext, CanonicalSigningHashComputer, derive_vault_address

from .submission import JsonRpcSubmissionClient, encode_witness

from .lifecycle import LifecycleController, build_controller

from .settings import VaultSettings, get_settings

__all__ = [
    "__version__",
    # Errors
    "VaultError",
    "NotFoundError",
    "WalletNotFoundError",
    "NetworkNotFoundError",
    "NoPendingProposalError",
    "ProposalConflictError",
    "InsufficientSignaturesError",
    "ValidationError",
    "ConfigValidationError",
    "ProposalFormatError",
    "SigningHashMismatchError",
    "ExternalFailure",
    "SigningHashError",
    "SubmissionError",
    # Model
    "ProposalState",
    "TransactionIntent",
    "SignatureEntry",
    "SignatureSet",
    "PendingProposal",
    "CreateResult",
    "SignatureResult",
    "SubmissionReceipt",
    "SendResult",
    "ProposalStatus",
    # Storage
    "ProposalStore",
    "FileProposalStore",
    "InMemoryProposalStore",
    # Configuration
    "WalletConfig",
    "NetworkConfig",
    "FileWalletRegistry",
    "FileNetworkRegistry",
    "VaultSettings",
    "get_settings",
    # Collaborators
    "SigningContext",
    "CanonicalSigningHashComputer",
    "derive_vault_address",
    "JsonRpcSubmissionClient",
    "encode_witness",
    # Lifecycle
    "LifecycleController",
    "build_controller",
]
