"""
Data model for a transaction proposal awaiting signatures.

A PendingProposal pins everything signers need to agree on: the intent
(recipient, amount, asset), the signing hash derived from it, and the
threshold taken from the wallet at creation time. Signatures accumulate in a
SignatureSet that keeps one entry per signer, first write wins.

Persisted records carry ``schema_version``; older layouts are upgraded through
the migration table at the bottom of this module.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .exceptions import ProposalFormatError, ValidationError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class ProposalState(str, Enum):
    """Lifecycle state, computed from the stored proposal."""
    EMPTY = "empty"  # No proposal (also after send or cancel)
    PROPOSED = "proposed"  # Created, no signatures yet
    SIGNING = "signing"  # Some signatures, below threshold
    READY = "ready"  # Threshold reached


@dataclass(frozen=True)
class TransactionIntent:
    """What the signers are agreeing to transfer."""
    recipient: str
    amount: str  # Decimal string, e.g. "0.001"
    asset_id: Optional[str] = None  # None = network base asset

    def __post_init__(self) -> None:
        recipient = (self.recipient or "").strip()
        if not recipient:
            raise ValidationError("Recipient address is required", field="recipient")

        amount = str(self.amount).strip() if self.amount is not None else ""
        try:
            value = Decimal(amount)
        except InvalidOperation:
            raise ValidationError(f"Amount '{amount}' is not a decimal number", field="amount")
        if not value.is_finite() or value <= 0:
            raise ValidationError(f"Amount must be a positive number, got '{amount}'", field="amount")

        asset_id = self.asset_id.strip() if self.asset_id else None

        object.__setattr__(self, "recipient", recipient)
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "asset_id", asset_id or None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "recipient": self.recipient,
            "amount": self.amount,
            "asset_id": self.asset_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionIntent":
        return cls(
            recipient=data.get("recipient", ""),
            amount=data.get("amount", ""),
            asset_id=data.get("asset_id"),
        )


@dataclass(frozen=True)
class SignatureEntry:
    """One signer's signature over the signing hash."""
    signer: str
    signature: str

    def to_dict(self) -> Dict[str, str]:
        return {"signer": self.signer, "signature": self.signature}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignatureEntry":
        return cls(signer=str(data["signer"]), signature=str(data["signature"]))


class SignatureSet:
    """Insertion-ordered signatures, at most one per signer address.

    Signer equality is exact string comparison. Adding a signer that is already
    present is a no-op: the first signature is kept.
    """

    def __init__(self, entries: Iterable[SignatureEntry] = ()) -> None:
        self._entries: List[SignatureEntry] = []
        self._by_signer: Dict[str, SignatureEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: SignatureEntry) -> bool:
        """Append ``entry`` unless its signer already signed. Returns True if appended."""
        if entry.signer in self._by_signer:
            return False
        self._entries.append(entry)
        self._by_signer[entry.signer] = entry
        return True

    def merge(self, entries: Iterable[SignatureEntry]) -> int:
        """Add each entry in order. Returns how many were appended."""
        return sum(1 for entry in entries if self.add(entry))

    def unique_count(self) -> int:
        return len(self._by_signer)

    def all(self) -> List[SignatureEntry]:
        return list(self._entries)

    def signers(self) -> List[str]:
        return [entry.signer for entry in self._entries]

    def get(self, signer: str) -> Optional[SignatureEntry]:
        return self._by_signer.get(signer)

    def copy(self) -> "SignatureSet":
        return SignatureSet(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SignatureEntry]:
        return iter(list(self._entries))

    def __contains__(self, signer: object) -> bool:
        return signer in self._by_signer

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignatureSet):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"SignatureSet({self._entries!r})"


@dataclass
class PendingProposal:
    """A transaction waiting for signatures."""
    wallet_name: str
    network_name: str
    signing_hash: str
    intent: TransactionIntent
    required_signatures: int
    signatures: SignatureSet = field(default_factory=SignatureSet)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    schema_version: int = SCHEMA_VERSION

    def __post_init__(self) -> None:
        if (
            isinstance(self.required_signatures, bool)
            or not isinstance(self.required_signatures, int)
            or self.required_signatures < 1
        ):
            raise ValidationError(
                f"required_signatures must be a positive integer, got {self.required_signatures!r}",
                field="required_signatures",
            )
        if not self.signing_hash:
            raise ValidationError("signing_hash is required", field="signing_hash")

    def unique_count(self) -> int:
        return self.signatures.unique_count()

    def missing_signatures(self) -> int:
        return max(self.required_signatures - self.unique_count(), 0)

    def is_ready(self) -> bool:
        """Send-eligible once unique signers reach the threshold."""
        return self.unique_count() >= self.required_signatures

    @property
    def state(self) -> ProposalState:
        if self.is_ready():
            return ProposalState.READY
        if self.unique_count() == 0:
            return ProposalState.PROPOSED
        return ProposalState.SIGNING

    def summary(self) -> Dict[str, Any]:
        """Short description used in conflict errors and prompts."""
        return {
            "wallet_name": self.wallet_name,
            "network_name": self.network_name,
            "recipient": self.intent.recipient,
            "amount": self.intent.amount,
            "created_at": self.created_at.isoformat(),
            "signatures": f"{self.unique_count()}/{self.required_signatures}",
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted record layout."""
        return {
            "schema_version": self.schema_version,
            "wallet_name": self.wallet_name,
            "network_name": self.network_name,
            "signing_hash": self.signing_hash,
            "intent": self.intent.to_dict(),
            "created_at": self.created_at.isoformat(),
            "required_signatures": self.required_signatures,
            "signatures": [entry.to_dict() for entry in self.signatures],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingProposal":
        """Parse a persisted record, upgrading older layouts first."""
        if not isinstance(data, dict):
            raise ProposalFormatError("Proposal record must be a JSON object")

        try:
            record = upgrade_record(data)
            return cls(
                wallet_name=str(record["wallet_name"]),
                network_name=str(record["network_name"]),
                signing_hash=str(record["signing_hash"]),
                intent=TransactionIntent.from_dict(record["intent"]),
                required_signatures=record["required_signatures"],
                signatures=SignatureSet(
                    SignatureEntry.from_dict(item) for item in record.get("signatures", [])
                ),
                created_at=_parse_timestamp(record["created_at"]),
                schema_version=record["schema_version"],
            )
        except ProposalFormatError:
            raise
        except KeyError as e:
            raise ProposalFormatError(f"Proposal record is missing field {e}") from e
        except (AttributeError, TypeError, ValueError) as e:
            raise ProposalFormatError(f"Proposal record is malformed: {e}") from e
        except ValidationError as e:
            raise ProposalFormatError(f"Proposal record is invalid: {e.message}", details=e.details) from e


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class CreateResult:
    """Returned by create: what the signers need."""
    signing_hash: str
    required_signatures: int
    vault_address: str


@dataclass
class SignatureResult:
    """Returned by add_signature."""
    unique_count: int
    required: int
    threshold_reached: bool
    appended: bool

    @property
    def missing(self) -> int:
        return max(self.required - self.unique_count, 0)


@dataclass
class SubmissionReceipt:
    """What the network returned for a submitted transaction."""
    transaction_id: str
    status: str = "success"


@dataclass
class SendResult:
    """Returned by a successful send."""
    transaction_id: str
    status: str
    signatures: List[SignatureEntry] = field(default_factory=list)


@dataclass
class ProposalStatus:
    """Read-only view over the current proposal."""
    proposal: Optional[PendingProposal]
    state: ProposalState
    unique_count: int = 0
    required: int = 0

    @property
    def missing(self) -> int:
        return max(self.required - self.unique_count, 0)

    @property
    def ready(self) -> bool:
        return self.state == ProposalState.READY


# =============================================================================
# Record migrations
# =============================================================================

def _migrate_legacy_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Upgrade the unversioned camelCase layout to schema version 1.

    Legacy records stored the intent under ``transaction`` ({to, amount,
    assetId}) and sometimes kept signatures as JSON-encoded strings.
    """
    try:
        transaction = record.get("transaction") or {}
        signatures = []
        for item in record.get("signatures", []):
            if isinstance(item, str):
                item = json.loads(item)
            signatures.append({"signer": item["signer"], "signature": item["signature"]})

        return {
            "schema_version": 1,
            "wallet_name": record["walletName"],
            "network_name": record["networkName"],
            "signing_hash": record["hashTxId"],
            "intent": {
                "recipient": transaction.get("to", ""),
                "amount": transaction.get("amount", ""),
                "asset_id": transaction.get("assetId"),
            },
            "created_at": record["createdAt"],
            "required_signatures": record["requiredSignatures"],
            "signatures": signatures,
        }
    except json.JSONDecodeError as e:
        raise ProposalFormatError(f"Legacy signature entry is not valid JSON: {e}") from e
    except KeyError as e:
        raise ProposalFormatError(f"Legacy proposal record is missing field {e}") from e
    except (AttributeError, TypeError) as e:
        raise ProposalFormatError(f"Legacy proposal record is malformed: {e}") from e


# schema_version -> function producing the next version
_MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    0: _migrate_legacy_record,
}


def upgrade_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Bring a persisted record up to SCHEMA_VERSION."""
    version = record.get("schema_version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ProposalFormatError(f"Invalid schema_version {version!r}")
    if version > SCHEMA_VERSION:
        raise ProposalFormatError(
            f"Proposal record uses schema version {version}; "
            f"this release understands up to {SCHEMA_VERSION}"
        )

    while version < SCHEMA_VERSION:
        migrate = _MIGRATIONS.get(version)
        if migrate is None:
            raise ProposalFormatError(f"No migration from schema version {version}")
        record = migrate(record)
        logger.info(f"Migrated proposal record from schema version {version} to {record['schema_version']}")
        version = record["schema_version"]

    return record


__all__ = [
    "SCHEMA_VERSION",
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
    "upgrade_record",
]
