"""
Signing-hash derivation.

Every signer signs the same commitment, so the hash must be a pure function of
the intent and the wallet/network configuration. The lifecycle controller only
ever talks to the SigningHashComputer protocol; CanonicalSigningHashComputer
is the default implementation (SHA-256 over canonical JSON).
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from .models import TransactionIntent
from .registry import NetworkConfig, WalletConfig


@dataclass(frozen=True)
class SigningContext:
    """Everything needed to derive the signing hash or submit the transaction."""
    intent: TransactionIntent
    wallet: WalletConfig
    network: NetworkConfig

    @property
    def asset_id(self) -> str:
        return self.network.resolve_asset(self.intent.asset_id)

    @property
    def vault_address(self) -> str:
        return derive_vault_address(self.wallet)


class SigningHashComputer(Protocol):
    def compute(self, context: SigningContext) -> str: ...


def canonical_json(obj: Any) -> bytes:
    """Deterministic JSON encoding: sorted keys, no whitespace."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True).encode("utf-8")


def normalize_amount(amount: str) -> str:
    """Render a decimal string without exponent or trailing zeros ("1.50" -> "1.5")."""
    value = Decimal(amount).normalize()
    return format(value, "f")


def derive_vault_address(wallet: WalletConfig) -> str:
    """Address of the predicate, derived from its configuration."""
    payload = {
        "signers": list(wallet.signers),
        "required_signatures": wallet.required_signatures,
        "predicate_version": wallet.predicate_version,
        "predicate_params": wallet.predicate_params,
    }
    return "0x" + hashlib.sha256(canonical_json(payload)).hexdigest()


class CanonicalSigningHashComputer:
    """SHA-256 commitment over the vault, chain and transfer fields."""

    DOMAIN = "quorum-vault/transfer/v1"

    def compute(self, context: SigningContext) -> str:
        payload = {
            "domain": self.DOMAIN,
            "vault": context.vault_address,
            "chain_id": context.network.chain_id,
            "recipient": context.intent.recipient,
            "amount": normalize_amount(context.intent.amount),
            "asset_id": context.asset_id,
        }
        return "0x" + hashlib.sha256(canonical_json(payload)).hexdigest()


__all__ = [
    "SigningContext",
    "SigningHashComputer",
    "CanonicalSigningHashComputer",
    "canonical_json",
    "normalize_amount",
    "derive_vault_address",
]
