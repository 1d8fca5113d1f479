"""
Pytest configuration for quorum-vault tests.
"""
from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add package source to path
package_src = Path(__file__).parent.parent / "src"
if str(package_src) not in sys.path:
    sys.path.insert(0, str(package_src))

from quorum_vault.lifecycle import LifecycleController
from quorum_vault.models import SignatureEntry, SubmissionReceipt
from quorum_vault.registry import FileNetworkRegistry, FileWalletRegistry
from quorum_vault.settings import VaultSettings
from quorum_vault.signer import KeySigner
from quorum_vault.store import InMemoryProposalStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

SIGNER_KEYS = ["0x" + "11" * 32, "0x" + "22" * 32, "0x" + "33" * 32]
STUB_HASH = "0x" + "ab" * 32


class FakeHashComputer:
    """SigningHashComputer returning a fixed hash and recording contexts."""

    def __init__(self, signing_hash: str = STUB_HASH, error: Optional[Exception] = None):
        self.signing_hash = signing_hash
        self.error = error
        self.calls: List[Any] = []

    def compute(self, context) -> str:
        self.calls.append(context)
        if self.error is not None:
            raise self.error
        return self.signing_hash


class FakeSubmitter:
    """SubmissionClient that records every call and can be told to fail."""

    def __init__(self, transaction_id: str = "0x" + "cd" * 32):
        self.transaction_id = transaction_id
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    def submit(self, context, signatures) -> SubmissionReceipt:
        self.calls.append({"context": context, "signatures": list(signatures)})
        if self.error is not None:
            raise self.error
        return SubmissionReceipt(transaction_id=self.transaction_id, status="success")


def write_json(path: Path, data: Dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def signers() -> List[KeySigner]:
    """Three deterministic Ed25519 signers."""
    return [KeySigner.from_private_key(pk) for pk in SIGNER_KEYS]


@pytest.fixture
def home(tmp_path: Path, signers: List[KeySigner]) -> Path:
    """Home directory with a 2-of-3 wallet, a 1-of-1 wallet and one network."""
    addresses = [s.address for s in signers]

    write_json(
        tmp_path / "wallets" / "team.json",
        {
            "signers": addresses,
            "required_signatures": 2,
            "predicate_version": "0xpredicate-v1",
        },
    )
    # Predicate layout with zero-address padding
    write_json(
        tmp_path / "wallets" / "solo.json",
        {
            "config": {
                "SIGNATURES_COUNT": 1,
                "SIGNERS": [addresses[0], "0x" + "0" * 64, "0x" + "0" * 64],
                "HASH_PREDICATE": "0x" + "99" * 32,
            },
            "version": "0xpredicate-v1",
        },
    )
    write_json(
        tmp_path / "networks" / "local.json",
        {
            "url": "http://localhost:4000/v1/rpc",
            "assets": {"ETH": "0x" + "00" * 32, "USDC": "0x" + "55" * 32},
            "chainId": 0,
            "explorerUrl": "https://explorer.local",
        },
    )
    write_json(
        tmp_path / "networks" / "backup.json",
        {
            "url": "http://backup:4000/v1/rpc",
            "assets": {"ETH": "0x" + "00" * 32},
            "chainId": 0,
        },
    )
    return tmp_path


@pytest.fixture
def settings(home: Path) -> VaultSettings:
    return VaultSettings(home=home, _env_file=None)


@pytest.fixture
def store() -> InMemoryProposalStore:
    return InMemoryProposalStore()


@pytest.fixture
def hash_computer() -> FakeHashComputer:
    return FakeHashComputer()


@pytest.fixture
def submitter() -> FakeSubmitter:
    return FakeSubmitter()


@pytest.fixture
def controller(home, store, hash_computer, submitter) -> LifecycleController:
    return LifecycleController(
        store=store,
        wallets=FileWalletRegistry(home / "wallets"),
        networks=FileNetworkRegistry(home / "networks"),
        hash_computer=hash_computer,
        submitter=submitter,
        clock=lambda: FIXED_NOW,
    )


def sig(signer: str, signature: Optional[str] = None) -> SignatureEntry:
    """Shorthand for a signature entry with a readable default payload."""
    return SignatureEntry(signer=signer, signature=signature or f"sig-of-{signer}")
