"""Tests for the local Ed25519 signer."""
from __future__ import annotations

import pytest

from quorum_vault.exceptions import ValidationError
from quorum_vault.signer import KeySigner, verify_signature

from conftest import SIGNER_KEYS, STUB_HASH


class TestKeySigner:
    """Tests for KeySigner."""

    def test_address_is_deterministic(self):
        """Should derive the same address from the same key."""
        first = KeySigner.from_private_key(SIGNER_KEYS[0])
        second = KeySigner.from_private_key(SIGNER_KEYS[0][2:])

        assert first.address == second.address
        assert first.address.startswith("0x")
        assert len(first.address) == 66

    def test_sign_and_verify(self):
        """Should produce a signature that verifies against the address."""
        signer = KeySigner.from_private_key(SIGNER_KEYS[0])

        signature = signer.sign(STUB_HASH)

        assert signature.startswith("0x")
        assert len(signature) == 2 + 128
        assert verify_signature(signer.address, STUB_HASH, signature) is True

    def test_wrong_signer_fails(self):
        """Should not verify against another signer's address."""
        alice = KeySigner.from_private_key(SIGNER_KEYS[0])
        bob = KeySigner.from_private_key(SIGNER_KEYS[1])

        assert verify_signature(bob.address, STUB_HASH, alice.sign(STUB_HASH)) is False

    def test_tampered_hash_fails(self):
        """Should not verify against a different hash."""
        signer = KeySigner.from_private_key(SIGNER_KEYS[0])
        signature = signer.sign(STUB_HASH)

        assert verify_signature(signer.address, "0x" + "cd" * 32, signature) is False

    def test_malformed_signature(self):
        """Should return False for garbage input."""
        signer = KeySigner.from_private_key(SIGNER_KEYS[0])

        assert verify_signature(signer.address, STUB_HASH, "0xnothex") is False

    @pytest.mark.parametrize("private_key", ["0x1234", "not-hex", ""])
    def test_rejects_bad_private_key(self, private_key):
        """Should require a 32-byte hex private key."""
        with pytest.raises(ValidationError):
            KeySigner.from_private_key(private_key)
