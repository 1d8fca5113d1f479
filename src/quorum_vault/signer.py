"""Local Ed25519 signer for the interactive ``tx sign`` command."""
from __future__ import annotations

from dataclasses import dataclass

from nacl import encoding, signing
from nacl.exceptions import BadSignatureError

from .exceptions import ValidationError
from .validators import hex_to_bytes


@dataclass(frozen=True)
class KeySigner:
    """Signs signing hashes with a 32-byte Ed25519 seed."""
    signing_key: signing.SigningKey

    @classmethod
    def from_private_key(cls, private_key: str) -> "KeySigner":
        seed = hex_to_bytes(private_key, "private_key")
        if len(seed) != 32:
            raise ValidationError("Private key must be 32 bytes (64 hex characters)", field="private_key")
        return cls(signing.SigningKey(seed))

    @property
    def address(self) -> str:
        return "0x" + self.signing_key.verify_key.encode(encoder=encoding.HexEncoder).decode()

    def sign(self, signing_hash: str) -> str:
        """Detached signature over the raw hash bytes, hex encoded."""
        message = hex_to_bytes(signing_hash, "signing_hash")
        signed = self.signing_key.sign(message)
        return "0x" + signed.signature.hex()


def verify_signature(address: str, signing_hash: str, signature: str) -> bool:
    """Check a signature produced by KeySigner.sign."""
    try:
        verify_key = signing.VerifyKey(hex_to_bytes(address, "signer"))
        verify_key.verify(hex_to_bytes(signing_hash, "signing_hash"), hex_to_bytes(signature, "signature"))
    except (BadSignatureError, ValidationError, ValueError):
        return False
    return True


__all__ = ["KeySigner", "verify_signature"]
