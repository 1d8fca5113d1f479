"""
Input validation helpers shared by the lifecycle, signer and RPC client.

Usage:
    from quorum_vault.validators import validate_hex_string

    raw = validate_hex_string(signature, field_name="signature")  # "abcd..." without 0x
"""
from __future__ import annotations

import re
from typing import Any, Optional

from .exceptions import ValidationError

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def validate_hex_string(
    value: Any,
    field_name: str = "value",
    min_bytes: Optional[int] = None,
    max_bytes: Optional[int] = None,
) -> str:
    """Validate a hex-encoded string.

    Args:
        value: The hex string to validate, with or without 0x prefix
        field_name: Name of the field for error messages
        min_bytes: Minimum number of bytes
        max_bytes: Maximum number of bytes

    Returns:
        The lowercase hex digits without the 0x prefix

    Raises:
        ValidationError: If the value is empty, not hex, or has an odd length
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a hex string", field=field_name)

    raw = value.strip()
    if raw.startswith(("0x", "0X")):
        raw = raw[2:]

    if not raw or len(raw) % 2 or not _HEX_RE.match(raw):
        raise ValidationError(f"{field_name} must be a hex string, got '{value}'", field=field_name)

    byte_length = len(raw) // 2
    if min_bytes is not None and byte_length < min_bytes:
        raise ValidationError(f"{field_name} must be at least {min_bytes} bytes", field=field_name)
    if max_bytes is not None and byte_length > max_bytes:
        raise ValidationError(f"{field_name} must be at most {max_bytes} bytes", field=field_name)

    return raw.lower()


def hex_to_bytes(value: Any, field_name: str = "value") -> bytes:
    """Decode a validated hex string."""
    return bytes.fromhex(validate_hex_string(value, field_name=field_name))


__all__ = ["validate_hex_string", "hex_to_bytes"]
