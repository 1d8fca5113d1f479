"""Tests for shared input validators."""
from __future__ import annotations

import pytest

from quorum_vault.exceptions import ValidationError
from quorum_vault.validators import hex_to_bytes, validate_hex_string


class TestValidateHexString:
    """Tests for validate_hex_string."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0xABcd", "abcd"),
            ("0XABCD", "abcd"),
            ("abcd", "abcd"),
            ("  0x01  ", "01"),
        ],
    )
    def test_normalizes(self, value, expected):
        """Should strip the prefix and lowercase the digits."""
        assert validate_hex_string(value, field_name="signature") == expected

    @pytest.mark.parametrize("value", ["", "0x", "0xabc", "0xzz", "sig-a", None, 12])
    def test_rejects(self, value):
        """Should reject empty, odd-length and non-hex values."""
        with pytest.raises(ValidationError) as exc_info:
            validate_hex_string(value, field_name="signature")

        assert exc_info.value.details["field"] == "signature"

    def test_byte_bounds(self):
        """Should enforce min_bytes and max_bytes."""
        assert validate_hex_string("0x" + "00" * 32, min_bytes=32, max_bytes=32) == "00" * 32

        with pytest.raises(ValidationError, match="at least 32 bytes"):
            validate_hex_string("0x0011", min_bytes=32)
        with pytest.raises(ValidationError, match="at most 2 bytes"):
            validate_hex_string("0x001122", max_bytes=2)

    def test_hex_to_bytes(self):
        """Should decode to raw bytes."""
        assert hex_to_bytes("0x00ff", "signing_hash") == b"\x00\xff"
