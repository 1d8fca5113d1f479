"""
Logging utilities for quorum-vault with sensitive data masking.

Signing keys pass through the CLI, so anything that might end up in a log
record goes through ``mask_sensitive_data`` first.

Usage:
    from quorum_vault.logging_utils import configure_logging, mask_sensitive_data

    configure_logging(logging.DEBUG)
    logger.info("Signing", extra={"data": mask_sensitive_data({"pk": "0xabc..."})})
"""
from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

MASK_PATTERN = "***MASKED***"
MAX_LOG_MESSAGE_LENGTH = 4000

SENSITIVE_FIELDS = frozenset({
    "pk",
    "private_key",
    "privatekey",
    "seed",
    "mnemonic",
    "secret",
    "password",
})


def mask_value(value: str, show_chars: int = 4) -> str:
    """Mask a sensitive value, optionally showing first/last characters.

    Args:
        value: The value to mask
        show_chars: Number of characters to show at start and end

    Returns:
        Masked string
    """
    if not value or len(value) <= show_chars * 2:
        return MASK_PATTERN

    return f"{value[:show_chars]}...{value[-show_chars:]}"


def is_sensitive_key(key: str) -> bool:
    """Check if a key name indicates sensitive data."""
    key_lower = key.lower().replace("-", "_")
    return key_lower in SENSITIVE_FIELDS or any(
        sensitive in key_lower
        for sensitive in ("secret", "password", "private", "mnemonic", "seed")
    )


def mask_sensitive_data(
    data: Any,
    additional_fields: Optional[Sequence[str]] = None,
    mask_pattern: str = MASK_PATTERN,
    _depth: int = 0,
    _max_depth: int = 10,
) -> Any:
    """Recursively mask sensitive data in a data structure.

    Args:
        data: The data structure to mask (dict, list, or scalar)
        additional_fields: Additional field names to mask
        mask_pattern: Pattern to replace sensitive values with

    Returns:
        Copy of data with sensitive values masked
    """
    if _depth > _max_depth:
        return data

    if isinstance(data, dict):
        result = {}
        for key, value in data.items():
            if is_sensitive_key(str(key)):
                result[key] = mask_pattern
            elif additional_fields and key in additional_fields:
                result[key] = mask_pattern
            else:
                result[key] = mask_sensitive_data(
                    value,
                    additional_fields,
                    mask_pattern,
                    _depth + 1,
                    _max_depth,
                )
        return result

    elif isinstance(data, (list, tuple)):
        return type(data)(
            mask_sensitive_data(
                item,
                additional_fields,
                mask_pattern,
                _depth + 1,
                _max_depth,
            )
            for item in data
        )

    elif isinstance(data, str):
        return _mask_inline_patterns(data)

    return data


def _mask_inline_patterns(text: str) -> str:
    """Mask credentials embedded in free text (RPC URLs with user:pass)."""
    if len(text) > MAX_LOG_MESSAGE_LENGTH:
        text = text[:MAX_LOG_MESSAGE_LENGTH] + "...[truncated]"

    patterns = [
        (r'(https?://)[^:/@\s]+:[^@/\s]+@', r'\1***:***@'),
        (r'(Bearer\s+)[a-zA-Z0-9._-]+', r'\1***'),
    ]

    for pattern, replacement in patterns:
        text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)

    return text


class JsonFormatter(logging.Formatter):
    """JSON log formatter for machine-readable output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "data") and record.data:
            log_data["data"] = mask_sensitive_data(record.data)

        return json.dumps(log_data, default=str)


def configure_logging(
    level: int | str = logging.WARNING,
    json_format: bool = False,
) -> None:
    """Configure logging for the CLI process.

    Args:
        level: Logging level (int or name such as "DEBUG")
        json_format: Whether to use JSON formatting
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )


__all__ = [
    "MASK_PATTERN",
    "mask_value",
    "is_sensitive_key",
    "mask_sensitive_data",
    "JsonFormatter",
    "configure_logging",
]
