"""Exception hierarchy for quorum-vault.

All errors raised by the lifecycle core inherit from VaultError, enabling:
- Consistent handling in the CLI (one except clause, one exit path)
- Machine-readable error codes for scripting
- Structured context through ``details``

Usage:
    from quorum_vault.exceptions import (
        VaultError,
        NoPendingProposalError,
        InsufficientSignaturesError,
    )

    try:
        controller.send()
    except InsufficientSignaturesError as e:
        print(f"have {e.have}, need {e.need}")

All exceptions have:
- error_code: Machine-readable error code (e.g., "CONFLICT")
- message: Human-readable error message
- details: Optional additional context dictionary
- to_dict(): Convert to a JSON-friendly mapping
"""
from __future__ import annotations

from typing import Any, Optional


class VaultError(Exception):
    """Base exception for all quorum-vault errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Optional additional context
    """

    error_code: str = "VAULT_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable mapping."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Missing prerequisites
# =============================================================================

class NotFoundError(VaultError):
    """Requested resource not found."""

    error_code = "NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        hint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} '{resource_id}' not found"
        if hint:
            message = f"{message}. {hint}"
        details = details or {}
        details["resource_type"] = resource_type
        details["resource_id"] = resource_id
        super().__init__(message, details=details)


class WalletNotFoundError(NotFoundError):
    """No wallet configuration with the given name."""

    error_code = "WALLET_NOT_FOUND"

    def __init__(self, name: str, path: Optional[str] = None) -> None:
        hint = f"Create a file at {path}" if path else None
        super().__init__("Wallet", name, hint=hint)


class NetworkNotFoundError(NotFoundError):
    """No network configuration with the given name."""

    error_code = "NETWORK_NOT_FOUND"

    def __init__(self, name: str, path: Optional[str] = None) -> None:
        hint = f"Create a file at {path}" if path else None
        super().__init__("Network", name, hint=hint)


class NoPendingProposalError(NotFoundError):
    """The proposal slot is empty."""

    error_code = "NO_PENDING_PROPOSAL"

    def __init__(self, location: str = "store") -> None:
        VaultError.__init__(
            self,
            "No pending transaction found. Create one first with: quorum-vault tx create",
            details={"resource_type": "Pending proposal", "resource_id": location},
        )


# =============================================================================
# State conflicts
# =============================================================================

class ProposalConflictError(VaultError):
    """A proposal already exists and replacement was not confirmed."""

    error_code = "CONFLICT"

    def __init__(
        self,
        message: str = "A pending transaction already exists",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)


class InsufficientSignaturesError(VaultError):
    """Send attempted before the signature threshold was reached."""

    error_code = "INSUFFICIENT_SIGNATURES"

    def __init__(self, have: int, need: int) -> None:
        self.have = have
        self.need = need
        super().__init__(
            f"Need {need} unique signatures, got {have}",
            details={"have": have, "need": need},
        )


# =============================================================================
# Validation & format errors
# =============================================================================

class ValidationError(VaultError):
    """Invalid input data or parameters."""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class ConfigValidationError(ValidationError):
    """Wallet or network configuration file is invalid."""

    error_code = "CONFIG_INVALID"

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details=details)


class ProposalFormatError(ValidationError):
    """The persisted proposal record cannot be parsed."""

    error_code = "PROPOSAL_FORMAT_ERROR"


class SigningHashMismatchError(ValidationError):
    """The signing hash recomputed at send time differs from the stored one."""

    error_code = "SIGNING_HASH_MISMATCH"

    def __init__(self, stored: str, recomputed: str) -> None:
        super().__init__(
            "Signing hash no longer matches the wallet/network configuration; "
            "cancel and create the transaction again",
            details={"stored": stored, "recomputed": recomputed},
        )


# =============================================================================
# Collaborator failures
# =============================================================================

class ExternalFailure(VaultError):
    """A boundary collaborator failed. The proposal is retained."""

    error_code = "EXTERNAL_FAILURE"


class SigningHashError(ExternalFailure):
    """Signing hash computation failed."""

    error_code = "SIGNING_HASH_ERROR"


class SubmissionError(ExternalFailure):
    """Submitting the transaction to the network failed."""

    error_code = "SUBMISSION_ERROR"

    def __init__(
        self,
        message: str,
        rpc_url: Optional[str] = None,
        method: Optional[str] = None,
        rpc_error: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if rpc_url:
            details["rpc_url"] = rpc_url
        if method:
            details["method"] = method
        if rpc_error is not None:
            details["rpc_error"] = rpc_error
        super().__init__(message, details=details)


__all__ = [
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
]
