"""
Transaction submission over JSON-RPC.

The lifecycle controller hands a SigningContext and the ordered signatures to
a SubmissionClient. JsonRpcSubmissionClient turns each signature into a
witness and posts a single ``vault_submitTransaction`` request to the
network's RPC URL. Any failure (transport, HTTP status, RPC error object or an
unusable result) is raised as SubmissionError so the caller can keep the
proposal and retry.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx

from .exceptions import SubmissionError
from .hashing import SigningContext, normalize_amount
from .logging_utils import mask_sensitive_data
from .models import SignatureEntry, SubmissionReceipt
from .validators import validate_hex_string

logger = logging.getLogger(__name__)


class SubmissionClient(Protocol):
    def submit(
        self,
        context: SigningContext,
        signatures: Sequence[SignatureEntry],
    ) -> SubmissionReceipt: ...


def encode_witness(signer: str, signature: str) -> str:
    """Witness layout: signer address bytes followed by the signature bytes."""
    return "0x" + validate_hex_string(signer, "signer") + validate_hex_string(signature, "signature")


class JsonRpcSubmissionClient:
    """SubmissionClient posting JSON-RPC 2.0 requests with httpx."""

    METHOD = "vault_submitTransaction"

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._request_id = 0

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                transport=self._transport,
            )
        return self._client

    def build_request(
        self,
        context: SigningContext,
        signatures: Sequence[SignatureEntry],
    ) -> Dict[str, Any]:
        self._request_id += 1
        params: Dict[str, Any] = {
            "vault": context.vault_address,
            "predicate_version": context.wallet.predicate_version,
            "to": context.intent.recipient,
            "amount": normalize_amount(context.intent.amount),
            "asset_id": context.asset_id,
            "witnesses": [encode_witness(s.signer, s.signature) for s in signatures],
        }
        if context.network.chain_id is not None:
            params["chain_id"] = context.network.chain_id
        return {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": self.METHOD,
            "params": [params],
        }

    def submit(
        self,
        context: SigningContext,
        signatures: Sequence[SignatureEntry],
    ) -> SubmissionReceipt:
        url = context.network.rpc_url
        payload = self.build_request(context, signatures)
        safe_url = mask_sensitive_data(url)

        logger.info(f"Submitting transaction to {safe_url} with {len(signatures)} witnesses")

        try:
            response = self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise SubmissionError(
                f"Could not reach {safe_url}: {e}", rpc_url=safe_url, method=self.METHOD
            ) from e

        if response.status_code >= 400:
            raise SubmissionError(
                f"[{response.status_code}] RPC endpoint rejected the request: "
                f"{response.text[:200] or response.reason_phrase}",
                rpc_url=safe_url,
                method=self.METHOD,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise SubmissionError(
                "RPC endpoint returned a non-JSON response", rpc_url=safe_url, method=self.METHOD
            ) from e

        if not isinstance(body, dict):
            raise SubmissionError("RPC response must be a JSON object", rpc_url=safe_url, method=self.METHOD)

        if body.get("error") is not None:
            error = body["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise SubmissionError(
                f"Transaction rejected: {message}",
                rpc_url=safe_url,
                method=self.METHOD,
                rpc_error=error,
            )

        receipt = self._parse_result(body.get("result"))
        if receipt is None:
            raise SubmissionError(
                "RPC response did not include a transaction id",
                rpc_url=safe_url,
                method=self.METHOD,
                rpc_error=body.get("result"),
            )

        logger.info(f"Transaction submitted: {receipt.transaction_id} ({receipt.status})")
        return receipt

    @staticmethod
    def _parse_result(result: Any) -> Optional[SubmissionReceipt]:
        if isinstance(result, str) and result:
            return SubmissionReceipt(transaction_id=result)
        if isinstance(result, dict):
            tx_id = result.get("transaction_id") or result.get("id")
            if tx_id:
                return SubmissionReceipt(
                    transaction_id=str(tx_id),
                    status=str(result.get("status") or "success"),
                )
        return None

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "JsonRpcSubmissionClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["SubmissionClient", "JsonRpcSubmissionClient", "encode_witness"]
