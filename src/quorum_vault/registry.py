"""
Wallet and network configuration loaded from JSON directories.

Layout (relative to the configured home):

    wallets/<name>.json    predicate signers, threshold and version
    networks/<name>.json   RPC URL, asset ids, optional chain id / explorer

The file name (without ``.json``) is the wallet or network name. Wallet files
written in the older ``{"config": {"SIGNERS": ..., "SIGNATURES_COUNT": ...},
"version": ...}`` layout are accepted as well.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
from pydantic import field_validator, model_validator

from .exceptions import ConfigValidationError, NetworkNotFoundError, WalletNotFoundError

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 64
BASE_ASSET = "ETH"


class WalletConfig(BaseModel):
    """An M-of-N predicate wallet."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    signers: List[str]
    required_signatures: int
    predicate_version: str
    predicate_params: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def accept_predicate_layout(cls, data: Any) -> Any:
        """Map the ``config``/``version`` predicate layout onto field names."""
        if not isinstance(data, dict) or "config" not in data:
            return data
        predicate = data.get("config") or {}
        params = {
            k: v for k, v in predicate.items() if k not in ("SIGNERS", "SIGNATURES_COUNT")
        }
        mapped = {k: v for k, v in data.items() if k not in ("config", "version")}
        mapped.setdefault("signers", predicate.get("SIGNERS"))
        mapped.setdefault("required_signatures", predicate.get("SIGNATURES_COUNT"))
        mapped.setdefault("predicate_version", data.get("version"))
        mapped.setdefault("predicate_params", params)
        return mapped

    @field_validator("signers")
    @classmethod
    def validate_signers(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("wallet must list at least one signer")
        return v

    @field_validator("predicate_version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("wallet must have a predicate_version")
        return v

    @model_validator(mode="after")
    def validate_threshold(self) -> "WalletConfig":
        if self.required_signatures < 1:
            raise ValueError("required_signatures must be at least 1")
        if self.required_signatures > len(self.active_signers):
            raise ValueError(
                f"required_signatures ({self.required_signatures}) cannot be greater "
                f"than the number of valid signers ({len(self.active_signers)})"
            )
        return self

    @property
    def active_signers(self) -> List[str]:
        """Signers excluding zero-address padding slots."""
        return [s for s in self.signers if s.lower() != ZERO_ADDRESS]


class NetworkConfig(BaseModel):
    """A network the vault can submit to."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = ""
    rpc_url: str = Field(validation_alias=AliasChoices("rpc_url", "url"))
    assets: Dict[str, str]
    chain_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("chain_id", "chainId"))
    explorer_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("explorer_url", "explorerUrl")
    )

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("network must have an rpc_url")
        return v.strip()

    @field_validator("assets")
    @classmethod
    def validate_assets(cls, v: Dict[str, str]) -> Dict[str, str]:
        if not v.get(BASE_ASSET):
            raise ValueError(f"network assets must include {BASE_ASSET}")
        return v

    @property
    def base_asset_id(self) -> str:
        return self.assets[BASE_ASSET]

    def resolve_asset(self, asset_id: Optional[str]) -> str:
        """Asset id for an intent; a known symbol (e.g. "USDC") maps to its id."""
        if not asset_id:
            return self.base_asset_id
        return self.assets.get(asset_id, asset_id)

    def asset_label(self, asset_id: str) -> str:
        for symbol, known_id in self.assets.items():
            if known_id == asset_id:
                return symbol
        return asset_id[:10] + "..." if len(asset_id) > 13 else asset_id


class WalletConfigProvider(Protocol):
    def load(self, name: str) -> WalletConfig: ...
    def list_names(self) -> List[str]: ...


class NetworkConfigProvider(Protocol):
    def load(self, name: str) -> NetworkConfig: ...
    def list_names(self) -> List[str]: ...


class _JsonDirectory:
    """Shared directory handling for the file registries."""

    kind = "config"

    def __init__(self, directory: os.PathLike[str] | str) -> None:
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def list_names(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json") if p.is_file())

    def _read(self, name: str) -> Optional[Dict[str, Any]]:
        if not name or Path(name).name != name:
            return None
        path = self.path_for(name)
        if not path.is_file():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"{self.kind} file {path} is not valid JSON: {e}", source=str(path))
        if not isinstance(data, dict):
            raise ConfigValidationError(f"{self.kind} file {path} must contain a JSON object", source=str(path))
        data["name"] = name
        return data


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


class FileWalletRegistry(_JsonDirectory):
    """WalletConfigProvider backed by ``<wallets_dir>/<name>.json``."""

    kind = "Wallet"

    def load(self, name: str) -> WalletConfig:
        data = self._read(name)
        if data is None:
            raise WalletNotFoundError(name, str(self.path_for(name)))
        try:
            config = WalletConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigValidationError(
                f"Wallet '{name}' is invalid: {_describe(e)}", source=str(self.path_for(name))
            ) from e
        logger.debug(
            f"Loaded wallet {name}: {config.required_signatures} of {len(config.active_signers)} signers"
        )
        return config


class FileNetworkRegistry(_JsonDirectory):
    """NetworkConfigProvider backed by ``<networks_dir>/<name>.json``."""

    kind = "Network"

    def load(self, name: str) -> NetworkConfig:
        data = self._read(name)
        if data is None:
            raise NetworkNotFoundError(name, str(self.path_for(name)))
        try:
            config = NetworkConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigValidationError(
                f"Network '{name}' is invalid: {_describe(e)}", source=str(self.path_for(name))
            ) from e
        logger.debug(f"Loaded network {name} ({config.rpc_url})")
        return config


__all__ = [
    "ZERO_ADDRESS",
    "BASE_ASSET",
    "WalletConfig",
    "NetworkConfig",
    "WalletConfigProvider",
    "NetworkConfigProvider",
    "FileWalletRegistry",
    "FileNetworkRegistry",
]
