"""Configuration surface for quorum-vault."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class VaultSettings(BaseSettings):
    """Where wallets, networks and the pending proposal live, plus runtime knobs."""

    # Base directory; relative paths below are resolved against it
    home: Path = Field(default_factory=Path.cwd)

    wallets_dir: Path = Path("wallets")
    networks_dir: Path = Path("networks")
    pending_file: Path = Path(".pending-tx.json")

    # Submission
    rpc_timeout_seconds: float = 30.0
    default_explorer_url: str = "https://app.fuel.network"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    json_logs: bool = False

    class Config:
        env_prefix = "QUORUM_VAULT_"
        env_file = ".env"
        extra = "ignore"

    @field_validator("rpc_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("rpc_timeout_seconds must be positive")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against ``home``."""
        path = Path(path).expanduser()
        if path.is_absolute():
            return path
        return self.home / path

    @property
    def wallets_path(self) -> Path:
        return self.resolve(self.wallets_dir)

    @property
    def networks_path(self) -> Path:
        return self.resolve(self.networks_dir)

    @property
    def pending_path(self) -> Path:
        return self.resolve(self.pending_file)


@lru_cache
def get_settings(env_file: str | None = None) -> VaultSettings:
    """Load VaultSettings once per process."""
    env_path = Path(env_file) if env_file else None
    if env_path is None:
        return VaultSettings()
    return VaultSettings(_env_file=env_path)


__all__ = ["VaultSettings", "get_settings"]
