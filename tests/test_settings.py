"""Tests for VaultSettings."""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from quorum_vault.lifecycle import build_controller
from quorum_vault.settings import VaultSettings
from quorum_vault.store import FileProposalStore


class TestVaultSettings:
    """Tests for path resolution and environment overrides."""

    def test_defaults_resolve_against_home(self, tmp_path):
        """Should resolve relative paths against home."""
        settings = VaultSettings(home=tmp_path, _env_file=None)

        assert settings.wallets_path == tmp_path / "wallets"
        assert settings.networks_path == tmp_path / "networks"
        assert settings.pending_path == tmp_path / ".pending-tx.json"

    def test_absolute_paths_kept(self, tmp_path):
        """Should leave absolute paths untouched."""
        elsewhere = tmp_path / "elsewhere" / "pending.json"
        settings = VaultSettings(home=Path("/unused"), pending_file=elsewhere, _env_file=None)

        assert settings.pending_path == elsewhere

    def test_environment_prefix(self, tmp_path, monkeypatch):
        """Should read QUORUM_VAULT_ environment variables."""
        monkeypatch.setenv("QUORUM_VAULT_HOME", str(tmp_path))
        monkeypatch.setenv("QUORUM_VAULT_RPC_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("QUORUM_VAULT_LOG_LEVEL", "debug")

        settings = VaultSettings(_env_file=None)

        assert settings.home == tmp_path
        assert settings.rpc_timeout_seconds == 5.0
        assert settings.log_level == "DEBUG"

    def test_rejects_non_positive_timeout(self):
        """Should require a positive RPC timeout."""
        with pytest.raises(PydanticValidationError):
            VaultSettings(rpc_timeout_seconds=0, _env_file=None)

    def test_build_controller_uses_paths(self, settings):
        """Should wire the file store to the configured pending path."""
        controller = build_controller(settings)

        assert isinstance(controller._store, FileProposalStore)
        assert controller._store.path == settings.pending_path
        assert controller.wallets.list_names() == ["solo", "team"]
