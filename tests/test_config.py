"""Tests for environment-driven configuration."""

import pytest
from decimal import Decimal
from pathlib import Path

from src.config import (
    AppSettings,
    LedgerSettings,
    RateSettings,
    StorageSettings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the pydantic-settings classes."""

    def test_ledger_defaults(self, monkeypatch):
        """Test the budgeting defaults."""
        for var in ("WALLET_FALLBACK_RATE", "WALLET_WEEK_BOUNDARY_WEEKDAY", "WALLET_DEFAULT_PRESETS"):
            monkeypatch.delenv(var, raising=False)
        settings = LedgerSettings()
        assert settings.fallback_rate == Decimal("4.30")
        assert settings.week_boundary_weekday == 6
        assert settings.default_presets_list == ["Groceries", "Dining out", "Subscriptions"]

    def test_ledger_from_environment(self, monkeypatch):
        """Test overrides through WALLET_ variables."""
        monkeypatch.setenv("WALLET_FALLBACK_RATE", "4.5")
        monkeypatch.setenv("WALLET_DEFAULT_PRESETS", " Rent , ,Coffee")
        settings = LedgerSettings()
        assert settings.fallback_rate == Decimal("4.5")
        assert settings.default_presets_list == ["Rent", "Coffee"]

    def test_rejects_bad_weekday(self, monkeypatch):
        """Test that the boundary weekday must be 0..6."""
        monkeypatch.setenv("WALLET_WEEK_BOUNDARY_WEEKDAY", "7")
        with pytest.raises(ValueError):
            LedgerSettings()

    def test_storage_path_expands_home(self, monkeypatch):
        """Test that ~ is expanded in the snapshot path."""
        monkeypatch.setenv("WALLET_STORAGE_STATE_PATH", "~/wallet/state.json")
        assert StorageSettings().state_path == Path("~/wallet/state.json").expanduser()

    def test_rate_attempts_bounded(self, monkeypatch):
        """Test that NBP attempts must be at least one."""
        monkeypatch.setenv("NBP_MAX_ATTEMPTS", "0")
        with pytest.raises(ValueError):
            RateSettings()

    def test_log_level_normalized(self, monkeypatch):
        """Test log level validation."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"
        monkeypatch.setenv("LOG_LEVEL", "loud")
        with pytest.raises(ValueError):
            AppSettings()

    def test_validate_all_settings(self, monkeypatch):
        """Test the startup check report."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        results = validate_all_settings()
        assert results["ledger"] is True
        assert results["storage"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
