"""Tests for configuration loading."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from tracker.config import AppSettings, GoogleSheetsSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:

    def test_defaults(self):
        settings = AppSettings()
        assert settings.amount_decimal_places == 2
        assert settings.amount_quantum == Decimal("0.01")
        assert settings.storage_connect_attempts == 3

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("AMOUNT_DECIMAL_PLACES", "0")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = AppSettings()
        assert settings.amount_quantum == Decimal("1")
        assert settings.log_level == "DEBUG"

    def test_debug_mode_raises_effective_level(self, monkeypatch):
        """debug_mode wins over a quieter log_level."""
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("DEBUG_MODE", "true")
        settings = AppSettings()
        assert settings.log_level == "WARNING"
        assert settings.effective_log_level == "DEBUG"

    def test_effective_level_follows_log_level(self, monkeypatch):
        monkeypatch.delenv("DEBUG_MODE", raising=False)
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert AppSettings().effective_log_level == "ERROR"

    def test_rejects_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            AppSettings()


class TestGoogleSheetsSettings:

    def test_missing_credentials_warns(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(tmp_path / "nope.json"))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")
        with pytest.warns(UserWarning):
            settings = GoogleSheetsSettings()
        assert settings.transactions_sheet_name == "Transactions"

    def test_validate_all_reports_missing_sheets(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        monkeypatch.chdir("/")
        status = validate_all_settings()
        assert status["app"] is True
        assert status["google_sheets"] is False
        assert "google_sheets_error" in status
