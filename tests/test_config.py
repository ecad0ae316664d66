"""Tests for settings."""

import pytest
from decimal import Decimal

from pydantic import ValidationError

from spinspend.config import AppSettings, BudgetSettings, get_settings, validate_all_settings


class TestAppSettings:
    """Tests for AppSettings."""

    def test_log_level_is_normalized(self):
        assert AppSettings(log_level=" warning ").log_level == "WARNING"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="chatty")

    def test_debug_mode_overrides_log_level(self):
        settings = AppSettings(log_level="WARNING", debug_mode=True)
        assert settings.effective_log_level == "DEBUG"
        assert AppSettings(log_level="WARNING", debug_mode=False).effective_log_level == "WARNING"

    @pytest.mark.parametrize(
        "environment, expected",
        [("production", True), (" Production ", True), ("development", False)],
    )
    def test_is_production(self, environment, expected):
        assert AppSettings(app_environment=environment).is_production is expected


class TestBudgetSettings:
    """Tests for BudgetSettings."""

    def test_zero_limit_means_no_limit(self):
        assert BudgetSettings(monthly_limit=Decimal("0")).has_limit is False
        assert BudgetSettings(monthly_limit=Decimal("1500")).has_limit is True

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            BudgetSettings(monthly_limit=Decimal("-1"))

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("BUDGET_MONTHLY_LIMIT", "2500")
        monkeypatch.setenv("BUDGET_CURRENCY_SYMBOL", "$")
        settings = BudgetSettings()
        assert settings.monthly_limit == Decimal("2500")
        assert settings.currency_symbol == "$"


class TestValidateAllSettings:
    def test_reports_broken_group(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        get_settings.cache_clear()
        try:
            status = validate_all_settings()
        finally:
            get_settings.cache_clear()

        assert status["budget"] is True
        assert status["app"] is False
        assert "app_error" in status
