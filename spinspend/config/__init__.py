"""Configuration package."""

from spinspend.config.settings import (
    AppSettings,
    BudgetSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BudgetSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
