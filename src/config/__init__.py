"""Configuration package."""

from src.config.settings import (
    AppSettings,
    GeminiSettings,
    LedgerSettings,
    RateSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "LedgerSettings",
    "RateSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
