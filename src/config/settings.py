"""
Configuration Management for Weekly Wallet

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger core itself never reads settings - values are passed in by
the session so that every ledger operation stays a pure function.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Budgeting rules that the user may want to tune."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        extra="ignore"
    )

    fallback_rate: Decimal = Field(
        default=Decimal("4.30"),
        gt=0,
        description="Secondary-per-base rate used when no live rate is available"
    )
    week_boundary_weekday: int = Field(
        default=6,
        ge=0,
        le=6,
        description="Weekday the week closes on (0 = Monday, 6 = Sunday)"
    )
    min_week_age_hours: int = Field(
        default=24,
        ge=0,
        description="Minimum age of the open week before it may be closed"
    )
    default_presets: str = Field(
        default="Groceries,Dining out,Subscriptions",
        description="Comma-separated quick-entry titles for a fresh wallet"
    )

    @property
    def default_presets_list(self) -> list[str]:
        """Get default presets as a list."""
        return [p.strip() for p in self.default_presets.split(",") if p.strip()]


class StorageSettings(BaseSettings):
    """Local snapshot storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_STORAGE_",
        extra="ignore"
    )

    state_path: Path = Field(
        default=Path("~/.weekly_wallet/state.json"),
        description="Path of the JSON snapshot file"
    )

    @field_validator('state_path')
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class RateSettings(BaseSettings):
    """NBP exchange-rate service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NBP_",
        extra="ignore"
    )

    api_url: str = Field(
        default="https://api.nbp.pl/api/exchangerates/rates/a/eur/?format=json",
        description="NBP table A endpoint for the EUR mid rate"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="HTTP timeout per attempt"
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts before falling back to the fixed rate"
    )


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the weekly report."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    # Optional: the report is an enrichment, the wallet works without it
    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=512,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def rates(self) -> RateSettings:
        return RateSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "storage", "rates", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
