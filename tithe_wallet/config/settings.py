"""
Configuration Management for the Tithe Wallet

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here so it is easy to see which
external services the wallet talks to. Only the storage and app settings
are needed to run; the Gemini key is optional and the advice agent
degrades to a static tip without it.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local wallet storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".tithe_wallet",
        description="Directory holding the persisted wallet document"
    )
    storage_key: str = Field(
        default="creative_wallet_data_v2",
        min_length=1,
        description="Fixed key the wallet document is stored under"
    )

    @field_validator('storage_key')
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """The key becomes a file name, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key cannot contain path separators: {v}")
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (advice falls back to a static tip without it)"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=256,
        ge=32,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.9,
        ge=0.0,
        le=2.0,
        description="Model temperature (tips are meant to be creative)"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class ExchangeRateSettings(BaseSettings):
    """Currency quote API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXCHANGE_RATE_",
        extra="ignore"
    )

    url: str = Field(
        default="https://economia.awesomeapi.com.br/json/last/USD-BRL,EUR-BRL",
        description="Quote endpoint (returns one object per currency pair)"
    )
    pair_key: str = Field(
        default="USDBRL",
        description="Which pair of the response is displayed"
    )
    poll_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="How often the quote is refreshed"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP timeout for one quote request"
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Wallet defaults
    default_goal: float = Field(
        default=5000.0,
        ge=0,
        description="Prosperity goal used for a fresh wallet"
    )
    currency: str = Field(
        default="BRL",
        min_length=3,
        max_length=3,
        description="Currency code stored in the wallet"
    )

    # Display limits
    recent_limit: int = Field(
        default=8,
        ge=1,
        le=100,
        description="How many transactions the dashboard lists"
    )
    advice_recent_count: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many recent transactions go into the advice prompt"
    )


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

    # Sub-settings are built on access so a bad section does not block the others

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def exchange_rate(self) -> ExchangeRateSettings:
        return ExchangeRateSettings()

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

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry explaining each failure.
    Used by the settings page.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "exchange_rate", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    try:
        gemini = settings.gemini
        results["gemini"] = gemini.is_configured
        if not gemini.is_configured:
            results["gemini_error"] = "GEMINI_API_KEY not set"
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    return results
