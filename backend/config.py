"""Application configuration using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./ledger.db"

    # Business rules
    ASSET_LOCK_HOURS: int = 24
    MIN_TRADE_SATS: int = 100_000
    INITIAL_BTC_SATS: int = 100_000_000
    TRADE_HISTORY_LIMIT: int = 50
    MAX_TRADE_HISTORY_LIMIT: int = 1000

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    @field_validator(
        "ASSET_LOCK_HOURS",
        "MIN_TRADE_SATS",
        "INITIAL_BTC_SATS",
        "TRADE_HISTORY_LIMIT",
        "MAX_TRADE_HISTORY_LIMIT",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Business-rule values must be strictly positive."""
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v


settings = Settings()
