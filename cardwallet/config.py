"""
Application configuration using Pydantic Settings.

Centralizes all environment variables: MongoDB (card records) and
Supabase (identity service and JWT validation).
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class Settings(BaseSettings):
    """Card wallet settings; every field can be overridden by an env var of the same name."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Discount Cards API"
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    # MongoDB - one record per account, keyed by the identity account id
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "discount_cards_db"
    users_collection: str = "users"

    # Supabase Auth - sign up / sign in / verification e-mails and JWT validation
    supabase_url: str = "https://your-project.supabase.co"
    supabase_anon_key: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None
    identity_timeout_seconds: float = 10.0

    @field_validator("supabase_jwt_secret", "supabase_anon_key", mode="before")
    @classmethod
    def strip_secret(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not isinstance(v, str):
            return v
        return v.strip() or None


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; call get_settings.cache_clear() after changing env."""
    return Settings()
