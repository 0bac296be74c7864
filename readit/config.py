"""Application settings loaded from environment / .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Readit application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    READIT_DB_PATH: str = "readit.db"
    READIT_DEBUG: bool = False
    READIT_VERSION: str = "0.1.0"

    # Ranking tuning constants
    READIT_HOT_GRAVITY: float = 1.8
    READIT_HOT_AGE_FLOOR_HOURS: float = 0.1
    READIT_BEST_CONFIDENCE: float = 0.95


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()
