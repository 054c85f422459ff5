"""
Application configuration using Pydantic Settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Plantlog API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "plantlog"

    # Scheduling
    TIMEZONE: str = "UTC"
    DEFAULT_WATERING_HOUR: int = 9
    DEFAULT_INTERVAL_DAYS: int = 7
    RECENT_HISTORY_LIMIT: int = 5

    # Photos arrive base64-encoded in JSON bodies
    MAX_REQUEST_BODY_BYTES: int = 8_000_000

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    REMINDER_DELIVERY_INTERVAL_SECONDS: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
