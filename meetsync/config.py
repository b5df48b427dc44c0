from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENV: str = "dev"
    APP_NAME: str = "MeetSync"
    LOG_LEVEL: str = "INFO"

    # DB URL – SQLite local by default
    DATABASE_URL: str = "sqlite:///./meetsync.db"

    # Signing key for session tokens; override in every real deployment
    SECRET_KEY: str = "dev-insecure-secret-key"
    SESSION_MAX_AGE_SECONDS: int = 7 * 24 * 3600

    # Upstream identity provider: HS256 access tokens are exchanged for sessions.
    # Unset means no one can sign in through the API.
    IDENTITY_JWT_SECRET: Optional[str] = None
    IDENTITY_JWT_AUDIENCE: str = "authenticated"

    # Public booking page: how far ahead we look and how many dates we show
    BOOKING_HORIZON_DAYS: int = 30
    BOOKING_MAX_DATES: int = 7

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
