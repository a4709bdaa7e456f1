"""
Centralized application settings using Pydantic.
All configuration is loaded from environment variables.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from typing import Annotated, Optional, List
from functools import lru_cache
import json


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "CenterHours"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    # Database
    DATABASE_URL: str = "sqlite:///./data/centers.db"

    # CORS - accepts JSON list or comma-separated string
    CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000", "http://localhost:8000", "http://127.0.0.1:8000"
    ]

    # Sentry Error Monitoring
    SENTRY_DSN: Optional[str] = None

    # Public holiday API (data.go.kr special day information service)
    HOLIDAY_API_URL: str = "http://apis.data.go.kr/B090041/openapi/service/SpcdeInfoService"
    HOLIDAY_API_KEY: Optional[str] = None
    HOLIDAY_API_TIMEOUT_SECONDS: float = 5.0
    HOLIDAY_CACHE_TTL_SECONDS: int = 86400

    # Scheduler
    HOLIDAY_SYNC_ENABLED: bool = True
    HOLIDAY_SYNC_TIMEZONE: str = "Asia/Seoul"

    # Operating status
    CENTER_TIMEZONE: str = "Asia/Seoul"
    CLOSING_SOON_THRESHOLD_MINUTES: int = 30
    NEXT_OPEN_SCAN_DAYS: int = 14

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if isinstance(value, str):
            value = value.strip()
            # Handle JSON string from environment
            if value.startswith("["):
                return json.loads(value)
            # Handle comma-separated string
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
