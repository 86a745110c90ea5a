"""
CampaignHub — Application Configuration
All settings loaded from environment variables via pydantic-settings.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./campaignhub.db"

    # ── Auth ──────────────────────────────────────────────────────────────────
    JWT_SECRET: str = "CHANGE_ME_JWT_SECRET_256_BIT"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 60

    # ── Route protection ──────────────────────────────────────────────────────
    # When False, unresolvable requests and lookup failures are denied instead
    # of allowed.
    ROUTE_PROTECTION_FAIL_OPEN: bool = True

    # ── Application Settings ──────────────────────────────────────────────────
    ENVIRONMENT: str = "development"  # development | staging | production
    APP_TITLE: str = "CampaignHub"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # ── Logging ───────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL {v!r}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton — safe for FastAPI Depends()."""
    return Settings()


# Module-level convenience alias
settings = get_settings()
