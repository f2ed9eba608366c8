"""
Application configuration using Pydantic Settings.

Scheduling defaults here feed the service layer; the engine functions
themselves take every tunable as an explicit argument.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # ===========================================
    # Slot search
    # ===========================================
    SLOT_SEARCH_HORIZON_DAYS: int = Field(5, ge=1)
    MAX_SLOT_SUGGESTIONS: int = Field(3, ge=1)

    # ===========================================
    # Conflict detection
    # ===========================================
    # Buffer before a proposal counts as overdue (clock/processing latency)
    OVERDUE_GRACE_SECONDS: int = Field(60, ge=0)

    # Proposals shorter than this fall back to DEFAULT_PROPOSAL_MINUTES
    # when searching for alternatives
    MIN_PROPOSAL_SECONDS: int = Field(60, ge=1)
    DEFAULT_PROPOSAL_MINUTES: int = Field(60, ge=1)

    # IANA zone used to bucket commitments by day when the caller sends none
    DEFAULT_TIMEZONE: str = "UTC"

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
