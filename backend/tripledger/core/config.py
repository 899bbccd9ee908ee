"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "TripLedger"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./tripledger.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Currency
    DEFAULT_BASE_CURRENCY: str = "EUR"  # Used when a trip has no base currency set

    # Exchange Rate
    FX_API_KEY: str = ""
    FX_API_URL: str = "https://v6.exchangerate-api.com/v6"
    FX_TIMEOUT_SECONDS: float = 10.0

    # Participant name matching: "exact" (case-insensitive full name) or "partial" (word / prefix)
    PARTICIPANT_MATCHING: str = "exact"

    @field_validator("PARTICIPANT_MATCHING", mode="before")
    @classmethod
    def parse_participant_matching(cls, v):
        """Normalize and validate the participant matching policy."""
        value = str(v).strip().lower()
        if value not in ("exact", "partial"):
            raise ValueError("PARTICIPANT_MATCHING must be 'exact' or 'partial'")
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
