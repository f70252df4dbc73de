"""
Catalog API Configuration Module

Loads environment variables for the product catalog service.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Literal, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Notes:
    - API_KEY unset or empty leaves write endpoints open
    - ENVIRONMENT=production hides internal error messages from clients
    """

    # Record store
    database_url: str = "sqlite+aiosqlite:///./catalog.db"

    # Static shared secret for write endpoints (x-api-key header)
    api_key: Optional[str] = None

    environment: Literal["development", "production", "test"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    class Config:
        env_file = ".env"
        case_sensitive = False

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("api_key")
    @classmethod
    def blank_key_disables_gate(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Global settings instance
settings = Settings()
