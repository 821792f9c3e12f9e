"""
Application configuration using environment variables.

Every field can be overridden by an upper-cased environment variable or a
``.env`` file, e.g. ``DATABASE_URL=postgresql://...`` or ``MAX_PAGE_SIZE=100``.
"""
import os
import secrets
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "SportsMeet API"
    debug: bool = False
    environment: str = "development"

    # Tokens: signed HS256, valid for a week, no refresh tokens
    secret_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Database
    database_url: str = "sqlite:///./sportsmeet.db"
    sqlite_busy_timeout: int = 30  # seconds a writer waits for the file lock

    # CORS
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Rate limiting (slowapi syntax)
    register_rate_limit: str = "3/minute"
    login_rate_limit: str = "5/minute"

    # Listing pages
    default_page_size: int = 10
    max_page_size: int = 50

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Refuse to boot production with a throwaway signing key
settings = get_settings()
if settings.is_production and "SECRET_KEY" not in os.environ:
    raise ValueError(
        "SECRET_KEY must be set in production! "
        "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
