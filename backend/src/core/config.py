"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str

    # Secrets: JWT signing, at-rest token encryption, session cookie signing
    jwt_secret: str
    encryption_key: str
    session_secret: str

    # Lifetime of CLI tokens issued from the web portal
    token_expiry_days: int = 30

    # Development mode - enables /auth/dev-login for local development
    dev_mode: bool = False

    # Comma-separated in the environment, e.g. "http://localhost:5173,https://example.com"
    cors_origins: Annotated[list[str], NoDecode] = ["http://localhost:5173"]

    # Redis (rate limiting); the app runs without it
    redis_url: str = "redis://localhost:6379"
    redis_enabled: bool = True

    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a comma-separated string or a list of origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
