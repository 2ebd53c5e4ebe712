"""
Configuration and settings for the todos API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_prefix="TODOS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Database (any SQLAlchemy URL; Postgres expected in production)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Bearer tokens
    token_secret: Optional[str] = Field(default=None)
    token_secret_file: Optional[str] = Field(default=None)
    token_algorithm: str = Field(default="HS256")
    token_header: str = Field(default="x-access-token")
    login_token_ttl_seconds: int = Field(default=3600, gt=0)
    register_token_ttl_seconds: int = Field(default=3600, gt=0)

    # Password hashing
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
