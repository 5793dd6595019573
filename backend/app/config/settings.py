"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from app.config import settings

    # Access settings
    db_url = settings.POSTGRES_URL
    limit = settings.REVIEW_DEFAULT_LIMIT
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "JLPT Study"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "jlpt"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "jlpt"

    @property
    def POSTGRES_URL(self) -> str:
        """Async PostgreSQL connection URL."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def POSTGRES_URL_SYNC(self) -> str:
        """Sync PostgreSQL connection URL for external migration tooling."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Vocabulary review
    REVIEW_DEFAULT_LIMIT: int = 20  # Due items returned per request
    REVIEW_MAX_LIMIT: int = 100

    # Browsing (vocabulary and grammar lists)
    VOCABULARY_LIST_DEFAULT_LIMIT: int = 50
    GRAMMAR_LIST_DEFAULT_LIMIT: int = 20
    LIST_MAX_LIMIT: int = 200

    # Quizzes
    # When True, unanswered questions do not count toward the points total,
    # so a partially-submitted quiz can still score 100%.
    QUIZ_SCORE_OVER_ATTEMPTED_ONLY: bool = True
    QUIZ_LIST_DEFAULT_LIMIT: int = 20
    QUIZ_HISTORY_DEFAULT_LIMIT: int = 20

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
