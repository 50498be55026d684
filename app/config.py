"""Application configuration and settings."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the applicant intake service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Anonymous Applicant API"
    version: str = "1.0.0"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./data/applicants.db"
    database_echo: bool = False
    data_directory: Path = Path("data")

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    default_page_size: int = 10
    max_page_size: int = 50
    identifier_retry_attempts: int = 3
    top_positions_limit: int = 10


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    settings = Settings()
    settings.data_directory.mkdir(parents=True, exist_ok=True)
    return settings
