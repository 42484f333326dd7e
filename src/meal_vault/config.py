"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    vault_path: Path = Path("vault")
    days_directory: str = "days"
    products_directory: str = "products"
    recipes_directory: str = "recipes"
    history_limit: int = 7
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="MEAL_VAULT_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
