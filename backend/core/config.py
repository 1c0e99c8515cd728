"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "Crypto Compliance Risk Engine"
    debug: bool = False
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    # Optional YAML scoring policy; built-in defaults when unset
    risk_policy_file: str | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
