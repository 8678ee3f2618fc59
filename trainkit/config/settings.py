"""Centralized application settings using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (``TRAINKIT_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="TRAINKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Artifact metadata
    default_author: str = "trainkit"
    model_version: str = "1.0"

    # Logging
    log_level: str = "WARNING"
    log_json: bool = False

    # Engine Settings
    random_state: int = 42
    image_size: int = 32
    sound_window_seconds: float = 0.975
    sound_bands: int = 32
    text_embedding_dim: int = 128
    recommender_factors: int = 32


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
