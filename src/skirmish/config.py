"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from SKIRMISH_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SKIRMISH_",
        case_sensitive=False,
    )

    debug: bool = False

    # Demo encounter
    initiative_seed: int | None = None  # None rolls a fresh order every run
    combat_log: bool = True  # Record and print the structured combat log
    demo_hp: int = Field(default=30, gt=0, description="Starting HP of the demo hero")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
