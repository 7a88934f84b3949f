"""Runtime configuration for the validators and their front-ends."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ceiling for max_depth; the element walker spends three stack frames per level.
MAX_DEPTH_LIMIT = 200


class Settings(BaseSettings):
    """Settings loaded from .env and ``AVATARGUARD_*`` environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="AVATARGUARD_", extra="ignore")

    max_depth: int = Field(default=64, ge=1, le=MAX_DEPTH_LIMIT)
    log_level: str = "INFO"


settings = Settings()
