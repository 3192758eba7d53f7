"""Application settings and configuration management."""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/debaitor.db")
    PERSISTENCE_ENABLED: bool = True

    AI_MODE: Literal["auto", "live", "mock"] = "auto"
    OPENAI_API_KEY: str = ""

    ROOM_CODE_ATTEMPTS: int = Field(default=20, ge=1)
    DEFAULT_TIME_LIMIT: int = Field(default=30, ge=5)
    MAX_AUDIO_BYTES: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")

    @property
    def ai_enabled(self) -> bool:
        """Whether collaborator calls go to the configured AI routes."""

        if self.AI_MODE == "live":
            return True
        if self.AI_MODE == "mock":
            return False
        key = self.OPENAI_API_KEY.strip()
        return bool(key) and not key.startswith("sk_your")


settings = Settings()
