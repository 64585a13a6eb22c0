from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from secrets import token_urlsafe

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # normalised to an async driver by backend.db.resolve_database_url
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/dreamscape.db",
        alias="DATABASE_URL",
    )
    log_file: Path = Field(default=Path("logs/dreamscape.log"))
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Authentication
    secret_key: str = Field(default_factory=lambda: token_urlsafe(32), alias="SECRET")
    token_ttl_hours: int = Field(default=24, alias="TOKEN_TTL_HOURS")
    bcrypt_rounds: int = Field(default=10, alias="BCRYPT_ROUNDS")

    # Advice generation
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    advice_max_tokens: int = Field(default=200, alias="ADVICE_MAX_TOKENS")
    advice_lookback_days: int = Field(default=3, alias="ADVICE_LOOKBACK_DAYS")
    request_timeout_seconds: float = Field(default=10.0, alias="REQUEST_TIMEOUT_SECONDS")
    retry_attempts: int = Field(default=3, alias="RETRY_ATTEMPTS")

    version: str = Field(default_factory=lambda: Settings._load_version())

    @staticmethod
    def _load_version() -> str:
        version_env = os.getenv("VERSION")
        if version_env:
            return version_env
        version_file = Path("VERSION")
        if version_file.exists():
            return version_file.read_text(encoding="utf-8").strip()
        return "0.0.0"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Path | str) -> Path:
        path = Path(value)
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: str | None) -> str:
        normalized = str(value or "INFO").upper()
        if normalized not in logging.getLevelNamesMapping():
            return "INFO"
        return normalized

    @field_validator("environment", mode="before")
    @classmethod
    def _validate_environment(cls, value: str | None) -> str:
        allowed = {"development", "test", "production"}
        if not value:
            return "development"
        normalized = str(value).lower()
        if normalized not in allowed:
            return "development"
        return normalized

    @field_validator("bcrypt_rounds", mode="before")
    @classmethod
    def _validate_bcrypt_rounds(cls, value: int | str | None) -> int:
        if value is None:
            return 10
        return min(max(int(value), 4), 16)

    @field_validator("retry_attempts", mode="before")
    @classmethod
    def _validate_retry_attempts(cls, value: int | str | None) -> int:
        if value is None:
            return 3
        return max(int(value), 1)


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""

    return Settings()
