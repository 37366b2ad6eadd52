"""Application settings powered by Pydantic BaseSettings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shutfetch.fetch.config import FetchConfig
from shutfetch.fetch.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    MAX_ATTEMPTS,
)
from shutfetch.observability.logging import configure_logging, level_from_name


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SHUTFETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, ge=1.0, le=300.0)
    max_attempts: int = Field(default=MAX_ATTEMPTS, ge=1, le=10)

    def to_fetch_config(self) -> FetchConfig:
        """Build the fetch configuration from these settings."""
        return FetchConfig(
            user_agent=self.user_agent,
            timeout_seconds=self.timeout_seconds,
            max_attempts=self.max_attempts,
        )

    def configure_logging(self) -> None:
        """Apply the logging settings."""
        configure_logging(
            level=level_from_name(self.log_level),
            json_format=self.log_json,
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
