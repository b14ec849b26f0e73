"""
Configuration Settings.

This module defines the brix configuration using Pydantic's BaseSettings.
All values load from environment variables prefixed with ``BRIX_`` (and an
optional ``.env`` file). Nested sections use ``__`` as delimiter, for example
``BRIX_INTELLIGENCE__MODEL`` maps to ``settings.intelligence.model``.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IntelligenceSettings(BaseModel):
    """Defaults for the ``Intelligence`` capability."""

    service: Literal["pydantic_ai", "custom"] = Field(
        default="pydantic_ai", description="Backend used to answer questions"
    )
    model: str = Field(default="openai:gpt-4o-mini", description="pydantic_ai model identifier")
    system_prompt: str = Field(
        default="You are a friendly assistant, ready to help with any task",
        description="System prompt prepended to every conversation",
    )
    api_key: Optional[str] = Field(default=None, description="API key for the image endpoint")
    base_url: str = Field(default="https://api.openai.com/v1", description="Base URL of the image endpoint")
    timeout: float = Field(default=60.0, description="HTTP timeout in seconds for image requests")


class DatabaseSettings(BaseModel):
    """Defaults for the ``Database`` capability."""

    service: Literal["memory", "sql"] = Field(default="memory", description="Storage backend")
    url: Optional[str] = Field(default=None, description="SQLAlchemy URL for the sql backend")


class BrixSettings(BaseSettings):
    """Runtime settings for brix."""

    model_config = SettingsConfigDict(
        env_prefix="BRIX_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Console log level")
    log_format: Literal["simple", "detailed", "json"] = Field(default="detailed", description="Log line format")
    log_file_dir: str = Field(default="logs", description="Directory for the log file")
    enable_file_logging: bool = Field(default=False, description="Also write logs to a file")

    intelligence: IntelligenceSettings = Field(default_factory=IntelligenceSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


@lru_cache(maxsize=1)
def get_settings() -> BrixSettings:
    """Return the process-wide settings instance."""
    return BrixSettings()
