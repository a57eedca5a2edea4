"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings so that an application embedding railtrack can tune
its logging without code changes:

    RAILTRACK_LOG_LEVEL=DEBUG      show every skipped step
    RAILTRACK_LOG_FORMAT=json      one JSON object per log line

The engine itself never reads settings; they are consumed by
railtrack.logs.configure_structlog.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RailtrackSettings(BaseSettings):
    """
    Logging settings for pipelines built on railtrack.

    Load order (highest priority first):
      1. Environment variables (RAILTRACK_ prefix)
      2. .env file in the working directory
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="RAILTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Minimum level emitted by railtrack loggers")
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="console for human-readable output, json for machine-readable lines",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard level names in any case; store them upper-cased."""
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level {value!r}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]
