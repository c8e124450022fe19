"""Configuration models for Cadence."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from cadence.core.timeline.options import ScheduleOptions


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON lines instead of text")
    filename: str | None = Field(default=None, description="Log file; stdout when unset")


class AppConfig(BaseModel):
    """Application-level configuration.

    Example:
        >>> config = AppConfig.model_validate({"schedule": {"stretch": 2.0}})
        >>> config.schedule.stretch
        2.0
    """

    model_config = ConfigDict(extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    schedule: ScheduleOptions = Field(default_factory=ScheduleOptions)


__all__ = [
    "AppConfig",
    "LoggingConfig",
]
