"""Configuration management for Cadence."""

from cadence.core.config.loader import (
    apply_logging_config,
    detect_format,
    load_app_config,
    load_config,
)
from cadence.core.config.models import AppConfig, LoggingConfig
from cadence.core.timeline.options import ScheduleOptions

__all__ = [
    # Loaders
    "load_config",
    "load_app_config",
    "detect_format",
    "apply_logging_config",
    # Models
    "AppConfig",
    "LoggingConfig",
    "ScheduleOptions",
]
