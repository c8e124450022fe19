"""Shared utilities for Cadence."""

from cadence.core.utils.math import clamp, to_seconds

__all__ = [
    "clamp",
    "to_seconds",
]
