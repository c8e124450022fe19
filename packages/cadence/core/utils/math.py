"""Math utilities for offsets and durations."""

from __future__ import annotations

from datetime import timedelta
from typing import TypeVar

import numpy as np

Number = TypeVar("Number", int, float, np.number)


def clamp(value: Number, min_val: Number, max_val: Number) -> Number:
    """Clamp value to range [min_val, max_val].

    Args:
        value: Value to clamp
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Clamped value
    """
    return max(min_val, min(max_val, value))


def to_seconds(value: float | int | timedelta, *, name: str = "value") -> float | int:
    """Normalize a duration or offset to a non-negative number of seconds.

    Plain numbers pass through unchanged (ints stay ints) so that callers
    working in their own units are not forced into floats.

    Args:
        value: Number of seconds or a timedelta
        name: Argument name used in the error message

    Returns:
        Non-negative number of seconds

    Raises:
        ValueError: If the value is negative or not numeric

    Example:
        >>> to_seconds(timedelta(minutes=2))
        120.0
        >>> to_seconds(5)
        5
    """
    if isinstance(value, timedelta):
        seconds: float | int = value.total_seconds()
    elif isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise ValueError(f"{name} must be a number or timedelta, got {type(value).__name__}")
    else:
        seconds = value.item() if isinstance(value, np.number) else value

    if seconds < 0:
        raise ValueError(f"{name} must be >= 0, got {seconds}")
    return seconds
