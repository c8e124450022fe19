"""Placement distributions for otherwise unconstrained moments.

A distribution picks a concrete offset inside a window::

    offset = distribution(starting_offset, window_duration)

with ``starting_offset <= offset < starting_offset + window_duration``, and
exactly ``starting_offset`` when the window is empty.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Protocol, runtime_checkable

import numpy as np

from cadence.core.utils.math import clamp

logger = logging.getLogger(__name__)


@runtime_checkable
class Distribution(Protocol):
    """Callable choosing an offset within ``[start, start + window)``."""

    def __call__(self, starting_offset: float, window_duration: float) -> float: ...


def start_of_window(starting_offset: float, window_duration: float) -> float:
    """Always place at the start of the window."""
    return starting_offset


def place_in_window(
    distribution: Distribution, starting_offset: float, window_duration: float
) -> float:
    """Apply ``distribution`` and force its result into the half-open window.

    Results below the window snap to its start; results at or past its end
    snap to the last representable offset before the end.

    Example:
        >>> place_in_window(lambda start, window: start + window, 2.0, 3.0) < 5.0
        True
    """
    if window_duration <= 0:
        return starting_offset
    end = starting_offset + window_duration
    last = float(np.nextafter(end, starting_offset))
    return clamp(distribution(starting_offset, window_duration), starting_offset, last)


class _RandomDistribution:
    """Base for numpy-backed distributions with an optional seed."""

    name = "random"

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def __call__(self, starting_offset: float, window_duration: float) -> float:
        if window_duration <= 0:
            return starting_offset
        fraction = float(self._sample())
        # Keep the result strictly inside the half-open window.
        fraction = clamp(fraction, 0.0, float(np.nextafter(1.0, 0.0)))
        return starting_offset + fraction * window_duration

    def _sample(self) -> float:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(seed={self.seed})"


class UniformDistribution(_RandomDistribution):
    """Every point of the window is equally likely."""

    name = "uniform"

    def _sample(self) -> float:
        return self._rng.random()


class TriangularDistribution(_RandomDistribution):
    """Placements cluster around ``mode`` (a fraction of the window).

    Args:
        mode: Peak position in [0, 1]; 0.5 peaks mid-window.
        seed: RNG seed for reproducible schedules.
    """

    name = "triangular"

    def __init__(self, mode: float = 0.5, seed: int | None = None) -> None:
        if not 0.0 <= mode <= 1.0:
            raise ValueError(f"mode must be within [0, 1], got {mode}")
        super().__init__(seed)
        self.mode = mode

    def _sample(self) -> float:
        return self._rng.triangular(0.0, self.mode, 1.0)


DistributionFactory = Callable[[int | None], Distribution]

_REGISTRY: dict[str, DistributionFactory] = {
    "start": lambda seed: start_of_window,
    UniformDistribution.name: lambda seed: UniformDistribution(seed=seed),
    TriangularDistribution.name: lambda seed: TriangularDistribution(seed=seed),
}


def register_distribution(name: str, factory: DistributionFactory) -> None:
    """Make a distribution selectable by name.

    Args:
        name: Registry key used in configuration.
        factory: Called with the configured seed; returns a distribution.
    """
    if name in _REGISTRY:
        logger.warning("Overwriting distribution '%s'", name)
    _REGISTRY[name] = factory


def get_distribution(name: str, seed: int | None = None) -> Distribution:
    """Build the distribution registered under ``name``.

    Raises:
        ValueError: If no distribution is registered under ``name``.
    """
    try:
        factory = _REGISTRY[name]
    except KeyError:
        raise ValueError(
            f"Unknown distribution '{name}'. Available: {', '.join(available_distributions())}"
        ) from None
    return factory(seed)


def available_distributions() -> list[str]:
    return sorted(_REGISTRY)


__all__ = [
    "Distribution",
    "TriangularDistribution",
    "UniformDistribution",
    "available_distributions",
    "get_distribution",
    "place_in_window",
    "register_distribution",
    "start_of_window",
]
