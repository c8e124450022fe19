"""Scheduling options."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cadence.core.timeline.distributions import (
    Distribution,
    available_distributions,
    get_distribution,
)


class ScheduleOptions(BaseModel):
    """Options recognised by the root scheduler.

    Attributes:
        stretch: Factor applied to every offset, measured from the
            scheduling start, before it is emitted.
        distribution: Name of the registered distribution used for nodes
            that do not carry their own.
        seed: Seed handed to the distribution factory.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    stretch: float = Field(default=1.0, gt=0.0, description="Offset rescaling factor")
    distribution: str = Field(default="start", description="Default placement distribution")
    seed: int | None = Field(default=None, description="Seed for random distributions")

    @field_validator("distribution")
    @classmethod
    def _known_distribution(cls, value: str) -> str:
        if value not in available_distributions():
            raise ValueError(
                f"Unknown distribution '{value}'. "
                f"Available: {', '.join(available_distributions())}"
            )
        return value

    def build_distribution(self) -> Distribution:
        """Instantiate the configured distribution."""
        return get_distribution(self.distribution, seed=self.seed)


__all__ = [
    "ScheduleOptions",
]
