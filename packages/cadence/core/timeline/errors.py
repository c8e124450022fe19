"""Errors raised while building timelines and reading scopes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cadence.core.timeline.models import Timeline


class WindowDurationExceeded(Exception):
    """Raised when attaching a child would overrun a fixed-duration parent.

    The parent is left exactly as it was before the attempt.

    Attributes:
        child: The timeline that could not be attached.
        parent_duration: The parent's declared duration.
        attempted_end: Where the child would have ended, relative to the
            parent's start.
    """

    def __init__(
        self,
        *,
        child: Timeline,
        parent_duration: float,
        attempted_end: float,
    ) -> None:
        self.child = child
        self.parent_duration = parent_duration
        self.attempted_end = attempted_end
        super().__init__(
            f"{type(child).__name__} of duration {child.duration} would end at "
            f"{attempted_end}, beyond the parent duration of {parent_duration}"
        )


class ScopeLookupError(KeyError):
    """Raised when a name is not defined anywhere in a scope chain."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"'{self.name}' is not defined in this scope or any parent scope"


__all__ = [
    "ScopeLookupError",
    "WindowDurationExceeded",
]
