"""Timeline tree models.

A timeline is a bounded span of time holding offset-tagged children:

- ``Moment``: zero-duration leaf wrapping a callback.
- ``SequentialTimeline``: children placed back-to-back in insertion order
  inside a fixed duration.
- ``ConcurrentTimeline``: children placed at explicit, possibly overlapping
  offsets; the duration grows to cover the furthest child.

Trees are built once (see ``cadence.core.timeline.builder``) and then only
read by the schedulers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import timedelta
import math
from typing import TYPE_CHECKING, Any

from cadence.core.timeline.errors import WindowDurationExceeded
from cadence.core.utils.math import to_seconds

if TYPE_CHECKING:
    from cadence.core.timeline.distributions import Distribution
    from cadence.core.timeline.scope import Scope

Callback = Callable[["Scope"], Any]
Duration = float | int | timedelta


class Timeline:
    """Abstract base class for every node in a timeline tree.

    Only the concrete variants (``Moment``, ``SequentialTimeline`` and
    ``ConcurrentTimeline``) have schedulers.

    Attributes:
        distribution: Optional placement policy for this node's children
            (or, for a ``Moment``, for the moment itself).
    """

    def __init__(self, duration: Duration, *, distribution: Distribution | None = None) -> None:
        self._duration = to_seconds(duration, name="duration")
        self._children: list[OffsetTimeline] = []
        self.distribution = distribution

    @property
    def duration(self) -> float | int:
        """Current declared span of this node."""
        return self._duration

    @property
    def children(self) -> tuple[OffsetTimeline, ...]:
        return tuple(self._children)

    @property
    def timelines(self) -> list[Timeline]:
        """Wrapped child timelines, in placement order."""
        return [child.timeline for child in self._children]

    def __iter__(self) -> Iterator[OffsetTimeline]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(duration={self.duration}, children={len(self)})"


@dataclass(frozen=True)
class OffsetTimeline:
    """A child timeline positioned ``offset`` after its parent's start."""

    timeline: Timeline
    offset: float | int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "offset", to_seconds(self.offset, name="offset"))

    @property
    def duration(self) -> float | int:
        return self.timeline.duration

    @property
    def end(self) -> float | int:
        """Offset at which the child's window closes, relative to the parent."""
        return self.offset + self.timeline.duration


class Moment(Timeline):
    """Zero-duration leaf that invokes ``callback(scope)`` when it fires."""

    def __init__(self, callback: Callback, *, distribution: Distribution | None = None) -> None:
        if not callable(callback):
            raise TypeError(f"Moment callback must be callable, got {type(callback).__name__}")
        super().__init__(0, distribution=distribution)
        self.callback = callback

    def __call__(self, scope: Scope) -> Any:
        return self.callback(scope)

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"Moment({name})"


# Absolute slack, in seconds, for float rounding in summed child durations.
DURATION_TOLERANCE = 1e-9


def _exceeds(end: float, limit: float) -> bool:
    return end > limit and not math.isclose(end, limit, rel_tol=0.0, abs_tol=DURATION_TOLERANCE)


class SequentialTimeline(Timeline):
    """Timeline whose children run back-to-back within a fixed duration.

    The Nth child is placed at the summed durations of the children before
    it. Any unused span (``slack``) is left for the scheduler's
    distribution to spread between children.

    Example:
        >>> day = SequentialTimeline(24)
        >>> day.use(SequentialTimeline(8), SequentialTimeline(8))
        SequentialTimeline(duration=24, children=2)
        >>> day.total_child_duration
        16
    """

    def __init__(
        self,
        duration: Duration,
        children: Iterable[Timeline] = (),
        *,
        distribution: Distribution | None = None,
    ) -> None:
        super().__init__(duration, distribution=distribution)
        self._total_child_duration: float | int = 0
        self.use(*children)

    @property
    def total_child_duration(self) -> float | int:
        return self._total_child_duration

    @property
    def slack(self) -> float | int:
        """Span not claimed by any child."""
        return max(self.duration - self._total_child_duration, 0)

    def attach(self, child: Timeline, offset: Duration | None = None) -> SequentialTimeline:
        """Append a child directly after the previous one.

        Args:
            child: Timeline to append.
            offset: Ignored; sequential placement is always cumulative.

        Returns:
            This timeline.

        Raises:
            WindowDurationExceeded: If the child would end past ``duration``.
        """
        return self.use(child)

    def use(self, *timelines: Timeline) -> SequentialTimeline:
        """Append several children; either all of them fit or none is added.

        Raises:
            WindowDurationExceeded: If any child would end past ``duration``.
        """
        cursor = self._total_child_duration
        placed: list[OffsetTimeline] = []
        for timeline in timelines:
            end = cursor + timeline.duration
            if _exceeds(end, self.duration):
                raise WindowDurationExceeded(
                    child=timeline, parent_duration=self.duration, attempted_end=end
                )
            placed.append(OffsetTimeline(timeline, cursor))
            cursor = end

        self._children.extend(placed)
        self._total_child_duration = min(cursor, self.duration)
        return self

    def parallelize(self, factor: int) -> ConcurrentTimeline:
        """Run ``factor`` independent copies of this timeline at offset 0."""
        _check_factor(factor)
        return ConcurrentTimeline().use(*([self] * factor))

    def __add__(self, other: object) -> SequentialTimeline:
        """Concatenate two timelines; the result keeps the left operand's distribution.

        The right operand's children are merged in directly, so a
        distribution set on the right operand itself does not carry over.
        """
        if not isinstance(other, SequentialTimeline):
            return NotImplemented
        return SequentialTimeline(
            self.duration + other.duration,
            [*self.timelines, *other.timelines],
            distribution=self.distribution,
        )

    def __mul__(self, factor: object) -> SequentialTimeline:
        if not isinstance(factor, int) or isinstance(factor, bool):
            return NotImplemented
        _check_factor(factor)
        return SequentialTimeline(
            self.duration * factor, self.timelines * factor, distribution=self.distribution
        )

    __rmul__ = __mul__

    def __pow__(self, factor: object) -> SequentialTimeline:
        if not isinstance(factor, int) or isinstance(factor, bool):
            return NotImplemented
        return SequentialTimeline(self.duration, [self.parallelize(factor)])


class ConcurrentTimeline(Timeline):
    """Timeline whose children start at independently chosen offsets.

    Attaching a child that ends past the current duration extends the
    duration to that child's end instead of failing.
    """

    def __init__(
        self,
        duration: Duration = 0,
        children: Iterable[Timeline] = (),
        *,
        after: Duration = 0,
        distribution: Distribution | None = None,
    ) -> None:
        super().__init__(duration, distribution=distribution)
        self.use(*children, after=after)

    def attach(self, child: Timeline, offset: Duration | None = 0) -> ConcurrentTimeline:
        """Place a child ``offset`` after this timeline's start (0 if ``None``)."""
        placed = OffsetTimeline(child, 0 if offset is None else offset)
        self._children.append(placed)
        self._duration = max(self._duration, placed.end)
        return self

    def use(self, *timelines: Timeline, after: Duration = 0) -> ConcurrentTimeline:
        """Place each timeline at the same offset ``after``."""
        for timeline in timelines:
            self.attach(timeline, after)
        return self


def _check_factor(factor: int) -> None:
    if factor < 0:
        raise ValueError(f"Repetition factor must be >= 0, got {factor}")


__all__ = [
    "DURATION_TOLERANCE",
    "Callback",
    "ConcurrentTimeline",
    "Duration",
    "Moment",
    "OffsetTimeline",
    "SequentialTimeline",
    "Timeline",
]
