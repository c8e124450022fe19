"""Builders for authoring timeline trees.

Each composite is authored through a builder that is handed to a
``configure`` callback. The child is fully configured before it is
attached to its parent, so the parent checks the child's final duration.

Example:
    >>> def workday(day: SequentialBuilder) -> None:
    ...     day.please(lambda scope: print("clock in"))
    ...     day.over(8 * HOUR, lambda shift: shift.please(lambda scope: print("work")))
    ...     day.please(lambda scope: print("clock out"))
    >>> week = sequential(WEEK, lambda w: w.repeat(lambda b: b.over(DAY, workday), times=5))
    >>> week.total_child_duration == 5 * DAY
    True
"""

from __future__ import annotations

from collections.abc import Callable

from cadence.core.timeline.distributions import Distribution
from cadence.core.timeline.models import (
    Callback,
    ConcurrentTimeline,
    Duration,
    Moment,
    SequentialTimeline,
    Timeline,
)
from cadence.core.utils.math import to_seconds

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY


class SequentialBuilder:
    """Authoring surface for a ``SequentialTimeline``.

    Every method appends after the children added so far and raises
    ``WindowDurationExceeded`` if the addition does not fit.
    """

    def __init__(self, timeline: SequentialTimeline) -> None:
        self.timeline = timeline

    def please(self, callback: Callback, *, distribution: Distribution | None = None) -> Moment:
        """Append a moment that calls ``callback(scope)``."""
        moment = Moment(callback, distribution=distribution)
        self.timeline.attach(moment)
        return moment

    def over(
        self,
        duration: Duration,
        configure: Callable[[SequentialBuilder], object] | None = None,
        *,
        distribution: Distribution | None = None,
    ) -> SequentialTimeline:
        """Append a nested sequential window of ``duration``."""
        child = sequential(duration, configure, distribution=distribution)
        self.timeline.attach(child)
        return child

    def simultaneously(
        self,
        configure: Callable[[ConcurrentBuilder], object] | None = None,
        *,
        distribution: Distribution | None = None,
    ) -> ConcurrentTimeline:
        """Append a concurrent block; it occupies the span of its longest branch."""
        child = concurrent(configure, distribution=distribution)
        self.timeline.attach(child)
        return child

    def repeat(
        self,
        configure: Callable[[SequentialBuilder], object],
        *,
        times: int,
        over: Duration | None = None,
    ) -> SequentialTimeline:
        """Run ``configure`` ``times`` times.

        Args:
            configure: Callback run once per repetition.
            times: Number of repetitions.
            over: If given, the repetitions go into a new nested window of
                this duration (the window is returned); otherwise they are
                appended to this timeline (which is returned).
        """
        if times < 0:
            raise ValueError(f"times must be >= 0, got {times}")
        if over is None:
            for _ in range(times):
                configure(self)
            return self.timeline

        child = SequentialTimeline(over)
        builder = SequentialBuilder(child)
        for _ in range(times):
            configure(builder)
        self.timeline.attach(child)
        return child

    def use(self, *timelines: Timeline) -> SequentialTimeline:
        """Append pre-built timelines, all or nothing."""
        return self.timeline.use(*timelines)


class ConcurrentBuilder:
    """Authoring surface for a ``ConcurrentTimeline``.

    Children are placed ``after`` the block's start; the block grows to fit.
    """

    def __init__(self, timeline: ConcurrentTimeline) -> None:
        self.timeline = timeline

    def please(
        self,
        callback: Callback,
        *,
        after: Duration = 0,
        distribution: Distribution | None = None,
    ) -> Moment:
        """Add a moment that may fire anywhere from ``after`` to the block's end."""
        moment = Moment(callback, distribution=distribution)
        self.timeline.attach(moment, after)
        return moment

    def over(
        self,
        duration: Duration,
        configure: Callable[[SequentialBuilder], object] | None = None,
        *,
        after: Duration = 0,
        distribution: Distribution | None = None,
    ) -> SequentialTimeline:
        """Add a sequential branch of ``duration`` starting ``after`` in."""
        child = sequential(duration, configure, distribution=distribution)
        self.timeline.attach(child, after)
        return child

    def also(
        self,
        configure: Callable[[SequentialBuilder], object] | None = None,
        *,
        over: Duration | None = None,
        after: Duration = 0,
    ) -> SequentialTimeline:
        """Like ``over`` but defaults the branch length to the block's current duration."""
        duration = self.timeline.duration if over is None else over
        return self.over(duration, configure, after=after)

    def repeat(
        self,
        configure: Callable[[SequentialBuilder], object],
        *,
        times: int,
        over: Duration,
        after: Duration = 0,
    ) -> ConcurrentTimeline:
        """Add ``times`` independent branches built by the same ``configure``."""
        if times < 0:
            raise ValueError(f"times must be >= 0, got {times}")
        for _ in range(times):
            self.over(over, configure, after=after)
        return self.timeline

    def use(self, *timelines: Timeline, after: Duration = 0) -> ConcurrentTimeline:
        """Add pre-built timelines, each starting ``after`` in."""
        return self.timeline.use(*timelines, after=after)


def sequential(
    duration: Duration,
    configure: Callable[[SequentialBuilder], object] | None = None,
    *,
    distribution: Distribution | None = None,
) -> SequentialTimeline:
    """Build a sequential timeline of ``duration``.

    Args:
        duration: Fixed span (seconds or timedelta).
        configure: Receives a ``SequentialBuilder`` for the new timeline.
        distribution: Placement policy for the timeline's children.

    Returns:
        The configured timeline.

    Raises:
        WindowDurationExceeded: If ``configure`` adds more than fits.
    """
    timeline = SequentialTimeline(to_seconds(duration, name="duration"), distribution=distribution)
    if configure is not None:
        configure(SequentialBuilder(timeline))
    return timeline


def concurrent(
    configure: Callable[[ConcurrentBuilder], object] | None = None,
    *,
    distribution: Distribution | None = None,
) -> ConcurrentTimeline:
    """Build a concurrent timeline; its duration covers its furthest branch."""
    timeline = ConcurrentTimeline(distribution=distribution)
    if configure is not None:
        configure(ConcurrentBuilder(timeline))
    return timeline


__all__ = [
    "DAY",
    "HOUR",
    "MINUTE",
    "WEEK",
    "ConcurrentBuilder",
    "SequentialBuilder",
    "concurrent",
    "sequential",
]
