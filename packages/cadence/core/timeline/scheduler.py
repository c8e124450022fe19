"""Schedulers: lazy, time-ordered moment producers for timeline trees.

One scheduler variant exists per timeline variant:

- ``MomentScheduler`` yields a single moment.
- ``SequentialScheduler`` concatenates its children's streams in order.
- ``ConcurrentScheduler`` merges its children's streams with a LazyMinHeap.
- ``RootScheduler`` wraps the tree root and applies ``ScheduleOptions``.

Every scheduler is a forward-only iterator whose offsets never decrease.
Nothing is materialised up front; callers pace generation by pulling, and
may stop at any time without cleanup.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, replace
from enum import Enum
import logging
from operator import attrgetter
from typing import Any, TypeVar

from cadence.core.timeline.distributions import (
    Distribution,
    place_in_window,
    start_of_window,
)
from cadence.core.timeline.heap import LazyMinHeap
from cadence.core.timeline.models import (
    Callback,
    ConcurrentTimeline,
    Duration,
    Moment,
    SequentialTimeline,
    Timeline,
)
from cadence.core.timeline.options import ScheduleOptions
from cadence.core.timeline.scope import Scope
from cadence.core.utils.math import to_seconds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledMoment:
    """A callback placed at an absolute offset, with the scope it runs in."""

    offset: float | int
    scope: Scope
    callback: Callback

    def fire(self) -> Any:
        """Invoke the callback with this moment's scope."""
        return self.callback(self.scope)


class SchedulerState(str, Enum):
    """Lifecycle of a scheduler; transitions only move forward."""

    PENDING = "pending"
    PRODUCING = "producing"
    EXHAUSTED = "exhausted"


class Scheduler(ABC):
    """Base class for per-node schedulers.

    Args:
        timeline: Node to schedule.
        starting_offset: Absolute offset of the node's own start.
        scope: Scope the node's moments (or children's scopes) derive from.
        distribution: Placement policy inherited from ancestors.
        window_duration: Span after ``starting_offset`` the node may be
            placed within. Only leaves use it.
    """

    def __init__(
        self,
        timeline: Timeline,
        starting_offset: float | int,
        scope: Scope,
        distribution: Distribution = start_of_window,
        window_duration: float | int = 0,
    ) -> None:
        self.timeline = timeline
        self.starting_offset = starting_offset
        self.scope = scope
        self.distribution = distribution
        self.window_duration = window_duration
        self._state = SchedulerState.PENDING
        self._moments: Iterator[ScheduledMoment] | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    def __iter__(self) -> Scheduler:
        return self

    def __next__(self) -> ScheduledMoment:
        if self._state is SchedulerState.EXHAUSTED:
            raise StopIteration
        if self._moments is None:
            self._moments = self._generate()
            self._state = SchedulerState.PRODUCING
        try:
            return next(self._moments)
        except StopIteration:
            self._state = SchedulerState.EXHAUSTED
            self._moments = None
            raise

    @abstractmethod
    def _generate(self) -> Iterator[ScheduledMoment]:
        """Yield this node's moments in non-decreasing offset order."""

    def _child_distribution(self) -> Distribution:
        """Distribution children inherit: this node's own, else the inherited one."""
        if self.timeline.distribution is not None:
            return self.timeline.distribution
        return self.distribution

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.timeline!r}, "
            f"starting_offset={self.starting_offset}, state={self._state.value})"
        )


S = TypeVar("S", bound=type[Scheduler])

_SCHEDULERS: dict[type[Timeline], type[Scheduler]] = {}


def schedules(timeline_cls: type[Timeline]) -> Callable[[S], S]:
    """Class decorator registering a scheduler for a timeline type."""

    def register(scheduler_cls: S) -> S:
        _SCHEDULERS[timeline_cls] = scheduler_cls
        return scheduler_cls

    return register


def scheduler_for(
    timeline: Timeline,
    starting_offset: float | int,
    scope: Scope,
    distribution: Distribution = start_of_window,
    window_duration: float | int = 0,
) -> Scheduler:
    """Instantiate the scheduler registered for ``timeline``'s type.

    Raises:
        TypeError: If no scheduler is registered for the type or its bases.
    """
    for cls in type(timeline).__mro__:
        scheduler_cls = _SCHEDULERS.get(cls)
        if scheduler_cls is not None:
            return scheduler_cls(timeline, starting_offset, scope, distribution, window_duration)
    raise TypeError(f"No scheduler registered for {type(timeline).__name__}")


@schedules(Moment)
class MomentScheduler(Scheduler):
    """Yields the moment once, placed by its distribution within the window."""

    timeline: Moment

    def _generate(self) -> Iterator[ScheduledMoment]:
        distribution = self._child_distribution()
        offset = place_in_window(distribution, self.starting_offset, self.window_duration)
        yield ScheduledMoment(offset=offset, scope=self.scope, callback=self.timeline.callback)


@schedules(SequentialTimeline)
class SequentialScheduler(Scheduler):
    """Concatenates child streams in child order.

    The parent's slack is handed out as the children are reached: each
    child starts where the distribution puts it within the remaining
    slack, measured from its cumulative offset. With the default
    distribution every child starts exactly at its cumulative offset.
    Child schedulers are only created when the previous child is drained.
    """

    timeline: SequentialTimeline

    def _generate(self) -> Iterator[ScheduledMoment]:
        inherited = self._child_distribution()
        slack = self.timeline.slack
        end = self.starting_offset + self.timeline.duration
        shift: float | int = 0

        for child in self.timeline.children:
            base = min(self.starting_offset + child.offset + shift, end)
            remaining = slack - shift
            start = base
            if remaining > 0:
                distribution = child.timeline.distribution
                if distribution is None:
                    distribution = inherited
                start = place_in_window(distribution, base, remaining)
                shift += start - base

            for moment in scheduler_for(child.timeline, start, self.scope.push(), inherited):
                # Rounding accepted by the duration check never carries past this window.
                if moment.offset > end:
                    moment = replace(moment, offset=end)
                yield moment


@schedules(ConcurrentTimeline)
class ConcurrentScheduler(Scheduler):
    """Merges child streams, which may interleave arbitrarily, by offset.

    Composite children start at their explicit offsets. A leaf child may
    be placed anywhere from its offset up to, but not at, the end of this
    timeline.
    """

    timeline: ConcurrentTimeline

    def _generate(self) -> Iterator[ScheduledMoment]:
        inherited = self._child_distribution()
        branches = [
            scheduler_for(
                child.timeline,
                self.starting_offset + child.offset,
                self.scope.push(),
                inherited,
                self.timeline.duration - child.end,
            )
            for child in self.timeline.children
        ]
        logger.debug(
            "Merging %d concurrent branches starting at %s", len(branches), self.starting_offset
        )
        yield from LazyMinHeap(*branches, key=attrgetter("offset"))


class RootScheduler(Scheduler):
    """Entry point scheduler for a whole tree.

    Delegates ordering to the scheduler of the root node's variant and
    rescales every emitted offset by ``options.stretch``, measured from
    ``starting_offset``.

    Args:
        timeline: Root of the tree.
        starting_offset: Absolute offset the root starts at.
        scope: Caller's scope; the tree works in a scope pushed from it.
        options: ``ScheduleOptions`` or a mapping validated into one.
    """

    def __init__(
        self,
        timeline: Timeline,
        starting_offset: Duration = 0,
        scope: Scope | None = None,
        options: ScheduleOptions | Mapping[str, Any] | None = None,
    ) -> None:
        if options is None:
            options = ScheduleOptions()
        elif not isinstance(options, ScheduleOptions):
            options = ScheduleOptions.model_validate(dict(options))
        super().__init__(
            timeline,
            to_seconds(starting_offset, name="starting_offset"),
            scope if scope is not None else Scope(),
            options.build_distribution(),
        )
        self.options = options
        self.emitted = 0
        logger.debug(
            "Scheduling %r from %s (stretch=%s, distribution=%s)",
            timeline,
            self.starting_offset,
            options.stretch,
            options.distribution,
        )

    def _generate(self) -> Iterator[ScheduledMoment]:
        stretch = self.options.stretch
        inner = scheduler_for(
            self.timeline, self.starting_offset, self.scope.push(), self.distribution
        )
        for moment in inner:
            if stretch != 1:
                moment = replace(
                    moment,
                    offset=self.starting_offset + (moment.offset - self.starting_offset) * stretch,
                )
            self.emitted += 1
            yield moment
        logger.debug("Schedule exhausted after %d moments", self.emitted)


def schedule(
    timeline: Timeline,
    starting_offset: Duration = 0,
    scope: Scope | None = None,
    options: ScheduleOptions | Mapping[str, Any] | None = None,
) -> RootScheduler:
    """Lazily schedule every moment in ``timeline``.

    Args:
        timeline: Root of a built timeline tree.
        starting_offset: Absolute offset of the root's start.
        scope: Scope callbacks inherit from. A fresh one if omitted.
        options: Scheduling options (``stretch``, ``distribution``, ``seed``).

    Returns:
        Iterator of ``ScheduledMoment`` in non-decreasing offset order.

    Example:
        >>> tl = SequentialTimeline(14, [Moment(print), Moment(print)])
        >>> [m.offset for m in schedule(tl)]
        [0, 0]
    """
    return RootScheduler(timeline, starting_offset, scope, options)


__all__ = [
    "ConcurrentScheduler",
    "MomentScheduler",
    "RootScheduler",
    "ScheduledMoment",
    "Scheduler",
    "SchedulerState",
    "SequentialScheduler",
    "schedule",
    "scheduler_for",
    "schedules",
]
