"""Timeline composition and moment scheduling.

Build a tree of nested time windows, then pull a single, globally
time-ordered stream of callback invocations from it.
"""

from cadence.core.timeline.builder import (
    DAY,
    HOUR,
    MINUTE,
    WEEK,
    ConcurrentBuilder,
    SequentialBuilder,
    concurrent,
    sequential,
)
from cadence.core.timeline.distributions import (
    Distribution,
    TriangularDistribution,
    UniformDistribution,
    available_distributions,
    get_distribution,
    place_in_window,
    register_distribution,
    start_of_window,
)
from cadence.core.timeline.errors import ScopeLookupError, WindowDurationExceeded
from cadence.core.timeline.heap import LazyMinHeap
from cadence.core.timeline.models import (
    ConcurrentTimeline,
    Moment,
    OffsetTimeline,
    SequentialTimeline,
    Timeline,
)
from cadence.core.timeline.options import ScheduleOptions
from cadence.core.timeline.runner import iter_instants, run
from cadence.core.timeline.scheduler import (
    ConcurrentScheduler,
    MomentScheduler,
    RootScheduler,
    ScheduledMoment,
    Scheduler,
    SchedulerState,
    SequentialScheduler,
    schedule,
)
from cadence.core.timeline.scope import Scope

__all__ = [
    # Tree
    "Timeline",
    "OffsetTimeline",
    "Moment",
    "SequentialTimeline",
    "ConcurrentTimeline",
    # Authoring
    "SequentialBuilder",
    "ConcurrentBuilder",
    "sequential",
    "concurrent",
    "MINUTE",
    "HOUR",
    "DAY",
    "WEEK",
    # Scheduling
    "schedule",
    "ScheduleOptions",
    "ScheduledMoment",
    "Scheduler",
    "SchedulerState",
    "MomentScheduler",
    "SequentialScheduler",
    "ConcurrentScheduler",
    "RootScheduler",
    "LazyMinHeap",
    # Running
    "iter_instants",
    "run",
    # Scope
    "Scope",
    # Distributions
    "Distribution",
    "UniformDistribution",
    "TriangularDistribution",
    "start_of_window",
    "place_in_window",
    "get_distribution",
    "register_distribution",
    "available_distributions",
    # Errors
    "ScopeLookupError",
    "WindowDurationExceeded",
]
