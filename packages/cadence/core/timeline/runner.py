"""Map scheduled offsets onto wall-clock instants and fire callbacks.

Offsets are seconds after ``origin``. Callbacks run synchronously, in
schedule order, each with a scope pushed from its moment's scope in which
``now`` is bound to the simulated instant.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import datetime, timedelta
import logging
from typing import Any

from cadence.core.timeline.models import Timeline
from cadence.core.timeline.options import ScheduleOptions
from cadence.core.timeline.scheduler import ScheduledMoment, schedule
from cadence.core.timeline.scope import Scope

logger = logging.getLogger(__name__)


def iter_instants(
    timeline: Timeline,
    origin: datetime,
    scope: Scope | None = None,
    options: ScheduleOptions | Mapping[str, Any] | None = None,
) -> Iterator[tuple[datetime, ScheduledMoment]]:
    """Yield ``(instant, moment)`` pairs with ``instant = origin + offset``.

    Args:
        timeline: Root of the tree to schedule (started at offset 0).
        origin: Wall-clock instant corresponding to offset 0.
        scope: Scope the tree's callbacks inherit from.
        options: Scheduling options.
    """
    for moment in schedule(timeline, 0, scope, options):
        yield origin + timedelta(seconds=float(moment.offset)), moment


def run(
    timeline: Timeline,
    origin: datetime,
    scope: Scope | None = None,
    options: ScheduleOptions | Mapping[str, Any] | None = None,
    until: datetime | None = None,
) -> int:
    """Fire every moment of ``timeline`` in order.

    Args:
        timeline: Root of the tree to run.
        origin: Wall-clock instant corresponding to offset 0.
        scope: Scope the tree's callbacks inherit from.
        options: Scheduling options.
        until: Stop before the first moment later than this instant.

    Returns:
        Number of callbacks invoked.

    Raises:
        Exception: Whatever a callback raises, unchanged.
    """
    fired = 0
    logger.info("Running %r from %s", timeline, origin.isoformat())
    for instant, moment in iter_instants(timeline, origin, scope, options):
        if until is not None and instant > until:
            logger.info("Stopping at %s, next moment is at %s", until.isoformat(), instant)
            break
        moment_scope = moment.scope.push()
        moment_scope.write("now", instant)
        moment.callback(moment_scope)
        fired += 1
    logger.info("Fired %d moments", fired)
    return fired


__all__ = [
    "iter_instants",
    "run",
]
