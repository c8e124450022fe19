"""Shared pytest fixtures for cadence tests."""

from __future__ import annotations

from collections.abc import Callable
import random

import pytest

from cadence.core.timeline.models import (
    ConcurrentTimeline,
    Moment,
    SequentialTimeline,
    Timeline,
)
from cadence.core.timeline.scope import Scope

# ============================================================================
# Callback Fixtures
# ============================================================================


class Recorder:
    """Callback factory that records which labelled callbacks fired, in order."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.scopes: list[Scope] = []

    def callback(self, label: str) -> Callable[[Scope], None]:
        def record(scope: Scope) -> None:
            self.calls.append(label)
            self.scopes.append(scope)

        record.__qualname__ = f"record[{label}]"
        return record


@pytest.fixture
def recorder() -> Recorder:
    """Create a fresh callback recorder."""
    return Recorder()


@pytest.fixture
def noop() -> Callable[[Scope], None]:
    """Callback that does nothing."""
    return lambda scope: None


# ============================================================================
# Tree Fixtures
# ============================================================================


def build_random_tree(rng: random.Random, depth: int = 0, max_depth: int = 4) -> Timeline:
    """Build a random valid tree mixing sequential, concurrent and leaf nodes."""
    if depth >= max_depth or rng.random() < 0.2:
        return Moment(lambda scope: None)

    if rng.random() < 0.5:
        children = [
            build_random_tree(rng, depth + 1, max_depth) for _ in range(rng.randint(0, 4))
        ]
        used = sum(child.duration for child in children)
        return SequentialTimeline(used + rng.randint(0, 20), children)

    timeline = ConcurrentTimeline()
    for _ in range(rng.randint(0, 4)):
        timeline.attach(build_random_tree(rng, depth + 1, max_depth), rng.randint(0, 30))
    return timeline


@pytest.fixture
def random_tree() -> Callable[[int], Timeline]:
    """Factory building a reproducible random tree from a seed."""

    def factory(seed: int) -> Timeline:
        return build_random_tree(random.Random(seed))

    return factory
