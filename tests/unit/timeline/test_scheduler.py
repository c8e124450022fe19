"""Tests for the scheduler hierarchy."""

from __future__ import annotations

from datetime import timedelta
import itertools

from pydantic import ValidationError
import pytest

from cadence.core.timeline.models import (
    ConcurrentTimeline,
    Moment,
    SequentialTimeline,
    Timeline,
)
from cadence.core.timeline.options import ScheduleOptions
from cadence.core.timeline.scheduler import (
    ConcurrentScheduler,
    MomentScheduler,
    RootScheduler,
    ScheduledMoment,
    SchedulerState,
    SequentialScheduler,
    schedule,
    scheduler_for,
)
from cadence.core.timeline.scope import Scope

DAY = 24 * 3600


def _leaf() -> Moment:
    return Moment(lambda scope: None)


def _offsets(timeline: Timeline, starting_offset: float = 0, **options) -> list[float]:
    return [m.offset for m in schedule(timeline, starting_offset, options=options or None)]


def _bounds_ok(timeline: Timeline, offsets: list[float], start: float) -> bool:
    return all(start <= offset <= start + timeline.duration for offset in offsets)


def _halfway(start: float, window: float) -> float:
    return start + window / 2


def _at_start(start: float, window: float) -> float:
    return start


def _at_end(start: float, window: float) -> float:
    return start + window


def _overshoot(start: float, window: float) -> float:
    return start + 10 * window


class TestEndToEnd:
    """Scenario tests over small hand-built trees."""

    def test_two_leaves_in_a_fortnight(self) -> None:
        timeline = SequentialTimeline(14 * DAY, [_leaf(), _leaf()])
        offsets = _offsets(timeline)
        assert offsets == [0, 0]
        assert all(offset <= 14 * DAY for offset in offsets)

    def test_sequential_children_follow_each_other(self) -> None:
        timeline = SequentialTimeline(
            10, [SequentialTimeline(3, [_leaf()]), SequentialTimeline(3, [_leaf()])]
        )
        assert _offsets(timeline, 5) == [5, 8]

    def test_concurrent_children_are_interleaved(self) -> None:
        first = SequentialTimeline(10, [_leaf(), SequentialTimeline(4), _leaf()])
        second = SequentialTimeline(3, [_leaf()])
        parallel = ConcurrentTimeline().attach(first, 0).attach(second, 2)
        assert _offsets(parallel) == [0, 2, 4]

    def test_nested_concurrent_inside_sequential(self) -> None:
        inner = ConcurrentTimeline().use(SequentialTimeline(2, [_leaf()]), after=1)
        timeline = SequentialTimeline(10, [SequentialTimeline(4, [_leaf()]), inner, _leaf()])
        # inner spans [4, 7), the trailing leaf starts at 7
        assert _offsets(timeline) == [0, 5, 7]

    def test_root_moment(self) -> None:
        assert _offsets(_leaf(), 3) == [3]

    def test_empty_timelines_produce_nothing(self) -> None:
        assert _offsets(SequentialTimeline(5)) == []
        assert _offsets(ConcurrentTimeline()) == []

    def test_timedelta_starting_offset(self) -> None:
        assert _offsets(_leaf(), timedelta(hours=1)) == [3600.0]

    def test_parallelized_copies_all_fire(self) -> None:
        serial = SequentialTimeline(4, [_leaf(), SequentialTimeline(2), _leaf()])
        assert _offsets(serial.parallelize(3)) == [0, 0, 0, 2, 2, 2]


class TestOrderingProperties:
    """Randomised checks of global ordering and containment."""

    @pytest.mark.parametrize("seed", range(25))
    def test_offsets_non_decreasing(self, random_tree, seed: int) -> None:
        timeline = random_tree(seed)
        offsets = _offsets(timeline, 7)
        assert offsets == sorted(offsets)
        assert _bounds_ok(timeline, offsets, 7)

    @pytest.mark.parametrize("seed", range(25))
    def test_offsets_non_decreasing_with_random_placement(self, random_tree, seed: int) -> None:
        timeline = random_tree(seed)
        offsets = _offsets(timeline, 0, distribution="uniform", seed=seed)
        assert offsets == sorted(offsets)
        assert _bounds_ok(timeline, offsets, 0)

    @pytest.mark.parametrize("seed", range(5))
    def test_every_leaf_fires_once(self, random_tree, seed: int) -> None:
        timeline = random_tree(seed)

        def count_leaves(node: Timeline) -> int:
            if isinstance(node, Moment):
                return 1
            return sum(count_leaves(child) for child in node.timelines)

        assert len(_offsets(timeline)) == count_leaves(timeline)


class TestDistributions:
    """Tests for placement of moments within slack and windows."""

    def test_sequential_slack_is_handed_out_in_order(self) -> None:
        timeline = SequentialTimeline(10, [_leaf(), _leaf()], distribution=_halfway)
        assert _offsets(timeline) == [5, 7.5]

    def test_leaf_in_concurrent_uses_remaining_window(self) -> None:
        leaf = Moment(lambda scope: None, distribution=_halfway)
        parallel = ConcurrentTimeline(10).attach(leaf, 2)
        assert _offsets(parallel) == [6]

    def test_child_distribution_overrides_parent(self) -> None:
        timeline = SequentialTimeline(
            10, [Moment(lambda scope: None, distribution=_at_end)], distribution=_at_start
        )
        (offset,) = _offsets(timeline)
        assert offset == pytest.approx(10)
        assert offset < 10

    def test_parent_distribution_is_inherited_by_descendants(self) -> None:
        inner = SequentialTimeline(4, [_leaf()])
        timeline = SequentialTimeline(10, [inner], distribution=_at_end)
        # inner is pushed to the end of the parent's slack, then its leaf to the end of inner's
        (offset,) = _offsets(timeline)
        assert offset == pytest.approx(10)
        assert offset < 10

    def test_leaf_window_end_is_excluded(self) -> None:
        leaf = Moment(lambda scope: None, distribution=_at_end)
        parallel = ConcurrentTimeline(10).attach(leaf, 2)
        (offset,) = _offsets(parallel)
        assert 2 <= offset < 10

    def test_out_of_window_results_are_clamped(self) -> None:
        timeline = SequentialTimeline(
            10, [_leaf(), SequentialTimeline(2, [_leaf()])], distribution=_overshoot
        )
        offsets = _offsets(timeline)
        assert offsets == sorted(offsets)
        assert all(0 <= offset <= 10 for offset in offsets)

    def test_rounded_child_durations_stay_inside_parent(self) -> None:
        def tenth() -> SequentialTimeline:
            # leaf sits at the very end of its 0.1s window
            return SequentialTimeline(0.1, [SequentialTimeline(0.1), _leaf()])

        inner = SequentialTimeline(0.3, [tenth(), tenth(), tenth()])
        timeline = SequentialTimeline(1.3, [inner, _leaf()])
        offsets = _offsets(timeline)

        assert offsets == sorted(offsets)
        assert max(offsets[:3]) <= 0.3

    def test_seeded_uniform_is_reproducible(self) -> None:
        timeline = SequentialTimeline(100, [_leaf() for _ in range(5)])
        first = _offsets(timeline, distribution="uniform", seed=11)
        second = _offsets(timeline, distribution="uniform", seed=11)
        assert first == second
        assert first != [0] * 5


class TestStretch:
    """Tests for offset rescaling at the root."""

    def test_stretch_scales_from_starting_offset(self) -> None:
        timeline = SequentialTimeline(
            10, [SequentialTimeline(3, [_leaf()]), SequentialTimeline(3, [_leaf()])]
        )
        assert _offsets(timeline, 5, stretch=2) == [5, 11]

    def test_stretch_accepts_options_model(self) -> None:
        timeline = SequentialTimeline(10, [SequentialTimeline(4), _leaf()])
        scheduler = schedule(timeline, options=ScheduleOptions(stretch=0.5))
        assert [m.offset for m in scheduler] == [2]

    @pytest.mark.parametrize("stretch", [0, -1])
    def test_non_positive_stretch_rejected(self, stretch: float) -> None:
        with pytest.raises(ValidationError):
            schedule(_leaf(), options={"stretch": stretch})

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ValidationError):
            schedule(_leaf(), options={"speed": 2})


class TestSchedulerLifecycle:
    """Tests for the forward-only iterator state machine."""

    def test_state_transitions(self) -> None:
        scheduler = schedule(SequentialTimeline(5, [_leaf(), _leaf()]))
        assert scheduler.state is SchedulerState.PENDING

        next(scheduler)
        assert scheduler.state is SchedulerState.PRODUCING
        next(scheduler)
        assert scheduler.state is SchedulerState.PRODUCING

        with pytest.raises(StopIteration):
            next(scheduler)
        assert scheduler.state is SchedulerState.EXHAUSTED

    def test_no_rewinding(self) -> None:
        scheduler = schedule(SequentialTimeline(5, [_leaf()]))
        assert len(list(scheduler)) == 1
        assert list(scheduler) == []

    def test_partial_consumption_is_lazy(self) -> None:
        children = [SequentialTimeline(1, [_leaf()]) for _ in range(1000)]
        scheduler = schedule(SequentialTimeline(1000, children))
        first_three = list(itertools.islice(scheduler, 3))

        assert [m.offset for m in first_three] == [0, 1, 2]
        assert scheduler.state is SchedulerState.PRODUCING
        assert scheduler.emitted == 3

    def test_scheduling_does_not_fire_callbacks(self, recorder) -> None:
        timeline = SequentialTimeline(5, [Moment(recorder.callback("a"))])
        list(schedule(timeline))
        assert recorder.calls == []

    def test_fire_invokes_callback_with_scope(self, recorder) -> None:
        (moment,) = list(schedule(SequentialTimeline(5, [Moment(recorder.callback("a"))])))
        moment.fire()
        assert recorder.calls == ["a"]
        assert recorder.scopes == [moment.scope]

    def test_scheduled_moment_is_immutable(self) -> None:
        moment = ScheduledMoment(offset=0, scope=Scope(), callback=lambda scope: None)
        with pytest.raises(AttributeError):
            moment.offset = 1  # type: ignore[misc]


class TestSchedulerDispatch:
    """Tests for variant selection."""

    @pytest.mark.parametrize(
        ("timeline", "expected"),
        [
            (Moment(lambda scope: None), MomentScheduler),
            (SequentialTimeline(1), SequentialScheduler),
            (ConcurrentTimeline(), ConcurrentScheduler),
        ],
    )
    def test_scheduler_for_variant(self, timeline: Timeline, expected: type) -> None:
        assert type(scheduler_for(timeline, 0, Scope())) is expected

    def test_subclasses_use_base_scheduler(self) -> None:
        class Shift(SequentialTimeline):
            pass

        assert isinstance(scheduler_for(Shift(1), 0, Scope()), SequentialScheduler)

    def test_unregistered_timeline_type(self) -> None:
        with pytest.raises(TypeError, match="No scheduler registered"):
            scheduler_for(Timeline(0), 0, Scope())

    def test_schedule_returns_root_scheduler(self) -> None:
        assert isinstance(schedule(_leaf()), RootScheduler)


class TestScopePropagation:
    """Tests for scope inheritance and branch isolation."""

    def test_callers_scope_is_inherited(self) -> None:
        caller = Scope(user="alice")
        (moment,) = list(schedule(SequentialTimeline(1, [_leaf()]), scope=caller))
        assert moment.scope.read("user") == "alice"
        assert moment.scope is not caller

    def test_each_moment_gets_its_own_scope(self) -> None:
        first, second = list(schedule(SequentialTimeline(1, [_leaf(), _leaf()])))
        first.scope.write("x", 1)
        assert "x" not in second.scope

    def test_concurrent_branches_are_isolated(self) -> None:
        left = SequentialTimeline(2, [_leaf()])
        right = SequentialTimeline(2, [_leaf()])
        parallel = ConcurrentTimeline().use(left, right)
        a, b = list(schedule(parallel))

        branch_scope = a.scope.parent
        assert branch_scope is not None
        branch_scope.write("token", "abc")

        assert a.scope.read("token") == "abc"
        assert "token" not in b.scope

    def test_copies_from_parallelize_do_not_share_scopes(self) -> None:
        serial = SequentialTimeline(1, [_leaf()])
        a, b = list(schedule(serial.parallelize(2)))
        assert a.scope is not b.scope
        assert a.scope.parent is not b.scope.parent
