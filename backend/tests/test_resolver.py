"""
Tests for the single-move resolver.

Bars are 80px wide unless a test says otherwise and lag is 1px per time
unit, so the expected positions can be read straight off the arithmetic.
"""

import pytest

from ganttlink.models import BatchMove, Rejected, RejectReason, ResolveOptions, SingleMove
from ganttlink.services import build_relationship_index, find_violations, resolve_movement
from ganttlink.store import TaskStore

from tests.factories import bar, chain, rel


def positions(result):
    return {u.task_id: u.x for u in result.updates}


class TestBasicMoves:

    def test_push_successor_forward(self, options):
        store = TaskStore([bar("P", 50), bar("S", 180)])

        result = resolve_movement("P", 120, 0, store, [rel("P", "S")], options)

        assert isinstance(result, SingleMove)
        assert result.x == 120
        assert positions(result) == {"P": 120, "S": 200}

    def test_slack_absorbs_small_move(self, options):
        store = TaskStore([bar("P", 50), bar("S", 180)])

        result = resolve_movement("P", 90, 0, store, [rel("P", "S")], options)

        assert result.x == 90
        assert result.cascade == ()

    def test_successor_cannot_move_before_predecessor(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 150, width=50)])

        result = resolve_movement("S", 50, 0, store, [rel("P", "S")], options)

        assert result.x == 100
        assert result.cascade == ()

    def test_no_predecessor_allows_any_backward_move(self, options):
        store = TaskStore([bar("P", 50), bar("S", 180)])

        result = resolve_movement("P", -30, 0, store, [rel("P", "S")], options)

        assert result.x == -30
        assert result.cascade == ()

    def test_same_position_is_a_no_op(self, options):
        store = TaskStore([bar("P", 50), bar("S", 130)])

        result = resolve_movement("P", 50, 0, store, [rel("P", "S")], options)

        assert result == SingleMove("P", 50, 0)

    def test_y_is_carried_through(self, options):
        store = TaskStore([bar("P", 50, y=10), bar("S", 180, y=40)])

        result = resolve_movement("P", 120, 70, store, [rel("P", "S")], options)

        assert result.y == 70
        [pushed] = result.cascade
        assert (pushed.x, pushed.y) == (200, 40)

    def test_caller_tasks_are_not_mutated(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("B", 100, width=100)])
        before = store.snapshot()

        resolve_movement("A", 50, 0, store, [rel("A", "B")], options)

        assert store.snapshot() == before

    def test_accepts_prebuilt_index(self, options):
        store = TaskStore([bar("P", 50), bar("S", 180)])
        index = build_relationship_index([rel("P", "S")])

        result = resolve_movement("P", 120, 0, store, index, options)

        assert positions(result) == {"P": 120, "S": 200}

    def test_default_options(self):
        store = TaskStore([bar("P", 50), bar("S", 180)])

        result = resolve_movement("P", 120, 0, store, [rel("P", "S")])

        assert positions(result) == {"P": 120, "S": 200}


class TestDependencyTypes:
    """Predecessor P at x=0, width 100; successor S width 50."""

    def test_start_to_start(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 20, width=50)])

        result = resolve_movement("P", 30, 0, store, [rel("P", "S", type="SS", lag=10)], options)

        assert positions(result) == {"P": 30, "S": 40}

    def test_finish_to_finish(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 60, width=50)])

        result = resolve_movement("P", 20, 0, store, [rel("P", "S", type="FF")], options)

        assert positions(result) == {"P": 20, "S": 70}

    def test_start_to_finish(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 0, width=50)])

        result = resolve_movement("P", 80, 0, store, [rel("P", "S", type="SF")], options)

        assert positions(result) == {"P": 80, "S": 30}

    def test_lag_is_scaled_by_pixels_per_time_unit(self):
        store = TaskStore([bar("P", 0, width=100), bar("S", 130, width=50)])
        options = ResolveOptions(pixels_per_time_unit=10)

        result = resolve_movement("P", 20, 0, store, [rel("P", "S", lag=2)], options)

        assert positions(result) == {"P": 20, "S": 140}


class TestCascade:

    def test_chain_pushes_transitively(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("B", 100, width=100), bar("C", 200, width=100)])

        result = resolve_movement("A", 50, 0, store, chain("A", "B", "C"), options)

        assert [(u.task_id, u.x) for u in result.updates] == [("A", 50), ("B", 150), ("C", 250)]

    def test_diamond_uses_longest_path(self, options):
        store = TaskStore([
            bar("A", 0, width=100),
            bar("B", 100, width=50),
            bar("C", 100, width=150),
            bar("D", 250, width=50),
        ])
        rels = [rel("A", "B"), rel("A", "C"), rel("B", "D"), rel("C", "D")]

        result = resolve_movement("A", 20, 0, store, rels, options)

        assert positions(result) == {"A": 20, "B": 120, "C": 120, "D": 270}

    def test_locked_successor_caps_the_move(self, options):
        store = TaskStore([bar("P", 50), bar("S", 180, locked=True)])

        result = resolve_movement("P", 120, 0, store, [rel("P", "S")], options)

        assert result == SingleMove("P", 100, 0)

    def test_transitive_lock_caps_the_seed(self, options):
        store = TaskStore([
            bar("A", 0, width=100),
            bar("B", 100, width=100),
            bar("C", 200, width=100, locked=True),
        ])

        result = resolve_movement("A", 50, 0, store, chain("A", "B", "C"), options)

        assert result.x == 0
        assert result.cascade == ()

    def test_transitive_lock_leaves_room_for_slack(self, options):
        store = TaskStore([
            bar("A", 0, width=100),
            bar("B", 120, width=100),
            bar("C", 230, width=100, locked=True),
        ])

        result = resolve_movement("A", 50, 0, store, chain("A", "B", "C"), options)

        assert positions(result) == {"A": 30, "B": 130}

    def test_end_lock_counts_as_locked(self, options):
        store = TaskStore([bar("P", 50), bar("S", 180, locked="end")])

        result = resolve_movement("P", 120, 0, store, [rel("P", "S")], options)

        assert result.x == 100

    def test_conflicting_constraints_are_rejected(self, options):
        store = TaskStore([
            bar("P", 0, width=100),
            bar("T", 90, width=50),
            bar("L", 130, width=50, locked=True),
        ])

        result = resolve_movement("T", 95, 0, store, chain("P", "T", "L"), options)

        assert result == Rejected("T", RejectReason.CONFLICTING_CONSTRAINTS)
        assert result.updates == []

    def test_rigid_successor_unit_moves_together(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 100, width=50), bar("R", 150, width=50)])
        rels = [rel("P", "S"), rel("S", "R", elastic=False)]

        result = resolve_movement("P", 20, 0, store, rels, options)

        assert positions(result) == {"P": 20, "S": 120, "R": 170}

    def test_locked_member_of_rigid_successor_blocks_push(self, options):
        store = TaskStore([
            bar("P", 0, width=100),
            bar("S", 100, width=50),
            bar("R", 150, width=50, locked=True),
        ])
        rels = [rel("P", "S"), rel("S", "R", elastic=False)]

        result = resolve_movement("P", 20, 0, store, rels, options)

        assert result == SingleMove("P", 0, 0)


class TestDepthCap:

    def _chain_store(self, count):
        ids = [f"T{i}" for i in range(count)]
        store = TaskStore([bar(task_id, i * 100, width=100) for i, task_id in enumerate(ids)])
        return store, chain(*ids)

    def test_push_within_cap(self):
        store, rels = self._chain_store(4)

        result = resolve_movement("T0", 10, 0, store, rels, ResolveOptions(max_depth=3))

        assert isinstance(result, SingleMove)
        assert positions(result)["T3"] == 310

    def test_push_beyond_cap_rejects_everything(self):
        store, rels = self._chain_store(5)

        result = resolve_movement("T0", 10, 0, store, rels, ResolveOptions(max_depth=3))

        assert result == Rejected("T0", RejectReason.DEPTH_EXCEEDED)

    def test_starting_depth_counts_against_cap(self):
        store, rels = self._chain_store(2)

        result = resolve_movement("T0", 10, 0, store, rels, ResolveOptions(max_depth=3), depth=4)

        assert result == Rejected("T0", RejectReason.DEPTH_EXCEEDED)

    def test_elastic_cycle_terminates(self, options):
        store = TaskStore([bar("A", 0, width=50), bar("B", 100, width=50)])
        rels = [rel("A", "B"), rel("B", "A")]

        result = resolve_movement("A", 80, 0, store, rels, options)

        assert result == Rejected("A", RejectReason.DEPTH_EXCEEDED)


class TestRejections:

    def test_missing_task(self, options):
        result = resolve_movement("ghost", 10, 0, TaskStore(), [], options)

        assert result == Rejected("ghost", RejectReason.MISSING_TASK)

    @pytest.mark.parametrize("locked", [True, "start", "end"])
    def test_locked_task(self, options, locked):
        store = TaskStore([bar("A", 0, locked=locked)])

        result = resolve_movement("A", 10, 0, store, [], options)

        assert result == Rejected("A", RejectReason.LOCKED)

    def test_duration_lock_still_moves(self, options):
        store = TaskStore([bar("A", 0, locked="duration")])

        result = resolve_movement("A", 10, 0, store, [], options)

        assert result == SingleMove("A", 10, 0)


class TestRigidGroups:

    def test_fixed_pair_moves_as_batch(self, options):
        store = TaskStore([bar("A", 50, width=70), bar("B", 160, width=70)])

        result = resolve_movement("A", 80, 0, store, [rel("A", "B", lag=40, elastic=False)], options)

        assert isinstance(result, BatchMove)
        assert positions(result) == {"A": 80, "B": 190}

    def test_dragging_last_member_moves_whole_chain(self, options):
        store = TaskStore([bar("A", 0, width=50), bar("B", 60, width=50), bar("C", 120, width=50)])
        rels = chain("A", "B", "C", lag=10, elastic=False)

        result = resolve_movement("C", 150, 0, store, rels, options)

        assert [(u.task_id, u.x) for u in result.batch] == [("C", 150), ("A", 30), ("B", 90)]

    def test_batch_carries_y_delta(self, options):
        store = TaskStore([bar("A", 0, y=0), bar("B", 100, y=30)])

        result = resolve_movement("A", 10, 20, store, [rel("A", "B", elastic=False)], options)

        assert result.position_of("B").y == 50

    def test_locked_member_rejects_group(self, options):
        store = TaskStore([bar("A", 0), bar("B", 100, locked=True)])

        result = resolve_movement("A", 10, 0, store, [rel("A", "B", elastic=False)], options)

        assert result == Rejected("A", RejectReason.RIGID_GROUP_LOCKED)

    def test_rigid_group_ignores_outside_predecessor(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("A", 100), bar("B", 200)])
        rels = [rel("P", "A"), rel("A", "B", elastic=False)]

        result = resolve_movement("A", 40, 0, store, rels, options)

        assert positions(result) == {"A": 40, "B": 140}


class TestInvariants:

    def test_applied_cascade_leaves_no_violations(self, options):
        store = TaskStore([
            bar("A", 0, width=100),
            bar("B", 100, width=60),
            bar("C", 160, width=40),
            bar("D", 200, width=50),
            bar("E", 100, width=30),
        ])
        rels = [
            rel("A", "B"),
            rel("B", "C", type="SS", lag=60),
            rel("C", "D", type="FF", lag=10),
            rel("A", "E", type="SF", lag=130),
            rel("E", "D", lag=-20),
        ]
        assert find_violations(store, rels, options) == []

        store.move("A", 75, 0, rels, options)

        assert find_violations(store, rels, options) == []
        assert store.get_task("A").x == 75

    def test_rigid_offsets_survive_a_batch_move(self, options):
        store = TaskStore([bar("A", 0, width=50), bar("B", 60, width=50), bar("C", 120, width=50)])
        rels = chain("A", "B", "C", lag=10, elastic=False)

        store.move("B", -40, 0, rels, options)

        assert find_violations(store, rels, options) == []
        assert [store.get_task(t).x for t in "ABC"] == [-100, -40, 20]


class TestBoundedGaps:
    """Relationships with a maximum gap pull their successors back as well."""

    def test_moving_left_pulls_bounded_successor(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("B", 100)])

        result = resolve_movement("A", -50, 0, store, [rel("A", "B", max_offset=10)], options)

        assert positions(result) == {"A": -50, "B": 60}

    def test_unbounded_successor_is_not_pulled(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("B", 100)])

        result = resolve_movement("A", -50, 0, store, [rel("A", "B")], options)

        assert result == SingleMove("A", -50, 0)

    def test_pull_stops_at_other_predecessor(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("C", 0, width=80), bar("B", 100)])
        rels = [rel("A", "B", max_offset=10), rel("C", "B")]

        result = resolve_movement("A", -50, 0, store, rels, options)

        assert positions(result) == {"A": -30, "B": 80}

    def test_locked_bounded_successor_floors_the_move(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("B", 100, locked=True)])

        result = resolve_movement("A", -50, 0, store, [rel("A", "B", max_offset=10)], options)

        assert result == SingleMove("A", -10, 0)

    def test_bounded_predecessor_caps_successor(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 100)])

        result = resolve_movement("S", 200, 0, store, [rel("P", "S", max_offset=10)], options)

        assert result.x == 110

    def test_min_offset_adds_to_lag(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 200)])

        result = resolve_movement("S", 0, 0, store, [rel("P", "S", lag=5, min_offset=15)], options)

        assert result.x == 120

    def test_pull_leaves_no_violations(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("B", 100, width=50), bar("C", 150, width=50)])
        rels = chain("A", "B", "C", max_offset=20)

        store.move("A", -100, 0, rels, options)

        assert find_violations(store, rels, options) == []
        assert [store.get_task(t).x for t in "ABC"] == [-100, 20, 90]


class TestAbsoluteBounds:

    def test_min_start_clamps_the_move(self, options):
        store = TaskStore([bar("A", 50, min_start=20)])

        assert resolve_movement("A", 0, 0, store, [], options) == SingleMove("A", 20, 0)

    def test_max_end_clamps_the_move(self, options):
        store = TaskStore([bar("A", 0, width=100, max_end=150)])

        assert resolve_movement("A", 100, 0, store, [], options) == SingleMove("A", 50, 0)

    def test_successor_max_start_caps_the_push(self, options):
        store = TaskStore([bar("A", 0, width=100), bar("B", 100, max_start=130)])

        result = resolve_movement("A", 50, 0, store, [rel("A", "B")], options)

        assert positions(result) == {"A": 30, "B": 130}

    def test_rigid_batch_is_held_by_tightest_member(self, options):
        store = TaskStore([bar("A", 0, width=50), bar("B", 60, width=50, max_end=150)])

        result = resolve_movement("A", 100, 0, store, [rel("A", "B", lag=10, elastic=False)], options)

        assert isinstance(result, BatchMove)
        assert positions(result) == {"A": 40, "B": 100}

    def test_bounds_against_predecessor_are_rejected(self, options):
        store = TaskStore([bar("P", 0, width=100), bar("S", 100, min_start=120)])

        result = resolve_movement("S", 105, 0, store, [rel("P", "S", max_offset=10)], options)

        assert result == Rejected("S", RejectReason.CONFLICTING_CONSTRAINTS)
