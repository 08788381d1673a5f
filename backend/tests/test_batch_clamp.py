"""
Tests for the batch-drag clamp.

E (x=0, width 100) is an outside predecessor of M (width 50) with FS lag
10, so M may not start before x=110. Parent and Child ride along in the
batch with no outside predecessors.
"""

import pytest

from ganttlink.services import BatchOriginal, clamp_batch_delta_x
from ganttlink.store import TaskStore

from tests.factories import bar, rel


@pytest.fixture
def store():
    return TaskStore([
        bar("E", 0, width=100),
        bar("M", 115, width=50),
        bar("Parent", 50, width=300),
        bar("Child", 200, width=50),
    ])


@pytest.fixture
def relationships():
    return [rel("E", "M", lag=10)]


ORIGINALS = {"M": 115, "Parent": 50, "Child": 200}


class TestClampBatchDelta:

    def test_backward_drag_stops_at_outside_predecessor(self, store, relationships, options):
        delta = clamp_batch_delta_x(ORIGINALS, -20, relationships, store, options)

        assert delta == -5

    def test_small_backward_drag_is_untouched(self, store, relationships, options):
        assert clamp_batch_delta_x(ORIGINALS, -3, relationships, store, options) == -3

    def test_forward_drag_is_never_clamped(self, store, relationships, options):
        assert clamp_batch_delta_x(ORIGINALS, 30, relationships, store, options) == 30

    def test_predecessor_inside_batch_is_ignored(self, store, relationships, options):
        originals = {**ORIGINALS, "E": 0}

        assert clamp_batch_delta_x(originals, -20, relationships, store, options) == -20

    def test_existing_violation_holds_batch_in_place(self, store, relationships, options):
        originals = {**ORIGINALS, "M": 105}

        assert clamp_batch_delta_x(originals, -20, relationships, store, options) == 0

    def test_accepts_batch_original_records(self, store, relationships, options):
        originals = {task_id: BatchOriginal(x) for task_id, x in ORIGINALS.items()}

        assert clamp_batch_delta_x(originals, -20, relationships, store, options) == -5

    def test_tightest_predecessor_wins(self, store, options):
        relationships = [rel("E", "M", lag=10), rel("E", "Child", type="SS", lag=190)]

        assert clamp_batch_delta_x(ORIGINALS, -20, relationships, store, options) == -5

        relationships = [rel("E", "M", lag=10), rel("E", "Child", type="SS", lag=198)]

        assert clamp_batch_delta_x(ORIGINALS, -20, relationships, store, options) == -2

    def test_unknown_members_are_skipped(self, store, relationships, options):
        originals = {**ORIGINALS, "ghost": 0}

        assert clamp_batch_delta_x(originals, -20, relationships, store, options) == -5

    def test_min_start_holds_the_batch(self, relationships, options):
        store = TaskStore([
            bar("E", 0, width=100),
            bar("M", 115, width=50),
            bar("Parent", 50, width=300, min_start=40),
            bar("Child", 200, width=50),
        ])

        assert clamp_batch_delta_x(ORIGINALS, -20, relationships, store, options) == -5
        assert clamp_batch_delta_x({"Parent": 50}, -20, [], store, options) == -10
