"""
Single-move resolver.

Given a task and a proposed position, applies every relationship that
touches the task and returns where things may legally go:

1. Locked tasks (and members of a locked rigid group) are rejected.
2. Rigidly linked tasks move as one batch by the same delta, kept inside
   every member's absolute bounds.
3. Otherwise the task is clamped into the range its predecessors and its
   absolute bounds allow, capped so that nothing downstream has to move
   further than it can, and its successors are pushed forward (or, over
   bounded relationships, pulled back) until every gap is in range again.

Cascades run on an explicit work queue against an overlay of pending
positions; the caller's tasks are never mutated. A cascade step deeper than
ResolveOptions.max_depth rejects the whole resolution, which is also what
bounds cyclic elastic graphs.
"""

from collections import deque
from dataclasses import replace
from math import inf
from typing import Callable, Iterable

from ganttlink.logging_config import get_logger
from ganttlink.models import (
    BatchMove,
    PositionUpdate,
    Rejected,
    RejectReason,
    Relationship,
    Resolution,
    ResolveOptions,
    SingleMove,
    TaskBar,
    TaskLookup,
)
from ganttlink.services.constraints import max_predecessor_x, min_successor_x, successor_x_range
from ganttlink.services.index import RelationshipIndex, RelationshipSource, ensure_index
from ganttlink.services.rigid import find_rigid_group, rigid_group_is_locked

logger = get_logger(__name__)

# Upper bound on relaxation passes when computing downstream slack
MAX_RELAXATION_PASSES = 100


class PositionOverlay:
    """Pending positions layered over the caller's task lookup."""

    def __init__(self, get_task: TaskLookup):
        self._get_task = get_task
        self._moved: dict[str, TaskBar] = {}

    def __call__(self, task_id: str) -> TaskBar | None:
        if task_id in self._moved:
            return self._moved[task_id]
        return self._get_task(task_id)

    def move(self, task_id: str, x: float, y: float) -> None:
        task = self(task_id)
        if task is not None:
            self._moved[task_id] = replace(task, x=x, y=y)

    def checkpoint(self) -> dict[str, TaskBar]:
        return dict(self._moved)

    def restore(self, checkpoint: dict[str, TaskBar]) -> None:
        self._moved = dict(checkpoint)

    def updates(self, exclude: str | None = None) -> list[PositionUpdate]:
        """Moved tasks in the order they were first moved."""
        return [
            PositionUpdate(task_id, task.x, task.y)
            for task_id, task in self._moved.items()
            if task_id != exclude
        ]


class RigidUnits:
    """Memoized rigid groups: each task maps to the tuple of tasks that move with it."""

    def __init__(self, index: RelationshipIndex):
        self._index = index
        self._units: dict[str, tuple[str, ...]] = {}

    def unit_of(self, task_id: str) -> tuple[str, ...]:
        if task_id not in self._units:
            group = find_rigid_group(task_id, self._index)
            unit = (task_id, *sorted(group))
            for member_id in unit:
                # Same members, each member listed first in its own view
                self._units[member_id] = (member_id, *sorted(set(unit) - {member_id}))
        return self._units[task_id]

    def is_locked(self, task_id: str, get_task: TaskLookup) -> bool:
        return rigid_group_is_locked(self.unit_of(task_id), get_task)


def resolve_movement(
    task_id: str,
    proposed_x: float,
    proposed_y: float,
    get_task: TaskLookup,
    relationships: RelationshipSource,
    options: ResolveOptions | None = None,
    depth: int = 0,
) -> Resolution:
    """
    Resolve a drag of task_id to (proposed_x, proposed_y).

    Args:
        task_id: The task being moved
        proposed_x: Candidate x in pixels
        proposed_y: Candidate y, carried through untouched
        get_task: Snapshot lookup, id -> TaskBar or None
        relationships: Relationship list or prebuilt RelationshipIndex
        options: Lag conversion, depth cap and tolerance
        depth: Starting depth when called from another propagation step

    Returns:
        Rejected, BatchMove (rigid group) or SingleMove (with moved successors)
    """
    options = options or ResolveOptions()
    index = ensure_index(relationships)

    task = get_task(task_id)
    if task is None:
        return _reject(task_id, RejectReason.MISSING_TASK)
    if task.movement_locked:
        return _reject(task_id, RejectReason.LOCKED)
    if depth > options.max_depth:
        return _reject(task_id, RejectReason.DEPTH_EXCEEDED)

    group = find_rigid_group(task_id, index)
    if group:
        return _move_rigid_group(task, proposed_x, proposed_y, group, get_task, options)

    if abs(proposed_x - task.x) <= options.epsilon and abs(proposed_y - task.y) <= options.epsilon:
        return SingleMove(task_id, task.x, task.y)

    # Own range: predecessors and absolute bounds
    lower, upper = x_range_from_predecessors(task, index, get_task, options)
    lower = max(lower, task.bounds.lowest_x())
    upper = min(upper, task.bounds.highest_x(task.width))
    if lower > upper + options.epsilon:
        logger.debug(f"Task {task_id}: no position satisfies {lower} <= x <= {upper}")
        return _reject(task_id, RejectReason.CONFLICTING_CONSTRAINTS)

    new_x = min(max(proposed_x, lower), upper)
    units = RigidUnits(index)

    # Downstream range: what successors can absorb
    if new_x > task.x:
        cap = max(task.x, _max_x_from_downstream(task, index, get_task, units, options, depth))
        if lower > cap + options.epsilon:
            logger.debug(
                f"Task {task_id}: predecessors require x>={lower} but downstream allows x<={cap}"
            )
            return _reject(task_id, RejectReason.CONFLICTING_CONSTRAINTS)
        if new_x > cap:
            logger.debug(f"Task {task_id}: clamped from {new_x} to {cap} by successors")
            new_x = cap
    elif new_x < task.x:
        floor = min(task.x, _min_x_from_downstream(task, index, get_task, units, options, depth))
        if floor > upper + options.epsilon:
            logger.debug(
                f"Task {task_id}: bounds require x<={upper} but bounded successors need x>={floor}"
            )
            return _reject(task_id, RejectReason.CONFLICTING_CONSTRAINTS)
        if new_x < floor:
            logger.debug(f"Task {task_id}: clamped from {new_x} to {floor} by bounded successors")
            new_x = floor

    overlay = PositionOverlay(get_task)
    overlay.move(task_id, new_x, proposed_y)

    if new_x != task.x:
        pull = new_x < task.x
        if not cascade_successors([task_id], overlay, index, get_task, units, options, depth, pull):
            return _reject(task_id, RejectReason.DEPTH_EXCEEDED)

    final = overlay(task_id)
    moved = tuple(overlay.updates(exclude=task_id))
    if moved:
        logger.debug(f"Task {task_id}: moved {len(moved)} successor(s)")

    return SingleMove(task_id, final.x, proposed_y, moved)


def _reject(task_id: str, reason: RejectReason) -> Rejected:
    logger.debug(f"Movement of {task_id} rejected: {reason.value}", extra={"task_id": task_id})
    return Rejected(task_id, reason)


def _move_rigid_group(
    task: TaskBar,
    proposed_x: float,
    proposed_y: float,
    group: set[str],
    get_task: TaskLookup,
    options: ResolveOptions,
) -> Resolution:
    if rigid_group_is_locked(group, get_task):
        return _reject(task.id, RejectReason.RIGID_GROUP_LOCKED)

    members = [task] + [m for m in (get_task(member_id) for member_id in sorted(group)) if m is not None]

    # One delta for everyone, so the group is as bounded as its tightest member
    lowest_delta = max(m.bounds.lowest_x() - m.x for m in members)
    highest_delta = min(m.bounds.highest_x(m.width) - m.x for m in members)
    if lowest_delta > highest_delta + options.epsilon:
        return _reject(task.id, RejectReason.CONFLICTING_CONSTRAINTS)

    delta_x = min(max(proposed_x - task.x, lowest_delta), highest_delta)
    delta_y = proposed_y - task.y

    return BatchMove(
        task.id,
        tuple(PositionUpdate(m.id, m.x + delta_x, m.y + delta_y) for m in members),
    )


def x_range_from_predecessors(
    task: TaskBar,
    index: RelationshipIndex,
    get_task: TaskLookup,
    options: ResolveOptions,
    only: Callable[[Relationship], bool] | None = None,
) -> tuple[float, float]:
    """
    Legal x range for task given its elastic predecessors where they are now.

    The upper end is inf unless a bounded relationship caps it. only
    restricts which incoming relationships are considered.
    """
    lower, upper = -inf, inf
    for rel in index.predecessors_of(task.id):
        if not rel.elastic or rel.predecessor_id == task.id:
            continue
        if only is not None and not only(rel):
            continue
        pred = get_task(rel.predecessor_id)
        if pred is None:
            continue
        rel_lower, rel_upper = successor_x_range(rel, pred, task.width, options)
        lower = max(lower, rel_lower)
        upper = min(upper, rel_upper)
    return lower, upper


def _is_elastic(rel: Relationship) -> bool:
    return rel.elastic


def _is_bounded(rel: Relationship) -> bool:
    return rel.is_bounded


def _reachable(
    task: TaskBar,
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
    depth: int,
    follow: Callable[[Relationship], bool],
) -> dict[str, int]:
    """Tasks reachable over followed successor edges within the depth budget, with their level."""
    levels = {task.id: depth}
    queue = deque([task.id])
    while queue:
        current_id = queue.popleft()
        if levels[current_id] >= options.max_depth:
            continue
        members = (current_id,) if current_id == task.id else units.unit_of(current_id)
        for member_id in members:
            for rel in index.successors_of(member_id):
                if not follow(rel) or rel.successor_id in levels:
                    continue
                # A rigid unit is reached as a whole
                for linked_id in units.unit_of(rel.successor_id):
                    if linked_id in levels or get_task(linked_id) is None:
                        continue
                    levels[linked_id] = levels[current_id] + 1
                    queue.append(linked_id)
    return levels


def _push_room(
    task_id: str,
    reached: dict[str, int],
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
) -> float:
    """How far right a downstream unit may go on its own account."""
    if units.is_locked(task_id, get_task):
        return 0.0
    unit = units.unit_of(task_id)
    room = inf
    for member_id in unit:
        member = get_task(member_id)
        if member is None:
            continue
        room = min(room, member.bounds.highest_x(member.width) - member.x)
        # Predecessors that stay put cap bounded gaps
        _, upper = x_range_from_predecessors(
            member, index, get_task, options,
            only=lambda rel: rel.predecessor_id not in reached and rel.predecessor_id not in unit,
        )
        room = min(room, upper - member.x)
    return max(room, 0.0)


def _pull_room(
    task_id: str,
    reached: dict[str, int],
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
) -> float:
    """How far left a downstream unit may go on its own account."""
    if units.is_locked(task_id, get_task):
        return 0.0
    unit = units.unit_of(task_id)
    room = inf
    for member_id in unit:
        member = get_task(member_id)
        if member is None:
            continue
        room = min(room, member.x - member.bounds.lowest_x())
        lower, _ = x_range_from_predecessors(
            member, index, get_task, options,
            only=lambda rel: rel.predecessor_id not in reached and rel.predecessor_id not in unit,
        )
        room = min(room, member.x - lower)
    return max(room, 0.0)


def _relax_slack(
    task: TaskBar,
    reached: dict[str, int],
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    room_of: Callable[[str], float],
    follow: Callable[[Relationship], bool],
    edge_room: Callable[[Relationship, TaskBar, TaskBar, float], float],
) -> float:
    """
    Slack of the seed after iterative relaxation over the reached tasks.

    Every reached task starts with its own room and is then limited by
    what its followed successors can absorb, so converging paths are
    handled regardless of visit order. Rigidly linked tasks share one value.
    """
    slack = {task_id: (inf if task_id == task.id else room_of(task_id)) for task_id in reached}

    def slack_of(task_id: str) -> float:
        if task_id in slack:
            return slack[task_id]
        # Beyond the depth budget: only the task's own room is known
        return room_of(task_id)

    for _ in range(MAX_RELAXATION_PASSES):
        changed = False
        for task_id in reached:
            if slack[task_id] == 0.0:
                continue
            members = (task_id,) if task_id == task.id else units.unit_of(task_id)
            limit = slack[task_id]
            for member_id in members:
                member = get_task(member_id)
                if member is None:
                    continue
                for rel in index.successors_of(member_id):
                    if not follow(rel) or rel.successor_id in members:
                        continue
                    succ = get_task(rel.successor_id)
                    if succ is None:
                        continue
                    succ_slack = slack_of(rel.successor_id)
                    if succ_slack == inf:
                        continue
                    limit = min(limit, edge_room(rel, member, succ, succ_slack))
            new_slack = max(limit, 0.0) if task_id != task.id else limit
            if new_slack < slack[task_id]:
                slack[task_id] = new_slack
                changed = True
        if not changed:
            break

    return slack[task.id]


def _max_x_from_downstream(
    task: TaskBar,
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
    depth: int,
) -> float:
    """Largest x the task can reach without pushing a successor past what it can take."""
    ppu = options.pixels_per_time_unit
    reached = _reachable(task, index, get_task, units, options, depth, _is_elastic)

    def edge_room(rel, member, succ, succ_slack):
        allowed_x = max_predecessor_x(
            rel.type, member.width, succ.x + succ_slack, succ.width, rel.min_gap_px(ppu)
        )
        return allowed_x - member.x

    slack = _relax_slack(
        task, reached, index, get_task, units,
        lambda task_id: _push_room(task_id, reached, index, get_task, units, options),
        _is_elastic, edge_room,
    )
    return task.x + slack


def _min_x_from_downstream(
    task: TaskBar,
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
    depth: int,
) -> float:
    """Smallest x the task can reach without pulling a bounded successor past what it can take."""
    ppu = options.pixels_per_time_unit
    reached = _reachable(task, index, get_task, units, options, depth, _is_bounded)

    def edge_room(rel, member, succ, succ_slack):
        lowest_x = max_predecessor_x(
            rel.type, member.width, succ.x - succ_slack, succ.width, rel.max_gap_px(ppu)
        )
        return member.x - lowest_x

    slack = _relax_slack(
        task, reached, index, get_task, units,
        lambda task_id: _pull_room(task_id, reached, index, get_task, units, options),
        _is_bounded, edge_room,
    )
    return task.x - slack


def _unit_lowest_delta(
    unit: tuple[str, ...],
    overlay: PositionOverlay,
    index: RelationshipIndex,
    options: ResolveOptions,
) -> float:
    """Most negative shift the unit can take without breaking a minimum gap or bound."""
    lowest = -inf
    for member_id in unit:
        member = overlay(member_id)
        if member is None:
            continue
        lower, _ = x_range_from_predecessors(
            member, index, overlay, options, only=lambda rel: rel.predecessor_id not in unit
        )
        lowest = max(lowest, max(lower, member.bounds.lowest_x()) - member.x)
    return lowest


def cascade_successors(
    seeds: Iterable[str],
    overlay: PositionOverlay,
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
    depth: int = 0,
    pull: bool = False,
) -> bool:
    """
    Move successors of the seeds until every gap is back in range.

    Pushing restores minimum gaps after a move to the right; pulling
    restores maximum gaps of bounded relationships after a move to the
    left, never past a successor's own minimum. Locked units are left
    where they are. Returns False if a move would exceed the depth cap.
    """
    ppu = options.pixels_per_time_unit
    seeds = list(dict.fromkeys(seeds))
    pending = {task_id: depth for task_id in seeds}
    queue = deque(seeds)

    while queue:
        current_id = queue.popleft()
        level = pending.pop(current_id)
        current = overlay(current_id)
        if current is None:
            continue

        for rel in index.successors_of(current_id):
            if not (rel.is_bounded if pull else rel.elastic):
                continue
            succ = overlay(rel.successor_id)
            if succ is None:
                continue
            unit = units.unit_of(succ.id)
            if current_id in unit:
                continue
            # Accounted for by the downstream caps; never moved
            if units.is_locked(succ.id, get_task):
                continue

            if pull:
                target_x = min_successor_x(
                    rel.type, current.x, current.width, succ.width, rel.max_gap_px(ppu)
                )
                if succ.x <= target_x:
                    continue
                delta = max(target_x - succ.x, _unit_lowest_delta(unit, overlay, index, options))
                if delta >= 0:
                    continue
            else:
                target_x = min_successor_x(
                    rel.type, current.x, current.width, succ.width, rel.min_gap_px(ppu)
                )
                if succ.x >= target_x:
                    continue
                delta = target_x - succ.x

            if level + 1 > options.max_depth:
                logger.debug(f"Move from {current_id} to {succ.id} exceeds depth cap {options.max_depth}")
                return False

            for member_id in unit:
                member = overlay(member_id)
                if member is None:
                    continue
                overlay.move(member_id, member.x + delta, member.y)
                if member_id in pending:
                    pending[member_id] = max(pending[member_id], level + 1)
                else:
                    pending[member_id] = level + 1
                    queue.append(member_id)

    return True
