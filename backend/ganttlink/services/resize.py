"""
Resize propagation.

A width change moves the resized task's finish edge. For FF and SF that
edge is what the task's own predecessors constrain, so the task may have to
move first; after that every successor is re-checked against wherever the
task ended up. Elastic successors go through the move resolver (with its
depth cap). Fixed successors are pinned to the exact offset together with
everything rigidly linked to them, and whatever that displaces downstream
is cascaded the same way a drag would.
"""

from ganttlink.logging_config import get_logger
from ganttlink.models import (
    DependencyType,
    PositionUpdate,
    Relationship,
    ResolveOptions,
    TaskBar,
    TaskLookup,
)
from ganttlink.services.constraints import fixed_successor_x, successor_x_range
from ganttlink.services.index import RelationshipIndex, RelationshipSource, ensure_index
from ganttlink.services.resolver import (
    PositionOverlay,
    RigidUnits,
    cascade_successors,
    resolve_movement,
    x_range_from_predecessors,
)
from ganttlink.services.rigid import find_rigid_group, rigid_group_is_locked

logger = get_logger(__name__)

END_CONSTRAINED_TYPES = (DependencyType.FF, DependencyType.SF)


def resolve_after_resize(
    task_id: str,
    get_task: TaskLookup,
    relationships: RelationshipSource,
    options: ResolveOptions | None = None,
) -> list[PositionUpdate]:
    """
    Re-derive positions after task_id changed width.

    get_task must already report the new width. Returns one update per
    moved task (the resized task included when it had to move itself);
    an empty list means nothing needed to change.
    """
    options = options or ResolveOptions()
    index = ensure_index(relationships)
    overlay = PositionOverlay(get_task)
    units = RigidUnits(index)

    task = get_task(task_id)
    if task is None:
        return []

    if not task.movement_locked:
        _realign_finish(task, overlay, index, options)

    for rel in index.successors_of(task_id):
        if rel.successor_id == task_id:
            continue
        if rel.elastic:
            _follow_elastic(rel, overlay, index, get_task, units, options)
        else:
            _follow_fixed(rel, overlay, index, get_task, units, options)

    updates = overlay.updates()
    if updates:
        logger.debug(f"Resize of {task_id} moved {len(updates)} task(s)")
    return updates


def _realign_finish(
    task: TaskBar,
    overlay: PositionOverlay,
    index: RelationshipIndex,
    options: ResolveOptions,
) -> None:
    """Move the resized task back into range of its FF/SF predecessors and its own bounds."""
    lower, upper = x_range_from_predecessors(
        task, index, overlay, options, only=lambda rel: rel.type in END_CONSTRAINED_TYPES
    )
    lower = max(lower, task.bounds.lowest_x())
    upper = min(upper, task.bounds.highest_x(task.width))
    if lower > upper + options.epsilon:
        logger.debug(f"Resize of {task.id}: no position satisfies {lower} <= x <= {upper}")
        return

    x = task.x
    if x < lower:
        x = lower
    elif x > upper:
        x = upper

    for rel in index.predecessors_of(task.id):
        if rel.elastic or rel.type not in END_CONSTRAINED_TYPES:
            continue
        pred = overlay(rel.predecessor_id)
        if pred is None or pred.id == task.id:
            continue
        x = fixed_successor_x(
            rel.type, pred.x, pred.width, task.width, rel.min_gap_px(options.pixels_per_time_unit)
        )

    if x != task.x:
        overlay.move(task.id, x, task.y)


def _follow_elastic(
    rel: Relationship,
    overlay: PositionOverlay,
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
) -> None:
    pred = overlay(rel.predecessor_id)
    succ = overlay(rel.successor_id)
    if succ is None or succ.movement_locked:
        return

    lower, upper = successor_x_range(rel, pred, succ.width, options)
    if lower <= succ.x <= upper:
        return
    target_x = lower if succ.x < lower else upper

    checkpoint = overlay.checkpoint()
    result = resolve_movement(succ.id, target_x, succ.y, overlay, index, options, depth=1)
    if result.kind == "rejected":
        logger.debug(f"Resize of {pred.id} could not move {succ.id}: {result.reason.value}")
        return
    for update in result.updates:
        overlay.move(update.task_id, update.x, update.y)

    # A rigid batch shifts its members only; carry the shift on downstream
    if result.kind == "batch":
        moved = [update.task_id for update in result.updates]
        if not cascade_successors(moved, overlay, index, get_task, units, options, 1, target_x < succ.x):
            logger.debug(f"Resize of {pred.id}: moving {succ.id} exceeds the depth cap")
            overlay.restore(checkpoint)


def _follow_fixed(
    rel: Relationship,
    overlay: PositionOverlay,
    index: RelationshipIndex,
    get_task: TaskLookup,
    units: RigidUnits,
    options: ResolveOptions,
) -> None:
    pred = overlay(rel.predecessor_id)
    succ = overlay(rel.successor_id)
    if succ is None:
        return

    pinned_x = fixed_successor_x(
        rel.type, pred.x, pred.width, succ.width, rel.min_gap_px(options.pixels_per_time_unit)
    )
    delta = pinned_x - succ.x
    if abs(delta) <= options.epsilon:
        return

    # Everything welded to the successor, short of the resized task itself
    component = [succ.id, *sorted(find_rigid_group(succ.id, index, exclude={pred.id}))]
    if rigid_group_is_locked(component, overlay):
        logger.debug(f"Resize of {pred.id} cannot pin {succ.id}: its rigid group is locked")
        return

    checkpoint = overlay.checkpoint()
    for member_id in component:
        member = overlay(member_id)
        if member is not None:
            overlay.move(member_id, member.x + delta, member.y)

    if not cascade_successors(component, overlay, index, get_task, units, options, 1, delta < 0):
        logger.debug(f"Resize of {pred.id}: pinning {succ.id} exceeds the depth cap")
        overlay.restore(checkpoint)
