"""
Batch-drag clamp.

When a summary task is dragged together with its descendants, the whole
batch shifts by one delta. Relationships inside the batch are preserved
automatically; only predecessors outside the batch, which stay put, and
the members' own earliest starts can be violated, and only by a backward
drag.
"""

from dataclasses import dataclass
from typing import Mapping, Union

from ganttlink.models import ResolveOptions, TaskLookup
from ganttlink.services.constraints import successor_x_range
from ganttlink.services.index import RelationshipSource, ensure_index


@dataclass(frozen=True)
class BatchOriginal:
    """Position of a batch member when the drag started."""
    original_x: float


def clamp_batch_delta_x(
    batch_originals: Mapping[str, Union[BatchOriginal, float]],
    proposed_delta_x: float,
    relationships: RelationshipSource,
    get_task: TaskLookup,
    options: ResolveOptions | None = None,
) -> float:
    """
    Limit a backward batch delta so no member crosses an outside predecessor
    or its own earliest start.

    Args:
        batch_originals: Member ID -> position at drag start
        proposed_delta_x: Delta from the original positions (negative = backward)
        relationships: Relationship list or prebuilt index
        get_task: Snapshot lookup for widths and predecessor positions
        options: Lag conversion

    Returns:
        The proposed delta, or a less negative one. A member that already
        violates its constraint is held in place (delta 0), never pushed
        forward.
    """
    if proposed_delta_x >= 0:
        return proposed_delta_x

    options = options or ResolveOptions()
    index = ensure_index(relationships)
    allowed_delta = proposed_delta_x

    for task_id, original in batch_originals.items():
        original_x = original.original_x if isinstance(original, BatchOriginal) else original
        task = get_task(task_id)
        if task is None:
            continue

        limits = [task.bounds.lowest_x()]
        for rel in index.predecessors_of(task_id):
            if rel.predecessor_id in batch_originals:
                continue
            pred = get_task(rel.predecessor_id)
            if pred is not None:
                limits.append(successor_x_range(rel, pred, task.width, options)[0])

        for min_x in limits:
            if original_x + proposed_delta_x >= min_x:
                continue

            max_backward = min_x - original_x
            if max_backward <= 0:
                allowed_delta = max(allowed_delta, max_backward)
            else:
                # Already in violation: do not repair, just stop it getting worse
                allowed_delta = max(allowed_delta, 0)

    return allowed_delta
