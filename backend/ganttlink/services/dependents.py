"""
Dependent-set collection for multi-task drags.

Walks successor edges breadth-first from a task; everything reached moves
with it. Locked tasks are left out and act as a wall: nothing beyond them
is collected through them.
"""

from collections import deque

from ganttlink.models import TaskLookup
from ganttlink.services.index import RelationshipSource, ensure_index


def collect_dependent_tasks(
    task_id: str,
    relationships: RelationshipSource,
    get_task: TaskLookup,
) -> set[str]:
    """
    Return the IDs strictly downstream of task_id.

    The start task is never included, even when a cycle leads back to it;
    callers add it themselves. Unknown and movement-locked tasks are
    skipped and not traversed.
    """
    index = ensure_index(relationships)

    collected: set[str] = set()
    visited = {task_id}
    queue = deque([task_id])

    while queue:
        current_id = queue.popleft()
        for rel in index.successors_of(current_id):
            succ_id = rel.successor_id
            if succ_id in visited:
                continue
            visited.add(succ_id)

            succ = get_task(succ_id)
            if succ is None or succ.movement_locked:
                continue

            collected.add(succ_id)
            queue.append(succ_id)

    return collected
