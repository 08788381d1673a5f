"""
Rigid-link discovery.

Fixed (non-elastic) relationships weld tasks together: moving one member
moves every member by the same delta. A fixed link binds both ends
regardless of its direction, so the traversal runs both ways.
"""

from collections import deque
from typing import Iterable

from ganttlink.models import TaskLookup
from ganttlink.services.index import RelationshipSource, ensure_index


def find_rigid_group(
    task_id: str,
    relationships: RelationshipSource,
    exclude: Iterable[str] = (),
) -> set[str]:
    """
    Return every task transitively linked to task_id by fixed relationships.

    The seed itself is not part of the result; an empty set means the task
    is not rigidly linked to anything. Tasks in exclude are neither returned
    nor walked through, which splits a group at a task whose own links are
    changing. Breadth-first with a visited set, so cycles of fixed links
    terminate.
    """
    index = ensure_index(relationships)

    blocked = set(exclude)
    visited = {task_id}
    queue = deque([task_id])

    while queue:
        current = queue.popleft()

        for rel in index.incident_to(current):
            if rel.elastic:
                continue
            other_id = rel.successor_id if rel.predecessor_id == current else rel.predecessor_id
            if other_id in visited or other_id in blocked:
                continue
            visited.add(other_id)
            queue.append(other_id)

    visited.discard(task_id)
    return visited


def rigid_group_is_locked(group: Iterable[str], get_task: TaskLookup) -> bool:
    """True if any existing member of the group is movement-locked."""
    for member_id in group:
        member = get_task(member_id)
        if member is not None and member.movement_locked:
            return True
    return False
