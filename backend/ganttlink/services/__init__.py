from ganttlink.services.index import (
    RelationshipIndex,
    RelationshipIndexCache,
    build_relationship_index,
    ensure_index,
)
from ganttlink.services.constraints import (
    ConstraintViolation,
    find_violations,
    fixed_successor_x,
    max_predecessor_x,
    min_successor_x,
    successor_x_range,
)
from ganttlink.services.rigid import find_rigid_group, rigid_group_is_locked
from ganttlink.services.resolver import resolve_movement
from ganttlink.services.resize import resolve_after_resize
from ganttlink.services.batch import BatchOriginal, clamp_batch_delta_x
from ganttlink.services.dependents import collect_dependent_tasks

__all__ = [
    "RelationshipIndex",
    "RelationshipIndexCache",
    "build_relationship_index",
    "ensure_index",
    "ConstraintViolation",
    "find_violations",
    "fixed_successor_x",
    "max_predecessor_x",
    "min_successor_x",
    "successor_x_range",
    "find_rigid_group",
    "rigid_group_is_locked",
    "resolve_movement",
    "resolve_after_resize",
    "BatchOriginal",
    "clamp_batch_delta_x",
    "collect_dependent_tasks",
]
