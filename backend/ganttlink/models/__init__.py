from ganttlink.models.task import (
    NO_BOUNDS,
    AbsoluteBounds,
    LockState,
    TaskBar,
    TaskLookup,
    is_movement_locked,
)
from ganttlink.models.relationship import DependencyType, Relationship
from ganttlink.models.options import ResolveOptions
from ganttlink.models.resolution import (
    BatchMove,
    PositionUpdate,
    Rejected,
    RejectReason,
    Resolution,
    SingleMove,
)

__all__ = [
    "NO_BOUNDS",
    "AbsoluteBounds",
    "LockState",
    "TaskBar",
    "TaskLookup",
    "is_movement_locked",
    "DependencyType",
    "Relationship",
    "ResolveOptions",
    "BatchMove",
    "PositionUpdate",
    "Rejected",
    "RejectReason",
    "Resolution",
    "SingleMove",
]
