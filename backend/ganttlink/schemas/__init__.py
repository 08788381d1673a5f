from ganttlink.schemas.snapshot import BoundsIn, RelationshipIn, Snapshot, TaskIn
from ganttlink.schemas.resolve import (
    BatchClampRead,
    BatchClampRequest,
    MoveRequest,
    PositionUpdateRead,
    ResizeRead,
    ResizeRequest,
    ResolutionRead,
    TaskIdsRead,
    TaskRequest,
)
from ganttlink.schemas.graph import (
    DroppedRelationshipRead,
    RelationshipCheckRequest,
    ValidationRead,
    ViolationRead,
)

__all__ = [
    "BoundsIn",
    "RelationshipIn",
    "Snapshot",
    "TaskIn",
    "BatchClampRead",
    "BatchClampRequest",
    "MoveRequest",
    "PositionUpdateRead",
    "ResizeRead",
    "ResizeRequest",
    "ResolutionRead",
    "TaskIdsRead",
    "TaskRequest",
    "DroppedRelationshipRead",
    "RelationshipCheckRequest",
    "ValidationRead",
    "ViolationRead",
]
