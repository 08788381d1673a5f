"""
Result types returned by the resolver.

There are three outcomes, none of them exceptions:
- Rejected: nothing may move
- BatchMove: a rigid group moves by one shared delta
- SingleMove: the dragged task lands at a (possibly clamped) position, along
  with any successors it pushed
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class RejectReason(str, Enum):
    MISSING_TASK = "missing_task"
    LOCKED = "locked"
    RIGID_GROUP_LOCKED = "rigid_group_locked"
    CONFLICTING_CONSTRAINTS = "conflicting_constraints"
    DEPTH_EXCEEDED = "depth_exceeded"


@dataclass(frozen=True)
class PositionUpdate:
    task_id: str
    x: float
    y: float


@dataclass(frozen=True)
class Rejected:
    kind: ClassVar[str] = "rejected"

    task_id: str
    reason: RejectReason

    @property
    def updates(self) -> list[PositionUpdate]:
        return []


@dataclass(frozen=True)
class BatchMove:
    """Rigid-group move. The seed comes first; every member appears once."""

    kind: ClassVar[str] = "batch"

    task_id: str
    batch: tuple[PositionUpdate, ...]

    @property
    def updates(self) -> list[PositionUpdate]:
        return list(self.batch)

    def position_of(self, task_id: str) -> PositionUpdate | None:
        for update in self.batch:
            if update.task_id == task_id:
                return update
        return None


@dataclass(frozen=True)
class SingleMove:
    """The seed's resolved position plus the successors it pushed."""

    kind: ClassVar[str] = "single"

    task_id: str
    x: float
    y: float
    cascade: tuple[PositionUpdate, ...] = ()

    @property
    def updates(self) -> list[PositionUpdate]:
        return [PositionUpdate(self.task_id, self.x, self.y), *self.cascade]


Resolution = Union[Rejected, BatchMove, SingleMove]
