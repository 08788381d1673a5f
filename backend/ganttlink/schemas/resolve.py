from typing import Literal

from pydantic import BaseModel, Field

from ganttlink.models import PositionUpdate, Resolution
from ganttlink.schemas.snapshot import Snapshot


class MoveRequest(Snapshot):
    task_id: str
    x: float
    y: float | None = None  # Defaults to the task's current row


class ResizeRequest(Snapshot):
    task_id: str
    width: float | None = Field(default=None, ge=0)  # New width, if not already in the snapshot


class BatchClampRequest(Snapshot):
    originals: dict[str, float]  # Task ID -> x at drag start
    delta_x: float


class TaskRequest(Snapshot):
    task_id: str


class PositionUpdateRead(BaseModel):
    task_id: str
    x: float
    y: float

    @classmethod
    def from_update(cls, update: PositionUpdate) -> "PositionUpdateRead":
        return cls(task_id=update.task_id, x=update.x, y=update.y)


class ResolutionRead(BaseModel):
    """
    Outcome of a move.

    - kind="rejected": reason is set, updates is empty
    - kind="batch": rigid group, updates holds every member
    - kind="single": x/y is the dragged task, updates also lists pushed successors
    """
    kind: Literal["single", "batch", "rejected"]
    task_id: str
    x: float | None = None
    y: float | None = None
    reason: str | None = None
    updates: list[PositionUpdateRead] = []

    @classmethod
    def from_resolution(cls, result: Resolution) -> "ResolutionRead":
        updates = [PositionUpdateRead.from_update(u) for u in result.updates]
        if result.kind == "rejected":
            return cls(kind="rejected", task_id=result.task_id, reason=result.reason.value)
        own = next(u for u in updates if u.task_id == result.task_id)
        return cls(kind=result.kind, task_id=result.task_id, x=own.x, y=own.y, updates=updates)


class ResizeRead(BaseModel):
    """Updates after a resize, with the width that was actually applied."""
    width: float
    updates: list[PositionUpdateRead]


class BatchClampRead(BaseModel):
    delta_x: float
    clamped: bool


class TaskIdsRead(BaseModel):
    task_ids: list[str]
