from pydantic import BaseModel

from ganttlink.schemas.snapshot import RelationshipIn, Snapshot


class DroppedRelationshipRead(BaseModel):
    predecessor_id: str
    successor_id: str
    reason: str


class ViolationRead(BaseModel):
    predecessor_id: str
    successor_id: str
    type: str
    elastic: bool
    expected_x: float
    actual_x: float


class ValidationRead(BaseModel):
    """Result of checking a snapshot before handing it to the engine."""
    valid: bool
    cycle: list[str] | None = None
    dropped: list[DroppedRelationshipRead] = []
    violations: list[ViolationRead] = []
    out_of_bounds: list[str] = []  # task IDs outside their absolute bounds


class RelationshipCheckRequest(Snapshot):
    relationship: RelationshipIn
