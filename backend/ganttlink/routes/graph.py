"""
Snapshot validation routes.
"""

from fastapi import APIRouter

from ganttlink.exceptions import (
    CycleDetectedError,
    ErrorResponse,
    SelfDependencyError,
    UnknownTaskError,
)
from ganttlink.logging_config import get_logger
from ganttlink.routes.deps import load_snapshot
from ganttlink.schemas import (
    DroppedRelationshipRead,
    RelationshipCheckRequest,
    Snapshot,
    ValidationRead,
    ViolationRead,
)
from ganttlink.services import find_violations
from ganttlink.services.graph import normalize_relationships, would_create_cycle

logger = get_logger(__name__)

router = APIRouter(responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})


@router.post("/validate", response_model=ValidationRead)
async def validate_snapshot(snapshot: Snapshot) -> ValidationRead:
    """
    Check a snapshot before using it for drags.

    Reports relationships the engine would ignore (self loops, unknown
    tasks, duplicates), an elastic dependency cycle if there is one, and
    every relationship the current positions already violate, and tasks
    sitting outside their absolute bounds.
    """
    inputs = load_snapshot(snapshot)
    normalized = normalize_relationships(inputs.relationships, (t.id for t in snapshot.tasks))
    violations = find_violations(inputs.store, normalized.relationships, inputs.options)
    out_of_bounds = [
        task.id for task in snapshot.tasks if inputs.store.get_task(task.id).out_of_bounds(inputs.options.epsilon)
    ]

    return ValidationRead(
        valid=not (normalized.dropped or normalized.cycle or violations or out_of_bounds),
        cycle=normalized.cycle,
        dropped=[
            DroppedRelationshipRead(
                predecessor_id=rel.predecessor_id,
                successor_id=rel.successor_id,
                reason=reason,
            )
            for rel, reason in normalized.dropped
        ],
        violations=[
            ViolationRead(
                predecessor_id=v.relationship.predecessor_id,
                successor_id=v.relationship.successor_id,
                type=v.relationship.type.value,
                elastic=v.relationship.elastic,
                expected_x=v.expected_x,
                actual_x=v.actual_x,
            )
            for v in violations
        ],
        out_of_bounds=out_of_bounds,
    )


@router.post("/check-relationship", response_model=ValidationRead)
async def check_relationship(request: RelationshipCheckRequest) -> ValidationRead:
    """
    Check that a new relationship can be added to the snapshot.

    Raises 400 for self loops and for edges that would close a cycle,
    404 if either end is unknown.
    """
    inputs = load_snapshot(request)
    candidate = request.relationship.to_relationship()

    for task_id in (candidate.predecessor_id, candidate.successor_id):
        if task_id not in inputs.store:
            raise UnknownTaskError(task_id)
    if candidate.predecessor_id == candidate.successor_id:
        raise SelfDependencyError(candidate.predecessor_id)
    if would_create_cycle(inputs.relationships, candidate.predecessor_id, candidate.successor_id):
        logger.warning(
            f"Cycle detected: {candidate.predecessor_id} -> {candidate.successor_id} would create a cycle"
        )
        raise CycleDetectedError(candidate.predecessor_id, candidate.successor_id)

    violations = find_violations(inputs.store, [candidate], inputs.options)
    return ValidationRead(
        valid=not violations,
        violations=[
            ViolationRead(
                predecessor_id=candidate.predecessor_id,
                successor_id=candidate.successor_id,
                type=candidate.type.value,
                elastic=candidate.elastic,
                expected_x=v.expected_x,
                actual_x=v.actual_x,
            )
            for v in violations
        ],
    )
