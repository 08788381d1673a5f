"""
Constraint-resolution routes.

Every request carries its own snapshot; nothing is kept between calls.
"""

from fastapi import APIRouter

from ganttlink.exceptions import ErrorDetail, ErrorResponse, InvalidSnapshotError
from ganttlink.logging_config import get_logger
from ganttlink.models import RejectReason
from ganttlink.routes.deps import load_snapshot, require_task
from ganttlink.schemas import (
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
from ganttlink.services import (
    clamp_batch_delta_x,
    collect_dependent_tasks,
    find_rigid_group,
    resolve_after_resize,
    resolve_movement,
)

logger = get_logger(__name__)

router = APIRouter(responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}})


@router.post("/move", response_model=ResolutionRead)
async def resolve_move(request: MoveRequest) -> ResolutionRead:
    """
    Resolve a drag of one task to a proposed position.

    Returns the dragged task's legal position together with every task it
    pushed, a rigid-group batch, or a rejection. Unknown task IDs come back
    as a "missing_task" rejection, not a 404: the widget simply keeps the
    bar where it was.
    """
    inputs = load_snapshot(request)
    y = request.y
    if y is None:
        task = inputs.store.get_task(request.task_id)
        y = task.y if task is not None else 0

    result = resolve_movement(
        request.task_id,
        request.x,
        y,
        inputs.store,
        inputs.index,
        inputs.options,
    )

    if result.kind == "rejected" and result.reason is RejectReason.DEPTH_EXCEEDED:
        logger.warning(
            f"Move of {request.task_id} hit the depth cap ({inputs.options.max_depth}); "
            "check the relationships for cycles"
        )
    else:
        logger.debug(f"Move of {request.task_id} resolved as {result.kind}")

    return ResolutionRead.from_resolution(result)


@router.post("/resize", response_model=ResizeRead)
async def resolve_resize(request: ResizeRequest) -> ResizeRead:
    """
    Propagate a width change to the task's neighbours.

    If width is given it replaces the snapshot's width before propagation,
    after being clamped into the task's absolute bounds.
    """
    inputs = load_snapshot(request)
    require_task(inputs, request.task_id)
    if request.width is not None:
        task = inputs.store.get_task(request.task_id)
        width = max(task.bounds.clamp_width(task.x, request.width), 0)
        if width != request.width:
            logger.debug(f"Resize of {request.task_id}: width {request.width} clamped to {width}")
        inputs.store.update_width(request.task_id, width)

    updates = resolve_after_resize(request.task_id, inputs.store, inputs.index, inputs.options)
    logger.debug(f"Resize of {request.task_id} produced {len(updates)} update(s)")

    return ResizeRead(
        width=inputs.store.get_task(request.task_id).width,
        updates=[PositionUpdateRead.from_update(u) for u in updates],
    )


@router.post("/batch-clamp", response_model=BatchClampRead)
async def resolve_batch_clamp(request: BatchClampRequest) -> BatchClampRead:
    """Clamp a batch drag delta against predecessors outside the batch."""
    inputs = load_snapshot(request)
    unknown = [task_id for task_id in request.originals if task_id not in inputs.store]
    if unknown:
        raise InvalidSnapshotError(
            "Batch members must be tasks in the snapshot",
            details=[
                ErrorDetail(loc=["body", "originals", task_id], msg="Unknown task", type="unknown_task")
                for task_id in unknown
            ],
        )

    delta = clamp_batch_delta_x(
        request.originals,
        request.delta_x,
        inputs.index,
        inputs.store,
        inputs.options,
    )
    return BatchClampRead(delta_x=delta, clamped=delta != request.delta_x)


@router.post("/dependents", response_model=TaskIdsRead)
async def resolve_dependents(request: TaskRequest) -> TaskIdsRead:
    """List the tasks that move with a task during a multi-task drag."""
    inputs = load_snapshot(request)
    require_task(inputs, request.task_id)
    dependents = collect_dependent_tasks(request.task_id, inputs.index, inputs.store)
    return TaskIdsRead(task_ids=sorted(dependents))


@router.post("/rigid-group", response_model=TaskIdsRead)
async def resolve_rigid_group(request: TaskRequest) -> TaskIdsRead:
    """List the tasks rigidly linked to a task (the task itself excluded)."""
    inputs = load_snapshot(request)
    require_task(inputs, request.task_id)
    group = find_rigid_group(request.task_id, inputs.index)
    return TaskIdsRead(task_ids=sorted(group))
