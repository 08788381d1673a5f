"""
Errors raised at the edges of ganttlink and their JSON shape.

The constraint engine never raises for scheduling outcomes; locks, clamps
and the depth cap come back as results. What is raised here is a bad
request: a snapshot that names a task twice, a lookup of a task that is
not in it, or a relationship that cannot be added. Every error, including
FastAPI's own body validation, is rendered as one ErrorResponse.
"""

from typing import Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ganttlink.logging_config import get_logger

logger = get_logger(__name__)


class ErrorDetail(BaseModel):
    """Where in the request body the problem is, in FastAPI's loc/msg/type form."""
    loc: list[Union[str, int]] = []
    msg: str
    type: str


class ErrorResponse(BaseModel):
    error: str  # not_found, duplicate_task, self_dependency, cycle_detected, validation_error
    message: str
    details: Optional[list[ErrorDetail]] = None


class GanttLinkException(Exception):
    """Base for request errors; subclasses fix the code and status."""

    error_code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[list[ErrorDetail]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error_code, message=self.message, details=self.details)


class UnknownTaskError(GanttLinkException):
    error_code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} is not in the snapshot")
        self.task_id = task_id


class DuplicateTaskError(GanttLinkException):
    error_code = "duplicate_task"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, task_id: str):
        super().__init__(f"Task ID {task_id} appears more than once")
        self.task_id = task_id


class RelationshipError(GanttLinkException):
    """A candidate relationship that cannot join the snapshot."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, predecessor_id: str, successor_id: str, reason: str):
        super().__init__(
            message,
            details=[
                ErrorDetail(
                    loc=["body", "relationship"],
                    msg=f"{predecessor_id} -> {successor_id}: {reason}",
                    type=self.error_code,
                )
            ],
        )
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id


class SelfDependencyError(RelationshipError):
    error_code = "self_dependency"

    def __init__(self, task_id: str):
        super().__init__("A task cannot depend on itself", task_id, task_id, "self loop")


class CycleDetectedError(RelationshipError):
    error_code = "cycle_detected"

    def __init__(self, predecessor_id: str, successor_id: str):
        super().__init__(
            "Adding this dependency would create a cycle in the task graph",
            predecessor_id,
            successor_id,
            "closes a cycle",
        )


class InvalidSnapshotError(GanttLinkException):
    """The body parsed, but does not fit the snapshot it came with."""

    error_code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


async def ganttlink_exception_handler(request: Request, exc: GanttLinkException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body validation failures in the same shape as every other error."""
    details = [
        ErrorDetail(loc=list(error["loc"]), msg=error["msg"], type=error["type"])
        for error in exc.errors()
    ]
    logger.debug(f"Rejected request to {request.url.path}: {len(details)} validation error(s)")
    response = ErrorResponse(
        error=InvalidSnapshotError.error_code,
        message="Request body is invalid",
        details=details,
    )
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=response.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GanttLinkException, ganttlink_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
