"""
In-memory task store.

Holds the task bars the engine reads and applies the updates it returns.
Applying is all-or-nothing: every task ID is checked before anything is
written, so a rejected or malformed batch never leaves a half-moved chart.
"""

from dataclasses import replace
from typing import Iterable, Sequence, Union

from ganttlink.exceptions import DuplicateTaskError, UnknownTaskError
from ganttlink.logging_config import get_logger
from ganttlink.models import PositionUpdate, Resolution, ResolveOptions, TaskBar
from ganttlink.services.index import RelationshipSource
from ganttlink.services.resolver import resolve_movement

logger = get_logger(__name__)


class TaskStore:
    def __init__(self, tasks: Iterable[TaskBar] = ()):
        self._tasks: dict[str, TaskBar] = {}
        for task in tasks:
            self.add(task)

    def get_task(self, task_id: str) -> TaskBar | None:
        return self._tasks.get(task_id)

    __call__ = get_task

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def add(self, task: TaskBar) -> None:
        if task.id in self._tasks:
            raise DuplicateTaskError(task.id)
        self._tasks[task.id] = task

    def remove(self, task_id: str) -> None:
        if self._tasks.pop(task_id, None) is None:
            raise UnknownTaskError(task_id)

    def clear(self) -> None:
        self._tasks.clear()

    def snapshot(self) -> dict[str, TaskBar]:
        """A copy of the current tasks; later writes do not show through."""
        return dict(self._tasks)

    def update_position(self, task_id: str, x: float | None = None, y: float | None = None) -> TaskBar:
        task = self._tasks.get(task_id)
        if task is None:
            raise UnknownTaskError(task_id)
        changes = {}
        if x is not None:
            changes["x"] = x
        if y is not None:
            changes["y"] = y
        self._tasks[task_id] = replace(task, **changes)
        return self._tasks[task_id]

    def update_width(self, task_id: str, width: float) -> TaskBar:
        task = self._tasks.get(task_id)
        if task is None:
            raise UnknownTaskError(task_id)
        self._tasks[task_id] = replace(task, width=width)
        return self._tasks[task_id]

    def apply(self, result: Union[Resolution, Sequence[PositionUpdate]]) -> list[PositionUpdate]:
        """
        Apply a resolution (or a plain update list) atomically.

        Returns the updates that were written; a Rejected result writes
        nothing and returns an empty list.
        """
        updates = list(result) if isinstance(result, (list, tuple)) else result.updates

        missing = [update.task_id for update in updates if update.task_id not in self._tasks]
        if missing:
            raise UnknownTaskError(missing[0])

        for update in updates:
            self._tasks[update.task_id] = replace(self._tasks[update.task_id], x=update.x, y=update.y)

        if updates:
            logger.debug(f"Applied {len(updates)} position update(s)")
        return updates

    def move(
        self,
        task_id: str,
        x: float,
        y: float,
        relationships: RelationshipSource,
        options: ResolveOptions | None = None,
    ) -> Resolution:
        """Resolve a drag against the current tasks and apply the outcome."""
        result = resolve_movement(task_id, x, y, self.get_task, relationships, options)
        self.apply(result)
        return result
