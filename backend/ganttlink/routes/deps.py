"""
Shared helpers for turning a request snapshot into engine inputs.
"""

from dataclasses import dataclass

from ganttlink.exceptions import UnknownTaskError
from ganttlink.models import Relationship, ResolveOptions
from ganttlink.schemas import Snapshot
from ganttlink.services import RelationshipIndex, build_relationship_index
from ganttlink.store import TaskStore


@dataclass
class EngineInputs:
    store: TaskStore
    relationships: list[Relationship]
    index: RelationshipIndex
    options: ResolveOptions


def load_snapshot(snapshot: Snapshot) -> EngineInputs:
    """Build a task store, relationship index and options for one request."""
    store = TaskStore(task.to_bar() for task in snapshot.tasks)
    relationships = [rel.to_relationship() for rel in snapshot.relationships]
    options = ResolveOptions.from_settings(
        pixels_per_time_unit=snapshot.pixels_per_time_unit,
        max_depth=snapshot.max_depth,
    )
    return EngineInputs(
        store=store,
        relationships=relationships,
        index=build_relationship_index(relationships),
        options=options,
    )


def require_task(inputs: EngineInputs, task_id: str) -> None:
    if task_id not in inputs.store:
        raise UnknownTaskError(task_id)
