"""
Relationship index.

Normalizes the raw relationship list into two lookup tables so that
per-task queries are O(1) instead of a scan over every relationship:
- by_predecessor: task ID -> relationships where the task is the predecessor
- by_successor: task ID -> relationships where the task is the successor

Build once per relationship change, not per drag frame.
"""

from dataclasses import dataclass, field
from typing import Iterator, Sequence, Union

from ganttlink.models import Relationship


@dataclass
class RelationshipIndex:
    relationships: tuple[Relationship, ...] = ()
    by_predecessor: dict[str, list[Relationship]] = field(default_factory=dict)
    by_successor: dict[str, list[Relationship]] = field(default_factory=dict)

    def successors_of(self, task_id: str) -> list[Relationship]:
        """Relationships where task_id is the predecessor."""
        return self.by_predecessor.get(task_id, [])

    def predecessors_of(self, task_id: str) -> list[Relationship]:
        """Relationships where task_id is the successor."""
        return self.by_successor.get(task_id, [])

    def incident_to(self, task_id: str) -> list[Relationship]:
        """Every relationship touching task_id, outgoing first; a self loop appears once."""
        outgoing = self.successors_of(task_id)
        return outgoing + [rel for rel in self.predecessors_of(task_id) if rel.predecessor_id != task_id]

    def __iter__(self) -> Iterator[Relationship]:
        return iter(self.relationships)

    def __len__(self) -> int:
        return len(self.relationships)


RelationshipSource = Union[Sequence[Relationship], RelationshipIndex]


def build_relationship_index(relationships: Sequence[Relationship]) -> RelationshipIndex:
    """Build both lookup tables from a relationship list."""
    by_predecessor: dict[str, list[Relationship]] = {}
    by_successor: dict[str, list[Relationship]] = {}

    for rel in relationships:
        by_predecessor.setdefault(rel.predecessor_id, []).append(rel)
        by_successor.setdefault(rel.successor_id, []).append(rel)

    return RelationshipIndex(
        relationships=tuple(relationships),
        by_predecessor=by_predecessor,
        by_successor=by_successor,
    )


def ensure_index(relationships: RelationshipSource) -> RelationshipIndex:
    """Accept either a prebuilt index or a plain relationship sequence."""
    if isinstance(relationships, RelationshipIndex):
        return relationships
    return build_relationship_index(relationships)


class RelationshipIndexCache:
    """
    Keeps the index for the most recent relationship list.

    The cache key is the list object itself: handing in the same list
    returns the cached index, any other list triggers a rebuild. Callers
    that mutate a list in place must call invalidate().
    """

    def __init__(self):
        self._source: Sequence[Relationship] | None = None
        self._index: RelationshipIndex | None = None

    def get(self, relationships: Sequence[Relationship]) -> RelationshipIndex:
        if self._index is None or relationships is not self._source:
            self._source = relationships
            self._index = build_relationship_index(relationships)
        return self._index

    def invalidate(self) -> None:
        self._source = None
        self._index = None
