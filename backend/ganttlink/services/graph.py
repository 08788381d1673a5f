"""
Graph operations using NetworkX.

This module handles:
- Building a DiGraph from a relationship list
- Cycle detection (the resolver tolerates cycles only through its depth cap)
- Relationship clean-up before a snapshot is handed to the engine
"""

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import networkx as nx

from ganttlink.logging_config import get_logger
from ganttlink.models import Relationship

logger = get_logger(__name__)


def build_relationship_graph(
    relationships: Iterable[Relationship],
    elastic_only: bool = False,
) -> nx.DiGraph:
    """
    Build a NetworkX DiGraph from relationships.

    Returns a graph where:
    - Nodes are task IDs
    - Edges go from predecessor -> successor
    - Each edge carries the relationship under the "relationship" key
      (the last one wins when two relationships join the same pair)
    """
    graph = nx.DiGraph()
    for rel in relationships:
        if elastic_only and not rel.elastic:
            continue
        graph.add_edge(rel.predecessor_id, rel.successor_id, relationship=rel)
    return graph


def find_cycle(
    relationships: Iterable[Relationship],
    elastic_only: bool = True,
) -> list[str] | None:
    """
    Return one cycle as a closed path of task IDs, or None.

    Only elastic edges are considered by default: a loop of fixed links is a
    single rigid body and is harmless.
    """
    graph = build_relationship_graph(relationships, elastic_only=elastic_only)
    try:
        edges = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        return None
    return [edges[0][0]] + [edge[1] for edge in edges]


def would_create_cycle(
    relationships: Iterable[Relationship],
    predecessor_id: str,
    successor_id: str,
) -> bool:
    """
    Check if adding an edge (predecessor -> successor) would create a cycle.

    Algorithm:
    1. Build the existing graph
    2. Temporarily add the new edge
    3. Check for cycles using NetworkX
    """
    graph = build_relationship_graph(relationships)
    graph.add_edge(predecessor_id, successor_id)
    try:
        nx.find_cycle(graph)
        return True
    except nx.NetworkXNoCycle:
        return False


@dataclass
class NormalizedRelationships:
    relationships: list[Relationship] = field(default_factory=list)
    dropped: list[tuple[Relationship, str]] = field(default_factory=list)
    cycle: list[str] | None = None


def normalize_relationships(
    relationships: Sequence[Relationship],
    task_ids: Iterable[str],
) -> NormalizedRelationships:
    """
    Drop relationships the engine should never see.

    Removes self loops, relationships referencing unknown tasks and exact
    duplicates, logging a warning for each. An elastic cycle is reported
    (and logged) but kept: the resolver stays bounded by its depth cap.
    """
    known = set(task_ids)
    result = NormalizedRelationships()
    seen: set[Relationship] = set()

    for rel in relationships:
        if rel.predecessor_id == rel.successor_id:
            reason = "self_dependency"
        elif rel.predecessor_id not in known or rel.successor_id not in known:
            reason = "unknown_task"
        elif rel in seen:
            reason = "duplicate"
        else:
            seen.add(rel)
            result.relationships.append(rel)
            continue

        logger.warning(
            f"Dropping relationship {rel.predecessor_id} -> {rel.successor_id}: {reason}"
        )
        result.dropped.append((rel, reason))

    result.cycle = find_cycle(result.relationships)
    if result.cycle:
        logger.warning(
            f"Circular dependency detected: {' -> '.join(result.cycle)}. "
            "Dragging tasks on this loop will be rejected once the depth cap is hit."
        )

    return result
