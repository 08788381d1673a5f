"""
Dependency-type geometry and constraint checking.

All positions are in pixels and gaps have already been converted. With
P = predecessor x, PW = predecessor width, SW = successor width:

    FS: succ.start >= pred.end + gap     ->  min succ x = P + PW + gap
    SS: succ.start >= pred.start + gap   ->  min succ x = P + gap
    FF: succ.end   >= pred.end + gap     ->  min succ x = P + PW - SW + gap
    SF: succ.end   >= pred.start + gap   ->  min succ x = P - SW + gap

Passing the maximum gap of a bounded relationship instead gives the
largest successor x. Fixed relationships pin the successor to exactly the
minimum.
"""

from dataclasses import dataclass
from math import inf

from ganttlink.models import DependencyType, Relationship, ResolveOptions, TaskBar, TaskLookup
from ganttlink.services.index import RelationshipSource, ensure_index


def predecessor_anchor(dep_type: DependencyType, pred_x: float, pred_width: float) -> float:
    """The predecessor edge a dependency type measures from."""
    if dep_type in (DependencyType.FS, DependencyType.FF):
        return pred_x + pred_width
    return pred_x


def min_successor_x(
    dep_type: DependencyType,
    pred_x: float,
    pred_width: float,
    succ_width: float,
    gap_px: float,
) -> float:
    """Successor x that leaves exactly gap_px between the constrained edges."""
    reference = predecessor_anchor(dep_type, pred_x, pred_width) + gap_px
    if dep_type.constrains_successor_end:
        return reference - succ_width
    return reference


def fixed_successor_x(
    dep_type: DependencyType,
    pred_x: float,
    pred_width: float,
    succ_width: float,
    gap_px: float,
) -> float:
    """Exact successor x for a fixed relationship."""
    return min_successor_x(dep_type, pred_x, pred_width, succ_width, gap_px)


def max_predecessor_x(
    dep_type: DependencyType,
    pred_width: float,
    succ_x: float,
    succ_width: float,
    gap_px: float,
) -> float:
    """
    Predecessor x that leaves exactly gap_px to a successor at succ_x.

    Inverse of min_successor_x. With the minimum gap this is the largest
    predecessor x when the successor cannot be pushed; with the maximum gap
    of a bounded relationship it is the smallest x when it cannot be pulled.
    """
    reference = succ_x + succ_width if dep_type.constrains_successor_end else succ_x
    if dep_type in (DependencyType.FS, DependencyType.FF):
        return reference - gap_px - pred_width
    return reference - gap_px


def successor_x_range(
    rel: Relationship,
    pred: TaskBar,
    succ_width: float,
    options: ResolveOptions,
) -> tuple[float, float]:
    """Legal successor x range implied by one relationship; upper is inf when unbounded."""
    ppu = options.pixels_per_time_unit
    lower = min_successor_x(rel.type, pred.x, pred.width, succ_width, rel.min_gap_px(ppu))
    max_gap = rel.max_gap_px(ppu)
    if max_gap == inf:
        return lower, inf
    return lower, min_successor_x(rel.type, pred.x, pred.width, succ_width, max_gap)


@dataclass(frozen=True)
class ConstraintViolation:
    relationship: Relationship
    expected_x: float
    actual_x: float

    @property
    def shortfall(self) -> float:
        """Positive when the successor sits too early, negative when too late."""
        return self.expected_x - self.actual_x


def find_violations(
    get_task: TaskLookup,
    relationships: RelationshipSource,
    options: ResolveOptions | None = None,
) -> list[ConstraintViolation]:
    """
    Report every relationship the current positions break.

    Elastic relationships are broken when the successor sits below its
    minimum or, for bounded ones, above its maximum; fixed ones when it is
    anywhere but the pinned position. Relationships that reference unknown
    tasks are skipped.
    """
    options = options or ResolveOptions()
    violations = []

    for rel in ensure_index(relationships):
        pred = get_task(rel.predecessor_id)
        succ = get_task(rel.successor_id)
        if pred is None or succ is None:
            continue

        lower, upper = successor_x_range(rel, pred, succ.width, options)
        if succ.x < lower - options.epsilon:
            violations.append(ConstraintViolation(rel, lower, succ.x))
        elif succ.x > upper + options.epsilon:
            violations.append(ConstraintViolation(rel, upper, succ.x))

    return violations
