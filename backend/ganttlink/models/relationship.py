from dataclasses import dataclass
from enum import Enum
from math import inf
from typing import Optional


class DependencyType(str, Enum):
    """Classical project-scheduling dependency types."""

    FS = "FS"  # Finish-to-Start
    SS = "SS"  # Start-to-Start
    FF = "FF"  # Finish-to-Finish
    SF = "SF"  # Start-to-Finish

    @property
    def constrains_successor_end(self) -> bool:
        return self in (DependencyType.FF, DependencyType.SF)


@dataclass(frozen=True)
class Relationship:
    """
    Directed dependency edge: predecessor_id -> successor_id.

    - lag: signed offset in time units; positive delays the successor,
      negative allows overlap
    - elastic: True enforces a gap range only; False pins the successor to
      the exact minimum gap and makes both ends one rigid body
    - min_offset / max_offset: gap range on top of lag, in time units. The
      successor is pushed below lag + min_offset and, when max_offset is
      set, pulled back once the gap exceeds lag + max_offset.
    """

    predecessor_id: str
    successor_id: str
    type: DependencyType = DependencyType.FS
    lag: float = 0
    elastic: bool = True
    min_offset: float = 0
    max_offset: Optional[float] = None

    def __post_init__(self):
        # Accept plain "FS"/"SS"/... strings
        object.__setattr__(self, "type", DependencyType(self.type))
        if self.max_offset is not None and self.max_offset < self.min_offset:
            raise ValueError(
                f"max_offset {self.max_offset} is below min_offset {self.min_offset} "
                f"on {self.predecessor_id} -> {self.successor_id}"
            )

    @property
    def is_bounded(self) -> bool:
        """Elastic with a maximum gap: successors are pulled as well as pushed."""
        return self.elastic and self.max_offset is not None

    def min_gap_px(self, pixels_per_time_unit: float) -> float:
        return (self.lag + self.min_offset) * pixels_per_time_unit

    def max_gap_px(self, pixels_per_time_unit: float) -> float:
        if not self.elastic:
            return self.min_gap_px(pixels_per_time_unit)
        if self.max_offset is None:
            return inf
        return (self.lag + self.max_offset) * pixels_per_time_unit
