from dataclasses import dataclass
from math import inf
from typing import Callable, Literal, Optional, Union

LockState = Union[bool, Literal["start", "end", "duration"]]


def is_movement_locked(locked: LockState) -> bool:
    """
    True when a lock state forbids relocating the task.

    - True: fully locked (no move, no resize)
    - "start" / "end": an edge is pinned, so the bar cannot move
    - "duration": width is frozen, the bar may still move
    """
    return locked is True or locked in ("start", "end")


@dataclass(frozen=True)
class AbsoluteBounds:
    """
    Absolute limits on a task, in pixels from the chart origin.

    Any field left as None is unbounded. Start limits constrain moves,
    end limits constrain both moves and resizes, width limits only resizes.
    """

    min_start: Optional[float] = None
    max_start: Optional[float] = None
    min_end: Optional[float] = None
    max_end: Optional[float] = None
    min_width: Optional[float] = None
    max_width: Optional[float] = None

    def lowest_x(self) -> float:
        return -inf if self.min_start is None else self.min_start

    def highest_x(self, width: float) -> float:
        highest = inf if self.max_start is None else self.max_start
        if self.max_end is not None:
            highest = min(highest, self.max_end - width)
        return highest

    def clamp_width(self, x: float, width: float) -> float:
        """Nearest width these bounds allow for a bar starting at x."""
        if self.min_end is not None:
            width = max(width, self.min_end - x)
        if self.max_end is not None:
            width = min(width, self.max_end - x)
        if self.min_width is not None:
            width = max(width, self.min_width)
        if self.max_width is not None:
            width = min(width, self.max_width)
        return width


NO_BOUNDS = AbsoluteBounds()


@dataclass
class TaskBar:
    """
    A task as the engine sees it: a bar on the time axis.

    Key fields:
    - x, width: horizontal position and length in pixels
    - y: row position, carried through moves untouched
    - locked: see is_movement_locked()
    - bounds: absolute start/end/width limits
    """

    id: str
    x: float
    y: float
    width: float
    height: float = 0
    locked: LockState = False
    bounds: AbsoluteBounds = NO_BOUNDS

    @property
    def end(self) -> float:
        return self.x + self.width

    @property
    def movement_locked(self) -> bool:
        return is_movement_locked(self.locked)

    def out_of_bounds(self, epsilon: float = 0.0) -> bool:
        """True if the bar currently sits outside its absolute bounds."""
        bounds = self.bounds
        if self.x < bounds.lowest_x() - epsilon or self.x > bounds.highest_x(self.width) + epsilon:
            return True
        if bounds.min_end is not None and self.end < bounds.min_end - epsilon:
            return True
        return abs(bounds.clamp_width(self.x, self.width) - self.width) > epsilon


TaskLookup = Callable[[str], Optional[TaskBar]]
