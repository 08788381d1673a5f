from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ganttlink.models import NO_BOUNDS, AbsoluteBounds, DependencyType, Relationship, TaskBar


class BoundsIn(BaseModel):
    """Absolute limits in pixels; omitted fields are unbounded."""
    min_start: Optional[float] = None
    max_start: Optional[float] = None
    min_end: Optional[float] = None
    max_end: Optional[float] = None
    min_width: Optional[float] = Field(default=None, ge=0)
    max_width: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_ranges(self) -> "BoundsIn":
        for low, high in (("min_start", "max_start"), ("min_end", "max_end"), ("min_width", "max_width")):
            low_value, high_value = getattr(self, low), getattr(self, high)
            if low_value is not None and high_value is not None and low_value > high_value:
                raise ValueError(f"{low} must not exceed {high}")
        return self


class TaskIn(BaseModel):
    """A task bar as sent by the rendering layer."""
    id: str
    x: float
    y: float = 0
    width: float = Field(ge=0)
    height: float = Field(default=0, ge=0)
    locked: Union[bool, Literal["start", "end", "duration"]] = False
    bounds: Optional[BoundsIn] = None

    def to_bar(self) -> TaskBar:
        return TaskBar(
            id=self.id,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            locked=self.locked,
            bounds=AbsoluteBounds(**self.bounds.model_dump()) if self.bounds else NO_BOUNDS,
        )


class RelationshipIn(BaseModel):
    """Dependency edge; JSON uses "from"/"to" like the widget does."""
    model_config = ConfigDict(populate_by_name=True)

    predecessor_id: str = Field(alias="from")
    successor_id: str = Field(alias="to")
    type: DependencyType = DependencyType.FS
    lag: float = 0
    elastic: bool = True
    min_offset: float = Field(default=0, alias="min")
    max_offset: Optional[float] = Field(default=None, alias="max")  # None: gap may grow freely

    @model_validator(mode="after")
    def check_offsets(self) -> "RelationshipIn":
        if self.max_offset is not None and self.max_offset < self.min_offset:
            raise ValueError("max must not be below min")
        return self

    def to_relationship(self) -> Relationship:
        return Relationship(
            predecessor_id=self.predecessor_id,
            successor_id=self.successor_id,
            type=self.type,
            lag=self.lag,
            elastic=self.elastic,
            min_offset=self.min_offset,
            max_offset=self.max_offset,
        )


class Snapshot(BaseModel):
    """Everything the engine needs for one call."""
    tasks: list[TaskIn]
    relationships: list[RelationshipIn] = []
    pixels_per_time_unit: float | None = Field(default=None, gt=0)
    max_depth: int | None = Field(default=None, ge=0)
