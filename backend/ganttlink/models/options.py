from dataclasses import dataclass

from ganttlink.config import get_settings


@dataclass(frozen=True)
class ResolveOptions:
    """
    Per-call engine options.

    - pixels_per_time_unit: converts relationship lag into pixels
    - max_depth: push-cascade depth cap; deeper pushes reject the resolution
    - epsilon: tolerance for no-op detection and conflict checks
    """

    pixels_per_time_unit: float = 1.0
    max_depth: int = 10
    epsilon: float = 1e-6

    @classmethod
    def from_settings(cls, **overrides) -> "ResolveOptions":
        settings = get_settings()
        values = {
            "pixels_per_time_unit": settings.pixels_per_time_unit,
            "max_depth": settings.max_depth,
            "epsilon": settings.epsilon,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
