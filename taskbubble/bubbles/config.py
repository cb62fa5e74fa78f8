"""Tuning constants for the bubble layout engine."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from taskbubble.config_utils import env_float, env_int


class LayoutConfigError(ValueError):
    """Raised when a LayoutConfig would make the simulation degenerate."""


@dataclass(frozen=True)
class LayoutConfig:
    """Spring/collision parameters (pixels and seconds).

    Environment variables use the BUBBLE_ prefix, e.g. BUBBLE_STIFFNESS=8.

    Radii are bubble radii: the defaults give diameters of 76..168 px.
    Damping is the per-frame velocity multiplier at 60 fps; other frame
    rates are scaled so motion does not depend on the refresh rate.
    """

    min_radius: float = 38.0
    max_radius: float = 84.0
    urgency_horizon_days: int = 14

    max_dt: float = 0.033
    margin: float = 24.0
    jitter_fraction: float = 0.18

    stiffness: float = 6.0
    damping: float = 0.92
    drift_accel: float = 24.0
    max_speed: float = 900.0

    restitution: float = 0.6
    collision_buffer: float = 4.0
    collision_iterations: int = 2

    min_spawn_speed: float = 20.0
    max_spawn_speed: float = 60.0
    max_substeps: int = 1

    def __post_init__(self) -> None:
        if self.min_radius <= 0:
            raise LayoutConfigError(f"min_radius must be positive, got {self.min_radius}")
        if self.max_radius < self.min_radius:
            raise LayoutConfigError(
                f"max_radius ({self.max_radius}) must be >= min_radius ({self.min_radius})"
            )
        if self.urgency_horizon_days < 1:
            raise LayoutConfigError("urgency_horizon_days must be at least 1")
        if self.max_dt <= 0:
            raise LayoutConfigError("max_dt must be positive")
        if not 0.0 < self.damping <= 1.0:
            raise LayoutConfigError(f"damping must be in (0, 1], got {self.damping}")
        if not 0.0 <= self.restitution <= 1.0:
            raise LayoutConfigError(f"restitution must be in [0, 1], got {self.restitution}")
        if not 0.0 <= self.jitter_fraction < 0.5:
            raise LayoutConfigError("jitter_fraction must be in [0, 0.5)")
        if self.margin < 0 or self.collision_buffer < 0:
            raise LayoutConfigError("margin and collision_buffer must not be negative")
        if self.stiffness < 0 or self.drift_accel < 0:
            raise LayoutConfigError("stiffness and drift_accel must not be negative")
        if self.max_speed <= 0:
            raise LayoutConfigError("max_speed must be positive")
        if self.collision_iterations < 1 or self.max_substeps < 1:
            raise LayoutConfigError("collision_iterations and max_substeps must be at least 1")
        if not 0 <= self.min_spawn_speed <= self.max_spawn_speed:
            raise LayoutConfigError("spawn speeds must satisfy 0 <= min <= max")

    @classmethod
    def from_env(cls, **overrides: Any) -> "LayoutConfig":
        base = cls()
        values = {}
        for f in fields(cls):
            name = f"BUBBLE_{f.name.upper()}"
            current = getattr(base, f.name)
            if isinstance(current, int):
                values[f.name] = env_int(name, current)
            else:
                values[f.name] = env_float(name, current)
        values.update(overrides)
        return cls(**values)

    def clamp_radius(self, radius: float) -> float:
        return max(self.min_radius, min(self.max_radius, float(radius)))
