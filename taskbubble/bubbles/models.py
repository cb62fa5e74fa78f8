from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from taskbubble.bubbles.seed import Personality

Position = Tuple[float, float]


@dataclass(frozen=True)
class VisibleItem:
    """A task eligible for display as a bubble. Owned by the host."""

    id: str
    urgency: float
    radius: float
    tone: str = "hsl(200, 78%, 58%)"
    label: str = ""


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class AnchorPoint:
    item_id: str
    x: float
    y: float
    rank: int


@dataclass
class SimulationNode:
    item_id: str
    x: float
    y: float
    vx: float
    vy: float
    radius: float
    personality: Personality

    @property
    def position(self) -> Position:
        return (self.x, self.y)


@dataclass(frozen=True)
class Frame:
    """What the engine reports after a step: bubble centres keyed by item id."""

    positions: Dict[str, Position] = field(default_factory=dict)
    dt: float = 0.0
    skipped: bool = False
    time: float = 0.0
