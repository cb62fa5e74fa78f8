"""Bubble layout engine.

This package contains the headless simulation behind the board:
- Seeded per-task personalities (stable across reloads)
- Due-date driven urgency, size and colour
- A spring/collision layout engine that reports positions per frame
- A frame loop that drives the engine from a clock
"""

from .config import LayoutConfig, LayoutConfigError
from .engine import LayoutEngine, cell_order, compute_anchors, grid_shape
from .loop import FrameLoop, FrameLoopState
from .models import AnchorPoint, Frame, SimulationNode, Viewport, VisibleItem
from .seed import Personality, personality_for, stable_hash
from .urgency import build_visible_items, days_until_due, is_visible, radius_for, tone_for, urgency_for

__all__ = [
    "LayoutConfig",
    "LayoutConfigError",
    "LayoutEngine",
    "cell_order",
    "compute_anchors",
    "grid_shape",
    "FrameLoop",
    "FrameLoopState",
    "AnchorPoint",
    "Frame",
    "SimulationNode",
    "Viewport",
    "VisibleItem",
    "Personality",
    "personality_for",
    "stable_hash",
    "build_visible_items",
    "days_until_due",
    "is_visible",
    "radius_for",
    "tone_for",
    "urgency_for",
]
