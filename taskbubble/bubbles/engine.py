"""Spring-anchored bubble layout.

The engine owns one SimulationNode per visible item. Every frame it lays the
items out on a near-square grid (most urgent in the most central cells),
pulls each node towards its cell with a spring, adds a slow seeded drift so
the board never freezes, bounces nodes off the walls and relaxes overlaps.

It never touches UI objects: ``step()`` returns a Frame with the centre of
every bubble and the host decides how to draw it.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from taskbubble.bubbles.config import LayoutConfig
from taskbubble.bubbles.models import AnchorPoint, Frame, Position, SimulationNode, Viewport, VisibleItem
from taskbubble.bubbles.seed import Personality, personality_for

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


def grid_shape(n: int) -> Tuple[int, int]:
    """(columns, rows) of the smallest near-square grid holding ``n`` cells."""
    if n <= 1:
        return 1, 1
    cols = math.isqrt(n)
    if cols * cols < n:
        cols += 1
    rows = -(-n // cols)
    return cols, rows


def cell_order(cols: int, rows: int) -> List[Tuple[int, int]]:
    """Grid cells as (row, col), closest to the grid centre first."""
    cx = cols / 2.0
    cy = rows / 2.0

    def _key(cell: Tuple[int, int]):
        row, col = cell
        return ((col + 0.5 - cx) ** 2 + (row + 0.5 - cy) ** 2, row, col)

    return sorted(((r, c) for r in range(rows) for c in range(cols)), key=_key)


def compute_anchors(
    items: Sequence[VisibleItem],
    viewport: Viewport,
    cfg: LayoutConfig,
    context: str = "",
    personalities: Optional[Dict[str, Personality]] = None,
) -> Dict[str, AnchorPoint]:
    """Target point for every item, by rank, inside ``viewport`` minus the margin."""
    if not items or viewport.is_empty:
        return {}

    cols, rows = grid_shape(len(items))
    cells = cell_order(cols, rows)

    margin = cfg.margin
    if viewport.width <= 2 * margin or viewport.height <= 2 * margin:
        margin = 0.0
    cell_w = (viewport.width - 2 * margin) / cols
    cell_h = (viewport.height - 2 * margin) / rows

    anchors: Dict[str, AnchorPoint] = {}
    for rank, item in enumerate(items):
        row, col = cells[rank]
        p = personalities.get(item.id) if personalities else None
        if p is None:
            p = personality_for(item.id, context)
        x = margin + (col + 0.5) * cell_w + p.jitter_x * cfg.jitter_fraction * cell_w
        y = margin + (row + 0.5) * cell_h + p.jitter_y * cfg.jitter_fraction * cell_h
        anchors[item.id] = AnchorPoint(item_id=item.id, x=x, y=y, rank=rank)
    return anchors


class LayoutEngine:
    """Continuous layout for a changing, ordered set of circular items.

    ``context`` seeds every item's personality together with its id; the
    board uses the workspace id so the same task keeps the same motion
    across reloads.
    """

    def __init__(self, cfg: Optional[LayoutConfig] = None, context: str = "") -> None:
        self.cfg = cfg or LayoutConfig()
        self.context = context
        self._items: List[VisibleItem] = []
        self._radii: Dict[str, float] = {}
        self._nodes: Dict[str, SimulationNode] = {}
        self._personalities: Dict[str, Personality] = {}
        self._time = 0.0
        self._skipped_frames = 0

    @property
    def items(self) -> List[VisibleItem]:
        return list(self._items)

    @property
    def nodes(self) -> Dict[str, SimulationNode]:
        return dict(self._nodes)

    @property
    def time(self) -> float:
        return self._time

    @property
    def skipped_frames(self) -> int:
        return self._skipped_frames

    def personality(self, item_id: str) -> Personality:
        p = self._personalities.get(item_id)
        if p is None:
            p = personality_for(
                item_id,
                self.context,
                min_spawn_speed=self.cfg.min_spawn_speed,
                max_spawn_speed=self.cfg.max_spawn_speed,
            )
            self._personalities[item_id] = p
        return p

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set_items(self, items: Iterable[VisibleItem], viewport: Optional[Viewport] = None) -> None:
        """Replace the visible set.

        Nodes of items that left the set are dropped right away. New items
        get a node at their anchor now if ``viewport`` is usable, otherwise
        on the next ``step()``.
        """
        ordered: List[VisibleItem] = []
        seen = set()
        for item in items:
            if item.id in seen:
                logger.warning("Duplicate bubble id %s ignored", item.id)
                continue
            seen.add(item.id)
            ordered.append(item)

        self._items = ordered
        self._radii = {item.id: self.cfg.clamp_radius(item.radius) for item in ordered}

        for item_id in [i for i in self._nodes if i not in seen]:
            del self._nodes[item_id]
            logger.debug("Dropped bubble %s", item_id)
        for item_id in [i for i in self._personalities if i not in seen]:
            del self._personalities[item_id]

        for item_id, node in self._nodes.items():
            node.radius = self._radii[item_id]

        if viewport is not None and not viewport.is_empty:
            self._spawn_missing(self.anchors(viewport))

    def reset(self) -> None:
        self._nodes.clear()
        self._time = 0.0

    def anchors(self, viewport: Viewport) -> Dict[str, AnchorPoint]:
        for item in self._items:
            self.personality(item.id)
        return compute_anchors(self._items, viewport, self.cfg, self.context, self._personalities)

    def _spawn_missing(self, anchors: Dict[str, AnchorPoint]) -> None:
        for item in self._items:
            if item.id in self._nodes:
                continue
            anchor = anchors.get(item.id)
            if anchor is None:
                continue
            p = self.personality(item.id)
            self._nodes[item.id] = SimulationNode(
                item_id=item.id,
                x=anchor.x,
                y=anchor.y,
                vx=p.spawn_vx,
                vy=p.spawn_vy,
                radius=self._radii[item.id],
                personality=p,
            )
            logger.debug("Spawned bubble %s at (%.1f, %.1f) rank=%d", item.id, anchor.x, anchor.y, anchor.rank)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def clamp_dt(self, dt: float) -> float:
        if not dt or dt < 0 or math.isnan(dt):
            return 0.0
        return min(float(dt), self.cfg.max_dt)

    def step(self, dt: float, viewport: Viewport) -> Frame:
        dt = self.clamp_dt(dt)

        # A zero-area viewport shows up mid layout transition; try again next frame.
        if viewport.is_empty:
            self._skipped_frames += 1
            logger.debug("Skipping layout frame for empty viewport %sx%s", viewport.width, viewport.height)
            return Frame(positions=self.positions(), dt=0.0, skipped=True, time=self._time)

        anchors = self.anchors(viewport)
        self._spawn_missing(anchors)

        if dt > 0:
            self._time += dt
            self._integrate(dt, anchors)

        ordered = self._ordered_nodes()
        for _ in range(self.cfg.collision_iterations):
            self._resolve_collisions(ordered)
            self._constrain(ordered, viewport)

        return Frame(positions=self.positions(), dt=dt, skipped=False, time=self._time)

    def positions(self) -> Dict[str, Position]:
        return {node.item_id: node.position for node in self._ordered_nodes()}

    def _ordered_nodes(self) -> List[SimulationNode]:
        return [self._nodes[item.id] for item in self._items if item.id in self._nodes]

    def _integrate(self, dt: float, anchors: Dict[str, AnchorPoint]) -> None:
        cfg = self.cfg
        decay = cfg.damping ** (dt * 60.0)
        t = self._time

        for node in self._ordered_nodes():
            anchor = anchors[node.item_id]
            p = node.personality
            omega = math.tau / p.drift_period
            drift = cfg.drift_accel * p.drift_scale

            ax = cfg.stiffness * (anchor.x - node.x) + drift * math.sin(omega * t + p.drift_phase_x)
            ay = cfg.stiffness * (anchor.y - node.y) + drift * math.sin(omega * t + p.drift_phase_y)

            vx = (node.vx + ax * dt) * decay
            vy = (node.vy + ay * dt) * decay
            speed = math.hypot(vx, vy)
            if speed > cfg.max_speed:
                scale = cfg.max_speed / speed
                vx *= scale
                vy *= scale

            node.vx = vx
            node.vy = vy
            node.x += vx * dt
            node.y += vy * dt

    def _resolve_collisions(self, nodes: Sequence[SimulationNode]) -> None:
        buffer = self.cfg.collision_buffer
        restitution = self.cfg.restitution

        for i, a in enumerate(nodes):
            for b in nodes[i + 1:]:
                min_dist = a.radius + b.radius + buffer
                dx = b.x - a.x
                dy = b.y - a.y
                dist_sq = dx * dx + dy * dy
                if dist_sq >= min_dist * min_dist:
                    continue

                dist = math.sqrt(dist_sq)
                if dist < _EPSILON:
                    angle = math.radians((a.personality.seed ^ b.personality.seed) % 360)
                    nx, ny = math.cos(angle), math.sin(angle)
                    dist = 0.0
                else:
                    nx, ny = dx / dist, dy / dist

                push = (min_dist - dist) / 2.0
                a.x -= nx * push
                a.y -= ny * push
                b.x += nx * push
                b.y += ny * push

                closing = (b.vx - a.vx) * nx + (b.vy - a.vy) * ny
                if closing < 0:
                    impulse = -(1.0 + restitution) * closing / 2.0
                    a.vx -= impulse * nx
                    a.vy -= impulse * ny
                    b.vx += impulse * nx
                    b.vy += impulse * ny

    def _constrain(self, nodes: Sequence[SimulationNode], viewport: Viewport) -> None:
        restitution = self.cfg.restitution
        for node in nodes:
            node.x, node.vx = _bounce(node.x, node.vx, node.radius, viewport.width, restitution)
            node.y, node.vy = _bounce(node.y, node.vy, node.radius, viewport.height, restitution)


def _bounce(pos: float, vel: float, radius: float, size: float, restitution: float) -> Tuple[float, float]:
    if size <= 2 * radius:
        return size / 2.0, 0.0
    if pos < radius:
        return radius, (-vel * restitution if vel < 0 else vel)
    if pos > size - radius:
        return size - radius, (-vel * restitution if vel > 0 else vel)
    return pos, vel
