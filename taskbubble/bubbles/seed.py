"""Per-item deterministic randomness.

Each bubble gets a small "personality" derived from a hash of its id and the
workspace it lives in: where it sits inside its grid cell, which way it is
kicked when it appears, and how it drifts. Nothing here touches a global
random generator, so the same task always moves the same way after a reload
while its siblings move differently.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

_INT32_MASK = 0xFFFFFFFF


def stable_hash(text: str) -> int:
    """31-based polynomial hash with signed 32-bit wrap-around, made non-negative."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & _INT32_MASK
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def _fraction(h: int, divisor: int, buckets: int) -> float:
    """Pick one of ``buckets`` evenly spaced values in [0, 1] from a slice of ``h``."""
    return ((h // divisor) % buckets) / (buckets - 1)


@dataclass(frozen=True)
class Personality:
    seed: int
    jitter_x: float
    jitter_y: float
    spawn_vx: float
    spawn_vy: float
    drift_phase_x: float
    drift_phase_y: float
    drift_scale: float
    drift_period: float


def personality_for(
    item_id: str,
    context: str = "",
    *,
    min_spawn_speed: float = 20.0,
    max_spawn_speed: float = 60.0,
) -> Personality:
    h = stable_hash(f"{context}{item_id}")

    jitter_x = _fraction(h, 1, 86) * 2.0 - 1.0
    jitter_y = _fraction(h, 97, 70) * 2.0 - 1.0

    angle = math.radians((h // 7) % 360)
    speed = min_spawn_speed + _fraction(h, 11, 41) * (max_spawn_speed - min_spawn_speed)

    return Personality(
        seed=h,
        jitter_x=jitter_x,
        jitter_y=jitter_y,
        spawn_vx=math.cos(angle) * speed,
        spawn_vy=math.sin(angle) * speed,
        drift_phase_x=((h % 13) / 13.0) * math.tau,
        drift_phase_y=(((h // 13) % 17) / 17.0) * math.tau,
        drift_scale=0.4 + _fraction(h, 1, 22) * 0.6,
        drift_period=10.0 + (h % 9),
    )
