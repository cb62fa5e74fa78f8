"""Turning task records into bubbles.

Urgency is driven by calendar days until the due date:

- ASAP tasks are always fully urgent (1.0).
- Tasks without a due date are calm (0.0).
- Otherwise urgency falls linearly from 1.0 (due today or overdue) to 0.0
  (due ``urgency_horizon_days`` or more days out).

Size and colour follow urgency: urgent bubbles are bigger and warmer.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Collection, Dict, Iterable, List, Optional, Union

from taskbubble.bubbles.config import LayoutConfig
from taskbubble.bubbles.models import VisibleItem

HIDDEN_STATUSES = {"done", "archived"}

DateLike = Union[date, datetime, str, None]

_COOL_HUE = 200.0
_WARM_HUE = 10.0


def _as_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def days_until_due(due_date: DateLike, today: DateLike = None) -> Optional[int]:
    due = _as_date(due_date)
    if due is None:
        return None
    ref = _as_date(today) or date.today()
    return (due - ref).days


def urgency_for(days: Optional[int], is_asap: bool = False, horizon_days: int = 14) -> float:
    if is_asap:
        return 1.0
    if days is None:
        return 0.0
    return max(0.0, min(1.0, 1.0 - days / float(horizon_days)))


def radius_for(urgency: float, cfg: LayoutConfig) -> float:
    u = max(0.0, min(1.0, urgency))
    return cfg.clamp_radius(cfg.min_radius + u * (cfg.max_radius - cfg.min_radius))


def hue_for(urgency: float) -> float:
    u = max(0.0, min(1.0, urgency))
    return _COOL_HUE - u * (_COOL_HUE - _WARM_HUE)


def tone_for(urgency: float) -> str:
    return f"hsl({hue_for(urgency):.0f}, 78%, 58%)"


def is_visible(task: Dict[str, Any], completing: Collection[str] = ()) -> bool:
    """Open work is visible; finished work only while its exit animation runs."""
    if str(task.get("id")) in completing:
        return True
    return (task.get("status") or "open") not in HIDDEN_STATUSES


def build_visible_items(
    tasks: Iterable[Dict[str, Any]],
    today: DateLike = None,
    cfg: Optional[LayoutConfig] = None,
    completing: Collection[str] = (),
) -> List[VisibleItem]:
    """Visible bubbles for ``tasks``, most urgent first.

    Order decides grid rank, and rank 0 is the most central cell. Ties are
    broken by due date, then title, then id so the order is stable across
    reruns.
    """
    cfg = cfg or LayoutConfig()
    ranked = []
    for task in tasks:
        if not is_visible(task, completing):
            continue
        days = days_until_due(task.get("due_date"), today)
        urgency = urgency_for(days, bool(task.get("is_asap")), cfg.urgency_horizon_days)
        item = VisibleItem(
            id=str(task["id"]),
            urgency=urgency,
            radius=radius_for(urgency, cfg),
            tone=tone_for(urgency),
            label=str(task.get("title") or ""),
        )
        due_key = days if days is not None else 10**9
        ranked.append(((-urgency, due_key, item.label.lower(), item.id), item))

    ranked.sort(key=lambda pair: pair[0])
    return [item for _, item in ranked]
