"""Month calendar helpers for the calendar page.

Everything here is plain data so the page can stay a thin Streamlit layer.
Weeks start on Sunday and a month is always shown as six full weeks.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from taskbubble.bubbles.urgency import _as_date

GRID_DAYS = 42

STATUS_LABELS = {
    "open": "○ Open",
    "in_progress": "◐ In progress",
    "done": "✓ Done",
    "archived": "Archived",
}


@dataclass(frozen=True)
class CalendarDay:
    date: date
    in_month: bool
    is_today: bool

    @property
    def day(self) -> int:
        return self.date.day


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_grid(year: int, month: int, today: Optional[date] = None) -> List[CalendarDay]:
    """The 42 days shown for ``year``/``month``, leading and trailing days included."""
    today = today or date.today()
    first = date(year, month, 1)
    # date.weekday(): Monday == 0; the grid starts on Sunday.
    lead = (first.weekday() + 1) % 7
    start = first - timedelta(days=lead)
    days = []
    for offset in range(GRID_DAYS):
        d = start + timedelta(days=offset)
        days.append(CalendarDay(date=d, in_month=d.month == month and d.year == year, is_today=d == today))
    return days


def weeks(days: List[CalendarDay]) -> List[List[CalendarDay]]:
    return [days[i : i + 7] for i in range(0, len(days), 7)]


def month_title(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def tasks_by_date(tasks: Iterable[Dict[str, Any]]) -> Dict[date, List[Dict[str, Any]]]:
    """Dated tasks keyed by due date. Archived tasks are left out; done ones stay."""
    grouped: Dict[date, List[Dict[str, Any]]] = {}
    for task in tasks:
        if task.get("status") == "archived":
            continue
        due = _as_date(task.get("due_date"))
        if due is None:
            continue
        grouped.setdefault(due, []).append(task)
    for day_tasks in grouped.values():
        day_tasks.sort(key=lambda t: (t.get("status") == "done", (t.get("title") or "").lower()))
    return grouped


def asap_tasks(tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Open work with no date, or flagged ASAP."""
    return [
        t
        for t in tasks
        if (t.get("is_asap") or not t.get("due_date")) and t.get("status") not in ("done", "archived")
    ]


def calendar_tasks(workspaces: Iterable[Dict[str, Any]], load) -> List[Dict[str, Any]]:
    """Tasks of every workspace, each tagged with ``workspace_name``.

    ``load`` is called with a workspace id and returns that workspace's tasks
    (``tasks_repo.list_workspace_tasks`` on the page).
    """
    rows: List[Dict[str, Any]] = []
    for ws in workspaces:
        for task in load(ws["id"]):
            rows.append({**task, "workspace_name": ws["name"]})
    return rows
