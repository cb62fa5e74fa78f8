"""Rendering helpers for the bubble board.

Kept free of Streamlit calls so they can be exercised headlessly; the page
only passes the figure / frame to ``st.plotly_chart`` / ``st.dataframe``.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd
import plotly.graph_objects as go

from taskbubble.bubbles import Frame, LayoutConfig, Viewport, VisibleItem, days_until_due, urgency_for

TASK_COLUMNS = ["id", "title", "status", "due_date", "is_asap", "days_left", "urgency", "company", "responsible"]


def _short(label: str, radius: float) -> str:
    # Roughly one character per 7px of diameter.
    limit = max(6, int(radius * 2 / 7.5))
    return label if len(label) <= limit else label[: limit - 1] + "…"


def build_bubble_figure(
    items: Sequence[VisibleItem],
    frame: Optional[Frame],
    viewport: Viewport,
    *,
    selected_id: Optional[str] = None,
    completing: Iterable[str] = (),
) -> go.Figure:
    """One circle shape per positioned bubble, in screen space (y grows down)."""
    fig = go.Figure()
    positions = frame.positions if frame else {}
    completing = set(completing)

    xs: List[float] = []
    ys: List[float] = []
    hover: List[str] = []
    ids: List[str] = []

    for item in items:
        pos = positions.get(item.id)
        if pos is None:
            continue
        x, y = pos
        r = item.radius
        is_selected = item.id == selected_id
        fig.add_shape(
            type="circle",
            xref="x",
            yref="y",
            x0=x - r,
            y0=y - r,
            x1=x + r,
            y1=y + r,
            fillcolor=item.tone,
            opacity=0.35 if item.id in completing else 0.88,
            line=dict(color="#0b2140" if is_selected else "rgba(255,255,255,0.85)", width=4 if is_selected else 2),
            layer="below",
        )
        fig.add_annotation(
            x=x,
            y=y,
            text=_short(item.label, r),
            showarrow=False,
            font=dict(size=12 if r < 60 else 14, color="#0b2140"),
        )
        xs.append(x)
        ys.append(y)
        hover.append(f"{item.label}<br>urgency {item.urgency:.0%}")
        ids.append(item.id)

    # Invisible markers give hover text and a selectable point per bubble.
    fig.add_trace(
        go.Scatter(
            x=xs,
            y=ys,
            mode="markers",
            marker=dict(size=24, opacity=0),
            hovertext=hover,
            hoverinfo="text",
            customdata=ids,
            showlegend=False,
        )
    )

    fig.update_xaxes(range=[0, viewport.width], visible=False, fixedrange=True)
    fig.update_yaxes(range=[viewport.height, 0], visible=False, fixedrange=True, scaleanchor="x", scaleratio=1)
    fig.update_layout(
        width=int(viewport.width),
        height=int(viewport.height),
        margin=dict(l=0, r=0, t=0, b=0),
        plot_bgcolor="rgba(240,245,250,1)",
        paper_bgcolor="rgba(0,0,0,0)",
        template="plotly_white",
    )
    return fig


def tasks_to_df(tasks: Iterable[Dict[str, Any]], today: Any = None, cfg: Optional[LayoutConfig] = None) -> pd.DataFrame:
    cfg = cfg or LayoutConfig()
    rows = []
    for t in tasks:
        days = days_until_due(t.get("due_date"), today)
        rows.append(
            {
                "id": t.get("id"),
                "title": t.get("title"),
                "status": t.get("status"),
                "due_date": t.get("due_date"),
                "is_asap": bool(t.get("is_asap")),
                "days_left": days,
                "urgency": round(urgency_for(days, bool(t.get("is_asap")), cfg.urgency_horizon_days), 2),
                "company": t.get("company"),
                "responsible": t.get("responsible"),
            }
        )
    if not rows:
        return pd.DataFrame(columns=TASK_COLUMNS)
    df = pd.DataFrame(rows, columns=TASK_COLUMNS)
    df["due_date"] = pd.to_datetime(df["due_date"], errors="coerce").dt.date
    df["days_left"] = df["days_left"].astype("Int64")
    return df.sort_values(by=["urgency", "days_left"], ascending=[False, True], na_position="last").reset_index(drop=True)


def task_option_label(task: Optional[Dict[str, Any]]) -> str:
    """Label for the task picker; ``None`` is the empty choice."""
    if task is None:
        return "Pick a task…"
    title = task.get("title") or "Untitled"
    return f"⚡ {title}" if task.get("is_asap") else title
