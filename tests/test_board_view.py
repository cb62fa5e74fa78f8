from datetime import date

from taskbubble.board_view import TASK_COLUMNS, build_bubble_figure, task_option_label, tasks_to_df
from taskbubble.bubbles import Frame, Viewport, VisibleItem

VIEWPORT = Viewport(900, 560)


def test_figure_draws_one_circle_per_positioned_bubble():
    items = [
        VisibleItem(id="a", urgency=1.0, radius=84.0, tone="hsl(10, 78%, 58%)", label="Fix login"),
        VisibleItem(id="b", urgency=0.0, radius=38.0, label="Write a very long release announcement"),
        VisibleItem(id="c", urgency=0.5, radius=60.0, label="Not placed yet"),
    ]
    frame = Frame(positions={"a": (200.0, 150.0), "b": (600.0, 400.0)})

    fig = build_bubble_figure(items, frame, VIEWPORT, selected_id="a")

    assert len(fig.layout.shapes) == 2
    first = fig.layout.shapes[0]
    assert (first.x0, first.x1, first.y0, first.y1) == (116.0, 284.0, 66.0, 234.0)
    assert first.fillcolor == "hsl(10, 78%, 58%)"
    assert [a.text for a in fig.layout.annotations][0] == "Fix login"
    assert fig.layout.annotations[1].text.endswith("…")
    assert list(fig.data[0].customdata) == ["a", "b"]
    assert tuple(fig.layout.yaxis.range) == (560, 0)


def test_figure_without_frame_is_empty_board():
    fig = build_bubble_figure([VisibleItem(id="a", urgency=0.2, radius=40.0)], None, VIEWPORT)
    assert len(fig.layout.shapes) == 0
    assert fig.layout.width == 900


def test_tasks_to_df_sorts_by_urgency():
    tasks = [
        {"id": "1", "title": "Later", "status": "open", "due_date": "2024-05-20"},
        {"id": "2", "title": "Now", "status": "open", "due_date": None, "is_asap": True},
        {"id": "3", "title": "Soon", "status": "in_progress", "due_date": "2024-05-03"},
    ]
    df = tasks_to_df(tasks, date(2024, 5, 1))
    assert list(df.columns) == TASK_COLUMNS
    assert list(df["id"]) == ["2", "3", "1"]
    assert df.loc[df["id"] == "3", "days_left"].iloc[0] == 2
    assert df.loc[df["id"] == "2", "urgency"].iloc[0] == 1.0


def test_tasks_to_df_empty():
    df = tasks_to_df([])
    assert df.empty
    assert list(df.columns) == TASK_COLUMNS


def test_task_option_label():
    assert task_option_label(None) == "Pick a task…"
    assert task_option_label({"title": "Ship it"}) == "Ship it"
    assert task_option_label({"title": "Server down", "is_asap": True}) == "⚡ Server down"
