from datetime import date

from taskbubble.calendar_view import asap_tasks, calendar_tasks, month_grid, month_title, shift_month, tasks_by_date, weeks


def test_month_grid_is_six_sunday_weeks():
    days = month_grid(2024, 5, today=date(2024, 5, 14))
    assert len(days) == 42
    # May 2024 starts on a Wednesday.
    assert days[0].date == date(2024, 4, 28)
    assert days[0].date.weekday() == 6
    assert [d.in_month for d in days[:3]] == [False, False, False]
    assert days[3].date == date(2024, 5, 1) and days[3].in_month
    assert [d.date for d in days if d.is_today] == [date(2024, 5, 14)]
    assert sum(d.in_month for d in days) == 31
    assert all(len(week) == 7 for week in weeks(days))


def test_month_starting_on_sunday_has_no_leading_days():
    days = month_grid(2024, 9, today=date(2000, 1, 1))
    assert days[0].date == date(2024, 9, 1)
    assert not any(d.is_today for d in days)


def test_shift_month_wraps_years():
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2024, 1, -1) == (2023, 12)
    assert shift_month(2024, 5, 0) == (2024, 5)
    assert month_title(2024, 2) == "February 2024"


def test_tasks_are_grouped_by_due_date():
    tasks = [
        {"id": "1", "title": "b report", "status": "open", "due_date": "2024-05-03"},
        {"id": "2", "title": "A review", "status": "done", "due_date": "2024-05-03"},
        {"id": "3", "title": "a launch", "status": "in_progress", "due_date": "2024-05-03"},
        {"id": "4", "title": "Old", "status": "archived", "due_date": "2024-05-03"},
        {"id": "5", "title": "Fire", "status": "open", "due_date": None, "is_asap": True},
    ]
    grouped = tasks_by_date(tasks)
    assert list(grouped) == [date(2024, 5, 3)]
    assert [t["id"] for t in grouped[date(2024, 5, 3)]] == ["3", "1", "2"]


def test_asap_lane_holds_open_undated_work():
    tasks = [
        {"id": "asap", "status": "open", "due_date": "2024-05-03", "is_asap": True},
        {"id": "undated", "status": "in_progress", "due_date": None},
        {"id": "finished", "status": "done", "due_date": None, "is_asap": True},
        {"id": "dated", "status": "open", "due_date": "2024-05-03"},
    ]
    assert [t["id"] for t in asap_tasks(tasks)] == ["asap", "undated"]


def test_calendar_tasks_tag_workspace_names():
    workspaces = [{"id": "w1", "name": "Ops"}, {"id": "w2", "name": "Sales"}]
    stored = {"w1": [{"id": "t1", "title": "Patch"}], "w2": []}
    rows = calendar_tasks(workspaces, stored.__getitem__)
    assert rows == [{"id": "t1", "title": "Patch", "workspace_name": "Ops"}]
