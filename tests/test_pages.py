"""Headless runs of the Streamlit pages against a throwaway SQLite store."""
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from streamlit.testing.v1 import AppTest

from taskbubble import config, tasks_repo

ROOT = Path(__file__).resolve().parents[1]


def _store_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{(tmp_path / 'pages.db').as_posix()}")
    monkeypatch.setenv("TASKBUBBLE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr(config, "_config", None)
    tasks_repo.configure()
    tasks_repo.init_db()
    ws = tasks_repo.create_workspace("Ops")
    tasks_repo.create_task(ws["id"], title="Patch servers", is_asap=True)
    yield ws
    tasks_repo.get_engine().dispose()


def _app(name):
    return AppTest.from_file(str(ROOT / name), default_timeout=30)


def test_landing_page_counts_open_tasks(store):
    at = _app("app.py").run()
    assert not at.exception
    assert [m.value for m in at.metric] == ["1", "1"]


def test_landing_page_shows_store_error(store, monkeypatch):
    monkeypatch.setattr(tasks_repo, "list_workspace_tasks", _store_down)
    at = _app("app.py").run()
    assert not at.exception
    assert "Could not reach the task store" in at.error[0].value
    assert any(b.label == "Retry" for b in at.button)


def test_board_join_code_lookup_error_is_shown(store, monkeypatch):
    at = _app("pages/1_Board.py").run()
    assert not at.exception

    monkeypatch.setattr(tasks_repo, "find_workspace_by_join_code", _store_down)
    at.text_input(key="tb_join_code").input("deadbeef")
    next(b for b in at.button if b.label == "Join").click()
    at.run()

    assert not at.exception
    assert any("Could not look up the join code" in e.value for e in at.error)


def test_calendar_page_lists_asap_work(store):
    at = _app("pages/2_Calendar.py").run()
    assert not at.exception
    assert any(b.label == "⚡ Patch servers" for b in at.button)


def test_calendar_page_shows_store_error(store, monkeypatch):
    monkeypatch.setattr(tasks_repo, "list_workspaces", _store_down)
    at = _app("pages/2_Calendar.py").run()
    assert not at.exception
    assert "Could not load the calendar" in at.error[0].value
