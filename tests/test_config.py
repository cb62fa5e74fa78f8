import logging
from dataclasses import replace

import pytest

from taskbubble.bubbles import LayoutConfig, LayoutConfigError
from taskbubble.config import AppConfig
from taskbubble.config_utils import env_bool, env_float, env_int, env_optional_str
from taskbubble.logging_setup import _ConsoleNoiseFilter, setup_logging


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("TB_FLAG", "yes")
    monkeypatch.setenv("TB_NUM", " 12 ")
    monkeypatch.setenv("TB_BAD", "twelve")
    monkeypatch.setenv("TB_BLANK", "   ")
    assert env_bool("TB_FLAG", False) is True
    assert env_bool("TB_BAD", True) is True
    assert env_int("TB_NUM", 0) == 12
    assert env_int("TB_BAD", 3) == 3
    assert env_float("TB_NUM", 0.0) == 12.0
    assert env_float("TB_BLANK", 1.5) == 1.5
    assert env_optional_str("TB_BLANK", "TB_NUM") == "12"
    assert env_optional_str("TB_MISSING") is None


def test_layout_config_from_env(monkeypatch):
    monkeypatch.setenv("BUBBLE_STIFFNESS", "8")
    monkeypatch.setenv("BUBBLE_COLLISION_ITERATIONS", "3")
    monkeypatch.setenv("BUBBLE_DAMPING", "not-a-number")
    cfg = LayoutConfig.from_env(max_dt=0.05)
    assert cfg.stiffness == 8.0
    assert cfg.collision_iterations == 3
    assert isinstance(cfg.collision_iterations, int)
    assert cfg.damping == LayoutConfig().damping
    assert cfg.max_dt == 0.05


@pytest.mark.parametrize(
    "changes",
    [
        {"min_radius": 0},
        {"min_radius": 90, "max_radius": 80},
        {"damping": 1.5},
        {"restitution": -0.1},
        {"max_dt": 0},
        {"collision_iterations": 0},
        {"min_spawn_speed": 50, "max_spawn_speed": 10},
    ],
)
def test_layout_config_rejects_degenerate_values(changes):
    with pytest.raises(LayoutConfigError):
        replace(LayoutConfig(), **changes)


def test_app_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("TASKBUBBLE_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("TASKBUBBLE_BOARD_WIDTH", "50")
    monkeypatch.setenv("TASKBUBBLE_REFRESH_SECONDS", "0.25")
    monkeypatch.setenv("TASKBUBBLE_ANIMATE", "off")
    cfg = AppConfig.from_env()
    assert cfg.database_url == "sqlite:///:memory:"
    assert cfg.log_dir == tmp_path
    assert cfg.board_width == 200
    assert cfg.refresh_seconds == 0.25
    assert cfg.log_level == "INFO"
    assert cfg.animate is False


def test_console_filter():
    flt = _ConsoleNoiseFilter()

    def record(name, level):
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert flt.filter(record("taskbubble.tasks_repo", logging.INFO))
    assert not flt.filter(record("taskbubble.bubbles.engine", logging.DEBUG))
    assert not flt.filter(record("streamlit.runtime", logging.WARNING))
    assert flt.filter(record("streamlit.runtime", logging.ERROR))


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved = list(root.handlers)
    try:
        setup_logging(log_dir=tmp_path, console_level="WARNING", force=True)
        logging.getLogger("taskbubble.test").debug("hello file")
        for h in root.handlers:
            h.flush()
        assert "hello file" in (tmp_path / "taskbubble.log").read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved:
            root.addHandler(h)
