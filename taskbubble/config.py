"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from taskbubble.config_utils import env_bool, env_float, env_int, env_optional_str, env_str


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration for the Streamlit app.

    Storage:
    - DATABASE_URL: SQLAlchemy URL (PostgreSQL, SQLite, ...)
    - If unset, defaults to local SQLite at data/taskbubble.db

    Logging:
    - TASKBUBBLE_LOG_LEVEL (default: INFO)
    - TASKBUBBLE_LOG_DIR (default: data/logs)

    Board:
    - TASKBUBBLE_BOARD_WIDTH / TASKBUBBLE_BOARD_HEIGHT: canvas size in px
    - TASKBUBBLE_REFRESH_SECONDS: how often the board fragment re-runs
    - TASKBUBBLE_COMPLETION_LINGER_SECONDS: how long a task marked done
      keeps floating before it leaves the board
    - TASKBUBBLE_DEFAULT_WORKSPACE: workspace name created on first run
    - TASKBUBBLE_ANIMATE: whether the board starts animated (default: true)
    """

    database_url: str
    log_level: str
    log_dir: Path

    board_width: int
    board_height: int
    refresh_seconds: float
    completion_linger_seconds: float
    default_workspace: str
    animate: bool

    @classmethod
    def from_env(cls) -> "AppConfig":
        db_url = env_optional_str("DATABASE_URL")
        if not db_url:
            data_dir = _repo_root() / "data"
            data_dir.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{(data_dir / 'taskbubble.db').as_posix()}"

        log_dir = Path(env_str("TASKBUBBLE_LOG_DIR", str(_repo_root() / "data" / "logs"))).expanduser()

        return cls(
            database_url=db_url,
            log_level=env_str("TASKBUBBLE_LOG_LEVEL", "INFO").upper(),
            log_dir=log_dir,
            board_width=max(200, env_int("TASKBUBBLE_BOARD_WIDTH", 900)),
            board_height=max(200, env_int("TASKBUBBLE_BOARD_HEIGHT", 560)),
            refresh_seconds=max(0.05, env_float("TASKBUBBLE_REFRESH_SECONDS", 0.1)),
            completion_linger_seconds=max(0.0, env_float("TASKBUBBLE_COMPLETION_LINGER_SECONDS", 1.5)),
            default_workspace=env_str("TASKBUBBLE_DEFAULT_WORKSPACE", "My Team"),
            animate=env_bool("TASKBUBBLE_ANIMATE", True),
        )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the application configuration (cached)."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config
