from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while Streamlit re-runs pages:
    - taskbubble logs pass, except the per-frame layout chatter below INFO
    - Python warnings captured as 'py.warnings' only at ERROR+
    - any third-party logger (streamlit, sqlalchemy, ...) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("taskbubble."):
            if name.startswith("taskbubble.bubbles."):
                return record.levelno >= logging.INFO
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


_configured = False


def setup_logging(
    *,
    log_dir: Optional[Union[str, Path]] = None,
    console_level: Union[int, str] = logging.INFO,
    file_level: int = logging.DEBUG,
    force: bool = False,
) -> None:
    """
    Configure the root logger with:
    - Console handler on stderr, filtered for interactive use
    - File handler (taskbubble.log) with full detail, when log_dir is given

    Streamlit executes page scripts on every rerun, so repeated calls are a
    no-op unless force=True.
    """
    global _configured
    if _configured and not force:
        return

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if isinstance(console_level, str):
        console_level = logging.getLevelName(console_level.upper())
        if not isinstance(console_level, int):
            console_level = logging.INFO

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "taskbubble.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _configured = True
