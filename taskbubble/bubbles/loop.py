from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Event
from typing import Callable, Iterable, Optional

from taskbubble.bubbles.engine import LayoutEngine
from taskbubble.bubbles.models import Frame, Viewport, VisibleItem

logger = logging.getLogger(__name__)

ViewportProvider = Callable[[], Viewport]
FrameSink = Callable[[Frame], None]


@dataclass
class FrameLoopState:
    started_at_utc: str
    frames: int = 0
    skipped_frames: int = 0
    last_frame: Optional[Frame] = None


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


class FrameLoop:
    """Drives a LayoutEngine from a clock, one tick per display refresh.

    The viewport is read synchronously on every tick and the resulting frame
    is handed to ``sink``. Pausing keeps the engine untouched, so a resumed
    board continues from the last positions instead of respawning.
    """

    def __init__(
        self,
        engine: LayoutEngine,
        viewport_provider: ViewportProvider,
        sink: Optional[FrameSink] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        max_substeps: Optional[int] = None,
    ) -> None:
        self.engine = engine
        self.viewport_provider = viewport_provider
        self.sink = sink
        self.clock = clock
        self.max_substeps = max(1, int(max_substeps or engine.cfg.max_substeps))
        self.state = FrameLoopState(started_at_utc=_utc_now_iso())
        self._last_tick: Optional[float] = None
        self._paused = False

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def last_frame(self) -> Optional[Frame]:
        return self.state.last_frame

    def update_items(self, items: Iterable[VisibleItem]) -> None:
        viewport = self.viewport_provider()
        self.engine.set_items(items, viewport)

    def pause(self) -> None:
        if not self._paused:
            logger.debug("Frame loop paused after %d frames", self.state.frames)
        self._paused = True

    def resume(self) -> None:
        if self._paused:
            logger.debug("Frame loop resumed with %d live bubbles", len(self.engine.nodes))
        self._paused = False
        # The hidden period is not simulated.
        self._last_tick = None

    def tick(self) -> Optional[Frame]:
        if self._paused:
            return None

        now = self.clock()
        elapsed = 0.0 if self._last_tick is None else max(0.0, now - self._last_tick)
        self._last_tick = now

        max_dt = self.engine.cfg.max_dt
        viewport = self.viewport_provider()

        frame = self.engine.step(min(elapsed, max_dt), viewport)
        remaining = elapsed - max_dt
        substeps = 1
        while remaining > 0 and substeps < self.max_substeps and not frame.skipped:
            frame = self.engine.step(min(remaining, max_dt), viewport)
            remaining -= max_dt
            substeps += 1

        self.state.frames += 1
        if frame.skipped:
            self.state.skipped_frames += 1
        self.state.last_frame = frame

        if self.sink is not None:
            self.sink(frame)
        return frame

    def run_forever(self, stop_event: Event, fps: float = 60.0) -> None:
        """Blocking loop for headless hosts; returns once ``stop_event`` is set."""
        interval = 1.0 / max(1.0, float(fps))
        logger.info("Frame loop running at %.0f fps", 1.0 / interval)
        while not stop_event.is_set():
            started = self.clock()
            self.tick()
            spent = self.clock() - started
            stop_event.wait(max(0.0, interval - spent))
        logger.info("Frame loop stopped after %d frames (%d skipped)", self.state.frames, self.state.skipped_frames)
