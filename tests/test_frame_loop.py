from threading import Event

import pytest

from taskbubble.bubbles import FrameLoop, LayoutConfig, LayoutEngine, Viewport, VisibleItem

VIEWPORT = Viewport(800, 600)


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _loop(clock, sink=None, viewport=VIEWPORT, **kwargs):
    engine = LayoutEngine(LayoutConfig(), context="ws")
    loop = FrameLoop(engine, lambda: viewport, sink, clock=clock, **kwargs)
    loop.update_items([VisibleItem(id=f"t{i}", urgency=0.5, radius=40.0) for i in range(4)])
    return loop


def test_first_tick_does_not_advance_time():
    clock = FakeClock()
    loop = _loop(clock)
    frame = loop.tick()
    assert frame.dt == 0.0
    assert set(frame.positions) == {"t0", "t1", "t2", "t3"}


def test_tick_uses_elapsed_wall_time():
    clock = FakeClock()
    loop = _loop(clock)
    loop.tick()
    clock.advance(0.016)
    frame = loop.tick()
    assert frame.dt == pytest.approx(0.016)
    assert loop.engine.time == pytest.approx(0.016)


def test_long_stall_is_clamped_to_one_step():
    clock = FakeClock()
    loop = _loop(clock)
    loop.tick()
    clock.advance(5.0)
    frame = loop.tick()
    assert frame.dt == loop.engine.cfg.max_dt
    assert loop.engine.time == pytest.approx(loop.engine.cfg.max_dt)


def test_substeps_cover_coarse_refresh():
    clock = FakeClock()
    loop = _loop(clock, max_substeps=4)
    max_dt = loop.engine.cfg.max_dt

    loop.tick()
    clock.advance(0.1)
    loop.tick()
    assert loop.engine.time == pytest.approx(0.1)

    clock.advance(5.0)
    loop.tick()
    assert loop.engine.time == pytest.approx(0.1 + 4 * max_dt)


def test_pause_and_resume_keep_positions():
    clock = FakeClock()
    frames = []
    loop = _loop(clock, sink=frames.append)
    for _ in range(30):
        clock.advance(0.016)
        loop.tick()
    settled = loop.engine.positions()
    sim_time = loop.engine.time

    loop.pause()
    clock.advance(10.0)
    assert loop.tick() is None
    assert loop.engine.time == sim_time
    assert len(frames) == 30

    loop.resume()
    clock.advance(3.0)
    frame = loop.tick()
    assert frame.dt == 0.0
    assert frame.positions == settled
    assert len(frames) == 31


def test_empty_viewport_frames_are_counted():
    clock = FakeClock()
    loop = _loop(clock, viewport=Viewport(0, 0))
    clock.advance(0.016)
    frame = loop.tick()
    assert frame.skipped
    assert loop.state.skipped_frames == 1
    assert loop.state.frames == 1


def test_run_forever_stops_on_event():
    stop = Event()
    frames = []

    def sink(frame):
        frames.append(frame)
        if len(frames) >= 3:
            stop.set()

    engine = LayoutEngine(context="ws")
    loop = FrameLoop(engine, lambda: VIEWPORT, sink)
    loop.update_items([VisibleItem(id="solo", urgency=1.0, radius=60.0)])
    loop.run_forever(stop, fps=200)

    assert len(frames) == 3
    assert loop.state.frames == 3
    assert all("solo" in f.positions for f in frames)
