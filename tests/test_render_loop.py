import threading
import time

import numpy as np
import pytest

from cubeConfig import CubeConfig
from cubeModels import PartialCommand
from integrator import Integrator
from renderLoop import RenderLoop
from stateStore import StateStore


class RecordingRenderer:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def render(self, live, age, clock):
        self.calls.append((live, age, clock))
        if self.fail:
            raise RuntimeError("shader exploded")
        return np.zeros((2, 2, 3), dtype=np.uint8)


class RecordingOutput:
    def __init__(self):
        self.shown = 0
        self.cleared = 0

    def show(self, frame):
        self.shown += 1

    def clear(self):
        self.cleared += 1


def _loop(clock, config, renderer=None):
    store = StateStore(clock=clock, boot_age=0.0)
    renderer = renderer or RecordingRenderer()
    output = RecordingOutput()
    loop = RenderLoop(store, Integrator(config), renderer, output, config, clock=clock)
    return loop, store, renderer, output


def test_tick_renders_live_state(clock) -> None:
    loop, store, renderer, output = _loop(clock, CubeConfig(blank_interval=0))
    store.apply(PartialCommand(colour=60))
    clock.advance(0.05)

    result = loop.tick()

    assert output.shown == 1
    assert output.cleared == 0
    live, age, anim_clock = renderer.calls[0]
    assert live is result.live
    assert age == pytest.approx(0.05)
    assert anim_clock == clock.now
    assert loop.last_tick is result


def test_blank_interval_zero_never_blanks(clock) -> None:
    loop, _, renderer, output = _loop(clock, CubeConfig(blank_interval=0))
    clock.advance(100_000.0)
    loop.tick()
    assert output.shown == 1
    assert output.cleared == 0


def test_stale_signal_blanks_instead_of_rendering(clock) -> None:
    loop, _, renderer, output = _loop(clock, CubeConfig(blank_interval=30))
    clock.advance(31.0)
    result = loop.tick()
    assert result.blank
    assert renderer.calls == []
    assert output.cleared == 1


def test_render_failure_falls_back_to_blank(clock) -> None:
    loop, _, _, output = _loop(clock, CubeConfig(), renderer=RecordingRenderer(fail=True))
    loop.tick()
    assert output.shown == 0
    assert output.cleared == 1


def test_thread_starts_and_stops(clock) -> None:
    loop, _, _, output = _loop(clock, CubeConfig(target_fps=200))
    loop.start()
    deadline = time.monotonic() + 2.0
    while loop.ticks < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    loop.stop(timeout=2.0)

    assert loop.ticks >= 3
    assert not loop.running
    assert output.shown == loop.ticks


class BlockingRenderer:
    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def render(self, live, age, clock):
        self.entered.set()
        self.release.wait(5.0)
        return np.zeros((2, 2, 3), dtype=np.uint8)


def test_stop_timeout_keeps_busy_thread_visible(clock) -> None:
    renderer = BlockingRenderer()
    loop, _, _, output = _loop(clock, CubeConfig(target_fps=200), renderer)
    loop.start()
    assert renderer.entered.wait(2.0)

    assert loop.stop(timeout=0.05) is False
    assert loop.running

    renderer.release.set()
    assert loop.stop(timeout=2.0) is True
    assert not loop.running
