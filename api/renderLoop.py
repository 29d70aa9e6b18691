import logging
import threading
import time
from typing import Callable, Optional

from cubeConfig import CubeConfig
from integrator import Integrator, TickResult
from stateStore import StateStore

logger = logging.getLogger(__name__)


class RenderLoop:
    """The single render worker.

    Each tick takes a target snapshot, advances the live state, then either
    renders a frame or blanks the output. A tick that fails to produce a frame
    blanks instead. The loop waits out the rest of each tick on an Event so
    ``stop`` wakes it immediately.
    """

    def __init__(self, store: StateStore, integrator: Integrator, renderer, output,
                 config: CubeConfig, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.integrator = integrator
        self.renderer = renderer
        self.output = output
        self.config = config
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.last_tick: Optional[TickResult] = None
        self.ticks = 0

    def tick(self) -> TickResult:
        now = self._clock()
        result = self.integrator.step(self.store.snapshot(), now)

        if result.blank:
            self.output.clear()
        else:
            try:
                frame = self.renderer.render(result.live, result.age, result.animation_clock)
                self.output.show(frame)
            except Exception:
                logger.exception("RENDER: frame failed, blanking")
                self.output.clear()

        # published as a whole for /status readers
        self.last_tick = result
        self.ticks += 1
        return result

    def run(self):
        logger.info("RENDER: Entering main loop (%d fps)", self.config.target_fps)
        period = self.config.tick_period
        while not self._stop.is_set():
            frame_start = time.monotonic()
            try:
                self.tick()
            except Exception:
                logger.exception("RENDER: tick failed")
            elapsed = time.monotonic() - frame_start
            if elapsed < period:
                self._stop.wait(period - elapsed)
        logger.info("RENDER: loop stopped after %d ticks", self.ticks)

    def start(self):
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="render-loop", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Signal the thread and wait for it. Returns False if it is still alive."""
        self._stop.set()
        if self._thread is None:
            return True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("RENDER: thread still busy after %s s", timeout)
            return False
        self._thread = None
        return True

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
