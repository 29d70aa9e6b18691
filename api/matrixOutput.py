import logging

import numpy as np

from cubeConfig import CubeConfig
from cubeErrors import DisplayInitError

try:
    import board
    import neopixel
    IS_PI = True
except ImportError:
    IS_PI = False
    board = None
    neopixel = None

logger = logging.getLogger(__name__)


def map_xy(x, y, config: CubeConfig):
    """Logical (x, y) to physical (x, y) on the chained panels."""
    mx, my = x, y

    # first panel is mounted mirrored
    if mx < config.panel_width:
        mx = config.panel_width - 1 - mx

    if config.flip_x:
        mx = (config.width - 1) - mx
    if config.flip_y:
        my = (config.height - 1) - my

    if config.reverse_panels:
        num_panels = config.width // config.panel_width
        panel = mx // config.panel_width
        inpanel = mx % config.panel_width
        mx = (num_panels - 1 - panel) * config.panel_width + inpanel

    return mx, my


def strip_index(mx, my, width):
    # serpentine wiring: odd rows run right to left
    if my % 2 == 0:
        return my * width + mx
    return my * width + (width - 1 - mx)


def build_index_map(config: CubeConfig):
    index = np.empty((config.height, config.width), dtype=np.int64)
    for y in range(config.height):
        for x in range(config.width):
            mx, my = map_xy(x, y, config)
            index[y, x] = strip_index(mx, my, config.width)
    return index


class NeoPixelMatrix:
    """WS2812 matrix driven through the Adafruit NeoPixel library."""

    def __init__(self, config: CubeConfig):
        self.config = config
        self.num_leds = config.width * config.height
        self._index = build_index_map(config).ravel()
        self.pixels = neopixel.NeoPixel(
            getattr(board, config.led_pin),
            self.num_leds,
            brightness=config.brightness,
            auto_write=False,
        )

    def show(self, frame):
        buf = np.zeros((self.num_leds, 3), dtype=np.uint8)
        buf[self._index] = frame.reshape(-1, 3)
        self.pixels[:] = [tuple(p) for p in buf.tolist()]
        self.pixels.show()

    def clear(self):
        self.pixels.fill((0, 0, 0))
        self.pixels.show()


class SimulatedMatrix:
    """Stand-in used when not running on a Pi. Keeps the last frame."""

    def __init__(self, config: CubeConfig):
        self.config = config
        self.frame = None
        self.frames_shown = 0
        self.cleared = False

    def show(self, frame):
        self.frame = frame
        self.frames_shown += 1
        self.cleared = False
        if self.frames_shown % (self.config.target_fps * 60) == 1:
            logger.debug("Simulated LED frame #%d, mean=%s", self.frames_shown, frame.mean(axis=(0, 1)))

    def clear(self):
        if not self.cleared:
            logger.debug("Simulated LED clear")
        self.frame = np.zeros((self.config.height, self.config.width, 3), dtype=np.uint8)
        self.cleared = True


def open_output(config: CubeConfig):
    if not IS_PI:
        logger.info("INIT: board/neopixel not available, simulating %dx%d matrix", config.width, config.height)
        return SimulatedMatrix(config)

    try:
        output = NeoPixelMatrix(config)
    except Exception as e:
        raise DisplayInitError(f"could not open LED matrix on {config.led_pin}: {e}") from e
    logger.info("INIT: LED matrix %dx%d on %s", config.width, config.height, config.led_pin)
    return output
