"""Process-lifetime configuration for the cube controller."""

import dataclasses
import os
from typing import Any

API_TOKEN = "1234567890"
API_PORT = 8080

MATRIX_W = 192          # 3x 64px panels
MATRIX_H = 64
PANEL_W = 64
SEGMENTS = 10

BLANK_INTERVAL = 0      # seconds of silence before blanking, 0 disables
ANIM_STEP = 40.0        # scalar units per second
COLOR_STEP = 2.0        # colour channel units per second
TARGET_FPS = 40
MAX_TICK = 0.1

GRAY_START_TIME = 60.0  # animation clock freezes, grayscale fade begins
GRAY_END_TIME = 70.0
BOOT_AGE = 10.0


def _env_bool(value, default):
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class CubeConfig:
    """Static facts about the display and the render loop.

    Parameters
    ----------
    api_token : str
        Shared secret expected in the ``X-API-Token`` header.
    width, height : int
        Logical display size in pixels.
    panel_width : int
        Width of one physical panel, used for remapping.
    segments : int
        Number of segment slots in every state.
    blank_interval : float
        Seconds without commands before the output is cleared. ``0`` never
        blanks.
    anim_step, color_step : float
        Maximum change per second for scalar fields and colour channels.
    target_fps : int
        Render ticks per second.
    max_tick : float
        Upper bound for the elapsed time fed into one tick.
    gray_start, gray_end : float
        Signal age window of the background grayscale fade. ``gray_start``
        is also where the animation clock freezes.
    boot_age : float
        Signal age reported right after startup.
    """

    api_token: str = API_TOKEN
    host: str = "0.0.0.0"
    port: int = API_PORT
    width: int = MATRIX_W
    height: int = MATRIX_H
    panel_width: int = PANEL_W
    segments: int = SEGMENTS
    blank_interval: float = BLANK_INTERVAL
    anim_step: float = ANIM_STEP
    color_step: float = COLOR_STEP
    target_fps: int = TARGET_FPS
    max_tick: float = MAX_TICK
    gray_start: float = GRAY_START_TIME
    gray_end: float = GRAY_END_TIME
    boot_age: float = BOOT_AGE
    flip_x: bool = False
    flip_y: bool = False
    reverse_panels: bool = False
    led_pin: str = "D18"
    brightness: float = 1.0

    @property
    def tick_period(self) -> float:
        return 1.0 / self.target_fps

    def public_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "segments": self.segments,
            "blankInterval": self.blank_interval,
            "animStep": self.anim_step,
            "targetFps": self.target_fps,
        }

    @classmethod
    def from_env(cls, **overrides: Any) -> "CubeConfig":
        """Build a config from ``CUBE_*`` environment variables.

        Explicit keyword arguments take precedence over the environment.
        """
        env = os.environ
        kwargs: dict = {}

        _ENV_STR = {
            "CUBE_API_TOKEN": "api_token",
            "CUBE_HOST": "host",
            "CUBE_LED_PIN": "led_pin",
        }
        _ENV_INT = {
            "CUBE_PORT": "port",
            "CUBE_WIDTH": "width",
            "CUBE_HEIGHT": "height",
            "CUBE_PANEL_WIDTH": "panel_width",
            "CUBE_TARGET_FPS": "target_fps",
        }
        _ENV_FLOAT = {
            "CUBE_BLANK_INTERVAL": "blank_interval",
            "CUBE_ANIM_STEP": "anim_step",
            "CUBE_COLOR_STEP": "color_step",
            "CUBE_GRAY_START": "gray_start",
            "CUBE_GRAY_END": "gray_end",
            "CUBE_BRIGHTNESS": "brightness",
        }
        _ENV_BOOL = {
            "CUBE_FLIP_X": "flip_x",
            "CUBE_FLIP_Y": "flip_y",
            "CUBE_REVERSE_PANELS": "reverse_panels",
        }

        for env_key, field_name in _ENV_STR.items():
            val = env.get(env_key)
            if val is not None:
                kwargs[field_name] = val
        for env_key, field_name in _ENV_INT.items():
            val = env.get(env_key)
            if val is not None:
                kwargs[field_name] = int(val)
        for env_key, field_name in _ENV_FLOAT.items():
            val = env.get(env_key)
            if val is not None:
                kwargs[field_name] = float(val)
        for env_key, field_name in _ENV_BOOL.items():
            kwargs[field_name] = _env_bool(env.get(env_key), False)

        kwargs.update(overrides)
        return cls(**kwargs)
