"""Per-tick advance of the live state toward the target state."""

from dataclasses import dataclass
from typing import Optional

from cubeConfig import CubeConfig
from cubeModels import LiveState, TargetState


def approach(current, target, max_step):
    """Move ``current`` toward ``target`` by at most ``max_step``."""
    delta = target - current
    if delta > max_step:
        return current + max_step
    if delta < -max_step:
        return current - max_step
    return target


def clamp_elapsed(dt, max_tick):
    return 0.0 if dt < 0.0 else (max_tick if dt > max_tick else dt)


def animation_clock(now, updated_at, grace):
    # freeze effects while the signal is stale
    age = now - updated_at
    return now if age < grace else updated_at


def should_blank(age, blank_interval):
    return blank_interval != 0 and age >= blank_interval


def is_quiet(age, blank_interval):
    return blank_interval != 0 and age > blank_interval


@dataclass(frozen=True)
class TickResult:
    live: LiveState
    dt: float
    age: float
    animation_clock: float
    blank: bool


class Integrator:
    """Rate-limited chase of the target, one call per render tick.

    The live state starts from the boot defaults. Scalars move by at most
    ``anim_step * dt`` and colour channels by ``color_step * dt``, with ``dt``
    clamped to ``max_tick`` so a stall never causes a jump. Mode and geometry
    switch instantly.
    """

    def __init__(self, config: CubeConfig, live: Optional[LiveState] = None):
        self.config = config
        self.live = live if live is not None else LiveState()
        self._last_tick = None

    def advance(self, target: TargetState, dt: float) -> LiveState:
        live = self.live
        step = self.config.anim_step * dt
        cstep = self.config.color_step * dt

        self.live = LiveState(
            mode=target.mode,
            geometry=target.geometry,
            colour=approach(live.colour, target.colour, step),
            width=approach(live.width, target.width, step),
            percent=approach(live.percent, target.percent, step),
            segments=tuple(
                approach(c, t, step) for c, t in zip(live.segments, target.segments)
            ),
            element_color=tuple(
                approach(c, t, cstep) for c, t in zip(live.element_color, target.element_color)
            ),
            background_color=tuple(
                approach(c, t, cstep) for c, t in zip(live.background_color, target.background_color)
            ),
        )
        return self.live

    def step(self, target: TargetState, now: float) -> TickResult:
        if self._last_tick is None:
            dt = 0.0
        else:
            dt = clamp_elapsed(now - self._last_tick, self.config.max_tick)
        self._last_tick = now

        live = self.advance(target, dt)
        age = now - target.updated_at
        return TickResult(
            live=live,
            dt=dt,
            age=age,
            animation_clock=animation_clock(now, target.updated_at, self.config.gray_start),
            blank=should_blank(age, self.config.blank_interval),
        )
