"""Turn a LiveState into an RGB frame.

The background is a shimmering tint of the background colour which fades to
grayscale once the signal gets old. The element (ring, disc, square,
triangle or cross) is alpha-blended on top in its pure colour. Everything is
evaluated per pixel with numpy on a grid centred on the display, where one
unit equals the shorter display side.
"""

import math

import numpy as np

from cubeConfig import GRAY_END_TIME, GRAY_START_TIME, SEGMENTS
from cubeModels import Geometry, LiveState

RADIUS = 0.25
BOX = 0.22
CROSS_REACH = 0.3
INACTIVE_WIDTH = 0.01
FEATHER = 0.03
LUMA = np.array([0.3, 0.59, 0.11], dtype=np.float32)


def smoothstep(e0, e1, x):
    t = np.clip((x - e0) / (e1 - e0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def mix(a, b, t):
    return a * (1.0 - t) + b * t


class FrameRenderer:
    def __init__(self, width, height, segments=SEGMENTS,
                 gray_start=GRAY_START_TIME, gray_end=GRAY_END_TIME):
        self.width = width
        self.height = height
        self.segments = segments
        self.gray_start = gray_start
        self.gray_end = gray_end

        ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
        scale = float(min(width, height))
        self.x = (xs + 0.5 - width / 2.0) / scale
        self.y = (height / 2.0 - ys - 0.5) / scale
        self.r = np.hypot(self.x, self.y)
        safe_r = np.maximum(self.r, 1e-6)
        self.nx = self.x / safe_r
        self.ny = self.y / safe_r
        # 0..1 around the centre, starting on the left
        self.angle = (np.arctan2(self.y, self.x) + math.pi) / (2.0 * math.pi)

    def _wobble(self, clock):
        return (np.sin(self.ny * 5.0 + clock * 2.0) - np.sin(self.nx * 5.0 + clock * 2.0)) / 100.0

    def _segment_blend(self, segments):
        phi = self.angle * self.segments
        total = np.zeros_like(phi)
        for i, value in enumerate(segments[: self.segments]):
            d = np.abs(phi - i)
            d = np.minimum(d, self.segments - d)
            total += smoothstep(1.0, 0.0, d) * value
        return np.clip(total / 100.0, 0.0, 1.0)

    def _arc_mask(self, pct):
        if pct >= 0.99:
            return np.ones_like(self.angle)
        start = smoothstep(0.0, FEATHER, self.angle)
        end = smoothstep(pct + FEATHER, pct - FEATHER, self.angle)
        return start * end

    def _background(self, live, age, clock):
        bg = np.array(live.background_color, dtype=np.float32)
        shift = (self.x + self.y + math.sin(clock * 0.5)) * 0.5
        rgb = np.stack(
            [
                bg[0] + np.sin(shift * math.pi) * 0.10,
                bg[1] + np.cos(shift * math.pi) * 0.10,
                bg[2] + np.sin(shift * 2.0 * math.pi) * 0.10,
            ],
            axis=-1,
        )
        if bg[2] > 0.5 and bg[0] < 0.3:
            rgb[..., 1] = np.clip(self.x + 0.4, 0.0, 1.0) * 1.1
            rgb[..., 2] *= 0.8

        energy = 0.65 + 0.35 * np.sin(6.0 * self.x + clock * 0.7) * np.cos(6.0 * self.y - clock * 0.5)
        rgb = np.clip(rgb * energy[..., None], 0.0, 1.0)

        fade = float(smoothstep(self.gray_start, self.gray_end, np.float32(age)))
        if fade > 0.0:
            gray = (rgb @ LUMA)[..., None]
            rgb = mix(rgb, gray, fade)
        return rgb

    def _shape(self, live, clock):
        wobble = self._wobble(clock)
        pmask = self._arc_mask(live.percent)
        w01 = min(max(live.width / 100.0, 0.0), 1.0)
        active = mix(0.003, 0.08, w01)
        base = mix(INACTIVE_WIDTH, active, pmask)
        seg = self._segment_blend(live.segments) * pmask
        w = base + base * seg * 0.1

        geom = live.geometry
        if geom == Geometry.RING:
            f = self.r + wobble
            return smoothstep(RADIUS - w, RADIUS, f) - smoothstep(RADIUS, RADIUS + w, f)
        if geom == Geometry.CIRCLE:
            edge = mix(0.01, 0.08, w01)
            return (1.0 - smoothstep(RADIUS - edge, RADIUS + edge, self.r + wobble)) * pmask
        if geom == Geometry.SQUARE:
            dx = np.abs(self.x) - BOX
            dy = np.abs(self.y) - BOX
            outside = np.hypot(np.maximum(dx, 0.0), np.maximum(dy, 0.0))
            f = outside + np.minimum(np.maximum(dx, dy), 0.0) + wobble
            return smoothstep(w, 0.0, np.abs(f))
        if geom == Geometry.TRIANGLE:
            k = math.sqrt(3.0)
            px = np.abs(self.x) - RADIUS
            py = self.y + RADIUS / k
            fold = px + k * py > 0.0
            px, py = (
                np.where(fold, (px - k * py) / 2.0, px),
                np.where(fold, (-k * px - py) / 2.0, py),
            )
            px = px - np.clip(px, -2.0 * RADIUS, 0.0)
            f = -np.hypot(px, py) * np.sign(py) + wobble
            return smoothstep(w, 0.0, np.abs(f))
        # cross
        dist = np.abs(np.abs(self.x) - np.abs(self.y)) + wobble * pmask
        return ((dist < w) & (self.r < CROSS_REACH)).astype(np.float32)

    def render(self, live: LiveState, age: float, clock: float) -> np.ndarray:
        background = self._background(live, age, clock)
        alpha = np.clip(self._shape(live, clock), 0.0, 1.0)[..., None]
        element = np.array(live.element_color, dtype=np.float32)
        composed = mix(background, element, alpha)
        return (np.clip(composed, 0.0, 1.0) * 255.0).astype(np.uint8)
