"""Fold a PartialCommand into the target state.

Reconciliation runs in two ordered passes:

1. ``apply_fields`` copies every field the command carries, clamping the
   ranged ones. Absent fields pass through.
2. ``normalize_mode`` enforces what the resulting mode implies. Heat mode
   always shows a white ring over the heat gradient (unless this very command
   sent an explicit background). Custom mode derives the background from a
   legacy ``colour`` once, only for commands that carry it.
"""

from dataclasses import replace

from colorControl import heat_level_to_rgb
from cubeErrors import ParseError
from cubeModels import WHITE, Geometry, Mode, PartialCommand, TargetState


def clamp(v, lo, hi):
    return lo if v < lo else (hi if v > hi else v)


def _clamp_rgb(rgb):
    return tuple(clamp(float(c), 0.0, 1.0) for c in rgb)


def merge_segments(previous, incoming):
    """Replace the leading slots, keep the rest."""
    n = len(incoming)
    return tuple(incoming) + tuple(previous[n:])


def apply_fields(prev: TargetState, cmd: PartialCommand) -> TargetState:
    changes = {}
    if cmd.mode is not None:
        changes["mode"] = Mode(cmd.mode)
    if cmd.geometry is not None:
        changes["geometry"] = Geometry(cmd.geometry)
    if cmd.colour is not None:
        changes["colour"] = clamp(cmd.colour, 0.0, 100.0)
    if cmd.width is not None:
        changes["width"] = clamp(cmd.width, 0.0, 100.0)
    if cmd.percent is not None:
        changes["percent"] = clamp(cmd.percent, 0.0, 1.0)
    if cmd.segments is not None:
        changes["segments"] = merge_segments(prev.segments, cmd.segments)
    if cmd.element_color is not None:
        changes["element_color"] = _clamp_rgb(cmd.element_color)
        changes["have_element_color"] = True
    if cmd.background_color is not None:
        changes["background_color"] = _clamp_rgb(cmd.background_color)
        changes["have_background_color"] = True
    return replace(prev, **changes)


def normalize_mode(state: TargetState, cmd: PartialCommand) -> TargetState:
    explicit_background = cmd.background_color is not None

    if state.mode == Mode.HEAT:
        changes = {
            "geometry": Geometry.RING,
            "element_color": WHITE,
            "have_element_color": True,
        }
        if not explicit_background:
            changes["background_color"] = heat_level_to_rgb(state.colour)
            changes["have_background_color"] = True
        return replace(state, **changes)

    # custom: no change detection, every colour-bearing command re-derives
    if cmd.colour is not None and not explicit_background:
        return replace(
            state,
            background_color=heat_level_to_rgb(state.colour),
            have_background_color=True,
        )
    return state


def reconcile(prev: TargetState, cmd: PartialCommand, now: float) -> TargetState:
    if cmd.is_empty():
        raise ParseError("no valid fields")
    state = apply_fields(prev, cmd)
    state = normalize_mode(state, cmd)
    return replace(state, updated_at=now)
