from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from cubeConfig import SEGMENTS

RGB = Tuple[float, float, float]

WHITE: RGB = (1.0, 1.0, 1.0)
BLUE: RGB = (0.0, 0.0, 1.0)


class Mode(str, Enum):
    HEAT = "heat"
    CUSTOM = "custom"


class Geometry(str, Enum):
    RING = "ring"
    CIRCLE = "circle"
    SQUARE = "square"
    TRIANGLE = "triangle"
    CROSS = "x"


class FieldIssue(BaseModel):
    """Why a recognized key was dropped from a command."""

    model_config = ConfigDict(frozen=True)

    key: str
    kind: str  # "wrong_type" or "malformed"
    detail: str = ""


class PartialCommand(BaseModel):
    """One update request. ``None`` means the client had no opinion."""

    model_config = ConfigDict(frozen=True)

    mode: Optional[Mode] = None
    geometry: Optional[Geometry] = None
    colour: Optional[float] = None
    width: Optional[float] = None
    percent: Optional[float] = None
    element_color: Optional[RGB] = None
    background_color: Optional[RGB] = None
    segments: Optional[Tuple[float, ...]] = None
    issues: Tuple[FieldIssue, ...] = ()

    def recognized_fields(self) -> List[str]:
        return [
            name
            for name in _COMMAND_FIELDS
            if getattr(self, name) is not None
        ]

    def is_empty(self) -> bool:
        return not self.recognized_fields()


_COMMAND_FIELDS = (
    "mode",
    "geometry",
    "colour",
    "width",
    "percent",
    "element_color",
    "background_color",
    "segments",
)


@dataclass(frozen=True)
class TargetState:
    """Latest accepted appearance. Replaced as a whole on every update."""

    mode: Mode = Mode.HEAT
    geometry: Geometry = Geometry.RING
    colour: float = 30.0
    width: float = 20.0
    percent: float = 1.0
    element_color: RGB = WHITE
    background_color: RGB = BLUE
    segments: Tuple[float, ...] = field(default=(0.0,) * SEGMENTS)
    have_element_color: bool = False
    have_background_color: bool = False
    updated_at: float = 0.0


@dataclass(frozen=True)
class LiveState:
    """Per-tick interpolated state handed to the renderer."""

    mode: Mode = Mode.HEAT
    geometry: Geometry = Geometry.RING
    colour: float = 30.0
    width: float = 20.0
    percent: float = 1.0
    element_color: RGB = WHITE
    background_color: RGB = BLUE
    segments: Tuple[float, ...] = field(default=(0.0,) * SEGMENTS)

    def status_fields(self) -> Dict[str, object]:
        return {
            "colour": self.colour,
            "geometry": self.geometry.value,
            "segments": list(self.segments),
            "mode": self.mode.value,
            "width": self.width,
            "percent": self.percent,
        }
