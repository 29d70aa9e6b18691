"""Turn a raw /update body into a PartialCommand.

Keys are checked one by one. A key that is missing is simply absent; a key
with the wrong JSON type or an unusable value is dropped and recorded as a
FieldIssue so it can be logged. Only a body that is not a JSON object, or one
left with no usable keys, is rejected as a whole.
"""

import json
import logging
import math
import sys

from colorControl import hex_to_rgb
from cubeConfig import SEGMENTS
from cubeErrors import ParseError
from cubeModels import FieldIssue, Geometry, Mode, PartialCommand

logger = logging.getLogger(__name__)

# wire key -> PartialCommand field
NUMBER_KEYS = {"colour": "colour", "width": "width", "percent": "percent"}
COLOR_KEYS = {"elementColor": "element_color", "backgroundColor": "background_color"}


class _Dropped(Exception):
    def __init__(self, kind, detail):
        self.kind = kind
        self.detail = detail
        super().__init__(detail)


def _number(value):
    # bool is an int subclass; true/false are not numbers on the wire
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _Dropped("wrong_type", f"expected number, got {type(value).__name__}")
    try:
        value = float(value)
    except OverflowError:
        # integer too big for a float; keep the sign so clamping still works
        value = sys.float_info.max if value > 0 else -sys.float_info.max
    if not math.isfinite(value):
        raise _Dropped("malformed", "not a finite number")
    return value


def _choice(value, enum_cls):
    if not isinstance(value, str):
        raise _Dropped("wrong_type", f"expected string, got {type(value).__name__}")
    try:
        return enum_cls(value)
    except ValueError:
        raise _Dropped("malformed", f"unknown value {value!r}") from None


def _color(value):
    if not isinstance(value, str):
        raise _Dropped("wrong_type", f"expected string, got {type(value).__name__}")
    rgb = hex_to_rgb(value)
    if rgb is None:
        raise _Dropped("malformed", f"not a hex colour: {value!r}")
    return rgb


def _segments(value):
    if not isinstance(value, list):
        raise _Dropped("wrong_type", f"expected array, got {type(value).__name__}")
    return tuple(_number(v) for v in value[:SEGMENTS])


def decode_body(raw):
    """Decode bytes/str into a JSON object or raise ParseError('invalid body')."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError("invalid body", str(e)) from e
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise ParseError("invalid body", str(e)) from e
    if not isinstance(data, dict):
        raise ParseError("invalid body", "top level is not an object")
    return data


def parse_command(raw) -> PartialCommand:
    data = decode_body(raw)

    values = {}
    issues = []

    def take(key, field_name, convert, *args):
        if key not in data:
            return
        try:
            values[field_name] = convert(data[key], *args)
        except _Dropped as e:
            issues.append(FieldIssue(key=key, kind=e.kind, detail=e.detail))

    take("mode", "mode", _choice, Mode)
    take("geometry", "geometry", _choice, Geometry)
    for key, field_name in NUMBER_KEYS.items():
        take(key, field_name, _number)
    for key, field_name in COLOR_KEYS.items():
        take(key, field_name, _color)
    take("segments", "segments", _segments)

    for issue in issues:
        logger.debug("API: dropped field %s (%s: %s)", issue.key, issue.kind, issue.detail)

    cmd = PartialCommand(issues=tuple(issues), **values)
    if cmd.is_empty():
        raise ParseError("no valid fields", ", ".join(i.key for i in issues))
    return cmd
