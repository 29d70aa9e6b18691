import json
import sys

import pytest

from commandParser import decode_body, parse_command
from cubeErrors import ParseError
from cubeModels import Geometry, Mode


def _parse(payload):
    return parse_command(json.dumps(payload).encode())


def test_custom_payload_fully_parsed() -> None:
    cmd = _parse(
        {
            "mode": "custom",
            "geometry": "square",
            "width": 60,
            "percent": 0.5,
            "elementColor": "#00FF00",
            "backgroundColor": "#110022",
        }
    )
    assert cmd.mode == Mode.CUSTOM
    assert cmd.geometry == Geometry.SQUARE
    assert cmd.width == 60.0
    assert cmd.percent == 0.5
    assert cmd.element_color == (0.0, 1.0, 0.0)
    assert cmd.background_color == pytest.approx((0x11 / 255, 0.0, 0x22 / 255))
    assert cmd.colour is None
    assert cmd.segments is None
    assert cmd.issues == ()


def test_cross_geometry_uses_x_on_the_wire() -> None:
    assert _parse({"geometry": "x"}).geometry == Geometry.CROSS


def test_unknown_keys_are_ignored() -> None:
    cmd = _parse({"colour": 15, "usage": 3, "foo": {"bar": 1}})
    assert cmd.recognized_fields() == ["colour"]


def test_malformed_field_is_dropped_not_fatal() -> None:
    cmd = _parse({"colour": 15, "elementColor": "#zzzzzz", "geometry": "hexagon"})
    assert cmd.colour == 15.0
    assert cmd.element_color is None
    assert cmd.geometry is None
    kinds = {issue.key: issue.kind for issue in cmd.issues}
    assert kinds == {"elementColor": "malformed", "geometry": "malformed"}


def test_wrong_types_are_reported_separately() -> None:
    cmd = _parse({"width": "60", "percent": True, "mode": 1, "colour": 10})
    assert cmd.recognized_fields() == ["colour"]
    kinds = {issue.key: issue.kind for issue in cmd.issues}
    assert kinds == {"width": "wrong_type", "percent": "wrong_type", "mode": "wrong_type"}


def test_out_of_range_values_are_kept_raw() -> None:
    cmd = _parse({"width": 150, "percent": -2})
    assert cmd.width == 150.0
    assert cmd.percent == -2.0


def test_oversized_integer_saturates_without_dropping_other_fields() -> None:
    cmd = _parse({"colour": 10**400, "width": 50})
    assert cmd.colour == sys.float_info.max
    assert cmd.width == 50.0
    assert cmd.issues == ()


def test_oversized_negative_integer_keeps_its_sign() -> None:
    assert _parse({"percent": -(10**400)}).percent == -sys.float_info.max


def test_oversized_integer_in_segments() -> None:
    cmd = _parse({"segments": [10**400, 5]})
    assert cmd.segments == (sys.float_info.max, 5.0)


def test_segments_truncated_to_ten() -> None:
    cmd = _parse({"segments": list(range(1, 15))})
    assert cmd.segments == tuple(float(i) for i in range(1, 11))


def test_short_segment_list_is_kept_short() -> None:
    assert _parse({"segments": [5, 6.5]}).segments == (5.0, 6.5)


def test_empty_segment_list_still_counts() -> None:
    cmd = _parse({"segments": []})
    assert cmd.segments == ()
    assert not cmd.is_empty()


def test_segments_with_non_number_dropped() -> None:
    cmd = _parse({"segments": [1, "two", 3], "width": 5})
    assert cmd.segments is None
    assert cmd.width == 5.0


def test_zero_recognized_fields_rejected() -> None:
    with pytest.raises(ParseError) as exc:
        _parse({"foo": 1, "colour": "hot"})
    assert exc.value.reason == "no valid fields"


def test_empty_object_rejected() -> None:
    with pytest.raises(ParseError) as exc:
        parse_command(b"{}")
    assert exc.value.reason == "no valid fields"


@pytest.mark.parametrize("raw", [b"", b"not json", b"[1, 2]", b"42", b"\xff\xfe", b'{"colour": 1'])
def test_invalid_body(raw) -> None:
    with pytest.raises(ParseError) as exc:
        parse_command(raw)
    assert exc.value.reason == "invalid body"


def test_deeply_nested_body_is_invalid() -> None:
    with pytest.raises(ParseError) as exc:
        decode_body(b"[" * 100000 + b"]" * 100000)
    assert exc.value.reason == "invalid body"


def test_decode_body_accepts_str() -> None:
    assert decode_body('{"mode": "heat"}') == {"mode": "heat"}


def test_non_finite_number_is_malformed() -> None:
    cmd = parse_command(b'{"colour": NaN, "width": 3}')
    assert cmd.colour is None
    assert cmd.issues[0].kind == "malformed"
