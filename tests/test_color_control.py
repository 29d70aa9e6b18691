import pytest

from colorControl import heat_level_to_rgb, hex_to_rgb, rgb_to_hex


def test_hex_to_rgb_with_and_without_hash() -> None:
    assert hex_to_rgb("#00FF00") == (0.0, 1.0, 0.0)
    assert hex_to_rgb("00ff00") == (0.0, 1.0, 0.0)
    assert hex_to_rgb("#FfFfFf") == (1.0, 1.0, 1.0)


@pytest.mark.parametrize("text", ["bad", "", "#", "#12345", "#1234567", "#GG0000", "0x00ff00", None, 123])
def test_hex_to_rgb_rejects_malformed(text) -> None:
    assert hex_to_rgb(text) is None


def test_rgb_to_hex() -> None:
    assert rgb_to_hex((0.0, 1.0, 0.0)) == "#00ff00"
    assert rgb_to_hex((2.0, -1.0, 0.5)) == "#ff0080"


def test_heat_gradient_endpoints() -> None:
    assert heat_level_to_rgb(0) == (0.0, 0.0, 0.4)
    assert heat_level_to_rgb(33) == pytest.approx((0.0, 0.5, 0.8))
    assert heat_level_to_rgb(66) == pytest.approx((1.0, 1.0, 0.0))
    assert heat_level_to_rgb(100) == pytest.approx((1.0, 0.0, 0.0))


def test_heat_gradient_clamps_level() -> None:
    assert heat_level_to_rgb(-20) == heat_level_to_rgb(0)
    assert heat_level_to_rgb(250) == heat_level_to_rgb(100)


def test_heat_gradient_cold_segment_values() -> None:
    t = 15 / 33
    assert heat_level_to_rgb(15) == pytest.approx((0.0, 0.5 * t, 0.4 + 0.4 * t))


def test_heat_gradient_medium_segment_values() -> None:
    assert heat_level_to_rgb(49.5) == pytest.approx((0.5, 0.75, 0.4))


@pytest.mark.parametrize("breakpoint", [33.0, 66.0])
def test_heat_gradient_is_continuous_at_breakpoints(breakpoint) -> None:
    eps = 1e-6
    below = heat_level_to_rgb(breakpoint - eps)
    above = heat_level_to_rgb(breakpoint + eps)
    assert below == pytest.approx(above, abs=1e-4)
    assert heat_level_to_rgb(breakpoint) == pytest.approx(above, abs=1e-4)


def test_heat_gradient_stays_in_range() -> None:
    for level in range(0, 101):
        assert all(0.0 <= c <= 1.0 for c in heat_level_to_rgb(level))
