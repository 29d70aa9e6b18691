import string

HEX_DIGITS = set(string.hexdigits)


def _clamp01(v):
    return 0.0 if v < 0.0 else (1.0 if v > 1.0 else v)


def hex_to_rgb(text):
    """Parse ``#RRGGBB`` or ``RRGGBB`` into channels in [0, 1].

    Returns None for anything else.
    """
    if not isinstance(text, str):
        return None
    h = text[1:] if text.startswith("#") else text
    if len(h) != 6 or not all(c in HEX_DIGITS for c in h):
        return None
    r = int(h[0:2], 16)
    g = int(h[2:4], 16)
    b = int(h[4:6], 16)
    return (r / 255.0, g / 255.0, b / 255.0)


def rgb_to_hex(rgb):
    r, g, b = (int(round(_clamp01(c) * 255)) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def heat_level_to_rgb(level):
    """Map a heat level (0..100) onto the background gradient.

    0-33 deep blue to teal, 33-66 teal to yellow, 66-100 yellow to red.
    Segments meet at (0, 0.5, 0.8) and (1, 1, 0).

    The middle segment is (t, 0.5 + 0.5t, 0.8(1 - t)), not the older
    (t, 0.6 + 0.4t, 1 - t), which jumped from (0, 0.5, 0.8) to (0, 0.6, 1.0)
    at level 33. Both reach yellow at 66; the other segments are unchanged.
    """
    c = max(0.0, min(100.0, float(level)))

    if c <= 33.0:
        t = c / 33.0
        return (0.0, 0.5 * t, 0.4 + 0.4 * t)
    if c <= 66.0:
        t = (c - 33.0) / 33.0
        return (t, 0.5 + 0.5 * t, 0.8 * (1.0 - t))
    t = (c - 66.0) / 34.0
    return (1.0, 1.0 - t, 0.0)

