"""Color conversions for the Nanoleaf state API.

The device has no RGB input, so RGB colors are sent as hue, saturation and
brightness. ``rgb_to_hsl`` must match the device's own interpretation exactly.
"""

from __future__ import annotations

import math


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero.

    Python's ``round`` uses banker's rounding (``round(0.5) == 0``), which
    disagrees with the device for exact halves.
    """
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return int(math.copysign(whole, value))


def rgb_to_hsl(red: int, green: int, blue: int) -> tuple[int, int, int]:
    """
    Convert an RGB color to integer hue, saturation and lightness.

    Args:
        red: Red channel (0-255)
        green: Green channel (0-255)
        blue: Blue channel (0-255)

    Returns:
        Tuple of (hue 0-360, saturation 0-100, lightness 0-100)

    Examples:
        >>> rgb_to_hsl(255, 0, 0)
        (0, 100, 50)
        >>> rgb_to_hsl(0, 0, 255)
        (240, 100, 50)
    """
    r = red / 255.0
    g = green / 255.0
    b = blue / 255.0

    low = min(r, g, b)
    high = max(r, g, b)

    chroma = high - low
    lightness = (high + low) / 2

    if chroma == 0:  # achromatic
        return 0, 0, round_half_away(100 * lightness)

    if high == r:
        hue = 0 + (g - b) / chroma
    elif high == g:
        hue = 2 + (b - r) / chroma
    else:
        hue = 4 + (r - g) / chroma
    hue *= 60
    if hue < 0:
        hue += 360

    saturation = (high - lightness) / min(lightness, 1 - lightness)

    # 359.5 and up rounds to 360, which is the same angle as 0
    return (
        round_half_away(hue) % 360,
        round_half_away(100 * saturation),
        round_half_away(100 * lightness),
    )
