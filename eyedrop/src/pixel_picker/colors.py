from __future__ import annotations

import math
import re

from .models import RGB

_HEX_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{_clamp_channel(r):02x}{_clamp_channel(g):02x}{_clamp_channel(b):02x}"


def hex_to_rgb(value: str) -> RGB | None:
    """Parse ``#rrggbb``; anything else yields None."""
    if not isinstance(value, str) or not _HEX_PATTERN.fullmatch(value):
        return None
    return (
        int(value[1:3], 16),
        int(value[3:5], 16),
        int(value[5:7], 16),
    )


def rgb_to_hsl_components(r: int, g: int, b: int) -> tuple[int, int, int]:
    red = _clamp_channel(r) / 255.0
    green = _clamp_channel(g) / 255.0
    blue = _clamp_channel(b) / 255.0

    high = max(red, green, blue)
    low = min(red, green, blue)
    lightness = (high + low) / 2.0

    if high == low:
        return 0, 0, round_half_up(lightness * 100.0)

    delta = high - low
    saturation = delta / (1.0 - abs(2.0 * lightness - 1.0))

    if high == red:
        segment = ((green - blue) / delta) % 6.0
    elif high == green:
        segment = (blue - red) / delta + 2.0
    else:
        segment = (red - green) / delta + 4.0

    hue = round_half_up(segment * 60.0) % 360
    return hue, round_half_up(saturation * 100.0), round_half_up(lightness * 100.0)


def rgb_to_hsl(r: int, g: int, b: int) -> str:
    hue, saturation, lightness = rgb_to_hsl_components(r, g, b)
    return f"hsl({hue}, {saturation}%, {lightness}%)"


def _clamp_channel(value: float) -> int:
    return max(0, min(255, round_half_up(float(value))))
