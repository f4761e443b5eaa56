from __future__ import annotations

from dataclasses import dataclass
from typing import Any

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class BoundingBox:
    """On-screen rectangle of the displayed raster, in client pixels."""

    left: float
    top: float
    width: float
    height: float

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def scaled(self, factor: float) -> BoundingBox:
        """Box after a scale transform about its own center."""
        width = self.width * factor
        height = self.height * factor
        return BoundingBox(
            left=self.left - (width - self.width) / 2.0,
            top=self.top - (height - self.height) / 2.0,
            width=width,
            height=height,
        )


@dataclass(frozen=True)
class PickResult:
    rgb: RGB
    hex: str
    hsl: str
    x: int | None = None
    y: int | None = None

    @property
    def rgb_string(self) -> str:
        return f"rgb({self.rgb[0]}, {self.rgb[1]}, {self.rgb[2]})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "hex": self.hex,
            "rgb": list(self.rgb),
            "rgb_string": self.rgb_string,
            "hsl": self.hsl,
            "x": self.x,
            "y": self.y,
        }


@dataclass(frozen=True)
class Palette:
    name: str
    colors: tuple[str, ...]
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "colors": list(self.colors),
            "createdAt": self.created_at,
        }
