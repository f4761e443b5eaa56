from __future__ import annotations

from dataclasses import dataclass, field

from .config import DEFAULT_CONFIG, PickerConfig
from .models import BoundingBox


@dataclass
class ZoomState:
    """Visual magnification of the displayed raster.

    Never touches buffer dimensions; sampling goes through the on-screen box.
    """

    config: PickerConfig = field(default_factory=lambda: DEFAULT_CONFIG)
    level: float = 1.0

    def __post_init__(self) -> None:
        self.level = self._bounded(self.level)

    def zoom_in(self) -> float:
        self.level = self._bounded(self.level + self.config.zoom_step)
        return self.level

    def zoom_out(self) -> float:
        self.level = self._bounded(self.level - self.config.zoom_step)
        return self.level

    def reset(self) -> float:
        self.level = self._bounded(1.0)
        return self.level

    def set_level(self, value: float) -> float:
        self.level = self._bounded(value)
        return self.level

    def toggle(self) -> float:
        if self.level > self.config.zoom_min:
            self.level = self.config.zoom_min
        else:
            self.level = self._bounded(self.config.zoom_toggle_level)
        return self.level

    def display_box(self, layout_box: BoundingBox) -> BoundingBox:
        return layout_box.scaled(self.level)

    def _bounded(self, value: float) -> float:
        # Round away float drift from repeated steps.
        value = round(value, 4)
        return max(self.config.zoom_min, min(self.config.zoom_max, value))
