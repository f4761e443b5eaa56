from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PickerConfig:
    max_width: int = 800
    drag_threshold: float = 10.0
    double_tap_ms: float = 300.0
    zoom_min: float = 1.0
    zoom_max: float = 3.0
    zoom_step: float = 0.2
    zoom_toggle_level: float = 2.0
    history_limit: int = 20
    max_image_bytes: int = 10 * 1024 * 1024
    request_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.max_width < 1:
            raise ValueError("max_width must be at least 1")
        if self.zoom_min <= 0 or self.zoom_max < self.zoom_min:
            raise ValueError("zoom range must satisfy 0 < zoom_min <= zoom_max")
        if self.zoom_step <= 0:
            raise ValueError("zoom_step must be positive")
        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")


DEFAULT_CONFIG = PickerConfig()
