from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image

from .colors import round_half_up
from .models import RGB

logger = logging.getLogger(__name__)


class SamplingBlockedError(RuntimeError):
    """Raised when the pixel source refuses read access."""


@dataclass(frozen=True)
class RasterBuffer:
    pixels: np.ndarray
    fit_scale: float
    source_size: tuple[int, int]
    readable: bool = True

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def read(self, x: int, y: int) -> RGB:
        if not self.readable:
            raise SamplingBlockedError("pixel source does not allow reads")
        if not self.contains(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} buffer")
        pixel = self.pixels[y, x]
        return int(pixel[0]), int(pixel[1]), int(pixel[2])


def compute_fit_scale(image_width: int, image_height: int, max_width: int) -> float:
    if image_width <= 0 or image_height <= 0:
        raise ValueError("image dimensions must be positive")
    return min(max_width / image_width, max_width / image_height, 1.0)


def fitted_size(image_width: int, image_height: int, max_width: int) -> tuple[int, int]:
    scale = compute_fit_scale(image_width, image_height, max_width)
    return (
        max(1, round_half_up(image_width * scale)),
        max(1, round_half_up(image_height * scale)),
    )


class RasterSurface:
    """Holds one decoded image as a sampleable, bounds-checked pixel grid."""

    def __init__(self) -> None:
        self._buffer: RasterBuffer | None = None

    @property
    def buffer(self) -> RasterBuffer | None:
        return self._buffer

    def load(
        self,
        image: Image.Image | np.ndarray,
        max_width: int,
        readable: bool = True,
    ) -> RasterBuffer:
        if isinstance(image, np.ndarray):
            image = Image.fromarray(image.astype(np.uint8))

        source_w, source_h = image.size
        scale = compute_fit_scale(source_w, source_h, max_width)
        target = fitted_size(source_w, source_h, max_width)

        rgba = image.convert("RGBA")
        if rgba.size != target:
            rgba = rgba.resize(target, Image.Resampling.BILINEAR)

        pixels = np.asarray(rgba, dtype=np.uint8).copy()
        # Transparent pixels read back as black, like a cleared canvas.
        pixels[pixels[..., 3] == 0, :3] = 0
        rgb = np.ascontiguousarray(pixels[..., :3])
        rgb.setflags(write=False)

        buffer = RasterBuffer(
            pixels=rgb,
            fit_scale=float(scale),
            source_size=(int(source_w), int(source_h)),
            readable=readable,
        )
        if self._buffer is not None:
            logger.debug(
                "replacing %dx%d buffer with %dx%d",
                self._buffer.width,
                self._buffer.height,
                buffer.width,
                buffer.height,
            )
        self._buffer = buffer
        return buffer

    def clear(self) -> None:
        self._buffer = None

    def sample_pixel(self, x: int, y: int) -> RGB | None:
        return sample_buffer(self._buffer, x, y)


def sample_buffer(buffer: RasterBuffer | None, x: int, y: int) -> RGB | None:
    if buffer is None or not buffer.contains(x, y):
        return None
    try:
        return buffer.read(x, y)
    except SamplingBlockedError:
        logger.debug("sampling blocked at (%d, %d)", x, y)
        return None
