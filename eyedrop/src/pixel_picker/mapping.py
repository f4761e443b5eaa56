from __future__ import annotations

import logging

from .colors import round_half_up
from .models import BoundingBox

logger = logging.getLogger(__name__)


class CoordinateMapper:
    """Maps client-space positions onto buffer pixels.

    The bounding box is the element's on-screen rectangle, so it already
    includes any zoom transform, while the buffer size does not. The ratio
    between the two therefore absorbs layout scaling, device pixel ratio and
    zoom alike.
    """

    def __init__(self) -> None:
        self._last: tuple[int, int] = (0, 0)

    @property
    def last(self) -> tuple[int, int]:
        return self._last

    def to_buffer_coords(
        self,
        client_x: float,
        client_y: float,
        box: BoundingBox,
        buffer_width: int,
        buffer_height: int,
    ) -> tuple[int, int]:
        if box.is_degenerate or buffer_width <= 0 or buffer_height <= 0:
            logger.debug("degenerate layout %s, reusing %s", box, self._last)
            return self._last

        scale_x = buffer_width / box.width
        scale_y = buffer_height / box.height
        x = round_half_up((client_x - box.left) * scale_x)
        y = round_half_up((client_y - box.top) * scale_y)

        self._last = (
            _clamp(x, 0, buffer_width - 1),
            _clamp(y, 0, buffer_height - 1),
        )
        return self._last

    def reset(self) -> None:
        self._last = (0, 0)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
