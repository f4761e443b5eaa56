from __future__ import annotations

import logging
from typing import Callable, Protocol

import numpy as np
from PIL import Image

from .colors import hex_to_rgb, rgb_to_hex, rgb_to_hsl
from .config import DEFAULT_CONFIG, PickerConfig
from .history import ColorHistory
from .interaction import (
    ActionKind,
    InteractionStateMachine,
    PointerEvent,
    PointerPhase,
)
from .mapping import CoordinateMapper
from .models import RGB, BoundingBox, PickResult
from .raster import RasterBuffer, RasterSurface, sample_buffer
from .zoom import ZoomState

logger = logging.getLogger(__name__)

PickCallback = Callable[[PickResult], None]


class ClipboardSink(Protocol):
    def write_text(self, value: str) -> None:
        """Place ``value`` on the clipboard."""


class ExtractionSession:
    """Ties pointer input, the raster buffer and color conversion together.

    Holds exactly one image at a time. Committed picks become the current
    color, are pushed to the history and handed to ``on_commit``; hover
    previews only reach ``on_preview``.
    """

    def __init__(
        self,
        config: PickerConfig | None = None,
        history: ColorHistory | None = None,
        on_commit: PickCallback | None = None,
        on_preview: Callable[[PickResult | None], None] | None = None,
        clipboard: ClipboardSink | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.history = history if history is not None else ColorHistory(
            limit=self.config.history_limit
        )
        self.on_commit = on_commit
        self.on_preview = on_preview
        self.clipboard = clipboard

        self.surface = RasterSurface()
        self.mapper = CoordinateMapper()
        self.machine = InteractionStateMachine(self.config)
        self.zoom = ZoomState(self.config)

        self.current: PickResult | None = None
        self.previous: PickResult | None = None
        self.preview: PickResult | None = None
        self._gesture_buffer: RasterBuffer | None = None

    @property
    def buffer(self) -> RasterBuffer | None:
        return self.surface.buffer

    def load_image(
        self, image: Image.Image | np.ndarray, readable: bool = True
    ) -> RasterBuffer:
        buffer = self.surface.load(image, self.config.max_width, readable=readable)
        self.machine.reset()
        self.mapper.reset()
        self._gesture_buffer = None
        self.preview = None
        logger.info(
            "loaded %dx%d image into %dx%d buffer (fit scale %.4f)",
            buffer.source_size[0],
            buffer.source_size[1],
            buffer.width,
            buffer.height,
            buffer.fit_scale,
        )
        return buffer

    def pick(self, x: int, y: int) -> PickResult | None:
        return self._commit(self.surface.buffer, x, y)

    def pick_at(
        self, client_x: float, client_y: float, box: BoundingBox
    ) -> PickResult | None:
        buffer = self.surface.buffer
        if buffer is None:
            return None
        x, y = self.mapper.to_buffer_coords(
            client_x, client_y, box, buffer.width, buffer.height
        )
        return self._commit(buffer, x, y)

    def handle_pointer(self, event: PointerEvent, box: BoundingBox) -> PickResult | None:
        """Feed one pointer event; returns the committed pick, if any."""
        idle_before = self.machine.session is None
        actions = self.machine.handle(event)
        if (
            event.phase is PointerPhase.DOWN
            and idle_before
            and self.machine.session is not None
        ):
            self._gesture_buffer = self.surface.buffer

        committed: PickResult | None = None
        for action in actions:
            if action.kind is ActionKind.PREVIEW:
                self._preview(action.client_x, action.client_y, box)
            elif action.kind is ActionKind.PREVIEW_END:
                self._set_preview(None)
            elif action.kind is ActionKind.ZOOM_TOGGLE:
                level = self.zoom.toggle()
                logger.debug("double tap toggled zoom to %.2fx", level)
            elif action.kind is ActionKind.COMMIT:
                committed = self._commit_at(
                    self._gesture_buffer, action.client_x, action.client_y, box
                )

        if self.machine.session is None:
            self._gesture_buffer = None
        return committed

    def select_history(self, hex_value: str) -> PickResult | None:
        """Make a history color current; malformed values select nothing."""
        rgb = hex_to_rgb(hex_value)
        if rgb is None:
            return None
        result = _to_result(rgb, None, None)
        self._set_current(result)
        return result

    def copy(self, fmt: str = "hex") -> bool:
        if self.current is None or self.clipboard is None:
            return False
        values = {
            "hex": self.current.hex,
            "rgb": self.current.rgb_string,
            "hsl": self.current.hsl,
        }
        if fmt not in values:
            raise ValueError(f"unknown color format '{fmt}'")
        try:
            self.clipboard.write_text(values[fmt])
        except Exception as exc:
            logger.warning("clipboard write failed: %s", exc)
            return False
        return True

    def _commit_at(
        self,
        buffer: RasterBuffer | None,
        client_x: float,
        client_y: float,
        box: BoundingBox,
    ) -> PickResult | None:
        if buffer is None:
            return None
        x, y = self.mapper.to_buffer_coords(
            client_x, client_y, box, buffer.width, buffer.height
        )
        return self._commit(buffer, x, y)

    def _commit(self, buffer: RasterBuffer | None, x: int, y: int) -> PickResult | None:
        rgb = sample_buffer(buffer, x, y)
        if rgb is None:
            return None
        result = _to_result(rgb, x, y)
        self._set_current(result)
        self.history.push(result.hex)
        if self.on_commit is not None:
            self.on_commit(result)
        return result

    def _preview(self, client_x: float, client_y: float, box: BoundingBox) -> None:
        buffer = self.surface.buffer
        if buffer is None:
            return
        x, y = self.mapper.to_buffer_coords(
            client_x, client_y, box, buffer.width, buffer.height
        )
        rgb = sample_buffer(buffer, x, y)
        if rgb is not None:
            self._set_preview(_to_result(rgb, x, y))

    def _set_preview(self, result: PickResult | None) -> None:
        self.preview = result
        if self.on_preview is not None:
            self.on_preview(result)

    def _set_current(self, result: PickResult) -> None:
        if self.current is not None:
            self.previous = self.current
        self.current = result


def _to_result(rgb: RGB, x: int | None, y: int | None) -> PickResult:
    return PickResult(
        rgb=rgb,
        hex=rgb_to_hex(*rgb),
        hsl=rgb_to_hsl(*rgb),
        x=x,
        y=y,
    )
