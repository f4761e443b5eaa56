from .colors import hex_to_rgb, rgb_to_hex, rgb_to_hsl
from .config import PickerConfig
from .history import ColorHistory
from .interaction import DeviceKind, InteractionStateMachine, PointerEvent, PointerPhase
from .mapping import CoordinateMapper
from .models import BoundingBox, Palette, PickResult
from .palette import PaletteBook
from .raster import RasterBuffer, RasterSurface
from .session import ExtractionSession
from .zoom import ZoomState

__all__ = [
    "BoundingBox",
    "ColorHistory",
    "CoordinateMapper",
    "DeviceKind",
    "ExtractionSession",
    "InteractionStateMachine",
    "Palette",
    "PaletteBook",
    "PickResult",
    "PickerConfig",
    "PointerEvent",
    "PointerPhase",
    "RasterBuffer",
    "RasterSurface",
    "ZoomState",
    "hex_to_rgb",
    "rgb_to_hex",
    "rgb_to_hsl",
]
