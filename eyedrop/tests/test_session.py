from __future__ import annotations

import numpy as np
import pytest

from eyedrop.src.pixel_picker.config import PickerConfig
from eyedrop.src.pixel_picker.history import ColorHistory
from eyedrop.src.pixel_picker.interaction import DeviceKind, PointerEvent, PointerPhase
from eyedrop.src.pixel_picker.models import BoundingBox
from eyedrop.src.pixel_picker.session import ExtractionSession

RED = [255, 0, 0]
BLUE = [0, 0, 255]


def _split_image(width=100, height=100):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, : width // 2] = RED
    image[:, width // 2 :] = BLUE
    return image


def _event(phase, device, x, y, t=0.0, pointer_id=0):
    return PointerEvent(
        phase=phase,
        device=device,
        client_x=x,
        client_y=y,
        timestamp_ms=t,
        pointer_id=pointer_id,
    )


class RecordingClipboard:
    def __init__(self):
        self.values = []

    def write_text(self, value):
        self.values.append(value)


class BrokenClipboard:
    def write_text(self, value):
        raise OSError("clipboard unavailable")


def test_pick_returns_all_representations_and_records_history():
    committed = []
    session = ExtractionSession(on_commit=committed.append)
    session.load_image(_split_image())

    result = session.pick(10, 10)

    assert result is not None
    assert result.rgb == (255, 0, 0)
    assert result.hex == "#ff0000"
    assert result.hsl == "hsl(0, 100%, 50%)"
    assert result.rgb_string == "rgb(255, 0, 0)"
    assert (result.x, result.y) == (10, 10)
    assert session.current == result
    assert session.history.colors == ["#ff0000"]
    assert committed == [result]


def test_out_of_bounds_pick_is_a_silent_no_op():
    committed = []
    session = ExtractionSession(on_commit=committed.append)
    session.load_image(_split_image())

    assert session.pick(100, 5) is None
    assert session.pick(-1, 5) is None
    assert session.current is None
    assert len(session.history) == 0
    assert committed == []


def test_blocked_source_pick_is_a_silent_no_op():
    session = ExtractionSession()
    session.load_image(_split_image(), readable=False)

    assert session.pick(10, 10) is None
    assert len(session.history) == 0


def test_pick_without_image_returns_none():
    session = ExtractionSession()

    assert session.pick(0, 0) is None
    assert session.pick_at(0, 0, BoundingBox(0, 0, 10, 10)) is None


def test_pick_at_maps_client_coordinates():
    session = ExtractionSession()
    session.load_image(_split_image())
    box = BoundingBox(left=0, top=0, width=50, height=50)

    result = session.pick_at(40, 10, box)

    assert result is not None
    assert (result.x, result.y) == (80, 20)
    assert result.hex == "#0000ff"


def test_repeated_picks_keep_history_unique():
    session = ExtractionSession()
    session.load_image(_split_image())

    session.pick(10, 10)
    session.pick(90, 10)
    session.pick(20, 20)

    assert session.history.colors == ["#ff0000", "#0000ff"]
    assert session.previous is not None
    assert session.previous.hex == "#0000ff"


def test_touch_tap_commits_through_pointer_pipeline():
    session = ExtractionSession()
    session.load_image(_split_image())
    box = BoundingBox(left=0, top=0, width=50, height=50)

    assert session.handle_pointer(_event(PointerPhase.DOWN, DeviceKind.TOUCH, 40, 10), box) is None
    result = session.handle_pointer(_event(PointerPhase.UP, DeviceKind.TOUCH, 41, 11, t=40), box)

    assert result is not None
    assert result.hex == "#0000ff"
    assert session.history.colors == ["#0000ff"]


def test_touch_drag_does_not_commit():
    session = ExtractionSession()
    session.load_image(_split_image())
    box = BoundingBox(left=0, top=0, width=50, height=50)

    session.handle_pointer(_event(PointerPhase.DOWN, DeviceKind.TOUCH, 10, 10), box)
    session.handle_pointer(_event(PointerPhase.MOVE, DeviceKind.TOUCH, 10, 30, t=20), box)
    result = session.handle_pointer(_event(PointerPhase.UP, DeviceKind.TOUCH, 10, 30, t=40), box)

    assert result is None
    assert len(session.history) == 0


def test_mouse_hover_previews_without_touching_history():
    previews = []
    session = ExtractionSession(on_preview=previews.append)
    session.load_image(_split_image())
    box = BoundingBox(left=0, top=0, width=100, height=100)

    session.handle_pointer(_event(PointerPhase.MOVE, DeviceKind.MOUSE, 10, 10), box)
    session.handle_pointer(_event(PointerPhase.MOVE, DeviceKind.MOUSE, 90, 10), box)

    assert [p.hex for p in previews] == ["#ff0000", "#0000ff"]
    assert session.preview is not None
    assert session.preview.hex == "#0000ff"
    assert session.current is None
    assert len(session.history) == 0

    session.handle_pointer(_event(PointerPhase.LEAVE, DeviceKind.MOUSE, 120, 10), box)
    assert session.preview is None
    assert previews[-1] is None


def test_double_tap_toggles_zoom_without_second_pick():
    committed = []
    session = ExtractionSession(on_commit=committed.append)
    session.load_image(_split_image())
    box = BoundingBox(left=0, top=0, width=100, height=100)

    session.handle_pointer(_event(PointerPhase.DOWN, DeviceKind.TOUCH, 10, 10, t=0), box)
    session.handle_pointer(_event(PointerPhase.UP, DeviceKind.TOUCH, 10, 10, t=50), box)
    session.handle_pointer(_event(PointerPhase.DOWN, DeviceKind.TOUCH, 90, 10, t=200), box)
    second = session.handle_pointer(_event(PointerPhase.UP, DeviceKind.TOUCH, 90, 10, t=260), box)

    assert second is None
    assert session.zoom.level == 2.0
    assert [r.hex for r in committed] == ["#ff0000"]


def test_zoomed_display_box_samples_same_pixel():
    session = ExtractionSession()
    session.load_image(_split_image())
    layout = BoundingBox(left=0, top=0, width=100, height=100)

    session.zoom.set_level(3.0)
    zoomed = session.zoom.display_box(layout)
    result = session.pick_at(50, 50, zoomed)

    assert zoomed.width == 300
    assert (result.x, result.y) == (50, 50)
    assert (session.buffer.width, session.buffer.height) == (100, 100)


def test_image_load_mid_gesture_resets_without_commit():
    committed = []
    session = ExtractionSession(on_commit=committed.append)
    session.load_image(_split_image())
    box = BoundingBox(left=0, top=0, width=100, height=100)

    session.handle_pointer(_event(PointerPhase.DOWN, DeviceKind.MOUSE, 10, 10), box)
    session.load_image(_split_image(20, 20))
    result = session.handle_pointer(_event(PointerPhase.UP, DeviceKind.MOUSE, 10, 10), box)

    assert result is None
    assert committed == []


def test_stale_buffer_coordinates_after_reload_are_rejected():
    session = ExtractionSession()
    session.load_image(_split_image(100, 100))
    session.load_image(_split_image(20, 20))

    assert session.pick(90, 90) is None
    assert session.pick(15, 5).hex == "#0000ff"


def test_large_image_uses_configured_max_width():
    session = ExtractionSession(config=PickerConfig(max_width=50))
    buffer = session.load_image(_split_image(200, 100))

    assert (buffer.width, buffer.height) == (50, 25)
    assert session.pick(5, 5).hex == "#ff0000"
    assert session.pick(45, 5).hex == "#0000ff"


def test_select_history_sets_current_color():
    session = ExtractionSession()

    result = session.select_history("#1E78D2")

    assert result is not None
    assert result.rgb == (30, 120, 210)
    assert result.hex == "#1e78d2"
    assert session.current == result
    assert session.select_history("not-a-color") is None
    assert session.select_history("#abcdef\n") is None
    assert session.current == result


def test_copy_formats_to_clipboard():
    clipboard = RecordingClipboard()
    session = ExtractionSession(clipboard=clipboard)
    session.load_image(_split_image())
    session.pick(10, 10)

    assert session.copy("hex") is True
    assert session.copy("rgb") is True
    assert session.copy("hsl") is True
    assert clipboard.values == ["#ff0000", "rgb(255, 0, 0)", "hsl(0, 100%, 50%)"]

    with pytest.raises(ValueError):
        session.copy("cmyk")


def test_copy_failure_is_reported_not_raised():
    session = ExtractionSession(clipboard=BrokenClipboard())
    session.load_image(_split_image())
    session.pick(10, 10)

    assert session.copy("hex") is False


def test_copy_without_color_returns_false():
    session = ExtractionSession(clipboard=RecordingClipboard())

    assert session.copy("hex") is False


def test_injected_history_is_shared():
    history = ColorHistory(["#00ff00"])
    session = ExtractionSession(history=history)
    session.load_image(_split_image())
    session.pick(10, 10)

    assert history.colors == ["#ff0000", "#00ff00"]


def test_zoom_steps_are_bounded():
    session = ExtractionSession()

    assert session.zoom.zoom_out() == 1.0
    assert session.zoom.zoom_in() == 1.2
    for _ in range(20):
        session.zoom.zoom_in()
    assert session.zoom.level == 3.0
    assert session.zoom.toggle() == 1.0
    assert session.zoom.toggle() == 2.0
    assert session.zoom.reset() == 1.0
