from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from .config import DEFAULT_CONFIG, PickerConfig

logger = logging.getLogger(__name__)


class DeviceKind(str, Enum):
    MOUSE = "mouse"
    PEN = "pen"
    TOUCH = "touch"


class PointerPhase(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"
    LEAVE = "leave"


class InteractionState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    HOVERING = "hovering"
    DRAGGING = "dragging"
    COMMITTING = "committing"


class ActionKind(str, Enum):
    PREVIEW = "preview"
    PREVIEW_END = "preview_end"
    COMMIT = "commit"
    ZOOM_TOGGLE = "zoom_toggle"


@dataclass(frozen=True)
class PointerEvent:
    phase: PointerPhase
    device: DeviceKind
    client_x: float
    client_y: float
    timestamp_ms: float = 0.0
    pointer_id: int = 0


@dataclass(frozen=True)
class InteractionAction:
    kind: ActionKind
    client_x: float
    client_y: float


@dataclass
class PointerSession:
    device: DeviceKind
    origin: tuple[float, float]
    started_at: float
    pointers: set[int] = field(default_factory=set)
    dragged: bool = False
    double_tap: bool = False


Actions = tuple[InteractionAction, ...]


class InteractionStateMachine:
    """Classifies pointer lifecycles into previews, picks and zoom toggles.

    Mouse and pen releases always commit; hover moves give continuous
    previews. Touch releases commit only for a tap that stayed under the drag
    threshold, was not part of a multi-touch gesture, and was not the second
    half of a double-tap. Every commit is emitted at most once per gesture.
    """

    def __init__(self, config: PickerConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._state = InteractionState.IDLE
        self._session: PointerSession | None = None
        self._last_down: tuple[DeviceKind, float] | None = None

        S = InteractionState
        P = PointerPhase
        self._transitions: dict[
            tuple[InteractionState, PointerPhase],
            Callable[[PointerEvent], Actions],
        ] = {
            (S.IDLE, P.DOWN): self._on_down,
            (S.IDLE, P.MOVE): self._on_idle_move,
            (S.HOVERING, P.DOWN): self._on_down,
            (S.HOVERING, P.MOVE): self._on_hover_move,
            (S.HOVERING, P.LEAVE): self._on_leave,
            (S.HOVERING, P.CANCEL): self._on_cancel,
            (S.ARMED, P.DOWN): self._on_extra_down,
            (S.ARMED, P.MOVE): self._on_armed_move,
            (S.ARMED, P.UP): self._on_up,
            (S.ARMED, P.LEAVE): self._on_armed_leave,
            (S.ARMED, P.CANCEL): self._on_cancel,
            (S.DRAGGING, P.DOWN): self._on_extra_down,
            (S.DRAGGING, P.UP): self._on_up,
            (S.DRAGGING, P.CANCEL): self._on_cancel,
        }

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def session(self) -> PointerSession | None:
        return self._session

    def handle(self, event: PointerEvent) -> Actions:
        handler = self._transitions.get((self._state, event.phase))
        if handler is None:
            return ()
        return handler(event)

    def reset(self) -> None:
        """Drop any in-flight gesture without emitting anything."""
        self._session = None
        self._set_state(InteractionState.IDLE)

    def _on_down(self, event: PointerEvent) -> Actions:
        double_tap = self._is_double_tap(event)
        self._last_down = None if double_tap else (event.device, event.timestamp_ms)

        self._session = PointerSession(
            device=event.device,
            origin=(event.client_x, event.client_y),
            started_at=event.timestamp_ms,
            pointers={event.pointer_id},
            double_tap=double_tap,
        )
        self._set_state(InteractionState.ARMED)

        if double_tap:
            return (_action(ActionKind.ZOOM_TOGGLE, event),)
        return ()

    def _on_extra_down(self, event: PointerEvent) -> Actions:
        session = self._session
        if session is None or event.pointer_id in session.pointers:
            return ()
        if session.device is not DeviceKind.TOUCH or event.device is not DeviceKind.TOUCH:
            return ()

        # A second finger turns the gesture into pinch/scroll.
        session.pointers.add(event.pointer_id)
        session.dragged = True
        self._set_state(InteractionState.DRAGGING)
        return ()

    def _on_idle_move(self, event: PointerEvent) -> Actions:
        if event.device is DeviceKind.TOUCH:
            return ()
        self._set_state(InteractionState.HOVERING)
        return (_action(ActionKind.PREVIEW, event),)

    def _on_hover_move(self, event: PointerEvent) -> Actions:
        if event.device is DeviceKind.TOUCH:
            return ()
        return (_action(ActionKind.PREVIEW, event),)

    def _on_armed_move(self, event: PointerEvent) -> Actions:
        session = self._session
        if session is None or event.pointer_id not in session.pointers:
            return ()

        if session.device is DeviceKind.TOUCH:
            if self._exceeds_threshold(session, event):
                session.dragged = True
                self._set_state(InteractionState.DRAGGING)
            return ()

        return (_action(ActionKind.PREVIEW, event),)

    def _on_up(self, event: PointerEvent) -> Actions:
        session = self._session
        if session is None or event.pointer_id not in session.pointers:
            return ()

        session.pointers.discard(event.pointer_id)
        if session.pointers:
            return ()

        if session.device is DeviceKind.TOUCH:
            if self._exceeds_threshold(session, event):
                session.dragged = True
            commit = not session.dragged and not session.double_tap
        else:
            commit = True

        self._session = None
        if not commit:
            self._set_state(InteractionState.IDLE)
            return ()

        self._set_state(InteractionState.COMMITTING)
        actions = (_action(ActionKind.COMMIT, event),)
        self._set_state(InteractionState.IDLE)
        return actions

    def _on_leave(self, event: PointerEvent) -> Actions:
        self._set_state(InteractionState.IDLE)
        return (_action(ActionKind.PREVIEW_END, event),)

    def _on_armed_leave(self, event: PointerEvent) -> Actions:
        session = self._session
        if session is None or session.device is DeviceKind.TOUCH:
            return ()
        return (_action(ActionKind.PREVIEW_END, event),)

    def _on_cancel(self, event: PointerEvent) -> Actions:
        self.reset()
        return ()

    def _is_double_tap(self, event: PointerEvent) -> bool:
        if event.device is not DeviceKind.TOUCH or self._last_down is None:
            return False
        last_device, last_time = self._last_down
        if last_device is not event.device:
            return False
        elapsed = event.timestamp_ms - last_time
        return 0 <= elapsed <= self.config.double_tap_ms

    def _exceeds_threshold(self, session: PointerSession, event: PointerEvent) -> bool:
        dx = abs(event.client_x - session.origin[0])
        dy = abs(event.client_y - session.origin[1])
        threshold = self.config.drag_threshold
        return dx >= threshold or dy >= threshold

    def _set_state(self, state: InteractionState) -> None:
        if state is not self._state:
            logger.debug("interaction %s -> %s", self._state.value, state.value)
        self._state = state


def _action(kind: ActionKind, event: PointerEvent) -> InteractionAction:
    return InteractionAction(kind=kind, client_x=event.client_x, client_y=event.client_y)
