"""Dispatches input events to the input signals of the service manager."""

from __future__ import annotations

from typing import Any

from .service import Service
from .signals import Signal


def _dispatch(signal: Signal, *args: Any) -> bool:
    """Call slots in order until one consumes the event."""
    return any(slot(*args) for slot in signal.slots())


class InputService(Service):
    """Feeds input into the signal registry; a slot returning True stops it."""

    @property
    def _signals(self) -> Any:
        return self._manager.signals

    def inject_key_event(self, event: Any, key: int) -> None:
        _dispatch(self._signals.input_key_event, event, key)

    def inject_touch_event(self, event: Any, x: int, y: int, contact_index: int) -> None:
        _dispatch(self._signals.input_touch_event, event, x, y, contact_index)

    def inject_mouse_event(self, event: Any, x: int, y: int, wheel_delta: float) -> bool:
        """Return True if a slot consumed the event."""
        return _dispatch(self._signals.input_mouse_event, event, x, y, wheel_delta)

    def inject_gesture_pinch_event(
        self, x: int, y: int, scale: float, number_of_touches: int
    ) -> None:
        _dispatch(self._signals.input_gesture_pinch_event, x, y, scale, number_of_touches)

    def inject_gesture_rotation_event(
        self, x: int, y: int, rotation: float, number_of_touches: int
    ) -> None:
        _dispatch(
            self._signals.input_gesture_rotation_event, x, y, rotation, number_of_touches
        )

    def inject_gesture_pan_event(self, x: int, y: int, number_of_touches: int) -> None:
        _dispatch(self._signals.input_gesture_pan_event, x, y, number_of_touches)

    def inject_gesture_swipe_event(self, x: int, y: int, direction: int) -> None:
        """Dispatch a swipe starting at (x, y) in the given direction."""
        _dispatch(self._signals.input_gesture_swipe_event, x, y, direction)

    def inject_key_global_event(self, event: Any, key: int) -> None:
        _dispatch(self._signals.input_key_global_event, event, key)

    def inject_touch_global_event(
        self, event: Any, x: int, y: int, contact_index: int
    ) -> None:
        _dispatch(self._signals.input_touch_global_event, event, x, y, contact_index)

    def inject_mouse_global_event(
        self, event: Any, x: int, y: int, wheel_delta: float
    ) -> bool:
        """Return True if a slot consumed the event."""
        return _dispatch(self._signals.input_mouse_global_event, event, x, y, wheel_delta)