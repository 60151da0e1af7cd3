"""Simple signals and the registry of signals shared by services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


class Signal:
    """An ordered list of callables invoked together."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> Callable[..., Any]:
        """Append a slot; returns it so this can be used as a decorator."""
        self._slots.append(slot)
        return slot

    def disconnect(self, slot: Callable[..., Any]) -> None:
        """Remove a slot if it is connected."""
        try:
            self._slots.remove(slot)
        except ValueError:
            pass

    def slots(self) -> list[Callable[..., Any]]:
        """A snapshot of the connected slots, in call order."""
        return list(self._slots)

    def emit(self, *args: Any) -> Any:
        """Call every slot; return the last slot's result, or None."""
        result = None
        for slot in self.slots():
            result = slot(*args)
        return result

    def __call__(self, *args: Any) -> Any:
        return self.emit(*args)

    def __len__(self) -> int:
        return len(self._slots)


def _signal() -> Signal:
    return field(default_factory=Signal)


@dataclass(eq=False)
class Signals:
    """Registry of every signal available through the service manager."""

    # system-wide
    pause_event: Signal = _signal()
    resume_event: Signal = _signal()
    resize_event: Signal = _signal()
    virtual_keyboard_size_changed: Signal = _signal()  # (0, 0) when hidden
    safe_area_changed_event: Signal = _signal()

    # service manager
    service_manager_state_changed_event: Signal = _signal()

    # social service
    social_authenticated_event: Signal = _signal()

    # input service; slots return True to consume the event
    input_key_event: Signal = _signal()
    input_touch_event: Signal = _signal()
    input_mouse_event: Signal = _signal()
    input_gesture_pinch_event: Signal = _signal()
    input_gesture_rotation_event: Signal = _signal()
    input_gesture_pan_event: Signal = _signal()
    input_gesture_swipe_event: Signal = _signal()

    # global input events fire even after the UI consumed them
    input_key_global_event: Signal = _signal()
    input_touch_global_event: Signal = _signal()
    input_mouse_global_event: Signal = _signal()

    # storefront service
    storefront_get_products_succeeded_event: Signal = _signal()
    storefront_get_products_failed_event: Signal = _signal()
    storefront_transaction_in_process_event: Signal = _signal()
    storefront_transaction_failed_event: Signal = _signal()
    storefront_transaction_succeeded_event: Signal = _signal()
    storefront_transaction_restored_event: Signal = _signal()
    storefront_receipt_requested_event: Signal = _signal()

    # task queue service
    task_queue_work_item_loaded_event: Signal = _signal()
    task_queue_work_item_processed_event: Signal = _signal()
    task_queue_started_event: Signal = _signal()
    task_queue_stopped_event: Signal = _signal()

    # render service
    frame_pre_render: Signal = _signal()
    frame_post_render: Signal = _signal()