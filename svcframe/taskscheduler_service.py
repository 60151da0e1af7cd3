"""Runs tasks on the main thread at a given game time."""

from __future__ import annotations

import heapq
from time import monotonic
from typing import Any, Callable

from .service import Service


class TaskSchedulerService(Service):
    """Schedules tasks to run on tick once the clock reaches their time.

    ``clock`` returns the current game time; it defaults to a monotonic
    clock in seconds. For work on another thread use TaskQueueService.
    """

    INVALID_TASK_HANDLE = 0

    def __init__(self, manager: Any, clock: Callable[[], float] | None = None) -> None:
        super().__init__(manager)
        self._clock = clock if clock is not None else monotonic
        self._next_task_handle = 0
        self._tasks: list[tuple[float, int, Callable[[], Any]]] = []
        self._removed: set[int] = set()

    def __len__(self) -> int:
        return sum(1 for _, handle, _ in self._tasks if handle not in self._removed)

    def schedule_task(self, time: float, func: Callable[[], Any]) -> int:
        """Schedule a task at a game time no earlier than now; return its handle."""
        now = self._clock()
        if time < now:
            raise ValueError(f"task time {time} is in the past (now {now})")
        self._next_task_handle += 1
        handle = self._next_task_handle
        heapq.heappush(self._tasks, (time, handle, func))
        return handle

    def remove_task(self, handle: int) -> None:
        """Cancel a scheduled task."""
        self._removed.add(handle)

    def on_init(self) -> bool:
        return True

    def on_tick(self) -> bool:
        now = self._clock()
        while self._tasks and self._tasks[0][0] <= now:
            _, handle, func = heapq.heappop(self._tasks)
            if handle in self._removed:
                self._removed.discard(handle)
            else:
                func()
        return False

    def on_shutdown(self) -> bool:
        return True