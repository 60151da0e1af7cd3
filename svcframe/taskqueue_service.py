"""Named background work queues plus a queue drained on the main thread."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable

from .service import Service

log = logging.getLogger(__name__)

WorkItem = Callable[[], Any]


class _Counter:
    """Thread-safe source of increasing work item handles."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def next(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


def _remove_handle(queue: deque[tuple[int, WorkItem]], handle: int) -> None:
    for item in queue:
        if item[0] == handle:
            queue.remove(item)
            return


class TaskQueue:
    """A queue of work items processed in order by its own thread.

    Progress is reported through the owning service's main-thread queue, so
    the task queue signals fire on the thread that ticks the service.
    """

    _counter = _Counter()

    def __init__(self, name: str, service: TaskQueueService) -> None:
        self.name = name
        self._service = service
        self._queue: deque[tuple[int, WorkItem]] = deque()
        self._not_empty = threading.Condition(threading.Lock())
        # held while an item runs so it cannot be removed half way
        self._item_remove_lock = threading.Lock()
        self._active = False
        self._thread: threading.Thread | None = None
        self.start()

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def running(self) -> bool:
        """Whether the worker thread is started."""
        return self._thread is not None

    def start(self) -> None:
        """Start the worker thread."""
        if self._thread is not None:
            raise RuntimeError(f"task queue {self.name!r} is already running")
        self._active = True
        self._thread = threading.Thread(
            target=self._run, name=f"TaskQueue-{self.name}", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker thread and wait for it; pending items stay queued."""
        with self._not_empty:
            self._active = False
            self._not_empty.notify()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

    def add_work_item(self, func: WorkItem) -> int:
        """Append a work item and return its handle."""
        with self._not_empty:
            handle = self._counter.next()
            self._queue.append((handle, func))
            self._not_empty.notify()
        return handle

    def remove_work_item(self, item_handle: int) -> None:
        """Drop a work item that has not started yet."""
        with self._not_empty, self._item_remove_lock:
            _remove_handle(self._queue, item_handle)

    def _run(self) -> None:
        name = self.name
        self._service._post_signal("task_queue_started_event", name)
        while self._active:
            with self._not_empty:
                while not self._queue and self._active:
                    self._not_empty.wait()
                if not self._active:
                    break
                self._item_remove_lock.acquire()
                handle, func = self._queue.popleft()

            try:
                self._service._post_signal("task_queue_work_item_loaded_event", name, handle)
                try:
                    func()
                except Exception:
                    log.exception("Work item %d of queue %s failed", handle, name)
            finally:
                self._item_remove_lock.release()
            self._service._post_signal("task_queue_work_item_processed_event", name, handle)
        self._service._post_signal("task_queue_stopped_event", name)


class TaskQueueService(Service):
    """Manages named task queues, each on its own thread.

    It also keeps an unnamed queue that is processed on the main thread,
    one item per tick, which lets worker threads hand results back.
    """

    _counter = _Counter()

    def __init__(self, manager: Any) -> None:
        super().__init__(manager)
        self._queues: dict[str, TaskQueue] = {}
        self._queue: deque[tuple[int, WorkItem]] = deque()
        self._queue_lock = threading.Lock()
        self._item_remove_lock = threading.RLock()

    def create_queue(self, name: str) -> None:
        """Create a named queue, unless one of that name exists."""
        if name in self._queues:
            return
        self._queues[name] = TaskQueue(name, self)

    def remove_queue(self, name: str) -> None:
        """Stop and forget a named queue."""
        queue = self._queues.pop(name, None)
        if queue is not None:
            queue.stop()

    def add_work_item(self, queue: str | None, func: WorkItem) -> int:
        """Add a work item to a named queue, or to the main thread if None.

        Returns the item's handle, or -1 if the named queue does not exist.
        """
        if queue is None:
            return self.run_on_main_thread(func)
        task_queue = self._queues.get(queue)
        if task_queue is None:
            return -1
        return task_queue.add_work_item(func)

    def remove_work_item(self, queue: str | None, item_handle: int) -> None:
        """Remove a pending work item from a named queue or the main thread."""
        if queue is not None:
            task_queue = self._queues.get(queue)
            if task_queue is not None:
                task_queue.remove_work_item(item_handle)
            return

        with self._queue_lock, self._item_remove_lock:
            _remove_handle(self._queue, item_handle)

    def get_work_items_count(self, queue: str | None) -> int:
        """Number of pending items in a named queue, or the main queue if None."""
        if queue is not None:
            task_queue = self._queues.get(queue)
            return 0 if task_queue is None else len(task_queue)
        return len(self._queue)

    def run_on_main_thread(self, func: WorkItem) -> int:
        """Schedule a work item to run during a later on_tick."""
        with self._queue_lock:
            handle = self._counter.next()
            self._queue.append((handle, func))
        return handle

    def on_init(self) -> bool:
        return True

    def on_tick(self) -> bool:
        with self._queue_lock:
            if not self._queue:
                return False
            self._item_remove_lock.acquire()
            _, func = self._queue.popleft()
        try:
            func()
        finally:
            self._item_remove_lock.release()
        return False

    def on_shutdown(self) -> bool:
        # queues post events to the main thread while stopping
        queues = list(self._queues.values())
        self._queues.clear()
        for queue in queues:
            queue.stop()

        while True:
            with self._queue_lock:
                if not self._queue:
                    break
                _, func = self._queue.popleft()
            with self._item_remove_lock:
                func()
        return True

    def _post_signal(self, signal_name: str, *args: Any) -> None:
        def emit() -> None:
            signals = getattr(self._manager, "signals", None)
            if signals is not None:
                getattr(signals, signal_name)(*args)

        self.run_on_main_thread(emit)