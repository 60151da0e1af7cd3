import threading
import time

import pytest

from svcframe.service_manager import ServiceManager
from svcframe.taskqueue_service import TaskQueue, TaskQueueService


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def manager():
    return ServiceManager()


@pytest.fixture
def service(manager):
    svc = TaskQueueService(manager)
    yield svc
    svc.on_shutdown()


def test_main_thread_items_run_one_per_tick(service):
    ran = []
    h1 = service.run_on_main_thread(lambda: ran.append("a"))
    h2 = service.run_on_main_thread(lambda: ran.append("b"))
    assert h2 > h1
    assert service.get_work_items_count(None) == 2

    assert service.on_tick() is False
    assert ran == ["a"]
    assert service.get_work_items_count(None) == 1

    service.on_tick()
    assert ran == ["a", "b"]
    assert service.get_work_items_count(None) == 0


def test_add_work_item_without_queue_goes_to_main_thread(service):
    ran = []
    service.add_work_item(None, lambda: ran.append(1))
    assert service.get_work_items_count(None) == 1
    service.on_tick()
    assert ran == [1]


def test_remove_main_thread_item(service):
    ran = []
    h1 = service.run_on_main_thread(lambda: ran.append("a"))
    service.run_on_main_thread(lambda: ran.append("b"))
    service.remove_work_item(None, h1)
    assert service.get_work_items_count(None) == 1
    service.on_tick()
    assert ran == ["b"]


def test_unknown_queue(service):
    assert service.add_work_item("missing", lambda: None) == -1
    assert service.get_work_items_count("missing") == 0
    service.remove_work_item("missing", 1)
    assert service.get_work_items_count(None) == 0


def test_named_queue_runs_item_and_reports_on_main_thread(service, manager):
    started, loaded, processed, ran_on = [], [], [], []
    manager.signals.task_queue_started_event.connect(started.append)
    manager.signals.task_queue_work_item_loaded_event.connect(
        lambda name, handle: loaded.append((name, handle))
    )
    manager.signals.task_queue_work_item_processed_event.connect(
        lambda name, handle: processed.append((name, handle))
    )
    done = threading.Event()

    def work():
        ran_on.append(threading.current_thread())
        done.set()

    service.create_queue("net")
    handle = service.add_work_item("net", work)
    assert done.wait(5)
    assert _wait_for(lambda: service.get_work_items_count(None) >= 3)
    assert started == [] and loaded == []

    for _ in range(3):
        service.on_tick()

    assert started == ["net"]
    assert loaded == [("net", handle)]
    assert processed == [("net", handle)]
    assert ran_on[0] is not threading.main_thread()
    assert len(ran_on) == 1


def test_named_queue_preserves_order(service):
    results = []
    done = threading.Event()
    service.create_queue("ordered")
    for i in range(3):
        service.add_work_item("ordered", lambda i=i: results.append(i))
    service.add_work_item("ordered", done.set)
    assert done.wait(5)
    assert results == [0, 1, 2]


def test_create_queue_twice_keeps_existing_queue(service):
    service.create_queue("q")
    first = service._queues["q"]
    service.create_queue("q")
    assert service._queues["q"] is first


def test_remove_queue_reports_stop(service, manager):
    stopped = []
    manager.signals.task_queue_stopped_event.connect(stopped.append)
    service.create_queue("gone")
    service.remove_queue("gone")
    assert service.add_work_item("gone", lambda: None) == -1
    assert service.on_shutdown() is True
    assert stopped == ["gone"]


def test_shutdown_drains_main_queue_and_drops_queues(service):
    ran = []
    service.create_queue("q")
    service.run_on_main_thread(lambda: ran.append("x"))
    assert service.on_shutdown() is True
    assert ran == ["x"]
    assert service.get_work_items_count(None) == 0
    assert service.add_work_item("q", lambda: None) == -1


def test_task_queue_remove_pending_item_and_restart(service):
    ran = []
    done = threading.Event()
    queue = TaskQueue("direct", service)
    queue.stop()
    assert queue.running is False

    h1 = queue.add_work_item(lambda: ran.append("a"))
    h2 = queue.add_work_item(lambda: ran.append("b"))
    assert h2 > h1
    assert len(queue) == 2

    queue.remove_work_item(h1)
    assert len(queue) == 1
    queue.remove_work_item(h1)
    assert len(queue) == 1

    queue.add_work_item(done.set)
    queue.start()
    assert done.wait(5)
    queue.stop()
    assert ran == ["b"]
    assert len(queue) == 0


def test_task_queue_start_twice_raises(service):
    queue = TaskQueue("twice", service)
    try:
        with pytest.raises(RuntimeError):
            queue.start()
    finally:
        queue.stop()
    assert queue.running is False


def test_failing_item_does_not_stop_queue(service):
    done = threading.Event()
    service.create_queue("fragile")

    def boom():
        raise RuntimeError("boom")

    service.add_work_item("fragile", boom)
    service.add_work_item("fragile", done.set)
    assert done.wait(5)