import pytest

from svcframe.service import Service, ServiceState
from svcframe.service_manager import ServiceDependencyError, ServiceManager


def _make(name, log, results=None):
    results = results or {}

    def hook(label):
        def method(self):
            log.append((name, label))
            return results.get(label, True)

        return method

    return type(
        name,
        (Service,),
        {
            "on_pre_init": hook("pre_init"),
            "on_init": hook("init"),
            "on_tick": hook("tick"),
            "on_shutdown": hook("shutdown"),
        },
    )


def test_register_without_dependencies_goes_to_front():
    log = []
    manager = ServiceManager()
    a = manager.register_service(_make("A", log), None)
    b = manager.register_service(_make("B", log))
    assert manager.services == (b, a)
    assert a.manager is manager


def test_register_with_dependency_goes_behind_it():
    log = []
    manager = ServiceManager()
    a = manager.register_service(_make("A", log))
    b = manager.register_service(_make("B", log))
    c = manager.register_service(_make("C", log), [b])
    assert manager.services == (b, a, c)
    assert manager.services.index(c) > manager.services.index(b)


def test_register_with_empty_dependency_list():
    log = []
    manager = ServiceManager()
    a = manager.register_service(_make("A", log))
    b = manager.register_service(_make("B", log))
    c = manager.register_service(_make("C", log), [])
    assert manager.services == (b, c, a)


def test_missing_dependency_raises():
    log = []
    manager = ServiceManager()
    stray = Service(None)
    with pytest.raises(ServiceDependencyError):
        manager.register_service(_make("A", log), [stray])
    assert manager.services == ()


def test_find_service_by_class():
    log = []
    manager = ServiceManager()
    cls_a = _make("A", log)
    cls_b = _make("B", log)
    a = manager.register_service(cls_a)
    assert manager.find_service(cls_a) is a
    assert manager.find_service(cls_b) is None


def test_update_advances_states_and_emits():
    log = []
    seen = []
    manager = ServiceManager()
    manager.signals.service_manager_state_changed_event.connect(seen.append)
    a = manager.register_service(_make("A", log))

    manager.update(0.5)
    assert manager.frame_elapsed_time == 0.5
    assert a.state is ServiceState.INITIALIZING
    assert manager.state is ServiceState.INITIALIZING

    manager.update(0.5)
    assert a.state is ServiceState.RUNNING
    assert manager.state is ServiceState.RUNNING
    assert seen == [ServiceState.INITIALIZING, ServiceState.RUNNING]
    assert log == [("A", "pre_init"), ("A", "init")]


def test_unfinished_init_holds_manager_back():
    log = []
    manager = ServiceManager()
    slow = manager.register_service(_make("Slow", log, {"init": False}))
    fast = manager.register_service(_make("Fast", log))
    for _ in range(3):
        manager.update(0.0)
    assert manager.state is ServiceState.INITIALIZING
    assert slow.state is ServiceState.INITIALIZING
    assert fast.state is ServiceState.RUNNING
    assert log.count(("Slow", "init")) == 2


def test_tick_returning_false_keeps_running():
    log = []
    manager = ServiceManager()
    a = manager.register_service(_make("A", log, {"tick": False}))
    for _ in range(5):
        manager.update(0.0)
    assert manager.state is ServiceState.RUNNING
    assert a.state is ServiceState.RUNNING
    assert log.count(("A", "tick")) == 3


def test_shutdown_runs_in_reverse_order_and_clears():
    log = []
    seen = []
    manager = ServiceManager()
    a = manager.register_service(_make("A", log, {"tick": False}))
    b = manager.register_service(_make("B", log, {"tick": False}), [a])
    manager.update(0.0)
    manager.update(0.0)
    manager.signals.service_manager_state_changed_event.connect(seen.append)
    log.clear()

    manager.shutdown()

    assert log == [("B", "shutdown"), ("A", "shutdown")]
    assert manager.state is ServiceState.COMPLETED
    assert a.state is ServiceState.COMPLETED
    assert b.state is ServiceState.COMPLETED
    assert manager.services == ()
    assert seen == [ServiceState.SHUTTING_DOWN, ServiceState.COMPLETED]


def test_update_after_completion_does_nothing():
    log = []
    manager = ServiceManager()
    manager.register_service(_make("A", log))
    manager.shutdown()
    log.clear()
    manager.update(1.0)
    assert log == []
    assert manager.state is ServiceState.COMPLETED