"""Lifecycle driver for a set of services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from .service import Service, ServiceState
from .signals import Signals

S = TypeVar("S", bound=Service)


class ServiceDependencyError(LookupError):
    """A service was registered with a dependency that is not registered."""


@dataclass
class _ServiceEntry:
    key: type
    service: Service


def _state_hook(service: Service, state: ServiceState) -> Callable[[], bool]:
    return {
        ServiceState.PRE_INIT: service.on_pre_init,
        ServiceState.INITIALIZING: service.on_init,
        ServiceState.RUNNING: service.on_tick,
        ServiceState.SHUTTING_DOWN: service.on_shutdown,
    }[state]


class ServiceManager:
    """Owns services and steps them through their states on every update."""

    def __init__(self) -> None:
        self.signals = Signals()
        self._services: list[_ServiceEntry] = []
        self._state = ServiceState.PRE_INIT
        self._elapsed_time = 0.0

    @property
    def state(self) -> ServiceState:
        """The manager's own lifecycle state."""
        return self._state

    @property
    def frame_elapsed_time(self) -> float:
        """Time of the last update, in seconds."""
        return self._elapsed_time

    @property
    def services(self) -> tuple[Service, ...]:
        """Registered services in processing order."""
        return tuple(entry.service for entry in self._services)

    def register_service(
        self, service_cls: type[S], dependencies: Iterable[Service] | None = None
    ) -> S:
        """Create and register a service of the given class.

        Without dependencies the service goes to the front of the list;
        otherwise it is placed behind the services it depends on.
        """
        service = service_cls(self)
        entry = _ServiceEntry(service_cls, service)

        if dependencies is None:
            self._services.insert(0, entry)
            return service

        deps = list(dependencies)
        remaining = len(deps)
        pos = 0
        while pos < len(self._services) and remaining > 0:
            current = self._services[pos].service
            if any(current is dep for dep in deps):
                remaining -= 1
            pos += 1

        if pos < len(self._services):
            pos += 1

        if remaining > 0:
            raise ServiceDependencyError(
                f"Trying to register service {service_cls.__name__} "
                "which has dependency on unregistered service"
            )

        self._services.insert(pos, entry)
        return service

    def find_service(self, service_cls: type[S]) -> S | None:
        """Return the service registered under the given class, or None."""
        for entry in self._services:
            if entry.key is service_cls:
                return entry.service  # type: ignore[return-value]
        return None

    def shutdown(self) -> None:
        """Shut every service down, then forget them."""
        for entry in self._services:
            if entry.service.state != ServiceState.COMPLETED:
                entry.service._state = ServiceState.SHUTTING_DOWN

        self._set_state(ServiceState.SHUTTING_DOWN)
        while self._state != ServiceState.COMPLETED:
            self.update(self._elapsed_time)

        self._services.clear()

    def update(self, elapsed_time: float) -> None:
        """Advance every service by one step."""
        self._elapsed_time = elapsed_time
        if self._state == ServiceState.COMPLETED:
            return

        all_completed = True

        if self._state == ServiceState.SHUTTING_DOWN:
            # services are torn down in reverse order of registration
            for entry in reversed(self._services):
                service = entry.service
                if service.state == ServiceState.SHUTTING_DOWN:
                    done = bool(service.on_shutdown())
                    all_completed = all_completed and done
                    if done:
                        service._state = ServiceState.COMPLETED
        else:
            for entry in list(self._services):
                service = entry.service
                state = service.state
                if state <= self._state:
                    done = bool(_state_hook(service, state)())
                    if state == self._state:
                        all_completed = all_completed and done
                    if done:
                        service._state = ServiceState(state + 1)

        if all_completed:
            self._set_state(ServiceState(self._state + 1))

    def _set_state(self, state: ServiceState) -> None:
        self._state = state
        self.signals.service_manager_state_changed_event(state)