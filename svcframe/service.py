"""Base class for services driven by a ServiceManager."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ServiceState(IntEnum):
    """Lifecycle states shared by services and the service manager."""

    PRE_INIT = 0
    INITIALIZING = 1
    RUNNING = 2
    SHUTTING_DOWN = 3
    COMPLETED = 4


class Service:
    """A unit of work stepped through its lifecycle by a ServiceManager.

    Each state hook is called once per update until it returns True, which
    moves the service to the next state.
    """

    def __init__(self, manager: Any) -> None:
        self._state = ServiceState.PRE_INIT
        self._manager = manager

    @property
    def state(self) -> ServiceState:
        """Current lifecycle state."""
        return self._state

    @property
    def manager(self) -> Any:
        """The manager that owns this service."""
        return self._manager

    def on_pre_init(self) -> bool:
        """Lightweight setup, such as looking up other services."""
        return True

    def on_init(self) -> bool:
        """Load resources; called every update until it returns True."""
        return True

    def on_tick(self) -> bool:
        """Per-frame work while running."""
        return True

    def on_shutdown(self) -> bool:
        """Release resources; called every update until it returns True."""
        return True