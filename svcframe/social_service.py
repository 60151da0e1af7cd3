"""Authentication against a social backend."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any

from .service import Service

log = logging.getLogger(__name__)


class AuthResponse(IntEnum):
    """Outcome of a social authentication."""

    SUCCESS = 0
    ERROR = 1


class SocialService(Service):
    """Authenticates on init and reports the result through a signal.

    ``social_controller`` must provide ``authenticate(listener)``; it later
    calls ``authenticate_event`` on the listener.
    """

    def __init__(self, manager: Any, social_controller: Any = None) -> None:
        super().__init__(manager)
        self._social_controller = social_controller
        self._session: Any = None

    @property
    def session(self) -> Any:
        """The session from the last authentication, or None."""
        return self._session

    def on_pre_init(self) -> bool:
        return True

    def on_init(self) -> bool:
        if self._social_controller is not None:
            self._social_controller.authenticate(self)
        return True

    def on_tick(self) -> bool:
        return True

    def on_shutdown(self) -> bool:
        self._session = None
        return True

    def authenticate_event(self, code: int, session: Any) -> None:
        """Store the session and emit ``social_authenticated_event(code)``."""
        self._session = session
        if code != AuthResponse.SUCCESS:
            log.warning("Error authenticating the social session %d", code)
        self._manager.signals.social_authenticated_event(code)