"""Analytics events sent over the Measurement Protocol."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence, Union

from .httprequest_service import HTTPRequestService, Request
from .service import Service

log = logging.getLogger(__name__)

ParameterValue = Union[bool, int, float, str]

_ENDPOINT = "https://www.google-analytics.com/mp/collect?api_secret={}&firebase_app_id={}"
_CLIENT_KEY = "app_instance_id"


@dataclass(frozen=True)
class Parameter:
    """A named event parameter."""

    name: str
    value: ParameterValue


@dataclass(frozen=True)
class EcommerceItem:
    """One entry of the ``items`` array of an ecommerce event."""

    parameters: Sequence[Parameter] = field(default_factory=tuple)


def format_value(value: ParameterValue) -> str:
    """Render a parameter value as a JSON literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    raise TypeError(f"unsupported parameter value type: {type(value).__name__}")


def params_payload(parameters: Iterable[Parameter] | None) -> str:
    """Render parameters as a JSON object."""
    body = ",".join(
        f"{json.dumps(p.name, ensure_ascii=False)}:{format_value(p.value)}"
        for p in parameters or ()
    )
    return "{" + body + "}"


class TrackerService(Service):
    """Tracks user interactions and game events via the Measurement Protocol.

    Requests go through the HTTPRequestService found during pre-init; without
    it events are dropped.
    """

    def __init__(self, manager: Any) -> None:
        super().__init__(manager)
        self._http_request_service: Any = None
        self._app_instance_id = ""
        self._app_id = ""
        self._api_secret = ""
        self._user_id = ""
        self._user_properties: dict[str, str] = {}
        self._enabled = True

    @property
    def app_instance_id(self) -> str:
        """Client instance id, without dashes."""
        return self._app_instance_id

    @property
    def user_id(self) -> str:
        """The user id sent with each event, or an empty string."""
        return self._user_id

    @property
    def user_properties(self) -> dict[str, str]:
        """A copy of the user properties sent with each event."""
        return dict(self._user_properties)

    @property
    def enabled(self) -> bool:
        """Whether events are sent at all."""
        return self._enabled

    def setup_tracking(self, app_id: str, app_instance_id: str, api_secret: str) -> None:
        """Configure the app id, instance id and API secret of the endpoint."""
        self._app_id = app_id
        # the instance id must be a 32 digit hex number
        self._app_instance_id = app_instance_id.replace("-", "")
        self._api_secret = api_secret

    def set_tracker_enabled(self, enabled: bool) -> None:
        """Turn event collection on or off."""
        self._enabled = bool(enabled)

    def on_pre_init(self) -> bool:
        self._http_request_service = self._manager.find_service(HTTPRequestService)
        return True

    def on_tick(self) -> bool:
        return True

    def on_shutdown(self) -> bool:
        return True

    def send_event(self, event_name: str, parameters: Iterable[Parameter] | None = None) -> None:
        """Send an event with optional parameters."""
        self._send_ga_event(event_name, params_payload(parameters))

    def send_ecommerce_event(
        self,
        event_name: str,
        items: Sequence[EcommerceItem],
        parameters: Iterable[Parameter] | None = None,
    ) -> None:
        """Send an event carrying an ``items`` array; at least one item is required."""
        if not items:
            raise ValueError("an ecommerce event needs at least one item")
        head = params_payload(parameters)[:-1]
        separator = ", " if head != "{" else ""
        rendered = ",".join(params_payload(item.parameters) for item in items)
        self._send_ga_event(event_name, f'{head}{separator}"items":[{rendered}]}}')

    def send_view(
        self,
        screen_name: str,
        screen_class: str,
        parameters: Iterable[Parameter] | None = None,
    ) -> None:
        """Send a ``screen_view`` event."""
        self.send_event(
            "screen_view",
            [
                Parameter("screen_name", screen_name),
                Parameter("screen_class", screen_class),
                *(parameters or ()),
            ],
        )

    def send_timing(
        self,
        category: str,
        variable: str,
        time_ms: int,
        parameters: Iterable[Parameter] | None = None,
    ) -> None:
        """Send a ``timing_complete`` event."""
        self.send_event(
            "timing_complete",
            [
                Parameter("event_category", category),
                Parameter("name", variable),
                Parameter("value", int(time_ms)),
                *(parameters or ()),
            ],
        )

    def send_exception(
        self,
        description: str,
        is_fatal: bool,
        parameters: Iterable[Parameter] | None = None,
    ) -> None:
        """Send an ``exception`` event."""
        self.send_event(
            "exception",
            [
                Parameter("description", description),
                Parameter("fatal", bool(is_fatal)),
                *(parameters or ()),
            ],
        )

    def set_user_id(self, user_id: str | None) -> None:
        """Set the user id sent with every event; None removes it."""
        self._user_id = user_id or ""

    def set_user_property(self, name: str, value: str | None) -> None:
        """Set a user property; None removes it."""
        if value is None:
            self._user_properties.pop(name, None)
        else:
            self._user_properties[name] = value

    def _send_ga_event(self, event_name: str, payload: str) -> None:
        if not self._enabled or self._http_request_service is None:
            return

        endpoint = _ENDPOINT.format(self._api_secret, self._app_id)

        user_id = ""
        if self._user_id:
            user_id = f',"user_id": {json.dumps(self._user_id, ensure_ascii=False)}'

        user_properties = ""
        if self._user_properties:
            entries = ",".join(
                f'{json.dumps(k, ensure_ascii=False)}:{{"value":{json.dumps(v, ensure_ascii=False)}}}'
                for k, v in sorted(self._user_properties.items())
            )
            user_properties = f',"user_properties":{{{entries}}}'

        body = (
            f'{{"{_CLIENT_KEY}":{json.dumps(self._app_instance_id)}{user_id}{user_properties},'
            f'"events":[{{"name":{json.dumps(event_name, ensure_ascii=False)}, "params":{payload}}}]}}'
        )

        log.debug("making GA request %s %s", endpoint, body)
        self._http_request_service.make_request_async(
            Request(
                url=endpoint,
                post_payload=body,
                headers=[("Content-Type", "application/json")],
            )
        )