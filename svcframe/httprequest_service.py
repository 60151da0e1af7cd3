"""HTTP requests sent from a dedicated task queue or the calling thread."""

from __future__ import annotations

import dataclasses
import http.client
import io
import logging
import socket
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional

from .service import Service
from .service_manager import ServiceDependencyError
from .taskqueue_service import TaskQueueService

log = logging.getLogger(__name__)

HTTP_REQUEST_SERVICE_QUEUE = "HTTPRequestServiceQueue"
DEFAULT_USER_AGENT = "Mozilla/5.0"

_TIMEOUT = 120
_CHUNK_SIZE = 16384

ResponseCallback = Callable[[int, Optional[io.BytesIO], str, int], Any]
ProgressCallback = Callable[[int, int, int, int], bool]


class RequestError(IntEnum):
    """Transfer error codes passed to response callbacks; 0 means success."""

    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    OPERATION_TIMEDOUT = 28
    ABORTED_BY_CALLBACK = 42
    SEND_ERROR = 55
    RECV_ERROR = 56

    @property
    def message(self) -> str:
        """Human readable description of the error."""
        return _MESSAGES[self]


_MESSAGES = {
    RequestError.OK: "No error",
    RequestError.UNSUPPORTED_PROTOCOL: "Unsupported protocol",
    RequestError.URL_MALFORMAT: "URL using bad/illegal format or missing URL",
    RequestError.COULDNT_RESOLVE_HOST: "Couldn't resolve host name",
    RequestError.COULDNT_CONNECT: "Couldn't connect to server",
    RequestError.OPERATION_TIMEDOUT: "Timeout was reached",
    RequestError.ABORTED_BY_CALLBACK: "Operation was aborted by an application callback",
    RequestError.SEND_ERROR: "Failed sending data to the peer",
    RequestError.RECV_ERROR: "Failure when receiving data from the peer",
}


@dataclass
class Request:
    """An HTTP request and the callbacks that receive its outcome.

    ``response_callback(error_code, response, error, http_status)`` gets the
    response body as a stream rewound to its start. ``progress_callback(
    dl_total, dl_now, ul_total, ul_now)`` may run on a worker thread and
    returns True to abort the transfer.
    """

    url: str = ""
    post_payload: str | bytes = ""
    headers: list[tuple[str, str]] = field(default_factory=list)
    response_callback: ResponseCallback | None = None
    progress_callback: ProgressCallback | None = None


def _classify(reason: object) -> RequestError:
    if isinstance(reason, TimeoutError):
        return RequestError.OPERATION_TIMEDOUT
    if isinstance(reason, socket.gaierror):
        return RequestError.COULDNT_RESOLVE_HOST
    if isinstance(reason, str) and reason.startswith("unknown url type"):
        return RequestError.UNSUPPORTED_PROTOCOL
    if isinstance(reason, OSError):
        return RequestError.COULDNT_CONNECT
    return RequestError.RECV_ERROR


def _content_length(headers: Any) -> int:
    try:
        return int(headers.get("Content-Length") or 0)
    except (TypeError, ValueError):
        return 0


class HTTPRequestService(Service):
    """Performs GET, POST and custom HTTP requests.

    Asynchronous requests run on a dedicated TaskQueueService queue and their
    response callbacks are delivered on the main thread.
    """

    def __init__(self, manager: Any, user_agent: str = DEFAULT_USER_AGENT) -> None:
        super().__init__(manager)
        self._task_queue_service: TaskQueueService | None = None
        self._user_agent = user_agent
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        self._opener = urllib.request.build_opener(
            urllib.request.HTTPSHandler(context=context)
        )

    @property
    def user_agent(self) -> str:
        """User-Agent header sent with every request."""
        return self._user_agent

    @staticmethod
    def task_queue_name() -> str:
        """Name of the task queue that carries asynchronous requests."""
        return HTTP_REQUEST_SERVICE_QUEUE

    def on_pre_init(self) -> bool:
        task_queue = self._manager.find_service(TaskQueueService)
        if task_queue is None:
            raise ServiceDependencyError(
                "HTTPRequestService needs a registered TaskQueueService"
            )
        task_queue.create_queue(HTTP_REQUEST_SERVICE_QUEUE)
        self._task_queue_service = task_queue
        return True

    def on_init(self) -> bool:
        return True

    def on_tick(self) -> bool:
        return True

    def on_shutdown(self) -> bool:
        if self._task_queue_service is not None:
            self._task_queue_service.remove_queue(HTTP_REQUEST_SERVICE_QUEUE)
        return True

    def make_request_async(
        self,
        request: Request,
        custom_request: str | None = None,
        with_credentials: bool = False,
    ) -> int:
        """Queue a request and return its work item handle.

        The request is copied, so later changes to it do not affect the
        transfer. The response callback runs on the main thread.
        """
        task_queue = self._require_task_queue()
        copy = dataclasses.replace(request, headers=list(request.headers))
        return task_queue.add_work_item(
            HTTP_REQUEST_SERVICE_QUEUE,
            lambda: self._send_request(copy, False, custom_request or "", with_credentials),
        )

    def make_request_sync(
        self,
        request: Request,
        custom_request: str | None = None,
        with_credentials: bool = False,
    ) -> None:
        """Perform a request on the calling thread and call back immediately.

        ``with_credentials`` is accepted for interface parity; cookies are
        not managed here.
        """
        self._send_request(request, True, custom_request or "", with_credentials)

    def _require_task_queue(self) -> TaskQueueService:
        if self._task_queue_service is None:
            raise RuntimeError("HTTPRequestService has not been pre-initialized")
        return self._task_queue_service

    def _send_request(
        self, request: Request, sync: bool, custom_request: str, with_credentials: bool
    ) -> None:
        callback = request.response_callback
        if not request.url:
            if callback is not None:
                if sync:
                    callback(-1, None, "", 0)
                else:
                    self._require_task_queue().run_on_main_thread(
                        lambda: callback(-1, None, "", 0)
                    )
            return

        log.debug(
            "Sending HTTP request: %s, %s: %r",
            request.url,
            custom_request or ("POST" if request.post_payload else "GET"),
            request.post_payload,
        )

        code, response, status = self._perform(request, custom_request)
        if code != RequestError.OK:
            log.info("Failed to perform HTTP request: error %d - %s", code, request.url)

        if callback is None:
            return

        def deliver() -> None:
            response.seek(0)
            callback(code, response, code.message, status)

        if sync:
            deliver()
        else:
            self._require_task_queue().run_on_main_thread(deliver)

    def _perform(
        self, request: Request, custom_request: str
    ) -> tuple[RequestError, io.BytesIO, int]:
        response = io.BytesIO()
        payload = request.post_payload
        data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        head = custom_request == "HEAD"
        method = custom_request or ("POST" if data else "GET")
        status = 0

        try:
            req = urllib.request.Request(request.url, data=data or None, method=method)
            req.add_header("User-Agent", self._user_agent)
            for name, value in request.headers:
                req.add_header(name, value)

            with self._opener.open(req, timeout=_TIMEOUT) as resp:
                status = resp.status
                code = self._receive(
                    resp, status, resp.reason, resp.headers, request, response, head, len(data)
                )
        except urllib.error.HTTPError as exc:
            status = exc.code
            code = RequestError.OK
            if exc.fp is not None:
                with exc:
                    code = self._receive(
                        exc, status, exc.reason, exc.headers, request, response, head, len(data)
                    )
        except urllib.error.URLError as exc:
            code = _classify(exc.reason)
        except http.client.HTTPException:
            code = RequestError.RECV_ERROR
        except ValueError:
            code = RequestError.URL_MALFORMAT
        except OSError as exc:
            code = _classify(exc)

        return code, response, status

    @staticmethod
    def _receive(
        source: Any,
        status: int,
        reason: str,
        headers: Any,
        request: Request,
        response: io.BytesIO,
        head: bool,
        uploaded: int,
    ) -> RequestError:
        if head:
            lines = [f"HTTP/1.1 {status} {reason}"]
            lines += [f"{name}: {value}" for name, value in headers.items()]
            text = "\r\n".join(lines) + "\r\n\r\n"
            response.write(text.encode("latin-1", errors="replace"))
            return RequestError.OK

        total = _content_length(headers)
        received = 0
        progress = request.progress_callback
        try:
            while chunk := source.read(_CHUNK_SIZE):
                response.write(chunk)
                received += len(chunk)
                if progress is not None and progress(total, received, uploaded, uploaded):
                    return RequestError.ABORTED_BY_CALLBACK
        except TimeoutError:
            return RequestError.OPERATION_TIMEDOUT
        except (OSError, http.client.HTTPException):
            return RequestError.RECV_ERROR
        return RequestError.OK