# svcframe

A small framework for running the services of a frame-driven application,
typically a game loop. Services move through a fixed lifecycle — pre-init,
init, running, shutting down, completed — under the control of a
`ServiceManager` that you update once per frame.

## Modules

- `svcframe.service` — the `Service` base class and the `ServiceState` enum.
  Override `on_pre_init`, `on_init`, `on_tick` and `on_shutdown`; each is
  called once per update until it returns True, which moves the service on.
- `svcframe.signals` — `Signal`, an ordered list of callables
  (`connect`, `disconnect`, `slots`, `emit`), and `Signals`, the registry of
  every signal the services use.
- `svcframe.service_manager` — `ServiceManager`. `register_service(cls,
  dependencies)` creates the service; with `None` it goes to the front of the
  list, otherwise it is placed behind the services it depends on, and
  `ServiceDependencyError` is raised if one of them is not registered.
  `update(elapsed_time)` steps every service, `find_service(cls)` looks one
  up, and `shutdown()` tears services down in reverse order and forgets them.
  Each change of the manager's state is emitted on
  `signals.service_manager_state_changed_event`.
- `svcframe.render_service` — `RenderService`, `RenderStep` and
  `RenderClick`: named, ordered render passes made of named callables. A slot
  of a step's `pre_render_signal` that returns a false value skips the step;
  `post_render_signal` fires after it ran.
- `svcframe.cache` — `Cache(factory, registry=None)` loads each asset once per
  case-insensitive URL; `Caches` holds caches for `flush_all` and
  `destroy_all`. Caches register with a module-level `Caches` unless given
  their own.
- `svcframe.taskqueue_service` — `TaskQueueService` with named queues, each a
  `TaskQueue` on its own thread, plus a main-thread queue of which one item is
  run per `on_tick`. Queue progress is reported through the
  `task_queue_*` signals, emitted on the thread that ticks the service.
- `svcframe.taskscheduler_service` — `TaskSchedulerService(manager, clock=None)`
  runs callables on tick once the clock reaches their time; the clock
  defaults to `time.monotonic`. Scheduling in the past raises `ValueError`.
- `svcframe.input_service` — `InputService` passes input events to the input
  signals, calling slots in connection order and stopping at the first that
  returns a true value. The mouse methods return whether the event was
  consumed.
- `svcframe.httprequest_service` — `HTTPRequestService` and `Request`.
  Requests are made with the standard library, either on the calling thread
  (`make_request_sync`) or on a dedicated task queue (`make_request_async`),
  whose response callback is then delivered on the main thread. The callback
  receives an error code (`RequestError`, 0 for success), the body as a
  rewound `io.BytesIO`, an error message and the HTTP status. A
  `TaskQueueService` must be registered before it.
- `svcframe.storefront_service` — `StorefrontService` and `StoreProduct`;
  store events are kept or forwarded to the `storefront_*` signals.
- `svcframe.social_service` — `SocialService` and `AuthResponse`; the
  authentication result is emitted on `social_authenticated_event`.
- `svcframe.tracker_service` — `TrackerService`, `Parameter`,
  `EcommerceItem`, `format_value` and `params_payload` for analytics events
  posted as JSON over the Measurement Protocol through `HTTPRequestService`.

## Quick start

```python
from svcframe.service_manager import ServiceManager
from svcframe.service import ServiceState
from svcframe.taskqueue_service import TaskQueueService
from svcframe.render_service import RenderService, RenderClick

manager = ServiceManager()
tasks = manager.register_service(TaskQueueService, None)
render = manager.register_service(RenderService, [tasks])

step = render.create_render_step("Scene", None)
step.add_render_click(RenderClick("Draw", lambda: print("draw")), None)

# Drive the lifecycle from your frame loop.
while manager.state != ServiceState.RUNNING:
    manager.update(0.016)

tasks.run_on_main_thread(lambda: print("ran on the main thread"))
manager.update(0.016)
render.render_frame()

manager.shutdown()
```

## Signals

Every manager owns a `Signals` registry (`manager.signals`):

```python
manager.signals.service_manager_state_changed_event.connect(
    lambda state: print("manager is now", state)
)
```

## Analytics

```python
from svcframe.httprequest_service import HTTPRequestService
from svcframe.tracker_service import Parameter, TrackerService

manager = ServiceManager()
tasks = manager.register_service(TaskQueueService, None)
http = manager.register_service(HTTPRequestService, [tasks])
tracker = manager.register_service(TrackerService, [http])
manager.update(0.016)  # pre-init: the tracker finds the HTTP service

tracker.setup_tracking("app-id", "0000-0000-0000-0000", "secret")
tracker.send_event("level_start", [Parameter("level", 3)])
```

Without an `HTTPRequestService`, or after `set_tracker_enabled(False)`,
events are dropped.

## What it does not do

The package draws nothing and opens no window: render clicks are plain
callables you supply. It holds no store or social backend either; the store
front and social controller are objects you pass in, which call the
services' event methods. Analytics events are only sent over HTTP.

## Running the tests

```
pip install -e .[test]
pytest
```