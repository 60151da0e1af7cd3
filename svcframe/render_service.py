"""Ordered render steps made of render clicks."""

from __future__ import annotations

from typing import Any, Callable

from .service import Service
from .signals import Signal


def _insert_after(items: list, item: Any, anchor: Any) -> None:
    for index, existing in enumerate(items):
        if existing is anchor:
            items.insert(index + 1, item)
            return
    items.append(item)


class RenderClick:
    """A small named piece of rendering."""

    def __init__(self, name: str, fn: Callable[[], Any]) -> None:
        self.name = name
        self.active = True
        self._fn = fn

    def render(self) -> None:
        """Run the render function."""
        self._fn()


class RenderStep:
    """A named, ordered collection of render clicks.

    Slots of ``pre_render_signal`` get the step and may return a false value
    to skip the step; ``post_render_signal`` fires after the clicks ran.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.active = True
        self.pre_render_signal = Signal()
        self.post_render_signal = Signal()
        self._clicks: list[RenderClick] = []

    @property
    def render_clicks(self) -> tuple[RenderClick, ...]:
        """Clicks in render order."""
        return tuple(self._clicks)

    def find_render_click(self, name: str) -> RenderClick | None:
        """Return the first click with the given name, or None."""
        return next((c for c in self._clicks if c.name == name), None)

    def add_render_click(
        self, click: RenderClick, insert_after: RenderClick | None = None
    ) -> None:
        """Insert a click after another one, or at the end."""
        _insert_after(self._clicks, click, insert_after)

    def render(self) -> None:
        """Render every active click unless a pre-render slot vetoes it."""
        for slot in self.pre_render_signal.slots():
            if not slot(self):
                return
        for click in list(self._clicks):
            if click.active:
                click.render()
        self.post_render_signal.emit(self)


class RenderService(Service):
    """Holds render steps and draws them in order."""

    def __init__(self, manager: Any) -> None:
        super().__init__(manager)
        self._steps: list[RenderStep] = []

    @property
    def render_steps(self) -> tuple[RenderStep, ...]:
        """Steps in render order."""
        return tuple(self._steps)

    def create_render_step(
        self, name: str, insert_after: RenderStep | None = None
    ) -> RenderStep:
        """Create a step after the given one, or at the end."""
        step = RenderStep(name)
        _insert_after(self._steps, step, insert_after)
        return step

    def find_render_step(self, name: str) -> RenderStep | None:
        """Return the first step with the given name, or None."""
        return next((s for s in self._steps if s.name == name), None)

    def remove_render_step(self, step: RenderStep) -> None:
        """Remove a step from the render list."""
        self._steps = [s for s in self._steps if s is not step]

    def render_frame(self) -> None:
        """Render every active step."""
        for step in list(self._steps):
            if step.active:
                step.render()

    def on_init(self) -> bool:
        return True

    def on_tick(self) -> bool:
        return False

    def on_shutdown(self) -> bool:
        self._steps.clear()
        return True