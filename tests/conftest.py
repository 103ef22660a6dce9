import itertools
from typing import Any, Callable, Optional

import pytest

from padelnity_notify.application.toasts.engine import ToastEngine
from padelnity_notify.domain.models.notification import Notification


class _Handle:
    def __init__(self, when: float, seq: int, callback: Callable[..., Any], args: tuple) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Deterministic stand-in for the event loop's ``time``/``call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: list[_Handle] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> _Handle:
        handle = _Handle(self.now + delay, next(self._seq), callback, args)
        self._handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target

    def fire(self, handle: _Handle) -> None:
        """Run a callback even if it was cancelled (late-firing timer)."""
        if handle in self._handles:
            self._handles.remove(handle)
        handle.callback(*handle.args)

    @property
    def armed(self) -> list[_Handle]:
        return [h for h in self._handles if not h.cancelled]


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, Optional[Notification]]] = []
        self.visible: Optional[Notification] = None
        self.overlaps = 0

    def render(self, notification: Notification) -> None:
        if self.visible is not None:
            self.overlaps += 1
        self.visible = notification
        self.events.append(("render", notification))

    def clear(self) -> None:
        self.events.append(("clear", self.visible))
        self.visible = None

    @property
    def rendered_titles(self) -> list[str]:
        return [n.title for kind, n in self.events if kind == "render" and n is not None]


DISPLAY = 1.0
EXIT = 0.25
WINDOW = 3.0


@pytest.fixture()
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def engine(sink: RecordingSink, timers: ManualTimers) -> ToastEngine:
    eng = ToastEngine(
        sink,
        dedup_window_seconds=WINDOW,
        display_seconds=DISPLAY,
        exit_seconds=EXIT,
        clock=timers.time,
    )
    eng.init(timers)
    return eng
