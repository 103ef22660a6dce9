from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional

from padelnity_notify.application.toasts.delivery_queue import DeliveryQueue
from padelnity_notify.domain.models.notification import Notification
from padelnity_notify.domain.ports.notification_sink import INotificationSink, ITimerFactory, ITimerHandle
from padelnity_notify.domain.ports.toast_listener import IToastListener


logger = logging.getLogger(__name__)


def call_listener(listener: Optional[IToastListener], hook: str, *args: Any) -> None:
    """Invoke a lifecycle hook; listener failures are logged, never raised."""
    if listener is None:
        return
    try:
        getattr(listener, hook)(*args)
    except Exception:
        logger.exception("toast listener %s failed", hook)


class Phase(str, Enum):
    IDLE = "idle"
    DISPLAYING = "displaying"
    EXITING = "exiting"


class DisplayScheduler:
    """Owns the single display slot.

    Lifecycle per toast: ``render`` -> display timer -> ``clear`` -> exit
    timer -> next toast. The slot stays occupied during the exit phase so
    the next toast never overlaps the outgoing animation.

    Every armed timer carries the generation it was armed for; a callback
    whose generation is no longer current is a no-op. Manual dismiss also
    cancels the display timer through its handle, so expiry and dismiss
    cannot both take effect for the same toast.
    """

    def __init__(
        self,
        queue: DeliveryQueue,
        sink: INotificationSink,
        *,
        display_seconds: float = 1.5,
        exit_seconds: float = 0.3,
        timers: Optional[ITimerFactory] = None,
        listener: Optional[IToastListener] = None,
    ) -> None:
        self._queue = queue
        self._sink = sink
        self._display_seconds = float(display_seconds)
        self._exit_seconds = float(exit_seconds)
        self._timers = timers
        self._listener = listener

        self._phase = Phase.IDLE
        self._current: Optional[Notification] = None
        self._handle: Optional[ITimerHandle] = None
        self._expires_at: Optional[float] = None
        self._generation = 0

    def bind(self, timers: ITimerFactory) -> None:
        self._timers = timers

    @property
    def bound(self) -> bool:
        return self._timers is not None

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    @property
    def expires_at(self) -> Optional[float]:
        return self._expires_at

    @property
    def is_idle(self) -> bool:
        return self._phase is Phase.IDLE

    def try_advance(self) -> None:
        if self._phase is not Phase.IDLE:
            return
        if self._timers is None:
            raise RuntimeError("scheduler has no timer factory; call ToastEngine.init() first")
        nxt = self._queue.dequeue_next()
        if nxt is None:
            return

        self._generation += 1
        self._phase = Phase.DISPLAYING
        self._current = nxt
        self._expires_at = self._timers.time() + self._display_seconds
        logger.debug("toast displayed: id=%s severity=%s", nxt.id, nxt.severity)
        self._handle = self._timers.call_later(
            self._display_seconds, self.on_timer_expire, nxt.id, self._generation
        )
        self._call_sink(self._sink.render, nxt)
        call_listener(self._listener, "on_displayed", nxt)
        call_listener(self._listener, "on_queue_depth", len(self._queue))

    def on_timer_expire(self, notification_id: str, generation: Optional[int] = None) -> None:
        if not self._is_displaying(notification_id):
            return
        if generation is not None and generation != self._generation:
            return
        self._handle = None
        self._begin_exit()

    def on_manual_dismiss(self, notification_id: str) -> bool:
        """Dismiss the displayed toast. Returns False for stale or repeated ids."""
        if not self._is_displaying(notification_id):
            logger.debug("stale dismiss ignored: id=%s", notification_id)
            return False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        current = self._current
        self._begin_exit()
        if current is not None:
            call_listener(self._listener, "on_dismissed", current)
        return True

    def shutdown(self) -> None:
        """Cancel armed timers, drop the slot and unbind the timer source.

        Queued toasts stay queued; the next ``bind`` + ``try_advance`` resumes them.
        """
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        was_displaying = self._phase is Phase.DISPLAYING
        self._generation += 1
        self._timers = None
        self._phase = Phase.IDLE
        self._current = None
        self._expires_at = None
        if was_displaying:
            self._call_sink(self._sink.clear)

    def _is_displaying(self, notification_id: str) -> bool:
        return (
            self._phase is Phase.DISPLAYING
            and self._current is not None
            and self._current.id == notification_id
        )

    def _begin_exit(self) -> None:
        if self._timers is None:
            raise RuntimeError("scheduler has no timer factory; call ToastEngine.init() first")
        self._phase = Phase.EXITING
        self._expires_at = None
        self._call_sink(self._sink.clear)
        self._handle = self._timers.call_later(self._exit_seconds, self._on_exit_done, self._generation)

    def _on_exit_done(self, generation: int) -> None:
        if self._phase is not Phase.EXITING or generation != self._generation:
            return
        self._handle = None
        self._current = None
        self._phase = Phase.IDLE
        self.try_advance()

    def _call_sink(self, fn: Callable[..., Any], *args: Any) -> None:
        # sink errors never reach the caller; the armed timers still advance the slot
        try:
            fn(*args)
        except Exception:
            logger.exception("notification sink %s failed", getattr(fn, "__name__", "call"))
