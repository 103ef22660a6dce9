from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Callable, Optional

from padelnity_notify.application.toasts.deduplicator import FingerprintDeduplicator
from padelnity_notify.application.toasts.delivery_queue import DeliveryQueue
from padelnity_notify.application.toasts.scheduler import DisplayScheduler, Phase, call_listener
from padelnity_notify.domain.models.notification import SEVERITIES, Notification, Severity
from padelnity_notify.domain.ports.notification_sink import INotificationSink, ITimerFactory
from padelnity_notify.domain.ports.toast_listener import IToastListener


logger = logging.getLogger(__name__)


class ToastEngine:
    """In-process toast delivery: dedup -> FIFO queue -> single display slot.

    All methods must run on the thread that owns ``timers`` (the asyncio loop
    thread in the server). Other threads go through ``emit_threadsafe``.
    """

    def __init__(
        self,
        sink: INotificationSink,
        *,
        dedup_window_seconds: float = 3.0,
        display_seconds: float = 1.5,
        exit_seconds: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
        listener: Optional[IToastListener] = None,
    ) -> None:
        self._sink = sink
        self._listener = listener
        self._ids = itertools.count(1)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.deduplicator = FingerprintDeduplicator(dedup_window_seconds, clock=clock)
        self.queue = DeliveryQueue()
        self.scheduler = DisplayScheduler(
            self.queue,
            sink,
            display_seconds=display_seconds,
            exit_seconds=exit_seconds,
            listener=listener,
        )

    @classmethod
    def from_settings(cls, sink: INotificationSink, settings: Any, listener: Optional[IToastListener] = None) -> "ToastEngine":
        return cls(
            sink,
            dedup_window_seconds=settings.toast_dedup_window_ms / 1000.0,
            display_seconds=settings.toast_display_ms / 1000.0,
            exit_seconds=settings.toast_exit_ms / 1000.0,
            listener=listener,
        )

    def init(self, timers: Optional[ITimerFactory] = None) -> None:
        """Bind the timer source (the running event loop by default) and flush anything queued."""
        if timers is None:
            timers = asyncio.get_running_loop()
        if isinstance(timers, asyncio.AbstractEventLoop):
            self._loop = timers
        self.scheduler.bind(timers)
        logger.info("toast engine initialized (queued=%d)", len(self.queue))
        self.scheduler.try_advance()

    @property
    def initialized(self) -> bool:
        return self.scheduler.bound

    def emit(self, severity: Severity, title: str, description: Optional[str] = None) -> None:
        if severity not in SEVERITIES:
            raise ValueError(f"unknown toast severity: {severity!r}")
        if not title or not str(title).strip():
            raise ValueError("toast title is required")
        description = description or None

        notification_id = str(next(self._ids))
        if not self.deduplicator.should_admit(title, description):
            logger.debug("duplicate toast suppressed: %s", title)
            call_listener(self._listener, "on_suppressed", severity, title)
            return

        notification = Notification(id=notification_id, severity=severity, title=title, description=description)
        self.queue.enqueue(notification)
        call_listener(self._listener, "on_emitted", notification)
        call_listener(self._listener, "on_queue_depth", len(self.queue))
        if self.scheduler.is_idle and self.scheduler.bound:
            self.scheduler.try_advance()

    def emit_threadsafe(self, severity: Severity, title: str, description: Optional[str] = None) -> None:
        if self._loop is None:
            raise RuntimeError("toast engine is not bound to an event loop")
        self._loop.call_soon_threadsafe(self.emit, severity, title, description)

    def dismiss(self, notification_id: str) -> bool:
        return self.scheduler.on_manual_dismiss(str(notification_id))

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        self._loop = None
        logger.info("toast engine stopped (pending=%d)", len(self.queue))

    @property
    def current(self) -> Optional[Notification]:
        return self.scheduler.current

    @property
    def phase(self) -> Phase:
        return self.scheduler.phase

    def state(self) -> dict:
        current = self.scheduler.current
        return {
            "phase": self.scheduler.phase.value,
            "current": current.to_dict() if current is not None else None,
            "queued": [n.to_dict() for n in self.queue.snapshot()],
        }

