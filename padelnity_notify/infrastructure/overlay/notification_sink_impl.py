from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Set

from fastapi import WebSocket

from padelnity_notify.domain.models.notification import Notification
from padelnity_notify.domain.ports.notification_sink import INotificationSink


logger = logging.getLogger(__name__)


def show_event(notification: Notification) -> dict:
    return {"type": "toast", "action": "show", "toast": notification.to_dict()}


CLEAR_EVENT = {"type": "toast", "action": "clear"}


class OverlayNotificationSink(INotificationSink):
    """Pushes toast show/clear events to every connected overlay websocket."""

    def __init__(self) -> None:
        self._clients: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        # serializes broadcasts so clients see show/clear in emission order
        self._send_lock = asyncio.Lock()
        self._pending: Set[asyncio.Task] = set()
        self._shown: Optional[Notification] = None

    async def register(self, ws: WebSocket) -> None:
        # broadcasts scheduled before this point do not include ws; the replay covers them
        async with self._send_lock:
            async with self._lock:
                self._clients.add(ws)
            if self._shown is None:
                return
            try:
                await ws.send_json(show_event(self._shown))
            except Exception:  # noqa: BLE001
                async with self._lock:
                    self._clients.discard(ws)

    async def unregister(self, ws: WebSocket) -> None:
        async with self._lock:
            self._clients.discard(ws)

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def publish(self, event: dict, clients: Optional[List[WebSocket]] = None) -> None:
        # broadcast without failing the caller
        if clients is None:
            async with self._lock:
                clients = list(self._clients)
        to_drop: list[WebSocket] = []
        async with self._send_lock:
            for ws in clients:
                try:
                    await ws.send_json(event)
                except Exception:  # noqa: BLE001
                    to_drop.append(ws)
        if to_drop:
            logger.info("dropping %d dead overlay client(s)", len(to_drop))
            async with self._lock:
                for ws in to_drop:
                    self._clients.discard(ws)

    def render(self, notification: Notification) -> None:
        self._shown = notification
        self._schedule(show_event(notification))

    def clear(self) -> None:
        self._shown = None
        self._schedule(dict(CLEAR_EVENT))

    def _schedule(self, event: dict) -> None:
        if not self._clients:
            return
        loop = asyncio.get_running_loop()
        task = loop.create_task(self.publish(event, list(self._clients)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


class LoggingNotificationSink(INotificationSink):
    """Terminal rendering: one log line per show/clear."""

    def __init__(self, logger_name: str = "padelnity_notify.toasts") -> None:
        self._log = logging.getLogger(logger_name)
        self._shown: Optional[Notification] = None

    def render(self, notification: Notification) -> None:
        self._shown = notification
        if notification.description:
            self._log.info("[%s] %s - %s", notification.severity.upper(), notification.title, notification.description)
        else:
            self._log.info("[%s] %s", notification.severity.upper(), notification.title)

    def clear(self) -> None:
        if self._shown is not None:
            self._log.debug("cleared toast %s", self._shown.id)
        self._shown = None
