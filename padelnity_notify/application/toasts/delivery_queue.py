from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from padelnity_notify.domain.models.notification import Notification


class DeliveryQueue:
    """Unbounded FIFO of admitted toasts waiting for the display slot."""

    def __init__(self) -> None:
        self._items: Deque[Notification] = deque()

    def enqueue(self, notification: Notification) -> None:
        self._items.append(notification)

    def dequeue_next(self) -> Optional[Notification]:
        if not self._items:
            return None
        return self._items.popleft()

    def snapshot(self) -> tuple[Notification, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)
