from __future__ import annotations

from typing import Protocol

from padelnity_notify.domain.models.notification import Notification


class IToastListener(Protocol):
    def on_emitted(self, notification: Notification) -> None: ...

    def on_suppressed(self, severity: str, title: str) -> None: ...

    def on_displayed(self, notification: Notification) -> None: ...

    def on_dismissed(self, notification: Notification) -> None: ...

    def on_queue_depth(self, depth: int) -> None: ...
