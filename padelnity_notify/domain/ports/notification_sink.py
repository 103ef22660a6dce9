from __future__ import annotations

from typing import Any, Callable, Protocol

from padelnity_notify.domain.models.notification import Notification


class INotificationSink(Protocol):
    """Rendering target for the single active toast.

    The host forwards user dismiss actions back to ``ToastEngine.dismiss``.
    """

    def render(self, notification: Notification) -> None: ...

    def clear(self) -> None: ...


class ITimerHandle(Protocol):
    def cancel(self) -> None: ...


class ITimerFactory(Protocol):
    """Subset of ``asyncio.AbstractEventLoop`` the scheduler relies on."""

    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ITimerHandle: ...
