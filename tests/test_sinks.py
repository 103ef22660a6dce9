import asyncio
import logging

from padelnity_notify.domain.models.notification import Notification
from padelnity_notify.infrastructure.overlay.notification_sink_impl import (
    LoggingNotificationSink,
    OverlayNotificationSink,
)


class FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[dict] = []
        self.fail = fail

    async def send_json(self, data: dict) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


def _toast() -> Notification:
    return Notification(id="7", severity="error", title="Email inválido", description="Por favor verifica tu dirección de email")


def test_overlay_broadcasts_show_then_clear_in_order():
    sink = OverlayNotificationSink()
    a, b = FakeSocket(), FakeSocket()

    async def scenario():
        await sink.register(a)
        await sink.register(b)
        sink.render(_toast())
        sink.clear()
        await asyncio.gather(*list(sink._pending))

    asyncio.run(scenario())

    for ws in (a, b):
        assert [e["action"] for e in ws.sent] == ["show", "clear"]
        assert ws.sent[0]["toast"]["id"] == "7"


def test_overlay_drops_dead_clients():
    sink = OverlayNotificationSink()
    ok, dead = FakeSocket(), FakeSocket(fail=True)

    async def scenario():
        await sink.register(ok)
        await sink.register(dead)
        sink.render(_toast())
        await asyncio.gather(*list(sink._pending))

    asyncio.run(scenario())

    assert sink.client_count == 1
    assert len(ok.sent) == 1


def test_overlay_replays_current_toast_to_late_joiner():
    sink = OverlayNotificationSink()
    sink.render(_toast())  # no clients yet: nothing scheduled
    late = FakeSocket()

    asyncio.run(sink.register(late))

    assert late.sent == [{"type": "toast", "action": "show", "toast": _toast().to_dict()}]


def test_logging_sink_writes_one_line_per_toast(caplog):
    sink = LoggingNotificationSink()
    with caplog.at_level(logging.INFO, logger="padelnity_notify.toasts"):
        sink.render(_toast())
        sink.render(Notification(id="8", severity="success", title="Guardado"))
        sink.clear()

    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
    assert messages == [
        "[ERROR] Email inválido - Por favor verifica tu dirección de email",
        "[SUCCESS] Guardado",
    ]


def test_client_joining_during_pending_broadcast_gets_show_once():
    sink = OverlayNotificationSink()
    early, late = FakeSocket(), FakeSocket()

    async def scenario():
        await sink.register(early)
        sink.render(_toast())  # broadcast task created, not yet run
        await sink.register(late)
        await asyncio.gather(*list(sink._pending))
        sink.clear()
        await asyncio.gather(*list(sink._pending))

    asyncio.run(scenario())

    assert [e["action"] for e in early.sent] == ["show", "clear"]
    assert [e["action"] for e in late.sent] == ["show", "clear"]
