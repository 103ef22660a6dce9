import random

import pytest

from padelnity_notify.application.toasts.delivery_queue import DeliveryQueue
from padelnity_notify.application.toasts.engine import ToastEngine
from padelnity_notify.application.toasts.scheduler import DisplayScheduler, Phase
from padelnity_notify.domain.models.notification import Notification

from conftest import DISPLAY, EXIT, ManualTimers, RecordingSink


def test_basic_flow_renders_then_clears_and_goes_idle(engine, sink, timers):
    engine.emit("success", "Saved")

    assert sink.rendered_titles == ["Saved"]
    assert engine.phase is Phase.DISPLAYING
    assert engine.scheduler.expires_at == DISPLAY

    timers.advance(DISPLAY)
    assert sink.events[-1][0] == "clear"
    assert engine.phase is Phase.EXITING

    timers.advance(EXIT)
    assert engine.phase is Phase.IDLE
    assert engine.current is None
    assert timers.armed == []


def test_backlog_is_displayed_in_order_after_full_lifecycle(engine, sink, timers):
    engine.emit("info", "A")
    engine.emit("info", "B")
    engine.emit("info", "C")

    assert sink.rendered_titles == ["A"]
    timers.advance(DISPLAY)
    assert sink.rendered_titles == ["A"]  # exit animation still occupies the slot
    timers.advance(EXIT)
    assert sink.rendered_titles == ["A", "B"]
    timers.advance(DISPLAY + EXIT)
    assert sink.rendered_titles == ["A", "B", "C"]
    timers.advance(DISPLAY + EXIT)

    kinds = [kind for kind, _ in sink.events]
    assert kinds == ["render", "clear"] * 3
    assert sink.overlaps == 0
    assert engine.phase is Phase.IDLE


def test_toast_emitted_while_displaying_waits_its_turn(engine, sink, timers):
    engine.emit("info", "first")
    timers.advance(0.5)
    engine.emit("error", "second")

    assert engine.current.title == "first"
    assert [n.title for n in engine.queue.snapshot()] == ["second"]


def test_manual_dismiss_cancels_timer_and_advances(engine, sink, timers):
    engine.emit("info", "A")
    engine.emit("info", "B")
    current = engine.current

    assert engine.dismiss(current.id) is True
    assert engine.phase is Phase.EXITING
    assert sink.events[-1] == ("clear", current)

    timers.advance(EXIT)
    assert engine.current.title == "B"


def test_dismiss_twice_is_idempotent(engine, sink, timers):
    engine.emit("info", "A")
    toast_id = engine.current.id

    assert engine.dismiss(toast_id) is True
    events_after_first = list(sink.events)
    assert engine.dismiss(toast_id) is False
    assert sink.events == events_after_first


def test_stale_dismiss_for_unknown_or_replaced_toast_is_ignored(engine, sink, timers):
    engine.emit("info", "A")
    engine.emit("info", "B")
    old_id = engine.current.id
    timers.advance(DISPLAY + EXIT)

    assert engine.current.title == "B"
    assert engine.dismiss(old_id) is False
    assert engine.dismiss("does-not-exist") is False
    assert engine.phase is Phase.DISPLAYING


def test_dismiss_during_exit_is_noop(engine, sink, timers):
    engine.emit("info", "A")
    toast_id = engine.current.id
    timers.advance(DISPLAY)

    assert engine.phase is Phase.EXITING
    assert engine.dismiss(toast_id) is False
    assert [kind for kind, _ in sink.events].count("clear") == 1


def test_timer_firing_after_manual_dismiss_has_no_effect(engine, sink, timers):
    engine.emit("info", "A")
    engine.emit("info", "B")
    display_handle = timers.armed[0]
    toast_id = engine.current.id

    engine.dismiss(toast_id)
    assert display_handle.cancelled
    timers.advance(EXIT)
    assert engine.current.title == "B"

    # the old timer fires late anyway (cancel raced with the callback)
    timers.fire(display_handle)
    assert engine.current.title == "B"
    assert engine.phase is Phase.DISPLAYING
    assert [kind for kind, _ in sink.events] == ["render", "clear", "render"]


def test_expire_for_same_id_but_old_generation_is_ignored(engine, sink, timers):
    engine.emit("info", "A")
    toast_id = engine.current.id
    generation = timers.armed[0].args[1]

    engine.scheduler.on_timer_expire(toast_id, generation - 1)
    assert engine.phase is Phase.DISPLAYING


def test_at_most_one_displayed_under_random_interleaving(engine, sink, timers):
    rng = random.Random(7)
    for step in range(300):
        action = rng.choice(["emit", "emit", "dismiss", "stale", "tick"])
        if action == "emit":
            engine.emit(rng.choice(["info", "error", "success"]), f"toast {step}")
        elif action == "dismiss" and engine.current is not None:
            engine.dismiss(engine.current.id)
        elif action == "stale":
            engine.dismiss(str(rng.randint(1, step + 1)))
        else:
            timers.advance(rng.choice([0.1, 0.25, 0.5, 1.0]))
        assert sink.overlaps == 0
        if engine.phase is Phase.IDLE:
            assert engine.current is None
            assert len(engine.queue) == 0

    timers.advance(1000.0)
    assert engine.phase is Phase.IDLE
    rendered = sink.rendered_titles
    assert rendered == sorted(rendered, key=lambda t: int(t.split()[1]))


def test_shutdown_cancels_timers_and_clears_screen(engine, sink, timers):
    engine.emit("info", "A")
    engine.emit("info", "B")

    engine.shutdown()
    assert timers.armed == []
    assert engine.phase is Phase.IDLE
    assert sink.events[-1][0] == "clear"
    assert not engine.initialized

    timers.advance(10.0)
    assert sink.rendered_titles == ["A"]

    engine.init(timers)
    assert engine.current.title == "B"


def test_sink_failure_does_not_stall_queue(timers):
    class BrokenSink(RecordingSink):
        def render(self, notification):
            super().render(notification)
            raise RuntimeError("renderer crashed")

    sink = BrokenSink()
    queue = DeliveryQueue()
    scheduler = DisplayScheduler(queue, sink, display_seconds=DISPLAY, exit_seconds=EXIT, timers=timers)
    queue.enqueue(Notification(id="1", severity="error", title="one"))
    queue.enqueue(Notification(id="2", severity="error", title="two"))
    scheduler.try_advance()
    timers.advance(DISPLAY + EXIT)

    assert sink.rendered_titles == ["one", "two"]
    assert scheduler.current.id == "2"


def test_emit_before_init_queues_until_bound(sink):
    timers = ManualTimers()
    eng = ToastEngine(sink, display_seconds=DISPLAY, exit_seconds=EXIT, clock=timers.time)
    eng.emit("info", "early")

    assert sink.events == []
    assert len(eng.queue) == 1

    eng.init(timers)
    assert sink.rendered_titles == ["early"]


def test_listener_failure_does_not_stall_queue(sink, timers, caplog):
    class BrokenListener:
        def on_emitted(self, notification):
            raise RuntimeError("metrics backend down")

        def on_suppressed(self, severity, title):
            raise RuntimeError("metrics backend down")

        def on_displayed(self, notification):
            raise RuntimeError("metrics backend down")

        def on_dismissed(self, notification):
            raise RuntimeError("metrics backend down")

        def on_queue_depth(self, depth):
            raise RuntimeError("metrics backend down")

    eng = ToastEngine(sink, display_seconds=DISPLAY, exit_seconds=EXIT, clock=timers.time, listener=BrokenListener())
    eng.init(timers)
    eng.emit("info", "A")
    eng.emit("info", "B")

    assert len(timers.armed) == 1
    assert eng.dismiss(eng.current.id) is True
    timers.advance(100.0)

    assert sink.rendered_titles == ["A", "B"]
    assert eng.phase is Phase.IDLE
    assert any("toast listener" in r.getMessage() for r in caplog.records)


def test_exit_without_timer_source_raises(timers):
    queue = DeliveryQueue()
    scheduler = DisplayScheduler(queue, RecordingSink(), display_seconds=DISPLAY, exit_seconds=EXIT, timers=timers)
    queue.enqueue(Notification(id="1", severity="info", title="one"))
    scheduler.try_advance()
    scheduler.bind(None)  # type: ignore[arg-type]

    with pytest.raises(RuntimeError):
        scheduler.on_manual_dismiss("1")
