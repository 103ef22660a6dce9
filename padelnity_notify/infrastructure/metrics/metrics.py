from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator

from padelnity_notify.domain.models.notification import Notification
from padelnity_notify.domain.ports.toast_listener import IToastListener


COUNTER_TOASTS_EMITTED = Counter(
    "toasts_emitted_total",
    "Toasts admitted into the delivery queue",
    ["severity"],
)
COUNTER_TOASTS_SUPPRESSED = Counter(
    "toasts_suppressed_total",
    "Toasts dropped as duplicates inside the dedup window",
    ["severity"],
)
COUNTER_TOASTS_DISPLAYED = Counter(
    "toasts_displayed_total",
    "Toasts that reached the display slot",
    ["severity"],
)
COUNTER_TOASTS_DISMISSED = Counter(
    "toasts_dismissed_total",
    "Toasts closed manually before their display timer fired",
)
GAUGE_QUEUE_DEPTH = Gauge(
    "toast_queue_depth",
    "Toasts waiting for the display slot",
)


class PrometheusToastListener(IToastListener):
    def on_emitted(self, notification: Notification) -> None:
        COUNTER_TOASTS_EMITTED.labels(severity=notification.severity).inc()

    def on_suppressed(self, severity: str, title: str) -> None:
        COUNTER_TOASTS_SUPPRESSED.labels(severity=severity).inc()

    def on_displayed(self, notification: Notification) -> None:
        COUNTER_TOASTS_DISPLAYED.labels(severity=notification.severity).inc()

    def on_dismissed(self, notification: Notification) -> None:
        COUNTER_TOASTS_DISMISSED.inc()

    def on_queue_depth(self, depth: int) -> None:
        GAUGE_QUEUE_DEPTH.set(depth)


def setup_metrics(app: FastAPI) -> None:
    """Attach Prometheus instrumentation and expose /metrics.

    Toast counters are module-level and fed by ``PrometheusToastListener``.
    """
    instrumentator = Instrumentator().instrument(app)
    instrumentator.expose(app, include_in_schema=False)
