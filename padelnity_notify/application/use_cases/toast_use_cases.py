from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from padelnity_notify.application.toasts.engine import ToastEngine


@dataclass(slots=True)
class ToastSuccess:
    engine: ToastEngine

    def __call__(self, title: str, description: Optional[str] = None) -> None:
        self.engine.emit("success", title, description)


@dataclass(slots=True)
class ToastInfo:
    engine: ToastEngine

    def __call__(self, title: str, description: Optional[str] = None) -> None:
        self.engine.emit("info", title, description)


@dataclass(slots=True)
class ToastError:
    engine: ToastEngine

    def __call__(self, title: str, description: Optional[str] = None) -> None:
        self.engine.emit("error", title, description)


class Notifier:
    """Public emit surface: ``notify.success("Guardado", "Tus datos se han actualizado")``."""

    def __init__(self, engine: ToastEngine) -> None:
        self.success = ToastSuccess(engine=engine)
        self.error = ToastError(engine=engine)
        self.info = ToastInfo(engine=engine)
