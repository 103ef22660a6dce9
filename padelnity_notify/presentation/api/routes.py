from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from padelnity_notify.application.toasts.engine import ToastEngine
from padelnity_notify.container import toast_engine
from padelnity_notify.domain.models.notification import SEVERITIES

router = APIRouter(prefix="/api")


class ToastRequest(BaseModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/toasts/state")
async def toasts_state(engine: ToastEngine = Depends(toast_engine)) -> dict:
    return engine.state()


@router.post("/toasts/{severity}", status_code=202)
async def emit_toast(severity: str, payload: ToastRequest, engine: ToastEngine = Depends(toast_engine)) -> dict:
    sev = (severity or "").strip().lower()
    if sev not in SEVERITIES:
        raise HTTPException(status_code=400, detail=f"unknown severity '{severity}' (expected one of {', '.join(SEVERITIES)})")
    try:
        engine.emit(sev, payload.title, payload.description)  # type: ignore[arg-type]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True}


@router.post("/toasts/{notification_id}/dismiss")
async def dismiss_toast(notification_id: str, engine: ToastEngine = Depends(toast_engine)) -> dict:
    # stale ids are expected (the toast may already be gone); report, don't fail
    dismissed = engine.dismiss(notification_id)
    return {"ok": True, "dismissed": dismissed}
