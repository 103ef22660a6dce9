from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse

from padelnity_notify.application.toasts.engine import ToastEngine
from padelnity_notify.config import settings
from padelnity_notify.container import overlay_sink, toast_engine
from padelnity_notify.infrastructure.overlay.notification_sink_impl import OverlayNotificationSink


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/overlay")


@router.get("/", response_class=HTMLResponse)
async def overlay_index() -> HTMLResponse:
    position = "bottom" if (settings.overlay_position or "").strip().lower() == "bottom" else "top"
    html = """<!doctype html><html><head><meta charset='utf-8'/><title>Avisos</title>
<meta name='viewport' content='width=device-width,initial-scale=1'/>
<style>
:root{ --radius:12px; --success:#10b981; --error:#ef4444; --info:#3b82f6; }
html,body{height:100%}
body{margin:0;background:transparent;overflow:hidden}
#slot{position:fixed;left:16px;right:16px;top:16px;display:flex;justify-content:center;z-index:2147483647;pointer-events:none}
body.pos-bottom #slot{top:auto;bottom:16px}
.toast{pointer-events:auto;display:flex;align-items:flex-start;gap:12px;max-width:384px;width:100%;padding:16px;border-radius:var(--radius);
  background:rgba(255,255,255,.95);border:1px solid #e5e7eb;box-shadow:0 20px 25px -5px rgba(0,0,0,.1);
  font:14px/1.4 system-ui,-apple-system,'Segoe UI',Arial;color:#111827;transition:transform var(--exit) ease-out,opacity var(--exit) ease-out}
.toast.entering,.toast.closing{transform:translateY(-20px);opacity:0}
.toast .icon{flex:0 0 auto;font-size:18px}
.toast .content{flex:1 1 auto;min-width:0}
.toast .title{font-weight:600}
.toast .desc{color:#4b5563;margin-top:4px}
.toast .close{appearance:none;border:0;background:transparent;color:#9ca3af;cursor:pointer;font-size:16px;line-height:1;padding:2px 4px}
.toast .close:hover{color:#4b5563}
.toast.success .icon{color:var(--success)}
.toast.error .icon{color:var(--error)}
.toast.info .icon{color:var(--info)}
</style></head><body>
<div id='slot'></div>
<script>
"""
    html += (
        f"const exitMs = {int(settings.toast_exit_ms)}; "
        f"const position = {json.dumps(position)};\n"
    )
    html += """
document.body.classList.add('pos-'+position);
document.documentElement.style.setProperty('--exit', exitMs+'ms');
const slot = document.getElementById('slot');
const ICONS = { success: '\\u2705', error: '\\u274C', info: '\\u2139\\uFE0F' };
let sock;

function hideCurrent(){
  const el = slot.firstElementChild;
  if(!el) return;
  el.classList.add('closing');
  setTimeout(()=>{ el.remove(); }, exitMs);
}

function show(t){
  slot.innerHTML = '';
  const d = document.createElement('div');
  d.className = 'toast entering ' + (t.severity||'info');
  const icon = document.createElement('div'); icon.className='icon'; icon.textContent = ICONS[t.severity] || ICONS.success;
  const content = document.createElement('div'); content.className='content';
  const title = document.createElement('div'); title.className='title'; title.textContent = String(t.title ?? '');
  content.appendChild(title);
  if(t.description){
    const desc = document.createElement('div'); desc.className='desc'; desc.textContent = String(t.description);
    content.appendChild(desc);
  }
  const close = document.createElement('button'); close.className='close'; close.setAttribute('aria-label','Cerrar notificación'); close.textContent='\\u00D7';
  close.addEventListener('click', (e)=>{
    e.preventDefault(); e.stopPropagation();
    try{ sock?.send(JSON.stringify({type:'dismiss', id:t.id})); }catch(_){}
  });
  d.appendChild(icon); d.appendChild(content); d.appendChild(close);
  slot.appendChild(d);
  requestAnimationFrame(()=> d.classList.remove('entering'));
}

function connect(){
  try{ sock = new WebSocket(location.origin.replace(/^http/,'ws') + '/overlay/ws'); }catch(e){ setTimeout(connect, 1500); return; }
  sock.onclose = ()=>{ setTimeout(connect, 1000); };
  sock.onmessage = (ev)=>{
    try{
      const data = JSON.parse(ev.data);
      if(data?.type!=='toast') return;
      if(data.action==='show'){ show(data.toast||{}); }
      else if(data.action==='clear'){ hideCurrent(); }
    }catch(e){}
  };
}
connect();
</script>
</body></html>"""
    return HTMLResponse(content=html)


@router.websocket("/ws")
async def overlay_ws(
    ws: WebSocket,
    sink: OverlayNotificationSink = Depends(overlay_sink),
    engine: ToastEngine = Depends(toast_engine),
) -> None:
    await ws.accept()
    await sink.register(ws)
    try:
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                logger.debug("ignoring non-json overlay message")
                continue
            if isinstance(msg, dict) and msg.get("type") == "dismiss" and msg.get("id") is not None:
                engine.dismiss(str(msg["id"]))
    except WebSocketDisconnect:
        pass
    finally:
        await sink.unregister(ws)
