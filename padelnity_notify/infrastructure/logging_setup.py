from __future__ import annotations

import json
import logging
import os
import socket
import time as _time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from padelnity_notify.config import settings


_STANDARD_LOG_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


_LOGGING_INITIALIZED = False


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        _dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if not settings.log_utc:
            _dt = _dt.astimezone()

        payload: dict[str, Any] = {
            "time": _dt.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "lineno": record.lineno,
            "func": record.funcName,
            "service": settings.app_name,
            "host": socket.gethostname(),
        }
        env_name = os.getenv("ENV") or os.getenv("ENVIRONMENT") or None
        if env_name:
            payload["environment"] = env_name
        # extras passed via logger.info(..., extra={...})
        for k, v in record.__dict__.items():
            if k not in _STANDARD_LOG_KEYS and k not in payload:
                try:
                    json.dumps(v)
                    payload[k] = v
                except (TypeError, ValueError):
                    payload[k] = str(v)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def _apply_formatter_to_logger(logger_name: str, formatter: logging.Formatter) -> None:
    logger = logging.getLogger(logger_name)
    for h in logger.handlers:
        h.setFormatter(formatter)


def init_logging() -> None:
    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Console: human-readable text; File: JSON (if enabled)
    text_formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    text_formatter.converter = _time.gmtime if settings.log_utc else _time.localtime  # type: ignore[assignment]

    stream_handlers = [
        h for h in root.handlers if type(h) is logging.StreamHandler  # noqa: E721 - file handlers subclass it
    ]
    if not stream_handlers:
        sh = logging.StreamHandler()
        sh.setLevel(level)
        sh.setFormatter(text_formatter)
        root.addHandler(sh)
    else:
        # keep the first, drop duplicates to avoid double logs
        stream_handlers[0].setFormatter(text_formatter)
        for h in stream_handlers[1:]:
            root.removeHandler(h)

    if settings.log_file_enabled:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = os.fspath(log_dir / settings.log_file_name)
        existing = [
            h for h in root.handlers
            if isinstance(h, RotatingFileHandler) and getattr(h, "baseFilename", None) == os.path.abspath(log_path)
        ]
        if not existing:
            fh = RotatingFileHandler(
                filename=log_path,
                maxBytes=int(settings.log_max_bytes),
                backupCount=int(settings.log_backup_count),
                encoding="utf-8",
            )
            fh.setLevel(level)
            fh.setFormatter(JsonFormatter())
            root.addHandler(fh)

    # Align uvicorn formatters with the console
    _apply_formatter_to_logger("uvicorn", text_formatter)
    _apply_formatter_to_logger("uvicorn.error", text_formatter)
    _apply_formatter_to_logger("uvicorn.access", text_formatter)

    _LOGGING_INITIALIZED = True
