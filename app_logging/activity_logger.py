from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from config.settings import settings


class ActivityLogger:
    """
    Structured activity logger. Writes JSON lines to file and emits the same
    event through structlog (stderr JSON once configure_logging() has run).
    Thread-safe via a class-level write lock.

    Each log record schema:
    {
        "timestamp":   "2025-01-01T00:00:00+00:00",
        "level":       "INFO",
        "event":       "template_created",
        "component":   "template_service",
        "template_id": "tmpl_...",   (optional)
        "account_id":  "5b10...",    (optional)
        "message":     "...",
        ...extra_fields
    }
    """

    _lock = threading.Lock()

    def __init__(self, component: str) -> None:
        self.component = component
        self._log_path = Path(settings.activity_log_path)
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._struct = structlog.get_logger(component)

    def _write(
        self,
        level: str,
        event: str,
        template_id: Optional[str] = None,
        account_id: Optional[str] = None,
        message: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "component": self.component,
        }
        if template_id:
            record["template_id"] = template_id
        if account_id:
            record["account_id"] = account_id
        record["message"] = message or event
        record.update(kwargs)

        line = json.dumps(record, default=str)

        with self._lock:
            with open(self._log_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")

        fields = {k: v for k, v in record.items() if k not in ("timestamp", "level", "event")}
        getattr(self._struct, level.lower())(event, **fields)

    # ── Public interface ──────────────────────────────────────────────────────

    def info(self, event: str, **kwargs: Any) -> None:
        self._write("INFO", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._write("WARNING", event, **kwargs)

    def error(
        self,
        event: str,
        exc: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        if exc:
            kwargs.setdefault("error_type", type(exc).__name__)
            kwargs.setdefault("error_message", str(exc))
        self._write("ERROR", event, **kwargs)

    def debug(self, event: str, **kwargs: Any) -> None:
        if settings.log_level.upper() == "DEBUG":
            self._write("DEBUG", event, **kwargs)
