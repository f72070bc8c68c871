"""Structured chunking events rendered through the shared logger."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from ..core.logging import log


class EventLevel(str, Enum):
    """Event levels for structured logging."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    DEBUG = "debug"


_enabled = True


def set_events_enabled(enabled: bool) -> None:
    """Turn chunk.* event emission on or off for this process."""
    global _enabled
    _enabled = enabled


def build_event(event_type: str, **kwargs: Any) -> Dict[str, Any]:
    """Build the canonical event dict for ``event_type`` ("stage.op")."""
    stage, _, op = event_type.partition(".")
    if not op:
        stage, op = "chunk", event_type

    level = str(kwargs.pop("level", EventLevel.INFO.value)).lower()
    status = kwargs.pop("status", None)
    if not status:
        if any(k in op for k in ["error", "fail"]):
            status = "FAIL"
            level = EventLevel.ERROR.value
        elif any(k in op for k in ["warning", "fallback"]):
            status = "OK"
            level = EventLevel.WARNING.value
        elif any(k in op for k in ["start", "begin"]):
            status = "START"
        elif any(k in op for k in ["complete", "done", "end"]):
            status = "END"
        else:
            status = "OK"

    event = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": level,
        "stage": stage,
        "op": op,
        "status": status,
    }
    event.update({k: v for k, v in kwargs.items() if v is not None})
    return event


def emit_event(event_type: str, **kwargs: Any) -> None:
    """Emit a standardized event line through structlog."""
    if not _enabled:
        return
    try:
        event = build_event(event_type, **kwargs)
        level = event.pop("level")
        getattr(log, level, log.info)(event_type, **event)
    except Exception:
        # Never break main flow on observability errors
        pass
