from __future__ import annotations

from contextvars import ContextVar, Token
from datetime import datetime, timezone
import json
import logging
import uuid


_TRACE_ID_CONTEXT: ContextVar[str | None] = ContextVar("trace_id", default=None)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_trace_id(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    if not normalized:
        return None
    return normalized[:128]


def ensure_trace_id(value: str | None) -> str:
    return normalize_trace_id(value) or uuid.uuid4().hex


def current_trace_id() -> str | None:
    return _TRACE_ID_CONTEXT.get()


def set_current_trace_id(trace_id: str | None) -> Token[str | None]:
    return _TRACE_ID_CONTEXT.set(normalize_trace_id(trace_id))


def reset_current_trace_id(token: Token[str | None]) -> None:
    _TRACE_ID_CONTEXT.reset(token)


def emit_structured_log(
    *,
    component: str,
    event: str,
    level: int = logging.INFO,
    trace_id: str | None = None,
    recorder_id: int | None = None,
    stage: str | None = None,
    **fields,
) -> None:
    payload: dict[str, object | None] = {
        "timestamp_utc": _utcnow_iso(),
        "component": component,
        "event": event,
        "trace_id": normalize_trace_id(trace_id) or current_trace_id(),
        "recorder_id": recorder_id,
        "stage": stage,
    }
    payload.update(fields)
    logging.getLogger(f"studio.{component}").log(level, json.dumps(payload, sort_keys=True, default=str))
