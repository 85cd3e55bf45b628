from __future__ import annotations

import hashlib
import json
from typing import Any

from sqlalchemy.orm import Session

from studio.models import AuditLog


def _payload_hash(payload: dict[str, Any]) -> str:
    body = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


def append_audit_log(
    db: Session,
    *,
    action: str,
    payload: dict[str, Any],
    recorder_id: int | None = None,
) -> AuditLog:
    row = AuditLog(
        recorder_id=recorder_id,
        action=action,
        payload_hash=_payload_hash(payload),
        payload_json=payload,
    )
    db.add(row)
    return row
