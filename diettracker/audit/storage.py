# -*- coding: utf-8 -*-
"""Audit log — best-effort change records for user data."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _dump(data: Any) -> Optional[str]:
    if data is None:
        return None
    return json.dumps(data, ensure_ascii=False, default=str)


def log_audit_event(
    *,
    user_id: str,
    action: str,
    table_name: str,
    record_id: Optional[str] = None,
    old_data: Any = None,
    new_data: Any = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    """Record one audit row. Failures are logged and never block the caller."""
    try:
        with db_conn(settings.db_path) as conn:
            conn.execute(
                """
                INSERT INTO audit_logs (id, user_id, action, table_name, record_id, old_data, new_data, ip_address, user_agent, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(uuid4()),
                    user_id,
                    action,
                    table_name,
                    record_id,
                    _dump(old_data),
                    _dump(new_data),
                    ip_address,
                    user_agent,
                    _utc_now(),
                ),
            )
    except Exception as exc:
        logger.warning("audit logging failed (%s %s): %s", action, table_name, exc)


def list_audit_events(*, user_id: str, limit: int = 100) -> List[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM audit_logs WHERE user_id = ? ORDER BY created_at DESC LIMIT ?",
            (user_id, int(limit)),
        ).fetchall()
    out: List[Dict[str, Any]] = []
    for r in rows:
        item = dict(r)
        for key in ("old_data", "new_data"):
            if item.get(key):
                item[key] = json.loads(item[key])
        out.append(item)
    return out
