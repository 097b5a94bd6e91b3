# -*- coding: utf-8 -*-
"""Chat — DB storage helpers (append-only history per user)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def append_message(*, user_id: str, role: str, content: str) -> Dict[str, Any]:
    msg = {
        "id": str(uuid4()),
        "user_id": user_id,
        "role": role,
        "content": content,
        "created_at": _utc_now(),
    }
    with db_conn(settings.db_path) as conn:
        row = conn.execute(
            "SELECT COALESCE(MAX(seq), 0) + 1 AS next_seq FROM chat_messages WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        msg["seq"] = int(row["next_seq"])
        conn.execute(
            """
            INSERT INTO chat_messages (id, user_id, role, content, created_at, seq)
            VALUES (:id, :user_id, :role, :content, :created_at, :seq)
            """,
            msg,
        )
    return msg


def list_messages(*, user_id: str, limit: int = 200) -> List[Dict[str, Any]]:
    """Most recent ``limit`` messages, oldest first."""
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(
            """
            SELECT * FROM (
                SELECT * FROM chat_messages WHERE user_id = ? ORDER BY seq DESC LIMIT ?
            ) ORDER BY seq ASC
            """,
            (user_id, int(limit)),
        ).fetchall()
        return [dict(r) for r in rows]
