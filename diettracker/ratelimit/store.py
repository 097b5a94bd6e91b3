# -*- coding: utf-8 -*-
"""Rate limiting — counter stores.

Two stores share one contract, ``hit(identity, function_name, limit) -> bool``:
the call counts the request and returns True, or returns False without
counting once ``limit`` requests were seen in the current window.

* :class:`InMemoryRateLimitStore` keeps a process-local dict and resets a
  record lazily on the first request after its fixed window expired. It is
  only correct for a single server instance.
* :class:`SqliteRateLimitStore` keeps one durable row per user and function
  and resets it at the next UTC midnight. The check and the increment run in
  one ``BEGIN IMMEDIATE`` transaction so concurrent workers cannot both pass
  the last free slot.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple

from ..app_db import connect


@dataclass
class RateLimitRecord:
    identity: str
    function_name: str
    request_count: int
    reset_at: float


class RateLimitStore(Protocol):
    def hit(self, identity: str, function_name: str, limit: int) -> bool:
        ...


class InMemoryRateLimitStore:
    def __init__(
        self,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._records: Dict[Tuple[str, str], RateLimitRecord] = {}

    def get(self, identity: str, function_name: str) -> Optional[RateLimitRecord]:
        return self._records.get((identity, function_name))

    def hit(self, identity: str, function_name: str, limit: int) -> bool:
        now = self._clock()
        key = (identity, function_name)
        record = self._records.get(key)
        if record is None or now > record.reset_at:
            if limit < 1:
                return False
            self._records[key] = RateLimitRecord(
                identity=identity,
                function_name=function_name,
                request_count=1,
                reset_at=now + self.window_seconds,
            )
            return True
        if record.request_count >= limit:
            return False
        record.request_count += 1
        return True


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _next_utc_midnight(now: datetime) -> datetime:
    day = now.astimezone(timezone.utc).date() + timedelta(days=1)
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _iso(dt: datetime) -> str:
    # Fixed width so stored timestamps compare correctly as strings.
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class SqliteRateLimitStore:
    def __init__(self, db_path: Path, clock: Callable[[], datetime] = _utc_now) -> None:
        self.db_path = Path(db_path)
        self._clock = clock

    def get(self, identity: str, function_name: str) -> Optional[RateLimitRecord]:
        conn = connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT * FROM rate_limits WHERE user_id = ? AND function_name = ?",
                (identity, function_name),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            return None
        reset_at = datetime.fromisoformat(row["reset_at"].replace("Z", "+00:00"))
        return RateLimitRecord(
            identity=row["user_id"],
            function_name=row["function_name"],
            request_count=int(row["request_count"]),
            reset_at=reset_at.timestamp(),
        )

    def hit(self, identity: str, function_name: str, limit: int) -> bool:
        now = self._clock()
        now_iso = _iso(now)
        conn = connect(self.db_path)
        # Autocommit mode so the explicit BEGIN IMMEDIATE owns the transaction.
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT request_count, reset_at FROM rate_limits WHERE user_id = ? AND function_name = ?",
                    (identity, function_name),
                ).fetchone()
                if row is None or row["reset_at"] <= now_iso:
                    allowed = limit >= 1
                    if allowed:
                        conn.execute(
                            """
                            INSERT INTO rate_limits (user_id, function_name, request_count, reset_at, last_request)
                            VALUES (?, ?, 1, ?, ?)
                            ON CONFLICT(user_id, function_name) DO UPDATE SET
                                request_count = 1,
                                reset_at = excluded.reset_at,
                                last_request = excluded.last_request
                            """,
                            (identity, function_name, _iso(_next_utc_midnight(now)), now_iso),
                        )
                elif int(row["request_count"]) >= limit:
                    allowed = False
                else:
                    allowed = True
                    conn.execute(
                        """
                        UPDATE rate_limits SET request_count = request_count + 1, last_request = ?
                        WHERE user_id = ? AND function_name = ?
                        """,
                        (now_iso, identity, function_name),
                    )
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()
        return allowed
