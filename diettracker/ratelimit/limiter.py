# -*- coding: utf-8 -*-
"""Rate limiting — policy wrapper and FastAPI dependency."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..config import settings
from ..errors import RateLimitCheckFailed, RateLimitExceeded
from .store import InMemoryRateLimitStore, RateLimitStore, SqliteRateLimitStore

logger = logging.getLogger(__name__)


class RateLimiter:
    """Gate request volume per (identity, function) over an injected store."""

    def __init__(self, store: RateLimitStore) -> None:
        self.store = store

    def allow(self, identity: str, function_name: str, limit: int) -> bool:
        """Count one request; False when the window's limit is already used up.

        Store failures surface as RateLimitCheckFailed so callers can tell an
        infrastructure problem from a policy denial.
        """
        try:
            return bool(self.store.hit(identity, function_name, int(limit)))
        except Exception as exc:
            logger.error("rate limit check failed for %s/%s: %s", identity, function_name, exc)
            raise RateLimitCheckFailed() from exc

    def enforce(self, identity: str, function_name: str, limit: int) -> None:
        if not self.allow(identity, function_name, limit):
            logger.info("rate limit exceeded for %s/%s (limit=%s)", identity, function_name, limit)
            raise RateLimitExceeded()


def build_rate_limiter() -> RateLimiter:
    backend = settings.rate_limit_backend
    if backend == "memory":
        return RateLimiter(InMemoryRateLimitStore(window_seconds=settings.rate_limit_window_sec))
    if backend == "sqlite":
        return RateLimiter(SqliteRateLimitStore(settings.db_path))
    raise ValueError(f"Unknown DIET_RATE_LIMIT_BACKEND: {backend!r}")


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return build_rate_limiter()
