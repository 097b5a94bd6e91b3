# -*- coding: utf-8 -*-
"""Per-identity request counters gating the relay functions."""

from .limiter import RateLimiter, get_rate_limiter  # noqa: F401
from .store import InMemoryRateLimitStore, RateLimitRecord, SqliteRateLimitStore  # noqa: F401
