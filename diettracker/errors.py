# -*- coding: utf-8 -*-
"""Error taxonomy shared by the relays and the CRUD routes.

Every error renders as ``{"error": message, "details": ...}`` so clients can
show a toast without knowing which route failed.
"""

from __future__ import annotations

from typing import Any, Optional


class DietAppError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class AuthenticationRequired(DietAppError):
    status_code = 401
    default_message = "Authentication required"


class ValidationFailed(DietAppError):
    """Raised with one issue per violated field constraint."""

    status_code = 400
    default_message = "Invalid input format."


class RateLimitExceeded(DietAppError):
    status_code = 429
    default_message = "Daily request limit exceeded. Please try again tomorrow."


class RateLimitCheckFailed(DietAppError):
    # Infrastructure failure, kept apart from a policy denial.
    status_code = 500
    default_message = "Rate limit check failed"


class DownstreamRateLimited(DietAppError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class DownstreamError(DietAppError):
    status_code = 500
    default_message = "AI service error"


class ParseFailure(DietAppError):
    status_code = 500
    default_message = "Failed to parse nutrition data"


class ConfigurationError(DietAppError):
    status_code = 500
    default_message = "GROQ_API_KEY is not configured"


class NotFound(DietAppError):
    status_code = 404
    default_message = "Not found"
