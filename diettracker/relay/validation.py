# -*- coding: utf-8 -*-
"""Relay — schema checks for inbound JSON bodies."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import ValidationFailed
from .models import ChatRequest, FoodSearchRequest

M = TypeVar("M", bound=BaseModel)


def format_issues(exc: Any) -> List[Dict[str, Any]]:
    """One entry per violated constraint from a pydantic or FastAPI validation error."""
    return [
        {
            "path": ".".join(str(p) for p in err.get("loc", ())),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


def _validate(model: Type[M], raw: Any) -> M:
    if isinstance(raw, (bytes, str)):
        try:
            raw = json.loads(raw or b"null")
        except ValueError as exc:
            raise ValidationFailed(
                details=[{"path": "", "message": f"Body is not valid JSON: {exc}", "type": "json_invalid"}]
            ) from exc
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise ValidationFailed(details=format_issues(exc)) from exc


def validate_chat_body(raw: Any) -> ChatRequest:
    return _validate(ChatRequest, raw)


def validate_search_body(raw: Any) -> FoodSearchRequest:
    return _validate(FoodSearchRequest, raw)
