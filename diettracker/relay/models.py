# -*- coding: utf-8 -*-
"""Relay — request/response models."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from ..chat.models import MAX_MESSAGES, ChatTurn
from ..meals.models import FoodItem


class ChatRequest(BaseModel):
    messages: List[ChatTurn] = Field(..., min_length=1, max_length=MAX_MESSAGES)


class FoodSearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=200)


class FoodSearchResponse(BaseModel):
    foods: List[FoodItem]


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
