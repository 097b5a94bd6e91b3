# -*- coding: utf-8 -*-
"""Chat — Pydantic models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]

MAX_MESSAGES = 50
MAX_CONTENT_CHARS = 4000


class ChatTurn(BaseModel):
    role: Role
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_CHARS)


class ChatMessage(BaseModel):
    id: str
    role: Role
    content: str
    created_at: str


class ChatMessageCreateRequest(BaseModel):
    role: Role
    # Assistant replies may exceed what a single relay turn accepts.
    content: str = Field(..., min_length=1, max_length=20_000)


class ChatHistoryResponse(BaseModel):
    count: int
    items: list[ChatMessage]
