# -*- coding: utf-8 -*-
"""Chat — API endpoints (message history)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import ChatHistoryResponse, ChatMessage, ChatMessageCreateRequest
from .storage import append_message, list_messages

router = APIRouter(prefix="/api/chat", tags=["Chat"])


def _message(row: dict) -> ChatMessage:
    return ChatMessage(id=row["id"], role=row["role"], content=row["content"], created_at=row["created_at"])


@router.get("/messages", response_model=ChatHistoryResponse, summary="List my chat history")
def list_chat_messages(
    limit: int = Query(default=200, ge=1, le=1000),
    user: dict = Depends(get_current_user),
):
    items = [_message(r) for r in list_messages(user_id=user["id"], limit=limit)]
    return ChatHistoryResponse(count=len(items), items=items)


@router.post("/messages", response_model=ChatMessage, summary="Append a message to my chat history")
def create_chat_message(body: ChatMessageCreateRequest, user: dict = Depends(get_current_user)):
    row = append_message(user_id=user["id"], role=body.role, content=body.content)
    return _message(row)
