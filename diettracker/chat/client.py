# -*- coding: utf-8 -*-
"""Chat — client for the relay endpoints.

:class:`DietChatClient` plays one chat turn the way the web UI does: store
the user message, stream the assistant reply from ``/diet-chat`` while
rendering deltas, then store the reply and log the meal it describes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..meals.models import FoodItem, MealDraft
from .extraction import extract_meal
from .models import MAX_CONTENT_CHARS, MAX_MESSAGES
from .sse import aiter_content_deltas

logger = logging.getLogger(__name__)


class RelayRequestError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ChatBusyError(RuntimeError):
    """A reply is still streaming; one submission at a time per client."""


@dataclass
class ChatTurnResult:
    content: str
    meal: Optional[MealDraft] = None
    saved_meal: Optional[Dict[str, Any]] = None


@dataclass
class ChatState:
    messages: List[Dict[str, str]] = field(default_factory=list)
    streaming_content: str = ""
    is_streaming: bool = False


async def _raise_for_relay_error(resp: httpx.Response) -> None:
    if resp.status_code < 400:
        return
    raw = await resp.aread()
    message = ""
    try:
        payload = json.loads(raw.decode("utf-8", errors="ignore"))
        if isinstance(payload, dict):
            message = str(payload.get("error") or payload.get("detail") or "")
    except ValueError:
        message = raw.decode("utf-8", errors="ignore").strip()
    raise RelayRequestError(resp.status_code, message or f"Request failed ({resp.status_code})")


class DietChatClient:
    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=httpx.Timeout(30.0, read=None),
        )
        self._today = today
        self.state = ChatState()

    async def __aenter__(self) -> "DietChatClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def load_history(self) -> List[Dict[str, str]]:
        resp = await self._http.get("/api/chat/messages")
        await _raise_for_relay_error(resp)
        items = resp.json().get("items") or []
        self.state.messages = [{"role": m["role"], "content": m["content"]} for m in items]
        return self.state.messages

    async def _save_message(self, role: str, content: str) -> None:
        resp = await self._http.post("/api/chat/messages", json={"role": role, "content": content})
        await _raise_for_relay_error(resp)

    async def _save_meal(self, meal: MealDraft) -> Dict[str, Any]:
        body = meal.model_dump(mode="json")
        body["meal_date"] = self._today().isoformat()
        resp = await self._http.post("/api/meals", json=body)
        await _raise_for_relay_error(resp)
        return resp.json()

    async def send(
        self,
        content: str,
        *,
        on_delta: Optional[Callable[[str, str], None]] = None,
    ) -> ChatTurnResult:
        """Send one user message and stream the reply.

        ``on_delta(delta, accumulated)`` is called for every content delta.
        """
        text = content.strip()
        if not text:
            raise ValueError("message is empty")
        if len(text) > MAX_CONTENT_CHARS:
            raise ValueError(f"message is longer than {MAX_CONTENT_CHARS} characters")
        if self.state.is_streaming:
            raise ChatBusyError("a reply is still streaming")

        self.state.is_streaming = True
        self.state.streaming_content = ""
        try:
            self.state.messages.append({"role": "user", "content": text})
            await self._save_message("user", text)
            accumulated = await self._stream_reply(on_delta)
            result = ChatTurnResult(content=accumulated)
            if accumulated:
                self.state.messages.append({"role": "assistant", "content": accumulated})
                await self._save_message("assistant", accumulated)
                result.meal = extract_meal(accumulated)
                if result.meal is not None:
                    result.saved_meal = await self._save_meal(result.meal)
                    logger.info("logged meal %r from chat reply", result.meal.meal_name)
            return result
        finally:
            self.state.is_streaming = False
            self.state.streaming_content = ""

    def relay_history(self) -> List[Dict[str, str]]:
        """The last MAX_MESSAGES turns, each cut to what the relay accepts.

        Stored replies may be longer than one relay turn allows.
        """
        return [
            {"role": m["role"], "content": m["content"][:MAX_CONTENT_CHARS]}
            for m in self.state.messages[-MAX_MESSAGES:]
            if m["content"].strip()
        ]

    async def _stream_reply(self, on_delta: Optional[Callable[[str, str], None]]) -> str:
        accumulated = ""
        request = self._http.build_request("POST", "/diet-chat", json={"messages": self.relay_history()})
        resp = await self._http.send(request, stream=True)
        try:
            await _raise_for_relay_error(resp)
            async for delta in aiter_content_deltas(resp.aiter_bytes()):
                accumulated += delta
                self.state.streaming_content = accumulated
                if on_delta is not None:
                    on_delta(delta, accumulated)
        finally:
            await resp.aclose()
        return accumulated

    async def search_foods(self, query: str) -> List[FoodItem]:
        resp = await self._http.post("/food-search", json={"query": query})
        await _raise_for_relay_error(resp)
        return [FoodItem.model_validate(f) for f in resp.json().get("foods") or []]

    async def add_food(self, food: FoodItem, *, servings: float, meal_type: str) -> Dict[str, Any]:
        resp = await self._http.post(
            "/api/meals/from-food",
            json={
                "food": food.model_dump(),
                "servings": servings,
                "meal_type": meal_type,
                "meal_date": self._today().isoformat(),
            },
        )
        await _raise_for_relay_error(resp)
        return resp.json()
