# -*- coding: utf-8 -*-
"""Shared helpers: isolated app import and a fake completions provider."""

from __future__ import annotations

import importlib
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

LLM_BASE_URL = "https://llm.test/openai/v1"


def load_app(tmp: Path, **env: Optional[str]):
    """Import a fresh ``diettracker.api`` bound to a temp database.

    Keyword arguments are extra environment variables (None removes one).
    """
    data_root = tmp / "data"
    base_env: Dict[str, Optional[str]] = {
        "DIET_DATA_ROOT": str(data_root),
        "DIET_DB_PATH": str(data_root / "diettracker.db"),
        "DIET_JWT_SECRET": "test-secret",
        "GROQ_API_KEY": "test-groq-key",
        "GROQ_BASE_URL": LLM_BASE_URL,
        "DIET_RATE_LIMIT_BACKEND": "sqlite",
        "DIET_CHAT_RATE_LIMIT": "100",
        "DIET_FOOD_SEARCH_RATE_LIMIT": "100",
    }
    base_env.update(env)
    for key, value in base_env.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value

    # Ensure settings/app reflect the env vars above.
    for name in list(sys.modules.keys()):
        if name == "diettracker" or name.startswith("diettracker."):
            sys.modules.pop(name, None)
    return importlib.import_module("diettracker.api")


def register(client: Any, email: str = "demo@example.com", password: str = "password123") -> Dict[str, str]:
    resp = client.post("/api/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def sse_body(deltas: Iterable[str], *, done: bool = True) -> bytes:
    lines: List[str] = [": keep-alive\n\n"]
    for delta in deltas:
        event = {"choices": [{"index": 0, "delta": {"content": delta}}]}
        lines.append(f"data: {json.dumps(event)}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def completion_body(content: str) -> Dict[str, Any]:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class FakeProvider:
    """Records completions requests and answers with a canned response."""

    def __init__(self, respond: Callable[[Dict[str, Any]], httpx.Response]) -> None:
        self.respond = respond
        self.requests: List[httpx.Request] = []
        self.payloads: List[Dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = json.loads(request.content.decode("utf-8"))
        self.payloads.append(payload)
        return self.respond(payload)

    def install(self, api_module, api_key: Optional[str] = "test-groq-key") -> None:
        from diettracker.relay.llm import CompletionsClient, get_completions_client

        transport = httpx.MockTransport(self.handler)
        api_module.app.dependency_overrides[get_completions_client] = lambda: CompletionsClient(
            api_key=api_key,
            base_url=LLM_BASE_URL,
            model="llama-3.3-70b-versatile",
            transport=transport,
        )


def stream_reply(deltas: Iterable[str]) -> Callable[[Dict[str, Any]], httpx.Response]:
    body = sse_body(deltas)

    class _Chunks(httpx.AsyncByteStream):
        async def __aiter__(self):
            yield body

    def respond(_payload: Dict[str, Any]) -> httpx.Response:
        return httpx.Response(200, stream=_Chunks(), headers={"content-type": "text/event-stream"})

    return respond


def json_reply(content: str) -> Callable[[Dict[str, Any]], httpx.Response]:
    def respond(_payload: Dict[str, Any]) -> httpx.Response:
        return httpx.Response(200, json=completion_body(content))

    return respond


def error_reply(status_code: int) -> Callable[[Dict[str, Any]], httpx.Response]:
    def respond(_payload: Dict[str, Any]) -> httpx.Response:
        return httpx.Response(status_code, json={"error": {"message": "upstream says no"}})

    return respond
