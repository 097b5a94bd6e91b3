# -*- coding: utf-8 -*-
"""Relay — OpenAI-compatible chat completions client (Groq by default)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config import settings
from ..errors import ConfigurationError, DownstreamError, DownstreamRateLimited

logger = logging.getLogger(__name__)


class CompletionsClient:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str,
        model: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise ConfigurationError()
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self, timeout: Optional[float]) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=self.transport)

    async def open_stream(
        self, messages: List[Dict[str, str]]
    ) -> Tuple[httpx.AsyncClient, httpx.Response]:
        """Start a ``stream: true`` completion; the caller owns both objects.

        Raises before returning when the provider answers non-2xx, after
        closing the response and client.
        """
        headers = self._headers()
        client = self._client(None)
        req = client.build_request(
            "POST",
            self.url,
            headers=headers,
            json={"model": self.model, "messages": messages, "stream": True},
        )
        try:
            resp = await client.send(req, stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            logger.error("completions stream request failed: %s", exc)
            raise DownstreamError() from exc

        if resp.status_code >= 400:
            try:
                raw = await resp.aread()
            finally:
                try:
                    await resp.aclose()
                finally:
                    await client.aclose()
            _raise_downstream(resp.status_code, raw)
        return client, resp

    async def complete(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Non-streaming completion; returns ``choices[0].message.content``."""
        headers = self._headers()
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        async with self._client(self.timeout) as client:
            try:
                resp = await client.post(self.url, headers=headers, json=payload)
            except httpx.HTTPError as exc:
                logger.error("completions request failed: %s", exc)
                raise DownstreamError() from exc
        if resp.status_code >= 400:
            _raise_downstream(resp.status_code, resp.content)
        try:
            data = resp.json()
        except ValueError as exc:
            raise DownstreamError("AI service returned a non-JSON response") from exc
        return _first_message_content(data)


def _first_message_content(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""


def _raise_downstream(status_code: int, raw: bytes) -> None:
    snippet = raw.decode("utf-8", errors="ignore").replace("\n", " ").strip()[:300]
    logger.error("completions API error: %s %s", status_code, snippet)
    if status_code == 429:
        raise DownstreamRateLimited()
    raise DownstreamError()


def get_completions_client() -> CompletionsClient:
    return CompletionsClient(
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        model=settings.groq_model,
        timeout=settings.groq_timeout,
    )
