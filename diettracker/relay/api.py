# -*- coding: utf-8 -*-
"""Relay — ``/diet-chat`` (streamed) and ``/food-search`` endpoints.

Both routes authenticate the bearer token, spend one unit of the caller's
rate limit, validate the body and then make a single completions call.
The chat route pipes the provider's SSE bytes through unchanged.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from ..auth.security import get_current_user
from ..config import settings
from ..ratelimit.limiter import RateLimiter, get_rate_limiter
from .food import parse_food_items
from .llm import CompletionsClient, get_completions_client
from .models import ErrorResponse, FoodSearchResponse
from .prompts import DIET_CHAT_SYSTEM_PROMPT, FOOD_SEARCH_SYSTEM_PROMPT, food_search_user_prompt
from .validation import validate_chat_body, validate_search_body

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

DIET_CHAT = "diet-chat"
FOOD_SEARCH = "food-search"

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter(tags=["Relay"])


@router.options(f"/{DIET_CHAT}", include_in_schema=False)
@router.options(f"/{FOOD_SEARCH}", include_in_schema=False)
def preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(f"/{DIET_CHAT}", responses=_ERROR_RESPONSES, summary="Stream a nutrition chat reply (SSE)")
async def diet_chat(
    request: Request,
    user: dict = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
    llm: CompletionsClient = Depends(get_completions_client),
):
    limiter.enforce(user["id"], DIET_CHAT, settings.chat_rate_limit)
    body = validate_chat_body(await request.body())

    logger.info("starting diet chat stream with %s messages", len(body.messages))
    messages = [{"role": "system", "content": DIET_CHAT_SYSTEM_PROMPT}]
    messages.extend(m.model_dump() for m in body.messages)
    client, resp = await llm.open_stream(messages)
    return relay_stream(client, resp)


async def _close_upstream(client: httpx.AsyncClient, resp: httpx.Response) -> None:
    try:
        await resp.aclose()
    finally:
        await client.aclose()


def relay_stream(client: httpx.AsyncClient, resp: httpx.Response) -> StreamingResponse:
    """Pipe an open upstream SSE response through unchanged.

    The background task closes the upstream too, for callers that disconnect
    before the body generator starts. Both closes are idempotent.
    """

    async def relay():
        try:
            async for chunk in resp.aiter_raw():
                if chunk:
                    yield chunk
        finally:
            await _close_upstream(client, resp)

    return StreamingResponse(
        relay(),
        media_type="text/event-stream",
        headers=CORS_HEADERS,
        background=BackgroundTask(_close_upstream, client, resp),
    )


@router.post(
    f"/{FOOD_SEARCH}",
    response_model=FoodSearchResponse,
    responses=_ERROR_RESPONSES,
    summary="Look up nutrition data for a free-text food query",
)
async def food_search(
    request: Request,
    user: dict = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
    llm: CompletionsClient = Depends(get_completions_client),
):
    limiter.enforce(user["id"], FOOD_SEARCH, settings.food_search_rate_limit)
    body = validate_search_body(await request.body())

    logger.info("starting food search (%s chars)", len(body.query))
    content = await llm.complete(
        [
            {"role": "system", "content": FOOD_SEARCH_SYSTEM_PROMPT},
            {"role": "user", "content": food_search_user_prompt(body.query)},
        ],
        temperature=settings.food_search_temperature,
        max_tokens=settings.food_search_max_tokens,
    )
    foods = parse_food_items(content or "[]")
    payload = FoodSearchResponse(foods=foods)
    return JSONResponse(content=payload.model_dump(mode="json"), headers=CORS_HEADERS)
