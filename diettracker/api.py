# -*- coding: utf-8 -*-
"""
Diet tracker API

Auth, chat history and meal logging plus the two AI relays
(``/diet-chat`` streamed, ``/food-search``).
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .app_db import init_app_db
from .auth.api import router as auth_router
from .chat.api import router as chat_router
from .config import settings
from .errors import DietAppError
from .meals.api import router as meals_router
from .relay.api import CORS_HEADERS
from .relay.api import router as relay_router
from .relay.validation import format_issues

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Diet Tracker",
    description="AI nutrition chat, food lookup and meal logging",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.db_path)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.db_path)


@app.exception_handler(DietAppError)
async def _diet_app_error_handler(request: Request, exc: DietAppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=CORS_HEADERS)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid input format.", "details": format_issues(exc)},
        headers=CORS_HEADERS,
    )


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


app.include_router(auth_router)
app.include_router(chat_router)
app.include_router(meals_router)
app.include_router(relay_router)


@app.get("/api/health")
def health() -> dict:
    return {"ok": True}


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("DIET_HOST") or "127.0.0.1"
    try:
        port = int(os.environ.get("DIET_PORT") or "8000")
    except ValueError:
        port = 8000

    uvicorn.run("diettracker.api:app", host=host, port=port, reload=False)
