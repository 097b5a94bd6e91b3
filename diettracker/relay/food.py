# -*- coding: utf-8 -*-
"""Relay — defensive parsing of the model's food list.

Models often wrap the requested array in prose or code fences, so the first
``[`` through the last ``]`` is tried before the whole content. Nothing is
synthesized: any failure is a :class:`ParseFailure`.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from pydantic import ValidationError

from ..errors import ParseFailure
from ..meals.models import FoodItem

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def _load_array(content: str) -> List[Any]:
    candidates: List[str] = []
    match = _ARRAY_RE.search(content)
    if match:
        candidates.append(match.group(0))
    candidates.append(content)

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError as exc:
            last_error = exc
            continue
        if isinstance(parsed, list):
            return parsed
        last_error = ValueError(f"expected a JSON array, got {type(parsed).__name__}")
    raise ValueError(str(last_error))


def parse_food_items(content: str) -> List[FoodItem]:
    try:
        raw_items = _load_array(content or "")
        return [FoodItem.model_validate(item) for item in raw_items]
    except (ValueError, ValidationError) as exc:
        snippet = (content or "").replace("\n", " ").strip()[:300]
        logger.warning("failed to parse nutrition data: %s; content=%r", exc, snippet)
        raise ParseFailure() from exc
