# -*- coding: utf-8 -*-
"""Chat — meal extraction from a completed assistant reply."""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from ..meals.models import MealDraft

logger = logging.getLogger(__name__)

MEAL_BLOCK_RE = re.compile(r"```json\s*\n([\s\S]*?)\n```")


def find_meal_block(text: str) -> Optional[str]:
    match = MEAL_BLOCK_RE.search(text or "")
    return match.group(1) if match else None


def extract_meal(text: str) -> Optional[MealDraft]:
    """Return the meal described by the first fenced ```json block, if any.

    A missing block, invalid JSON or a payload that is not a valid meal all
    yield None; a failed extraction never affects the chat itself.
    """
    block = find_meal_block(text)
    if block is None:
        return None
    try:
        payload = json.loads(block)
    except ValueError as exc:
        logger.debug("meal block is not valid JSON: %s", exc)
        return None
    if not isinstance(payload, dict):
        return None
    try:
        return MealDraft.model_validate(payload)
    except ValidationError as exc:
        logger.debug("meal block rejected: %s", exc)
        return None
