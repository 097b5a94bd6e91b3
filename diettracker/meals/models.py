# -*- coding: utf-8 -*-
"""Meals — Pydantic models."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

_NUM_RE = re.compile(r"-?\d+(?:\.\d+)?")
_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def coerce_amount(value: Any) -> Any:
    """Best-effort numeric coercion for model-produced amounts ("5g", "1,200").

    Negative numbers clamp to zero; values without any number are returned
    unchanged so field validation reports them.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return max(0.0, float(value))
    if isinstance(value, str):
        m = _NUM_RE.search(value.replace(",", ""))
        if m:
            return max(0.0, float(m.group(0)))
    return value


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class MealDraft(BaseModel):
    """A loggable meal as described by the assistant (no date yet)."""

    meal_name: str = Field(..., min_length=1, max_length=200)
    meal_type: Optional[MealType] = None
    calories: Optional[float] = Field(None, ge=0)
    protein: Optional[float] = Field(None, ge=0)
    carbs: Optional[float] = Field(None, ge=0)
    fats: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)


class MealCreateRequest(MealDraft):
    meal_date: Optional[str] = Field(None, pattern=_DATE_PATTERN, description="YYYY-MM-DD, defaults to today")


class Meal(MealDraft):
    id: str
    meal_date: str
    created_at: str


class MealListResponse(BaseModel):
    count: int
    items: List[Meal]


class FoodItem(BaseModel):
    name: str = Field(..., min_length=1)
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fat: float = Field(..., ge=0)
    serving_size: str = Field(..., min_length=1)
    serving_unit: str = Field(..., min_length=1)

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def _coerce_macros(cls, value: Any) -> Any:
        return coerce_amount(value)

    @field_validator("serving_size", "serving_unit", mode="before")
    @classmethod
    def _coerce_serving(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return f"{value:g}"
        if isinstance(value, str):
            return value.strip()
        return value


class FoodSelection(BaseModel):
    food: FoodItem
    servings: float = Field(1.0, gt=0, le=100)
    meal_type: MealType
    meal_date: Optional[str] = Field(None, pattern=_DATE_PATTERN)
    notes: Optional[str] = Field(None, max_length=2000)


class WeeklyStats(BaseModel):
    start: str
    end: str
    calories: float
    protein: float
    meals: int
    avg_calories: float
