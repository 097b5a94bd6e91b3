# -*- coding: utf-8 -*-
"""Meals — DB storage helpers."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from .models import FoodSelection, MealDraft, WeeklyStats

_MEAL_FIELDS = ("meal_name", "meal_type", "calories", "protein", "carbs", "fats", "notes")


def round_half_up(value: float) -> int:
    # Halves round up, not to even.
    return int(math.floor(value + 0.5))


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_meal(*, user_id: str, draft: MealDraft, meal_date: str) -> Dict[str, Any]:
    values = draft.model_dump(mode="json")
    meal: Dict[str, Any] = {k: values.get(k) for k in _MEAL_FIELDS}
    meal.update(id=str(uuid4()), user_id=user_id, meal_date=meal_date, created_at=_utc_now())
    with db_conn(settings.db_path) as conn:
        conn.execute(
            """
            INSERT INTO meals (id, user_id, meal_name, meal_type, calories, protein, carbs, fats, meal_date, notes, created_at)
            VALUES (:id, :user_id, :meal_name, :meal_type, :calories, :protein, :carbs, :fats, :meal_date, :notes, :created_at)
            """,
            meal,
        )
    return meal


def get_meal(*, user_id: str, meal_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.db_path) as conn:
        row = conn.execute(
            "SELECT * FROM meals WHERE id = ? AND user_id = ?",
            (meal_id, user_id),
        ).fetchone()
        return dict(row) if row else None


def list_meals(
    *,
    user_id: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM meals WHERE user_id = ?"
    params: list[Any] = [user_id]
    if start:
        sql += " AND meal_date >= ?"
        params.append(start)
    if end:
        sql += " AND meal_date <= ?"
        params.append(end)
    sql += " ORDER BY meal_date DESC, created_at DESC LIMIT ? OFFSET ?"
    params.extend([int(limit), int(offset)])
    with db_conn(settings.db_path) as conn:
        rows = conn.execute(sql, tuple(params)).fetchall()
        return [dict(r) for r in rows]


def delete_meal(*, user_id: str, meal_id: str) -> bool:
    with db_conn(settings.db_path) as conn:
        cur = conn.execute("DELETE FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id))
        return cur.rowcount > 0


def draft_from_food(selection: FoodSelection) -> MealDraft:
    """Scale a looked-up food by the chosen number of servings."""
    food = selection.food
    servings = selection.servings
    notes = selection.notes or f"{servings:g} x {food.serving_size} {food.serving_unit}"
    return MealDraft(
        meal_name=food.name,
        meal_type=selection.meal_type,
        calories=round_half_up(food.calories * servings),
        protein=round_half_up(food.protein * servings),
        carbs=round_half_up(food.carbs * servings),
        fats=round_half_up(food.fat * servings),
        notes=notes,
    )


def weekly_stats(*, user_id: str, today: Optional[date] = None) -> WeeklyStats:
    end = today or date.today()
    start = end - timedelta(days=7)
    meals = list_meals(user_id=user_id, start=start.isoformat(), end=end.isoformat(), limit=10_000)
    calories = sum(float(m.get("calories") or 0.0) for m in meals)
    protein = sum(float(m.get("protein") or 0.0) for m in meals)
    count = len(meals)
    return WeeklyStats(
        start=start.isoformat(),
        end=end.isoformat(),
        calories=round(calories, 1),
        protein=round_half_up(protein),
        meals=count,
        avg_calories=round_half_up(calories / count) if count else 0,
    )
