# -*- coding: utf-8 -*-
"""Meals — API endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from ..audit.storage import log_audit_event
from ..auth.security import get_current_user
from ..errors import NotFound
from .models import FoodSelection, Meal, MealCreateRequest, MealDraft, MealListResponse, WeeklyStats
from .storage import create_meal, delete_meal, draft_from_food, get_meal, list_meals, weekly_stats

router = APIRouter(prefix="/api/meals", tags=["Meals"])


def _audit(request: Request, user: dict, action: str, meal_id: str, old=None, new=None) -> None:
    log_audit_event(
        user_id=user["id"],
        action=action,
        table_name="meals",
        record_id=meal_id,
        old_data=old,
        new_data=new,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def _save(request: Request, user: dict, draft: MealDraft, meal_date: str | None) -> Meal:
    row = create_meal(user_id=user["id"], draft=draft, meal_date=meal_date or date.today().isoformat())
    _audit(request, user, "create", row["id"], new=row)
    return Meal.model_validate(row)


@router.post("", response_model=Meal, summary="Log a meal")
def create_meal_api(body: MealCreateRequest, request: Request, user: dict = Depends(get_current_user)):
    draft = MealDraft.model_validate(body.model_dump(exclude={"meal_date"}))
    return _save(request, user, draft, body.meal_date)


@router.post("/from-food", response_model=Meal, summary="Log a looked-up food scaled by servings")
def create_meal_from_food(body: FoodSelection, request: Request, user: dict = Depends(get_current_user)):
    return _save(request, user, draft_from_food(body), body.meal_date)


@router.get("", response_model=MealListResponse, summary="List my meals")
def list_meals_api(
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user: dict = Depends(get_current_user),
):
    rows = list_meals(user_id=user["id"], start=start, end=end, limit=limit, offset=offset)
    items = [Meal.model_validate(r) for r in rows]
    return MealListResponse(count=len(items), items=items)


@router.get("/stats/weekly", response_model=WeeklyStats, summary="Totals for the last seven days")
def weekly_stats_api(user: dict = Depends(get_current_user)):
    return weekly_stats(user_id=user["id"])


@router.delete("/{meal_id}", summary="Delete a meal")
def delete_meal_api(meal_id: str, request: Request, user: dict = Depends(get_current_user)):
    existing = get_meal(user_id=user["id"], meal_id=meal_id)
    if not existing or not delete_meal(user_id=user["id"], meal_id=meal_id):
        raise NotFound("Meal not found")
    _audit(request, user, "delete", meal_id, old=existing)
    return {"status": "ok"}
