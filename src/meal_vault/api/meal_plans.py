"""Meal plan API endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from meal_vault.api.models import (
    AddEntryRequest,
    TargetsRequest,
    UpdateItemRequest,
    UpdateMetaRequest,
    WellnessRequest,
)
from meal_vault.domain.meal_plans import Wellness
from meal_vault.domain.nutrition import NutritionTargets

if TYPE_CHECKING:
    from meal_vault.containers import AppContainer
    from meal_vault.domain.meal_plans import MealPlanDay

router = APIRouter(prefix="/v1/meal-plans", tags=["meal-plans"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _day_payload(day: MealPlanDay) -> dict[str, object]:
    return {"day": asdict(day)}


@router.get("/day")
async def get_day(request: Request, date: str | None = None) -> dict[str, object]:
    """Return a day, creating it on first access."""
    day = await _container(request).meal_plan_service.load_day(date)
    return _day_payload(day)


@router.get("/day/notes")
async def get_notes(request: Request, date: str | None = None) -> dict[str, object]:
    """Return the hand-written notes of a day."""
    notes = await _container(request).meal_plan_service.load_notes(date)
    return {"notes": notes}


@router.get("/history")
async def get_history(
    request: Request, limit: int | None = None
) -> dict[str, object]:
    """Return the most recent stored days."""
    container = _container(request)
    resolved_limit = container.settings.history_limit if limit is None else limit
    days = await container.meal_plan_service.load_history(resolved_limit)
    return {"days": [asdict(day) for day in days]}


@router.post("/day/entries")
async def add_entry(payload: AddEntryRequest, request: Request) -> dict[str, object]:
    """Add a product or recipe from the library to a day."""
    service = _container(request).meal_plan_service
    if payload.product_slug:
        day = await service.add_product_by_slug(
            payload.date,
            payload.product_slug,
            section_id=payload.section_id,
            section_name=payload.section_name,
            quantity=payload.quantity,
            unit=payload.unit,
            expected_updated_at=payload.expected_updated_at,
        )
    else:
        day = await service.add_recipe_by_slug(
            payload.date,
            payload.recipe_slug or "",
            section_id=payload.section_id,
            section_name=payload.section_name,
            servings=payload.servings,
            expected_updated_at=payload.expected_updated_at,
        )
    return _day_payload(day)


@router.patch("/day/sections/{section_id}/items/{index}")
async def update_item(
    section_id: str,
    index: int,
    payload: UpdateItemRequest,
    request: Request,
    date: str | None = None,
) -> dict[str, object]:
    """Rescale an item in a section."""
    day = await _container(request).meal_plan_service.update_item(
        date,
        section_id,
        index,
        quantity=payload.quantity,
        unit=payload.unit,
        servings=payload.servings,
        expected_updated_at=payload.expected_updated_at,
    )
    return _day_payload(day)


@router.delete("/day/sections/{section_id}/items/{index}")
async def remove_item(
    section_id: str,
    index: int,
    request: Request,
    date: str | None = None,
    expected_updated_at: str | None = None,
) -> dict[str, object]:
    """Remove an item from a section."""
    day = await _container(request).meal_plan_service.remove_item(
        date, section_id, index, expected_updated_at=expected_updated_at
    )
    return _day_payload(day)


@router.patch("/day/meta")
async def update_meta(
    payload: UpdateMetaRequest, request: Request
) -> dict[str, object]:
    """Record or clear the weight for a day."""
    day = await _container(request).meal_plan_service.update_meta(
        payload.date, weight_kg=payload.weight_kg
    )
    return _day_payload(day)


@router.put("/day/wellness")
async def put_wellness(
    payload: WellnessRequest, request: Request
) -> dict[str, object]:
    """Replace the wellness notes of a day."""
    wellness = Wellness(
        mood=payload.mood,
        sleep_hours=payload.sleep_hours,
        steps=payload.steps,
        notes=payload.notes,
    )
    day = await _container(request).meal_plan_service.update_wellness(
        payload.date, wellness
    )
    return _day_payload(day)


@router.put("/day/targets")
async def put_targets(payload: TargetsRequest, request: Request) -> dict[str, object]:
    """Store the targets snapshot of a day."""
    targets = NutritionTargets(
        calories_kcal=payload.calories_kcal,
        protein_g=payload.protein_g,
        fat_g=payload.fat_g,
        carbs_g=payload.carbs_g,
        sugar_g=payload.sugar_g,
        fiber_g=payload.fiber_g,
    )
    day = await _container(request).meal_plan_service.set_targets_snapshot(
        payload.date, targets
    )
    return _day_payload(day)
