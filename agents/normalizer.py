"""
agents/normalizer.py

Validated plan tree → persistence-ready drafts, one per day.

- Meal slots without a duration get the fixed slot default.
- Day totals sum the slots that are present; a missing snack adds nothing.
- is_default is true exactly when there is no owner.
- Input models are never mutated; drafts are frozen.
"""

from __future__ import annotations

from typing import Optional

from schemas.plan_schemas import DailyMealPlan, DailyWorkoutPlan, MealItem, MealPlanBatch, WorkoutPlanBatch
from schemas.store_schemas import ExerciseDraft, MealDraft, MealPlanDraft, Nutrition, WorkoutPlanDraft

MEAL_SLOTS = ("breakfast", "lunch", "dinner", "snack")

SLOT_DURATION_MINUTES = {
    "breakfast": 15,
    "lunch":     20,
    "dinner":    30,
    "snack":     10,
}

DEFAULT_INTENSITY = "Modérée"


def _meal_draft(slot: str, item: MealItem) -> MealDraft:
    duration = item.duration_minutes
    return MealDraft(
        slot=slot,
        title=item.title,
        ingredients=tuple(item.ingredients),
        instructions=tuple(item.instructions),
        nutrition=Nutrition(
            calories=item.calories,
            protein=item.macros.proteins,
            carbs=item.macros.carbs,
            fat=item.macros.fats,
        ),
        duration_minutes=int(round(duration)) if duration is not None else SLOT_DURATION_MINUTES[slot],
    )


def sum_nutrition(parts) -> Nutrition:
    parts = list(parts)
    return Nutrition(
        calories=sum(p.calories for p in parts),
        protein=sum(p.protein for p in parts),
        carbs=sum(p.carbs for p in parts),
        fat=sum(p.fat for p in parts),
    )


def normalize_meal_day(day: DailyMealPlan, owner_id: Optional[str]) -> MealPlanDraft:
    meals = tuple(
        _meal_draft(slot, getattr(day.meals, slot))
        for slot in MEAL_SLOTS
        if getattr(day.meals, slot) is not None
    )
    return MealPlanDraft(
        owner_id=owner_id,
        plan_date=day.date,
        is_default=owner_id is None,
        totals=sum_nutrition(m.nutrition for m in meals),
        meals=meals,
    )


def normalize_meal_plan(batch: MealPlanBatch, owner_id: Optional[str]) -> list[MealPlanDraft]:
    return [normalize_meal_day(day, owner_id) for day in batch.days]


def normalize_workout_day(day: DailyWorkoutPlan, owner_id: Optional[str]) -> WorkoutPlanDraft:
    exercises = tuple(
        ExerciseDraft(
            name=ex.name,
            reps=ex.reps,
            body_part=ex.focus,
            description=ex.description,
            duration_minutes=int(round(ex.duration_minutes)) if ex.duration_minutes is not None else None,
            estimated_calories=ex.estimated_calories,
        )
        for ex in day.exercises
    )
    return WorkoutPlanDraft(
        owner_id=owner_id,
        plan_date=day.date,
        is_default=owner_id is None,
        name=f"Séance du {day.date.isoformat()}",
        description="Séance générée par IA",
        intensity=DEFAULT_INTENSITY,
        duration_minutes=sum(ex.duration_minutes or 0 for ex in exercises),
        estimated_calories=sum(ex.estimated_calories or 0 for ex in exercises),
        exercises=exercises,
    )


def normalize_workout_plan(batch: WorkoutPlanBatch, owner_id: Optional[str]) -> list[WorkoutPlanDraft]:
    return [normalize_workout_day(day, owner_id) for day in batch.days]
