"""
schemas/store_schemas.py

Persistence-side models.

  *Draft  — immutable graph produced by the normalizer, consumed by the
            upsert engine. One draft = one (owner, date) plan row.
  *View   — what repositories hand back to services and callers.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────
# Meal
# ─────────────────────────────────────────────

class Nutrition(BaseModel):
    model_config = ConfigDict(frozen=True)

    calories: float = 0
    protein:  float = 0
    carbs:    float = 0
    fat:      float = 0


class MealDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    slot:             str                 # breakfast / lunch / dinner / snack
    title:            str
    ingredients:      tuple[str, ...]
    instructions:     tuple[str, ...]
    nutrition:        Nutrition
    duration_minutes: int


class MealPlanDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner_id:   Optional[str]
    plan_date:  date
    is_default: bool
    totals:     Nutrition
    meals:      tuple[MealDraft, ...]


class MealView(BaseModel):
    slot:             str
    title:            str
    ingredients:      list[str]
    instructions:     list[str]
    nutrition:        Nutrition
    duration_minutes: int


class MealPlanView(BaseModel):
    id:         Optional[str] = None
    owner_id:   Optional[str]
    plan_date:  date
    is_default: bool
    totals:     Nutrition
    meals:      list[MealView] = Field(default_factory=list)

    def meal(self, slot: str) -> Optional[MealView]:
        return next((m for m in self.meals if m.slot == slot), None)


# ─────────────────────────────────────────────
# Workout
# ─────────────────────────────────────────────

class ExerciseDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    name:               str
    reps:               str
    body_part:          Optional[str] = None
    description:        Optional[str] = None
    duration_minutes:   Optional[int] = None
    estimated_calories: Optional[float] = None


class WorkoutPlanDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner_id:           Optional[str]
    plan_date:          date
    is_default:         bool
    name:               str
    description:        str
    intensity:          str
    duration_minutes:   int
    estimated_calories: float
    exercises:          tuple[ExerciseDraft, ...]


class ExerciseView(BaseModel):
    name:               str
    reps:               str
    body_part:          Optional[str] = None
    description:        Optional[str] = None
    duration_minutes:   Optional[int] = None
    estimated_calories: Optional[float] = None


class WorkoutPlanView(BaseModel):
    id:                 Optional[str] = None
    owner_id:           Optional[str]
    plan_date:          date
    is_default:         bool
    name:               str
    description:        str
    intensity:          str
    duration_minutes:   int
    estimated_calories: float
    exercises:          list[ExerciseView] = Field(default_factory=list)


# ─────────────────────────────────────────────
# Logs
# ─────────────────────────────────────────────

class MealLogEntry(BaseModel):
    log_date:  datetime
    meal_type: str
    calories:  float
    protein:   float
    carbs:     float
    fat:       float


class WeightEntry(BaseModel):
    entry_date: date
    weight_kg:  float
