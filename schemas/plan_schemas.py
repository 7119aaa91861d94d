"""
schemas/plan_schemas.py

Shapes of the plans the model is asked to produce.

Two layers per domain:
  1. A declarative schema (FieldSpec tree) interpreted by
     schemas.validation.validate. This is what accepts or rejects a payload.
  2. Pydantic models for the typed tree handed to the normalizer once the
     payload is known to conform.

Both layers describe the same JSON envelope: {"days": [...]}.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────
# 1. Declarative schema
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class FieldSpec:
    """
    kind is one of: string, number, date, object, array.
    `fields` describes object members, `item` describes array elements.
    """
    kind:     str
    required: bool = True
    fields:   dict[str, "FieldSpec"] = dc_field(default_factory=dict)
    item:     Optional["FieldSpec"] = None


def string(required: bool = True) -> FieldSpec:
    return FieldSpec("string", required)


def number(required: bool = True) -> FieldSpec:
    return FieldSpec("number", required)


def iso_date(required: bool = True) -> FieldSpec:
    return FieldSpec("date", required)


def obj(fields: dict[str, FieldSpec], required: bool = True) -> FieldSpec:
    return FieldSpec("object", required, fields=fields)


def array(item: FieldSpec, required: bool = True) -> FieldSpec:
    return FieldSpec("array", required, item=item)


MACROS_SPEC = obj({
    "carbs":    number(),
    "proteins": number(),
    "fats":     number(),
})


def _meal_spec(required: bool = True) -> FieldSpec:
    return obj({
        "title":           string(),
        "ingredients":     array(string()),
        "instructions":    array(string()),
        "calories":        number(),
        "macros":          MACROS_SPEC,
        "durationMinutes": number(required=False),
    }, required=required)


MEAL_PLAN_SCHEMA = obj({
    "days": array(obj({
        "date":  iso_date(),
        "meals": obj({
            "breakfast": _meal_spec(),
            "lunch":     _meal_spec(),
            "dinner":    _meal_spec(),
            "snack":     _meal_spec(required=False),
        }),
    })),
})

EXERCISE_SPEC = obj({
    "name":              string(),
    "reps":              string(),
    "description":       string(required=False),
    "durationMinutes":   number(required=False),
    "focus":             string(required=False),
    "estimatedCalories": number(required=False),
})

WORKOUT_PLAN_SCHEMA = obj({
    "days": array(obj({
        "date":      iso_date(),
        "exercises": array(EXERCISE_SPEC),
    })),
})


# ─────────────────────────────────────────────
# 2. Typed trees (meal)
# ─────────────────────────────────────────────

class Macros(BaseModel):
    carbs:    float
    proteins: float
    fats:     float


class MealItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title:            str
    ingredients:      list[str]
    instructions:     list[str]
    calories:         float
    macros:           Macros
    duration_minutes: Optional[float] = Field(default=None, alias="durationMinutes")


class DayMeals(BaseModel):
    breakfast: MealItem
    lunch:     MealItem
    dinner:    MealItem
    snack:     Optional[MealItem] = None


class DailyMealPlan(BaseModel):
    date:  date
    meals: DayMeals


class MealPlanBatch(BaseModel):
    days: list[DailyMealPlan]


# ─────────────────────────────────────────────
# 3. Typed trees (workout)
# ─────────────────────────────────────────────

class ExerciseItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name:               str
    reps:               str
    description:        Optional[str]   = None
    duration_minutes:   Optional[float] = Field(default=None, alias="durationMinutes")
    focus:              Optional[str]   = None
    estimated_calories: Optional[float] = Field(default=None, alias="estimatedCalories")


class DailyWorkoutPlan(BaseModel):
    date:      date
    exercises: list[ExerciseItem]


class WorkoutPlanBatch(BaseModel):
    days: list[DailyWorkoutPlan]


# ─────────────────────────────────────────────
# 4. User attributes (prompt input)
# ─────────────────────────────────────────────

class Availability(BaseModel):
    days_per_week:   int = Field(default=3, ge=1, le=7)
    minutes_per_day: int = Field(default=30, ge=5)


class UserAttributes(BaseModel):
    """Built per request from a stored profile, or from the shared defaults."""
    gender:                str
    age:                   int
    weight:                float
    height:                float
    fitness_level:         str
    goal:                  str
    dietary_preferences:   list[str] = Field(default_factory=list)
    health_considerations: list[str] = Field(default_factory=list)
    equipment:             list[str] = Field(default_factory=list)
    availability:          Availability = Field(default_factory=Availability)


DEFAULT_ATTRIBUTES = UserAttributes(
    gender="homme",
    age=30,
    weight=70,
    height=170,
    fitness_level="débutant",
    goal="maintenance",
    equipment=["bodyweight"],
)
