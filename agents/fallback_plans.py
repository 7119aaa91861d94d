"""
agents/fallback_plans.py

Static default plans served when default-plan generation fails.

Content is written in the same JSON shape the model must return and goes
through the same schema check and normalizer, so a fallback plan is
always schema-valid. Content lives in per-locale tables; only "fr"
exists today.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from agents.normalizer import normalize_meal_plan, normalize_workout_plan
from schemas.plan_schemas import MEAL_PLAN_SCHEMA, WORKOUT_PLAN_SCHEMA, MealPlanBatch, WorkoutPlanBatch
from schemas.store_schemas import MealPlanDraft, WorkoutPlanDraft
from schemas.validation import validate

FALLBACK_LOCALE = "fr"

MEAL_CONTENT: dict[str, dict] = {
    "fr": {
        "breakfast": {
            "title": "Petit-déjeuner équilibré",
            "ingredients": ["Flocons d'avoine", "Lait", "Banane", "Miel"],
            "instructions": [
                "Cuire les flocons d'avoine avec le lait",
                "Ajouter la banane coupée",
                "Arroser de miel",
            ],
            "calories": 350,
            "macros": {"carbs": 60, "proteins": 12, "fats": 8},
        },
        "lunch": {
            "title": "Salade composée",
            "ingredients": ["Salade verte", "Tomates", "Concombre", "Thon", "Huile d'olive"],
            "instructions": [
                "Laver et couper les légumes",
                "Ajouter le thon",
                "Assaisonner avec l'huile d'olive",
            ],
            "calories": 400,
            "macros": {"carbs": 15, "proteins": 25, "fats": 20},
        },
        "dinner": {
            "title": "Poulet grillé avec légumes",
            "ingredients": ["Blanc de poulet", "Brocoli", "Riz complet", "Épices"],
            "instructions": [
                "Griller le poulet avec les épices",
                "Cuire le riz complet",
                "Faire cuire les légumes à la vapeur",
            ],
            "calories": 450,
            "macros": {"carbs": 45, "proteins": 35, "fats": 15},
        },
    },
}

WORKOUT_CONTENT: dict[str, list[dict]] = {
    "fr": [
        {"name": "Jumping jacks", "reps": "3x30s", "focus": "cardio",
         "description": "Échauffement dynamique", "durationMinutes": 5, "estimatedCalories": 40},
        {"name": "Squats", "reps": "3x15", "focus": "jambes",
         "description": "Dos droit, descendre jusqu'à la parallèle", "durationMinutes": 8, "estimatedCalories": 60},
        {"name": "Pompes", "reps": "3x10", "focus": "haut du corps",
         "description": "Sur les genoux si besoin", "durationMinutes": 7, "estimatedCalories": 50},
        {"name": "Gainage", "reps": "3x30s", "focus": "core",
         "description": "Planche sur les avant-bras", "durationMinutes": 5, "estimatedCalories": 25},
    ],
}


def static_meal_payload(dates: Iterable[date], locale: str = FALLBACK_LOCALE) -> dict:
    return {"days": [{"date": d.isoformat(), "meals": MEAL_CONTENT[locale]} for d in dates]}


def static_workout_payload(dates: Iterable[date], locale: str = FALLBACK_LOCALE) -> dict:
    return {"days": [{"date": d.isoformat(), "exercises": WORKOUT_CONTENT[locale]} for d in dates]}


def static_meal_plans(dates: Iterable[date], locale: str = FALLBACK_LOCALE) -> list[MealPlanDraft]:
    payload = validate(static_meal_payload(dates, locale), MEAL_PLAN_SCHEMA)
    return normalize_meal_plan(MealPlanBatch.model_validate(payload), owner_id=None)


def static_workout_plans(dates: Iterable[date], locale: str = FALLBACK_LOCALE) -> list[WorkoutPlanDraft]:
    payload = validate(static_workout_payload(dates, locale), WORKOUT_PLAN_SCHEMA)
    return normalize_workout_plan(WorkoutPlanBatch.model_validate(payload), owner_id=None)
