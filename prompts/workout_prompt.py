"""
prompts/workout_prompt.py

Multi-day workout plan prompt, sharing the profile / date formatting of
the meal prompt.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from langchain_core.prompts import PromptTemplate

from prompts.meal_prompt import date_lines, profile_lines
from schemas.plan_schemas import UserAttributes

WORKOUT_PROMPT = PromptTemplate.from_template("""Tu es un coach sportif personnel.

Voici les données de l'utilisateur :
{profile}

Génère un plan d'entraînement personnalisé pour chacune des dates suivantes :
{dates}

Format de réponse JSON strict (tableau d'objets) :

[
  {{
    "date": "YYYY-MM-DD",
    "exercises": [
      {{
        "name": "nom de l'exercice",
        "description": "courte description",
        "reps": "3x12",
        "durationMinutes": 15,
        "focus": "haut du corps" | "jambes" | "core" | "cardio" | "plein corps",
        "estimatedCalories": 150
      }},
      ...
    ]
  }},
  ...
]

Chaque date doit avoir entre 3 à 5 exercices.
Les calories doivent être réalistes.
Réponds uniquement avec un tableau JSON, sans texte ou explication.
""")


def build_workout_prompt(user: UserAttributes, dates: Sequence[date | str]) -> str:
    profile = profile_lines(user, [
        ("Matériel disponible", user.equipment),
        ("Problèmes de santé",  user.health_considerations),
    ])
    return WORKOUT_PROMPT.format(profile=profile, dates=date_lines(dates))
