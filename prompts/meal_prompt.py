"""
prompts/meal_prompt.py

Multi-day meal plan prompt. Pure string templating: same input, same text.
The model is shown the exact JSON array it must return.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from langchain_core.prompts import PromptTemplate

from schemas.plan_schemas import UserAttributes

MEAL_PROMPT = PromptTemplate.from_template("""Tu es un assistant nutritionniste.

En te basant sur ces données :
{profile}

Génère un plan de repas personnalisé pour chaque jour parmi les dates suivantes :
{dates}

Format de réponse JSON strict (tableau d'objets) :

[
  {{
    "date": "YYYY-MM-DD",
    "meals": {{
      "breakfast": {{
        "title": "Nom du plat",
        "ingredients": ["ingrédient 1", "ingrédient 2"],
        "instructions": ["étape 1", "étape 2"],
        "calories": nombre,
        "macros": {{
          "carbs": nombre,
          "proteins": nombre,
          "fats": nombre
        }}
      }},
      "lunch": {{ ... même format ... }},
      "dinner": {{ ... même format ... }},
      "snack": {{ ... même format ... }}
    }}
  }},
  ...
]

Les instructions doivent être un **tableau de courtes phrases**.
Chaque repas doit inclure un objet `macros` indiquant la quantité de **glucides (carbs), protéines (proteins) et lipides (fats)** en grammes.
Réponds uniquement avec un tableau JSON **valide**, sans texte explicatif ni balises.
Les calories et macros doivent être cohérents et adaptés à l'objectif : {goal}.
""")


def profile_lines(user: UserAttributes, optional: Sequence[tuple[str, list[str]]]) -> str:
    """Labelled attribute lines; optional lists are skipped when empty."""
    lines = [
        f"- Genre : {user.gender}",
        f"- Âge : {user.age} ans",
        f"- Poids : {user.weight:g} kg",
        f"- Taille : {user.height:g} cm",
        f"- Niveau de forme : {user.fitness_level}",
        f"- Objectif : {user.goal}",
        f"- Disponibilité : {user.availability.days_per_week} jours/semaine, "
        f"{user.availability.minutes_per_day} min/jour",
    ]
    for label, values in optional:
        if values:
            lines.append(f"- {label} : {', '.join(values)}")
    return "\n".join(lines)


def date_lines(dates: Sequence[date | str]) -> str:
    return "\n".join(f"- {d.isoformat() if isinstance(d, date) else d}" for d in dates)


def build_meal_prompt(user: UserAttributes, dates: Sequence[date | str]) -> str:
    profile = profile_lines(user, [
        ("Préférences alimentaires", user.dietary_preferences),
        ("Contraintes de santé",     user.health_considerations),
    ])
    return MEAL_PROMPT.format(profile=profile, dates=date_lines(dates), goal=user.goal)
