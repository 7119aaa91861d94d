# tests/test_prompts.py
from datetime import date

from prompts.meal_prompt import build_meal_prompt, date_lines
from prompts.workout_prompt import build_workout_prompt
from schemas.plan_schemas import DEFAULT_ATTRIBUTES, UserAttributes


def _user(**overrides):
    base = DEFAULT_ATTRIBUTES.model_dump()
    base.update(overrides)
    return UserAttributes(**base)


def test_meal_prompt_lists_every_date_on_its_own_line():
    dates = [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
    prompt = build_meal_prompt(_user(), dates)
    lines = prompt.splitlines()
    for d in dates:
        assert f"- {d.isoformat()}" in lines


def test_meal_prompt_omits_empty_optional_lists():
    prompt = build_meal_prompt(_user(dietary_preferences=[], health_considerations=[]), [date(2024, 1, 1)])
    assert "Préférences alimentaires" not in prompt
    assert "Contraintes de santé" not in prompt
    assert "\n\n\n" not in prompt


def test_meal_prompt_includes_non_empty_optional_lists():
    prompt = build_meal_prompt(
        _user(dietary_preferences=["végétarien", "sans gluten"], health_considerations=["diabète"]),
        [date(2024, 1, 1)],
    )
    assert "- Préférences alimentaires : végétarien, sans gluten" in prompt
    assert "- Contraintes de santé : diabète" in prompt


def test_meal_prompt_is_deterministic_and_shows_json_shape():
    user, dates = _user(goal="perte de poids"), [date(2024, 1, 1)]
    first = build_meal_prompt(user, dates)
    assert first == build_meal_prompt(user, dates)
    assert '"breakfast"' in first and '"macros"' in first
    assert "uniquement" in first
    assert "perte de poids" in first


def test_meal_prompt_renders_profile_values():
    prompt = build_meal_prompt(_user(age=41, weight=82.5), [date(2024, 1, 1)])
    assert "- Âge : 41 ans" in prompt
    assert "- Poids : 82.5 kg" in prompt
    assert "3 jours/semaine, 30 min/jour" in prompt


def test_workout_prompt_lists_equipment_and_dates():
    prompt = build_workout_prompt(_user(equipment=["haltères", "tapis"]), ["2024-01-01", "2024-01-02"])
    assert "- Matériel disponible : haltères, tapis" in prompt
    assert "- 2024-01-01" in prompt.splitlines()
    assert "- 2024-01-02" in prompt.splitlines()
    assert "Problèmes de santé" not in prompt
    assert '"exercises"' in prompt


def test_date_lines_empty_list():
    assert date_lines([]) == ""
