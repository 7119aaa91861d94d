# tests/test_normalizer.py
from datetime import date

import pytest

from agents.fallback_plans import static_meal_plans, static_workout_plans
from agents.normalizer import SLOT_DURATION_MINUTES, normalize_meal_plan, normalize_workout_plan
from schemas.plan_schemas import MealPlanBatch, WorkoutPlanBatch


def test_meal_totals_sum_present_slots(meal_day):
    batch = MealPlanBatch.model_validate({"days": [meal_day("2024-01-01"), meal_day("2024-01-02", snack=False)]})
    with_snack, without_snack = normalize_meal_plan(batch, owner_id="u1")

    assert with_snack.totals.calories == 1500
    assert with_snack.totals.protein == 81
    assert with_snack.totals.carbs == 160
    assert with_snack.totals.fat == 51
    assert without_snack.totals.calories == 1400
    assert [m.slot for m in without_snack.meals] == ["breakfast", "lunch", "dinner"]


def test_slot_durations_default_unless_given(meal_day):
    day = meal_day("2024-01-01")
    day["meals"]["lunch"]["durationMinutes"] = 12.4
    draft = normalize_meal_plan(MealPlanBatch.model_validate({"days": [day]}), owner_id=None)[0]

    durations = {m.slot: m.duration_minutes for m in draft.meals}
    assert durations == {"breakfast": 15, "lunch": 12, "dinner": 30, "snack": 10}
    assert SLOT_DURATION_MINUTES["dinner"] == 30


def test_default_flag_follows_owner(meal_day):
    batch = MealPlanBatch.model_validate({"days": [meal_day("2024-01-01")]})
    assert normalize_meal_plan(batch, owner_id=None)[0].is_default is True
    owned = normalize_meal_plan(batch, owner_id="u1")[0]
    assert owned.is_default is False
    assert owned.owner_id == "u1"
    assert owned.plan_date == date(2024, 1, 1)


def test_input_is_not_mutated_and_drafts_are_frozen(meal_day):
    batch = MealPlanBatch.model_validate({"days": [meal_day("2024-01-01")]})
    before = batch.model_dump()
    draft = normalize_meal_plan(batch, owner_id=None)[0]
    assert batch.model_dump() == before
    with pytest.raises(Exception):
        draft.is_default = False


def test_workout_day_becomes_one_session(workout_day):
    batch = WorkoutPlanBatch.model_validate({"days": [workout_day("2024-01-01")]})
    draft = normalize_workout_plan(batch, owner_id="u1")[0]

    assert draft.name == "Séance du 2024-01-01"
    assert draft.intensity == "Modérée"
    assert draft.duration_minutes == 18
    assert draft.estimated_calories == 140
    assert [e.body_part for e in draft.exercises] == ["jambes", "haut du corps", "core"]
    assert draft.exercises[2].duration_minutes is None


def test_static_meal_fallback_is_schema_valid_and_french():
    plans = static_meal_plans([date(2024, 1, 1), date(2024, 1, 2)])
    assert [p.plan_date for p in plans] == [date(2024, 1, 1), date(2024, 1, 2)]
    for plan in plans:
        assert plan.is_default is True
        assert [m.slot for m in plan.meals] == ["breakfast", "lunch", "dinner"]
        assert plan.totals.calories == 350 + 400 + 450
    assert plans[0].meals[0].title == "Petit-déjeuner équilibré"


def test_static_workout_fallback():
    plan = static_workout_plans([date(2024, 1, 1)])[0]
    assert plan.is_default is True
    assert len(plan.exercises) == 4
    assert plan.duration_minutes == 25
    assert plan.estimated_calories == 175
