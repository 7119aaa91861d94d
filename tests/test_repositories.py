# tests/test_repositories.py
from datetime import date, datetime

import pytest
from sqlalchemy.exc import SQLAlchemyError

from agents.normalizer import normalize_meal_plan, normalize_workout_plan
from db.database import create_tables, make_engine, make_session_factory, session_scope
from db.repositories import (
    MealLogRepository, MealPlanRepository, UserRepository, WeightRepository,
    WorkoutPlanRepository, calculate_age, upsert_plan,
)
from errors import NotFound, PersistenceFailure
from schemas.plan_schemas import MealPlanBatch, WorkoutPlanBatch
from schemas.store_schemas import MealLogEntry


@pytest.fixture
def meal_draft(meal_day):
    def build(day="2024-01-01", owner_id=None, snack=True, lunch_title=None):
        payload = meal_day(day, snack=snack)
        if lunch_title:
            payload["meals"]["lunch"]["title"] = lunch_title
        return normalize_meal_plan(MealPlanBatch.model_validate({"days": [payload]}), owner_id)[0]
    return build


def _counts(session_factory, repo_cls=MealPlanRepository):
    with session_scope(session_factory) as db:
        return repo_cls(db).count_children()


def test_upsert_twice_keeps_one_plan(session_factory, meal_draft):
    draft = meal_draft()
    upsert_plan(session_factory, MealPlanRepository, draft)
    once = _counts(session_factory)
    upsert_plan(session_factory, MealPlanRepository, draft)

    assert _counts(session_factory) == once
    assert once == {"meal_plans": 1, "planned_meals": 4, "meal_ingredients": 8, "meal_steps": 8}


def test_replacement_keeps_only_latest_children(session_factory, meal_draft, make_user):
    user_id = make_user()
    upsert_plan(session_factory, MealPlanRepository, meal_draft(owner_id=user_id))
    view = upsert_plan(session_factory, MealPlanRepository,
                       meal_draft(owner_id=user_id, snack=False, lunch_title="Bowl"))

    assert _counts(session_factory)["planned_meals"] == 3
    with session_scope(session_factory) as db:
        stored = MealPlanRepository(db).list_for_owner(user_id, date(2024, 1, 1), date(2024, 1, 1))
    assert len(stored) == 1
    assert stored[0].id == view.id
    assert stored[0].meal("lunch").title == "Bowl"
    assert stored[0].meal("snack") is None


def test_stored_totals_equal_slot_sums(session_factory, meal_draft):
    view = upsert_plan(session_factory, MealPlanRepository, meal_draft(snack=False))
    with session_scope(session_factory) as db:
        stored = MealPlanRepository(db).list_defaults(date(2024, 1, 1), date(2024, 1, 7))[0]

    assert stored == view
    assert stored.totals.calories == sum(m.nutrition.calories for m in stored.meals) == 1400
    assert stored.totals.protein == sum(m.nutrition.protein for m in stored.meals)
    assert stored.meal("breakfast").ingredients == ["Porridge base", "sel"]
    assert stored.meal("dinner").instructions == ["préparer", "servir"]


def test_user_and_default_plans_do_not_collide(session_factory, meal_draft, make_user):
    user_id = make_user()
    upsert_plan(session_factory, MealPlanRepository, meal_draft())
    upsert_plan(session_factory, MealPlanRepository, meal_draft(owner_id=user_id))

    with session_scope(session_factory) as db:
        repo = MealPlanRepository(db)
        assert repo.count_defaults(date(2024, 1, 1), date(2024, 1, 7)) == 1
        assert len(repo.list_for_owner(user_id, date(2024, 1, 1), date(2024, 1, 7))) == 1
    assert _counts(session_factory)["meal_plans"] == 2


def test_window_queries_respect_bounds(session_factory, meal_draft):
    for day in ("2023-12-31", "2024-01-01", "2024-01-07", "2024-01-08"):
        upsert_plan(session_factory, MealPlanRepository, meal_draft(day=day))
    with session_scope(session_factory) as db:
        repo = MealPlanRepository(db)
        plans = repo.list_defaults(date(2024, 1, 1), date(2024, 1, 7))
        assert [p.plan_date for p in plans] == [date(2024, 1, 1), date(2024, 1, 7)]
        assert repo.count_defaults(date(2024, 1, 1), date(2024, 1, 7)) == 2


def test_failed_replace_rolls_back(session_factory, meal_draft, monkeypatch):
    before = upsert_plan(session_factory, MealPlanRepository, meal_draft())

    def broken_build(self, draft, owner_key):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(MealPlanRepository, "_build", broken_build)
    with pytest.raises(PersistenceFailure):
        upsert_plan(session_factory, MealPlanRepository, meal_draft(lunch_title="Bowl"))

    with session_scope(session_factory) as db:
        stored = MealPlanRepository(db).list_defaults(date(2024, 1, 1), date(2024, 1, 1))
    assert stored == [before]
    assert _counts(session_factory)["planned_meals"] == 4


def test_racing_writer_converges_to_one_plan(tmp_path, meal_draft, monkeypatch):
    engine = make_engine(f"sqlite:///{tmp_path / 'race.db'}")
    create_tables(engine)
    factory = make_session_factory(engine)

    ours, theirs = meal_draft(lunch_title="Ours"), meal_draft(lunch_title="Theirs")
    real_find = MealPlanRepository.find_id
    calls = []

    def find_with_rival(self, owner_key, plan_date):
        calls.append(owner_key)
        if len(calls) == 1:
            # another writer commits the same key between our lookup and insert
            upsert_plan(factory, MealPlanRepository, theirs)
            return None
        return real_find(self, owner_key, plan_date)

    monkeypatch.setattr(MealPlanRepository, "find_id", find_with_rival)
    view = upsert_plan(factory, MealPlanRepository, ours)

    assert len(calls) == 3
    assert view.meal("lunch").title == "Ours"
    assert _counts(factory) == {"meal_plans": 1, "planned_meals": 4, "meal_ingredients": 8, "meal_steps": 8}
    engine.dispose()


def test_unresolvable_conflict_is_a_persistence_failure(session_factory, meal_draft, monkeypatch):
    upsert_plan(session_factory, MealPlanRepository, meal_draft())
    monkeypatch.setattr(MealPlanRepository, "find_id", lambda self, key, d: None)

    with pytest.raises(PersistenceFailure):
        upsert_plan(session_factory, MealPlanRepository, meal_draft())
    assert _counts(session_factory)["meal_plans"] == 1


def test_workout_upsert_is_idempotent(session_factory, workout_day, make_user):
    user_id = make_user()
    draft = normalize_workout_plan(WorkoutPlanBatch.model_validate({"days": [workout_day("2024-01-02")]}), user_id)[0]
    upsert_plan(session_factory, WorkoutPlanRepository, draft)
    view = upsert_plan(session_factory, WorkoutPlanRepository, draft)

    assert _counts(session_factory, WorkoutPlanRepository) == {"workout_plans": 1, "workouts": 1, "exercises": 3}
    assert view.owner_id == user_id
    assert view.is_default is False
    assert [e.name for e in view.exercises] == ["Squats", "Pompes", "Planche"]
    assert view.duration_minutes == 18


def test_attributes_fall_back_to_defaults(session_factory, make_user):
    user_id = make_user(weight_kg=82, date_of_birth=date(1990, 6, 15), equipment=None)
    with session_scope(session_factory) as db:
        repo = UserRepository(db)
        meal_attrs = repo.get_attributes(user_id, today=date(2024, 1, 1))
        workout_attrs = repo.get_attributes(user_id, default_equipment=["bodyweight"], today=date(2024, 1, 1))

    assert meal_attrs.age == 33
    assert meal_attrs.weight == 82
    assert meal_attrs.gender == "homme"
    assert meal_attrs.goal == "maintenance"
    assert meal_attrs.availability.days_per_week == 3
    assert meal_attrs.equipment == []
    assert workout_attrs.equipment == ["bodyweight"]


def test_attributes_split_stored_lists(session_factory, make_user):
    user_id = make_user(dietary_restrictions=["vegan", "sans noix"], minutes_per_day=45)
    with session_scope(session_factory) as db:
        attrs = UserRepository(db).get_attributes(user_id)
    assert attrs.dietary_preferences == ["vegan", "sans noix"]
    assert attrs.availability.minutes_per_day == 45


def test_attributes_need_user_and_profile(session_factory, make_user):
    no_profile = make_user(name="bob", with_profile=False)
    with session_scope(session_factory) as db:
        repo = UserRepository(db)
        with pytest.raises(NotFound):
            repo.get_attributes("missing")
        with pytest.raises(NotFound, match="profile"):
            repo.get_attributes(no_profile)


def test_calculate_age_birthday_boundary():
    assert calculate_age(date(2000, 1, 2), today=date(2024, 1, 1)) == 23
    assert calculate_age(date(2000, 1, 1), today=date(2024, 1, 1)) == 24
    assert calculate_age(None) is None


def test_meal_log_upserts_per_day_and_type(session_factory, make_user):
    user_id = make_user()
    with session_scope(session_factory) as db:
        logs = MealLogRepository(db)
        logs.log_meal(user_id, MealLogEntry(log_date=datetime(2024, 1, 1, 8, 30), meal_type="breakfast",
                                            calories=300, protein=10, carbs=40, fat=8))
        logs.log_meal(user_id, MealLogEntry(log_date=datetime(2024, 1, 1, 9, 0), meal_type="breakfast",
                                            calories=420, protein=15, carbs=50, fat=12))
        logs.log_meal(user_id, MealLogEntry(log_date=datetime(2024, 1, 2, 12, 0), meal_type="lunch",
                                            calories=600, protein=35, carbs=60, fat=20))

    with session_scope(session_factory) as db:
        logs = MealLogRepository(db)
        day_one = logs.get_logs(user_id, date(2024, 1, 1))
        both = logs.get_logs_range(user_id, date(2024, 1, 1), date(2024, 1, 3))
        first_only = logs.get_logs_range(user_id, date(2024, 1, 1), date(2024, 1, 2))

    assert [(e.meal_type, e.calories) for e in day_one] == [("breakfast", 420)]
    assert day_one[0].log_date == datetime(2024, 1, 1)
    assert len(both) == 2
    assert len(first_only) == 1


def test_latest_weight_entry(session_factory, make_user):
    user_id = make_user()
    with session_scope(session_factory) as db:
        weights = WeightRepository(db)
        assert weights.latest_entry(user_id) is None
        weights.add_entry(user_id, 80.0, date(2024, 1, 1))
        weights.add_entry(user_id, 78.5, date(2024, 1, 8))
        weights.add_entry(user_id, 79.0, date(2024, 1, 4))

    with session_scope(session_factory) as db:
        latest = WeightRepository(db).latest_entry(user_id)
    assert latest.entry_date == date(2024, 1, 8)
    assert latest.weight_kg == 78.5
