# tests/conftest.py
import json
from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from agents.plan_agent import MEAL_DOMAIN, WORKOUT_DOMAIN, PlanAgent
from db.database import create_tables, drop_tables, make_session_factory, session_scope
from db.repositories import SubscriptionRepository, UserRepository
from llm.generation_client import GenerationClient
from services.plan_service import MealPlanService, WorkoutPlanService
from services.subscription_gate import SubscriptionGate

TODAY = date(2024, 1, 1)


# --- Fake chat model ---
class FakeChatModel:
    """
    Stands in for a LangChain chat model. Each .invoke() pops the next
    canned reply; an Exception instance is raised instead of returned.
    The last reply repeats once the queue is down to one.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def invoke(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(content=reply)


@pytest.fixture
def fake_model_cls():
    return FakeChatModel


# --- Payload builders ---
def _meal(title, calories, p=10, c=20, f=5):
    return {
        "title": title,
        "ingredients": [f"{title} base", "sel"],
        "instructions": ["préparer", "servir"],
        "calories": calories,
        "macros": {"carbs": c, "proteins": p, "fats": f},
    }


@pytest.fixture
def meal_day():
    def build(day, snack=True):
        meals = {
            "breakfast": _meal("Porridge", 300, p=10, c=50, f=6),
            "lunch":     _meal("Salade", 500, p=30, c=40, f=20),
            "dinner":    _meal("Saumon", 600, p=40, c=45, f=25),
        }
        if snack:
            meals["snack"] = _meal("Pomme", 100, p=1, c=25, f=0)
        return {"date": day, "meals": meals}
    return build


@pytest.fixture
def workout_day():
    def build(day):
        return {
            "date": day,
            "exercises": [
                {"name": "Squats", "reps": "3x12", "description": "lent", "durationMinutes": 10,
                 "focus": "jambes", "estimatedCalories": 80},
                {"name": "Pompes", "reps": "3x10", "durationMinutes": 8,
                 "focus": "haut du corps", "estimatedCalories": 60},
                {"name": "Planche", "reps": "3x30s", "focus": "core"},
            ],
        }
    return build


@pytest.fixture
def as_reply():
    """Days → model text, fenced the way models usually answer."""
    def render(days, fenced=True):
        body = json.dumps(days, ensure_ascii=False)
        return f"```json\n{body}\n```" if fenced else body
    return render


# --- Store ---
@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def make_user(session_factory):
    def create(name="alice", subscribed=False, with_profile=True, **profile):
        with session_scope(session_factory) as db:
            users = UserRepository(db)
            user_id = users.create(name, f"{name}@example.com")
            if with_profile:
                users.upsert_profile(user_id, **profile)
            if subscribed:
                SubscriptionRepository(db).set_status(user_id, "ACTIVE")
        return user_id
    return create


# --- Services ---
@pytest.fixture
def build_services(session_factory):
    def build(model, rate_limiter=None, today=TODAY):
        client = GenerationClient(model)
        gate = SubscriptionGate(session_factory)
        meal = MealPlanService(session_factory, PlanAgent(client, MEAL_DOMAIN), gate,
                               rate_limiter, clock=lambda: today)
        workout = WorkoutPlanService(session_factory, PlanAgent(client, WORKOUT_DOMAIN), gate,
                                     rate_limiter, clock=lambda: today)
        return SimpleNamespace(gate=gate, meal=meal, workout=workout)
    return build
