"""
bootstrap.py

Explicit wiring of collaborators. Every component takes what it needs
through its constructor; this is the only place that builds them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from agents.plan_agent import MEAL_DOMAIN, WORKOUT_DOMAIN, PlanAgent
from cache.redis_client import RedisClient
from db.database import SessionFactory, SessionLocal
from llm.generation_client import GenerationClient
from scheduler import PlanScheduler
from scheduler_graph import build_refresh_graph
from services.plan_service import MealPlanService, WorkoutPlanService
from services.subscription_gate import SubscriptionGate


@dataclass
class App:
    gate:            SubscriptionGate
    meal_service:    MealPlanService
    workout_service: WorkoutPlanService
    scheduler:       PlanScheduler


def build_app(
    session_factory: SessionFactory = SessionLocal,
    chat_model: Optional[Any] = None,
    rate_limiter: Optional[RedisClient] = None,
    **service_kwargs,
) -> App:
    """
    chat_model:   anything with .invoke(prompt); defaults to the configured provider
    rate_limiter: defaults to a Redis-backed limiter (fails open without Redis)
    """
    client  = GenerationClient(chat_model)
    gate    = SubscriptionGate(session_factory)
    limiter = rate_limiter if rate_limiter is not None else RedisClient()

    meal_service = MealPlanService(
        session_factory, PlanAgent(client, MEAL_DOMAIN), gate, limiter, **service_kwargs,
    )
    workout_service = WorkoutPlanService(
        session_factory, PlanAgent(client, WORKOUT_DOMAIN), gate, limiter, **service_kwargs,
    )
    graph = build_refresh_graph(gate, meal_service, workout_service)

    return App(
        gate=gate,
        meal_service=meal_service,
        workout_service=workout_service,
        scheduler=PlanScheduler(session_factory, graph),
    )
