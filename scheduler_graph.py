"""
scheduler_graph.py

Per-user refresh state machine, one run per user per tick:

    check_subscription ──► generate_custom ──► END   (status done | failed)
                       └─► ensure_default  ──► END

A node that raises is caught inside the node and recorded as
status="failed" with the error text, so one user's failure is just data
for the scheduler loop.
"""

import logging

from langgraph.graph import StateGraph, END

from services.plan_service import MealPlanService, WorkoutPlanService
from services.subscription_gate import SubscriptionGate
from state import UserRefreshState

logger = logging.getLogger(__name__)


def _failed(state: UserRefreshState, e: Exception) -> dict:
    logger.exception("Plan refresh failed for user %s", state.user_id)
    return {"status": "failed", "error": f"{type(e).__name__}: {e}"}


def build_refresh_graph(
    gate: SubscriptionGate,
    meal_service: MealPlanService,
    workout_service: WorkoutPlanService,
):
    """Compiles the refresh graph around the given collaborators."""

    def check_subscription(state: UserRefreshState) -> dict:
        subscribed = gate.has_active_subscription(state.user_id)
        return {"subscribed": subscribed, "mode": "custom" if subscribed else "default"}

    def generate_custom(state: UserRefreshState) -> dict:
        try:
            meals    = meal_service.generate_custom_plans(state.user_id, enforce_rate_limit=False)
            workouts = workout_service.generate_custom_plans(state.user_id, enforce_rate_limit=False)
        except Exception as e:
            return _failed(state, e)
        return {"meal_plans": len(meals), "workout_plans": len(workouts), "status": "done"}

    def ensure_default(state: UserRefreshState) -> dict:
        try:
            meal_generated    = meal_service.ensure_default_plans()
            workout_generated = workout_service.ensure_default_plans()
        except Exception as e:
            return _failed(state, e)
        return {"defaults_generated": meal_generated or workout_generated, "status": "done"}

    def route_by_subscription(state: UserRefreshState) -> str:
        return "generate_custom" if state.subscribed else "ensure_default"

    builder = StateGraph(UserRefreshState)

    builder.add_node("check_subscription", check_subscription)
    builder.add_node("generate_custom",    generate_custom)
    builder.add_node("ensure_default",     ensure_default)

    builder.set_entry_point("check_subscription")
    builder.add_conditional_edges(
        "check_subscription",
        route_by_subscription,
        {
            "generate_custom": "generate_custom",
            "ensure_default":  "ensure_default",
        }
    )
    builder.add_edge("generate_custom", END)
    builder.add_edge("ensure_default",  END)

    return builder.compile()


def refresh_user(graph, user_id: str) -> UserRefreshState:
    raw = graph.invoke(UserRefreshState(user_id=user_id))
    return UserRefreshState(**raw)
