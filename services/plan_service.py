"""
services/plan_service.py

Plan retrieval and generation policy, one service per domain.

  get_plans(user)           subscribed + plans in window → own plans,
                            otherwise the shared defaults
  get_default_plans()       stored defaults for the window, generated on
                            first request when none exist
  generate_default_plans()  AI defaults; on any generation error the
                            static fallback table is stored instead
  ensure_default_plans()    generate defaults only when the window is empty
  generate_custom_plans()   profile → AI → store, subscription required
  store_custom_plans()      client-supplied days → validate → store

Generation errors never reach callers raw: custom generation surfaces
GenerationUnavailable, default generation degrades to static content.
Static fallback plans are stored like generated ones, so an outage costs
one model call per window instead of one per request.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

import config
from agents.fallback_plans import static_meal_plans, static_workout_plans
from agents.plan_agent import PlanAgent, unique_days
from agents.response_parser import build_model
from cache.redis_client import RedisClient
from db.database import SessionFactory, session_scope
from db.repositories import (
    MealPlanRepository, UserRepository, WorkoutPlanRepository, upsert_plan,
)
from errors import (
    GENERATION_ERRORS, Forbidden, GenerationUnavailable,
    NotFound, RateLimited,
)
from schemas.plan_schemas import DEFAULT_ATTRIBUTES
from schemas.validation import validate
from services.subscription_gate import SubscriptionGate

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def rolling_window(today: Optional[date] = None, days: int = config.PLAN_WINDOW_DAYS) -> list[date]:
    """Today through days-1 days ahead. Plan rows are keyed by UTC day."""
    if days < 1:
        raise ValueError(f"days must be at least 1, got {days}")
    today = today or utc_today()
    return [today + timedelta(days=i) for i in range(days)]


class PlanService:
    """Domain-agnostic policy; subclasses bind the repository and fallback content."""

    domain:            str = ""
    repo_cls:          type = None
    default_equipment: list[str] = []

    def __init__(
        self,
        session_factory: SessionFactory,
        agent: PlanAgent,
        gate: SubscriptionGate,
        rate_limiter: Optional[RedisClient] = None,
        clock: Callable[[], date] = utc_today,
    ):
        self.session_factory = session_factory
        self.agent           = agent
        self.gate            = gate
        self.rate_limiter    = rate_limiter
        self.clock           = clock

    def _static_plans(self, dates: Sequence[date]) -> list:
        raise NotImplementedError

    def window(self, days: Optional[int] = None) -> list[date]:
        return rolling_window(self.clock(), days or config.PLAN_WINDOW_DAYS)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def get_plans(self, user_id: str) -> list:
        dates = self.window()
        if self.gate.has_active_subscription(user_id):
            with session_scope(self.session_factory) as db:
                plans = self.repo_cls(db).list_for_owner(user_id, dates[0], dates[-1])
            logger.info("Found %d %s plan(s) for user %s", len(plans), self.domain, user_id)
            if plans:
                return plans
        logger.info("Serving default %s plans to user %s", self.domain, user_id)
        return self.get_default_plans()

    def get_default_plans(self, days: Optional[int] = None) -> list:
        dates = self.window(days)
        with session_scope(self.session_factory) as db:
            plans = self.repo_cls(db).list_defaults(dates[0], dates[-1])
        if plans:
            return plans
        logger.info("No default %s plans in window, generating", self.domain)
        return self.generate_default_plans(dates)

    # ── Default plans ─────────────────────────────────────────────────────────

    def generate_default_plans(self, dates: Sequence[date]) -> list:
        dates = list(dates)
        try:
            drafts = self.agent.generate(DEFAULT_ATTRIBUTES, dates, owner_id=None)
        except GENERATION_ERRORS:
            logger.exception("Default %s generation failed, storing static plans", self.domain)
            drafts = self._static_plans(dates)
        return [upsert_plan(self.session_factory, self.repo_cls, d) for d in drafts]

    def ensure_default_plans(self) -> bool:
        """Generates defaults only when the window holds none. Returns True if it generated."""
        dates = self.window()
        with session_scope(self.session_factory) as db:
            existing = self.repo_cls(db).count_defaults(dates[0], dates[-1])
        if existing:
            logger.debug("%d default %s plan(s) already in window", existing, self.domain)
            return False
        logger.info("No default %s plans found. Generating new ones.", self.domain)
        self.generate_default_plans(dates)
        return True

    # ── Custom plans ──────────────────────────────────────────────────────────

    def _require_subscriber(self, user_id: str) -> None:
        with session_scope(self.session_factory) as db:
            if not UserRepository(db).exists(user_id):
                raise NotFound(f"User not found: {user_id}")
        if not self.gate.has_active_subscription(user_id):
            raise Forbidden("An active subscription is required for custom plans")

    def generate_custom_plans(self, user_id: str, enforce_rate_limit: bool = True) -> list:
        self._require_subscriber(user_id)
        with session_scope(self.session_factory) as db:
            attributes = UserRepository(db).get_attributes(
                user_id, default_equipment=self.default_equipment, today=self.clock(),
            )

        if enforce_rate_limit and self.rate_limiter is not None:
            allowed, count = self.rate_limiter.check_rate_limit(user_id)
            if not allowed:
                raise RateLimited(f"Generation limit reached ({count} requests this hour)")

        try:
            drafts = self.agent.generate(attributes, self.window(), owner_id=user_id)
        except GENERATION_ERRORS as e:
            logger.exception("Custom %s generation failed for user %s", self.domain, user_id)
            raise GenerationUnavailable(self.domain) from e

        stored = [upsert_plan(self.session_factory, self.repo_cls, d) for d in drafts]
        logger.info("✅ Stored %d custom %s plan(s) for user %s", len(stored), self.domain, user_id)
        return stored

    def store_custom_plans(self, user_id: str, days: list[dict]) -> list:
        """Stores plan days supplied by the client, in the same shape the model returns."""
        self._require_subscriber(user_id)
        payload = validate({"days": days}, self.agent.domain.schema)
        batch   = build_model(payload, self.agent.domain.model)
        drafts  = unique_days(self.agent.domain.normalize(batch, user_id))
        return [upsert_plan(self.session_factory, self.repo_cls, d) for d in drafts]


class MealPlanService(PlanService):

    domain    = "meal"
    repo_cls  = MealPlanRepository

    def _static_plans(self, dates: Sequence[date]) -> list:
        return static_meal_plans(dates)


class WorkoutPlanService(PlanService):

    domain            = "workout"
    repo_cls          = WorkoutPlanRepository
    default_equipment = ["bodyweight"]

    def _static_plans(self, dates: Sequence[date]) -> list:
        return static_workout_plans(dates)
