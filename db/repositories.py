"""
db/repositories.py

Repository pattern — one class per domain.
Services call these instead of writing raw SQLAlchemy queries.

Rule: repositories accept/return Pydantic schemas or plain values.
      They never expose SQLAlchemy ORM objects outside this file.

Plan writes go through upsert_plan(), which owns the transaction:

  1. day window [00:00, 23:59:59.999999] UTC for the draft's date
  2. look up the plan for (owner_key, window), locking it where supported
  3. delete its children innermost first, then the plan row
  4. insert the new graph in one add()
  5. commit — any failure rolls the whole thing back

Two writers racing on the same key: the loser hits the unique
constraint on (owner_key, date), rolls back and replays once, this time
finding and replacing the winner's row.
"""

from __future__ import annotations

import logging
from datetime import datetime, date, timedelta
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db.database import SessionFactory, session_scope
from db.models import (
    DEFAULT_OWNER_KEY, owner_key_for,
    User, UserProfile, Subscription,
    MealPlan, PlannedMeal, MealIngredient, MealStep,
    WorkoutPlan, Workout, Exercise,
    MealLog, UserWeightEntry,
)
from errors import NotFound, PersistenceFailure
from schemas.plan_schemas import DEFAULT_ATTRIBUTES, Availability, UserAttributes
from schemas.store_schemas import (
    ExerciseView, MealLogEntry, MealPlanDraft, MealPlanView, MealView,
    Nutrition, WeightEntry, WorkoutPlanDraft, WorkoutPlanView,
)

logger = logging.getLogger(__name__)

UPSERT_ATTEMPTS = 2


def day_start(d: date) -> datetime:
    return datetime(d.year, d.month, d.day)


def day_window(d: date) -> tuple[datetime, datetime]:
    start = day_start(d)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def _split(value: Optional[str]) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()] if value else []


def _join(values: Optional[list[str]]) -> Optional[str]:
    return ", ".join(values) if values else None


def calculate_age(date_of_birth: Optional[date], today: Optional[date] = None) -> Optional[int]:
    if date_of_birth is None:
        return None
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


# ═══════════════════════════════════════════════════════════════
# USER REPOSITORY
# ═══════════════════════════════════════════════════════════════

class UserRepository:

    def __init__(self, db: Session):
        self.db = db

    def exists(self, user_id: str) -> bool:
        return self.db.get(User, user_id) is not None

    def list_ids(self) -> list[str]:
        return list(self.db.scalars(select(User.id).order_by(User.created_at, User.id)))

    def create(self, name: str, email: Optional[str] = None) -> str:
        user = User(name=name, email=email)
        self.db.add(user)
        self.db.flush()   # get ID without committing
        return user.id

    def upsert_profile(
        self,
        user_id: str,
        *,
        gender: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        weight_kg: Optional[float] = None,
        height_cm: Optional[float] = None,
        fitness_level: Optional[str] = None,
        goal: Optional[str] = None,
        dietary_restrictions: Optional[list[str]] = None,
        health_considerations: Optional[list[str]] = None,
        equipment: Optional[list[str]] = None,
        days_per_week: Optional[int] = None,
        minutes_per_day: Optional[int] = None,
    ) -> None:
        profile = self.db.scalar(select(UserProfile).where(UserProfile.user_id == user_id))
        if profile is None:
            profile = UserProfile(user_id=user_id)
            self.db.add(profile)

        profile.gender                = gender
        profile.date_of_birth         = date_of_birth
        profile.weight_kg             = weight_kg
        profile.height_cm             = height_cm
        profile.fitness_level         = fitness_level
        profile.goal                  = goal
        profile.dietary_restrictions  = _join(dietary_restrictions)
        profile.health_considerations = _join(health_considerations)
        profile.equipment             = _join(equipment)
        profile.days_per_week         = days_per_week
        profile.minutes_per_day       = minutes_per_day
        self.db.flush()

    def get_attributes(
        self,
        user_id: str,
        default_equipment: Optional[list[str]] = None,
        today: Optional[date] = None,
    ) -> UserAttributes:
        """
        Builds generation attributes from the stored profile.
        Raises NotFound when the user or the profile is missing; missing
        profile fields fall back to DEFAULT_ATTRIBUTES.
        """
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFound(f"User not found: {user_id}")
        p = user.profile
        if p is None:
            raise NotFound(f"User profile not found for ID: {user_id}")

        d = DEFAULT_ATTRIBUTES
        return UserAttributes(
            gender=p.gender or d.gender,
            age=calculate_age(p.date_of_birth, today) or d.age,
            weight=p.weight_kg or d.weight,
            height=p.height_cm or d.height,
            fitness_level=p.fitness_level or d.fitness_level,
            goal=p.goal or d.goal,
            dietary_preferences=_split(p.dietary_restrictions),
            health_considerations=_split(p.health_considerations),
            equipment=_split(p.equipment) or list(default_equipment or []),
            availability=Availability(
                days_per_week=p.days_per_week or d.availability.days_per_week,
                minutes_per_day=p.minutes_per_day or d.availability.minutes_per_day,
            ),
        )


# ═══════════════════════════════════════════════════════════════
# SUBSCRIPTION REPOSITORY
# ═══════════════════════════════════════════════════════════════

class SubscriptionRepository:

    ACTIVE = "ACTIVE"

    def __init__(self, db: Session):
        self.db = db

    def get_status(self, user_id: str) -> Optional[str]:
        return self.db.scalar(select(Subscription.status).where(Subscription.user_id == user_id))

    def set_status(self, user_id: str, status: str, external_id: Optional[str] = None) -> None:
        sub = self.db.scalar(select(Subscription).where(Subscription.user_id == user_id))
        if sub is None:
            sub = Subscription(user_id=user_id)
            self.db.add(sub)
        sub.status = status
        if external_id is not None:
            sub.external_id = external_id
        self.db.flush()


# ═══════════════════════════════════════════════════════════════
# PLAN REPOSITORIES
# ═══════════════════════════════════════════════════════════════

class _PlanRepository:
    """Shared lookup / window queries. Subclasses define the graph."""

    model: type = None

    def __init__(self, db: Session):
        self.db = db

    def find_id(self, owner_key: str, plan_date: date) -> Optional[str]:
        start, end = day_window(plan_date)
        stmt = (
            select(self.model.id)
            .where(self.model.owner_key == owner_key, self.model.date.between(start, end))
            .with_for_update()
        )
        return self.db.scalar(stmt)

    def replace(self, draft):
        """Delete-then-insert for the draft's key. Caller owns the transaction."""
        key = owner_key_for(draft.owner_id)
        existing = self.find_id(key, draft.plan_date)
        if existing is not None:
            logger.debug("Replacing %s %s for %s on %s", self.model.__name__, existing, key, draft.plan_date)
            self._delete_graph(existing)
        plan = self._build(draft, key)
        self.db.add(plan)
        self.db.flush()
        return self._view(plan)

    def _window_query(self, owner_key: str, start: date, end: date):
        return (
            select(self.model)
            .where(
                self.model.owner_key == owner_key,
                self.model.date.between(day_start(start), day_window(end)[1]),
            )
            .order_by(self.model.date)
        )

    def list_for_owner(self, user_id: str, start: date, end: date) -> list:
        return [self._view(p) for p in self.db.scalars(self._window_query(user_id, start, end))]

    def list_defaults(self, start: date, end: date) -> list:
        return [self._view(p) for p in self.db.scalars(self._window_query(DEFAULT_OWNER_KEY, start, end))]

    def count_defaults(self, start: date, end: date) -> int:
        stmt = select(func.count(self.model.id)).where(
            self.model.is_default.is_(True),
            self.model.user_id.is_(None),
            self.model.date.between(day_start(start), day_window(end)[1]),
        )
        return self.db.scalar(stmt) or 0

    def _bulk_delete(self, stmt) -> None:
        # identity map is expired right after, no need to sync it row by row
        self.db.execute(stmt, execution_options={"synchronize_session": False})

    def _delete_graph(self, plan_id: str) -> None:
        raise NotImplementedError

    def _build(self, draft, owner_key: str):
        raise NotImplementedError

    def _view(self, plan):
        raise NotImplementedError


class MealPlanRepository(_PlanRepository):

    model = MealPlan

    def _delete_graph(self, plan_id: str) -> None:
        meal_ids = select(PlannedMeal.id).where(PlannedMeal.plan_id == plan_id)
        self._bulk_delete(delete(MealIngredient).where(MealIngredient.meal_id.in_(meal_ids)))
        self._bulk_delete(delete(MealStep).where(MealStep.meal_id.in_(meal_ids)))
        self._bulk_delete(delete(PlannedMeal).where(PlannedMeal.plan_id == plan_id))
        self._bulk_delete(delete(MealPlan).where(MealPlan.id == plan_id))
        self.db.expire_all()

    def _build(self, draft: MealPlanDraft, owner_key: str) -> MealPlan:
        return MealPlan(
            owner_key=owner_key,
            user_id=draft.owner_id,
            date=day_start(draft.plan_date),
            is_default=draft.is_default,
            calories=draft.totals.calories,
            protein=draft.totals.protein,
            carbs=draft.totals.carbs,
            fat=draft.totals.fat,
            meals=[
                PlannedMeal(
                    position=i,
                    meal_type=m.slot,
                    title=m.title,
                    calories=m.nutrition.calories,
                    protein=m.nutrition.protein,
                    carbs=m.nutrition.carbs,
                    fat=m.nutrition.fat,
                    duration_minutes=m.duration_minutes,
                    ingredients=[MealIngredient(position=j, name=n) for j, n in enumerate(m.ingredients)],
                    steps=[MealStep(position=j, text=t) for j, t in enumerate(m.instructions)],
                )
                for i, m in enumerate(draft.meals)
            ],
        )

    def _view(self, plan: MealPlan) -> MealPlanView:
        return MealPlanView(
            id=plan.id,
            owner_id=plan.user_id,
            plan_date=plan.date.date(),
            is_default=plan.is_default,
            totals=Nutrition(calories=plan.calories, protein=plan.protein, carbs=plan.carbs, fat=plan.fat),
            meals=[
                MealView(
                    slot=m.meal_type,
                    title=m.title,
                    ingredients=[i.name for i in m.ingredients],
                    instructions=[s.text for s in m.steps],
                    nutrition=Nutrition(calories=m.calories, protein=m.protein, carbs=m.carbs, fat=m.fat),
                    duration_minutes=m.duration_minutes,
                )
                for m in plan.meals
            ],
        )

    def count_children(self) -> dict[str, int]:
        """Row counts for the plan graph tables (diagnostics and tests)."""
        return {
            "meal_plans":       self.db.scalar(select(func.count(MealPlan.id))),
            "planned_meals":    self.db.scalar(select(func.count(PlannedMeal.id))),
            "meal_ingredients": self.db.scalar(select(func.count(MealIngredient.id))),
            "meal_steps":       self.db.scalar(select(func.count(MealStep.id))),
        }


class WorkoutPlanRepository(_PlanRepository):

    model = WorkoutPlan

    def _delete_graph(self, plan_id: str) -> None:
        workout_ids = select(Workout.id).where(Workout.plan_id == plan_id)
        self._bulk_delete(delete(Exercise).where(Exercise.workout_id.in_(workout_ids)))
        self._bulk_delete(delete(Workout).where(Workout.plan_id == plan_id))
        self._bulk_delete(delete(WorkoutPlan).where(WorkoutPlan.id == plan_id))
        self.db.expire_all()

    def _build(self, draft: WorkoutPlanDraft, owner_key: str) -> WorkoutPlan:
        return WorkoutPlan(
            owner_key=owner_key,
            user_id=draft.owner_id,
            date=day_start(draft.plan_date),
            is_default=draft.is_default,
            workouts=[
                Workout(
                    name=draft.name,
                    description=draft.description,
                    intensity=draft.intensity,
                    duration_minutes=draft.duration_minutes,
                    estimated_calories=draft.estimated_calories,
                    exercises=[
                        Exercise(
                            position=i,
                            name=ex.name,
                            reps=ex.reps,
                            body_part=ex.body_part,
                            description=ex.description,
                            duration_minutes=ex.duration_minutes,
                            estimated_calories=ex.estimated_calories,
                        )
                        for i, ex in enumerate(draft.exercises)
                    ],
                )
            ],
        )

    def _view(self, plan: WorkoutPlan) -> WorkoutPlanView:
        workout = plan.workouts[0]
        return WorkoutPlanView(
            id=plan.id,
            owner_id=plan.user_id,
            plan_date=plan.date.date(),
            is_default=plan.is_default,
            name=workout.name,
            description=workout.description,
            intensity=workout.intensity,
            duration_minutes=workout.duration_minutes,
            estimated_calories=workout.estimated_calories,
            exercises=[
                ExerciseView(
                    name=ex.name,
                    reps=ex.reps,
                    body_part=ex.body_part,
                    description=ex.description,
                    duration_minutes=ex.duration_minutes,
                    estimated_calories=ex.estimated_calories,
                )
                for ex in workout.exercises
            ],
        )

    def count_children(self) -> dict[str, int]:
        return {
            "workout_plans": self.db.scalar(select(func.count(WorkoutPlan.id))),
            "workouts":      self.db.scalar(select(func.count(Workout.id))),
            "exercises":     self.db.scalar(select(func.count(Exercise.id))),
        }


def upsert_plan(session_factory: SessionFactory, repo_cls: type[_PlanRepository], draft):
    """
    Transactional replace of the plan for (draft.owner_id or default, draft.plan_date).
    Returns the stored view. Store errors surface as PersistenceFailure.
    """
    for attempt in range(1, UPSERT_ATTEMPTS + 1):
        try:
            with session_scope(session_factory) as db:
                return repo_cls(db).replace(draft)
        except IntegrityError as e:
            if attempt == UPSERT_ATTEMPTS:
                logger.error("Upsert conflict persisted for %s on %s", draft.owner_id or "default", draft.plan_date)
                raise PersistenceFailure("Concurrent plan write could not be resolved") from e
            logger.warning(
                "Concurrent write on %s %s, retrying upsert",
                draft.owner_id or "default", draft.plan_date,
            )
        except SQLAlchemyError as e:
            logger.error("Plan upsert failed: %s", e)
            raise PersistenceFailure("Failed to store plan") from e


# ═══════════════════════════════════════════════════════════════
# TRACKING REPOSITORIES
# ═══════════════════════════════════════════════════════════════

def _log_entry(row: MealLog) -> MealLogEntry:
    return MealLogEntry(
        log_date=row.date,
        meal_type=row.meal_type,
        calories=row.calories,
        protein=row.protein,
        carbs=row.carbs,
        fat=row.fat,
    )


class MealLogRepository:

    def __init__(self, db: Session):
        self.db = db

    def log_meal(self, user_id: str, entry: MealLogEntry) -> MealLogEntry:
        """One row per user, day and meal type; logging again overwrites."""
        log_date = day_start(entry.log_date.date())
        row = self.db.scalar(
            select(MealLog).where(
                MealLog.user_id == user_id,
                MealLog.date == log_date,
                MealLog.meal_type == entry.meal_type,
            )
        )
        if row is None:
            row = MealLog(user_id=user_id, date=log_date, meal_type=entry.meal_type)
            self.db.add(row)
        row.calories = entry.calories
        row.protein  = entry.protein
        row.carbs    = entry.carbs
        row.fat      = entry.fat
        self.db.flush()
        return _log_entry(row)

    def get_logs(self, user_id: str, day: date) -> list[MealLogEntry]:
        start = day_start(day)
        rows = self.db.scalars(
            select(MealLog)
            .where(MealLog.user_id == user_id, MealLog.date >= start, MealLog.date < start + timedelta(days=1))
            .order_by(MealLog.meal_type)
        )
        return [_log_entry(r) for r in rows]

    def get_logs_range(self, user_id: str, start: date, end: date) -> list[MealLogEntry]:
        """Half-open range: start included, end excluded."""
        rows = self.db.scalars(
            select(MealLog)
            .where(MealLog.user_id == user_id, MealLog.date >= day_start(start), MealLog.date < day_start(end))
            .order_by(MealLog.date, MealLog.meal_type)
        )
        return [_log_entry(r) for r in rows]


class WeightRepository:

    def __init__(self, db: Session):
        self.db = db

    def add_entry(self, user_id: str, weight_kg: float, entry_date: Optional[date] = None) -> WeightEntry:
        row = UserWeightEntry(user_id=user_id, weight_kg=weight_kg, entry_date=entry_date or date.today())
        self.db.add(row)
        self.db.flush()
        return WeightEntry(entry_date=row.entry_date, weight_kg=row.weight_kg)

    def latest_entry(self, user_id: str) -> Optional[WeightEntry]:
        row = self.db.scalar(
            select(UserWeightEntry)
            .where(UserWeightEntry.user_id == user_id)
            .order_by(UserWeightEntry.entry_date.desc(), UserWeightEntry.created_at.desc())
            .limit(1)
        )
        if row is None:
            return None
        return WeightEntry(entry_date=row.entry_date, weight_kg=row.weight_kg)
