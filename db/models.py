"""
db/models.py

SQLAlchemy ORM models for the fitness planning backend.

Tables:
  users                 — core identity
  user_profiles         — physical stats, goal, restrictions, availability
  subscriptions         — one billing status row per user

  meal_plans            — one row per (owner, date); totals precomputed
  planned_meals         — one row per meal slot
  meal_ingredients      — per-meal ingredient rows
  meal_steps            — per-meal instruction rows

  workout_plans         — one row per (owner, date)
  workouts              — session header (name, intensity, totals)
  exercises             — per-session exercise rows

  meal_logs             — meals actually eaten, one per user/date/type
  user_weight_entries   — weight history

Plan rows carry owner_key = user id, or "default" for shared plans, so
one unique constraint covers both kinds of plan.
"""

from __future__ import annotations

import uuid
from datetime import datetime, date

from sqlalchemy import (
    String, Integer, Float, Boolean, Text, DateTime, Date,
    ForeignKey, UniqueConstraint, Index,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


DEFAULT_OWNER_KEY = "default"


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


def owner_key_for(user_id: str | None) -> str:
    return user_id if user_id is not None else DEFAULT_OWNER_KEY


# ═══════════════════════════════════════════════════════════════
# USER DOMAIN
# ═══════════════════════════════════════════════════════════════

class User(Base):
    __tablename__ = "users"

    id:         Mapped[str]      = mapped_column(String(36), primary_key=True, default=_uuid)
    name:       Mapped[str]      = mapped_column(String(100), nullable=False)
    email:      Mapped[str|None] = mapped_column(String(255), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    profile:        Mapped[UserProfile | None]     = relationship("UserProfile",     back_populates="user", uselist=False, cascade="all, delete-orphan")
    subscription:   Mapped[Subscription | None]    = relationship("Subscription",    back_populates="user", uselist=False, cascade="all, delete-orphan")
    meal_plans:     Mapped[list[MealPlan]]         = relationship("MealPlan",        back_populates="user", cascade="all, delete-orphan")
    workout_plans:  Mapped[list[WorkoutPlan]]      = relationship("WorkoutPlan",     back_populates="user", cascade="all, delete-orphan")
    meal_logs:      Mapped[list[MealLog]]          = relationship("MealLog",         back_populates="user", cascade="all, delete-orphan")
    weight_entries: Mapped[list[UserWeightEntry]]  = relationship("UserWeightEntry", back_populates="user", cascade="all, delete-orphan")


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id:                    Mapped[str]         = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id:               Mapped[str]         = mapped_column(String(36), ForeignKey("users.id"), unique=True)
    gender:                Mapped[str|None]    = mapped_column(String(20), nullable=True)
    date_of_birth:         Mapped[date|None]   = mapped_column(Date, nullable=True)
    weight_kg:             Mapped[float|None]  = mapped_column(Float, nullable=True)
    height_cm:             Mapped[float|None]  = mapped_column(Float, nullable=True)
    fitness_level:         Mapped[str|None]    = mapped_column(String(30), nullable=True)
    goal:                  Mapped[str|None]    = mapped_column(String(50), nullable=True)
    dietary_restrictions:  Mapped[str|None]    = mapped_column(Text, nullable=True)   # comma-separated
    health_considerations: Mapped[str|None]    = mapped_column(Text, nullable=True)   # comma-separated
    equipment:             Mapped[str|None]    = mapped_column(Text, nullable=True)   # comma-separated
    days_per_week:         Mapped[int|None]    = mapped_column(Integer, nullable=True)
    minutes_per_day:       Mapped[int|None]    = mapped_column(Integer, nullable=True)
    updated_at:            Mapped[datetime]    = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped[User] = relationship("User", back_populates="profile")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id:                 Mapped[str]           = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id:            Mapped[str]           = mapped_column(String(36), ForeignKey("users.id"), unique=True)
    status:             Mapped[str]           = mapped_column(String(20), default="INACTIVE")   # ACTIVE / INACTIVE / CANCELED
    external_id:        Mapped[str|None]      = mapped_column(String(100), nullable=True)      # billing provider id
    current_period_end: Mapped[datetime|None] = mapped_column(DateTime, nullable=True)
    updated_at:         Mapped[datetime]      = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped[User] = relationship("User", back_populates="subscription")


# ═══════════════════════════════════════════════════════════════
# MEAL PLAN DOMAIN
# ═══════════════════════════════════════════════════════════════

class MealPlan(Base):
    __tablename__ = "meal_plans"

    id:         Mapped[str]      = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_key:  Mapped[str]      = mapped_column(String(36), nullable=False)
    user_id:    Mapped[str|None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    date:       Mapped[datetime] = mapped_column(DateTime, nullable=False)   # UTC midnight
    is_default: Mapped[bool]     = mapped_column(Boolean, default=False)
    calories:   Mapped[float]    = mapped_column(Float, default=0)
    protein:    Mapped[float]    = mapped_column(Float, default=0)
    carbs:      Mapped[float]    = mapped_column(Float, default=0)
    fat:        Mapped[float]    = mapped_column(Float, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user:  Mapped[User | None]       = relationship("User",        back_populates="meal_plans")
    meals: Mapped[list[PlannedMeal]] = relationship("PlannedMeal", back_populates="meal_plan", cascade="all, delete-orphan",
                                                    order_by="PlannedMeal.position")

    __table_args__ = (
        UniqueConstraint("owner_key", "date", name="uq_meal_plans_owner_date"),
        Index("ix_meal_plans_default_date", "is_default", "date"),
    )


class PlannedMeal(Base):
    __tablename__ = "planned_meals"

    id:               Mapped[str]   = mapped_column(String(36), primary_key=True, default=_uuid)
    plan_id:          Mapped[str]   = mapped_column(String(36), ForeignKey("meal_plans.id"))
    position:         Mapped[int]   = mapped_column(Integer, default=0)
    meal_type:        Mapped[str]   = mapped_column(String(15))     # breakfast/lunch/dinner/snack
    title:            Mapped[str]   = mapped_column(String(200))
    calories:         Mapped[float] = mapped_column(Float)
    protein:          Mapped[float] = mapped_column(Float)
    carbs:            Mapped[float] = mapped_column(Float)
    fat:              Mapped[float] = mapped_column(Float)
    duration_minutes: Mapped[int]   = mapped_column(Integer)

    meal_plan:   Mapped[MealPlan]             = relationship("MealPlan",       back_populates="meals")
    ingredients: Mapped[list[MealIngredient]] = relationship("MealIngredient", back_populates="meal", cascade="all, delete-orphan",
                                                             order_by="MealIngredient.position")
    steps:       Mapped[list[MealStep]]       = relationship("MealStep",       back_populates="meal", cascade="all, delete-orphan",
                                                             order_by="MealStep.position")


class MealIngredient(Base):
    __tablename__ = "meal_ingredients"

    id:       Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    meal_id:  Mapped[str] = mapped_column(String(36), ForeignKey("planned_meals.id"))
    position: Mapped[int] = mapped_column(Integer, default=0)
    name:     Mapped[str] = mapped_column(String(200))

    meal: Mapped[PlannedMeal] = relationship("PlannedMeal", back_populates="ingredients")


class MealStep(Base):
    __tablename__ = "meal_steps"

    id:       Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    meal_id:  Mapped[str] = mapped_column(String(36), ForeignKey("planned_meals.id"))
    position: Mapped[int] = mapped_column(Integer, default=0)
    text:     Mapped[str] = mapped_column(Text)

    meal: Mapped[PlannedMeal] = relationship("PlannedMeal", back_populates="steps")


# ═══════════════════════════════════════════════════════════════
# WORKOUT PLAN DOMAIN
# ═══════════════════════════════════════════════════════════════

class WorkoutPlan(Base):
    __tablename__ = "workout_plans"

    id:         Mapped[str]      = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_key:  Mapped[str]      = mapped_column(String(36), nullable=False)
    user_id:    Mapped[str|None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    date:       Mapped[datetime] = mapped_column(DateTime, nullable=False)   # UTC midnight
    is_default: Mapped[bool]     = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user:     Mapped[User | None]   = relationship("User",    back_populates="workout_plans")
    workouts: Mapped[list[Workout]] = relationship("Workout", back_populates="workout_plan", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("owner_key", "date", name="uq_workout_plans_owner_date"),
        Index("ix_workout_plans_default_date", "is_default", "date"),
    )


class Workout(Base):
    __tablename__ = "workouts"

    id:                 Mapped[str]   = mapped_column(String(36), primary_key=True, default=_uuid)
    plan_id:            Mapped[str]   = mapped_column(String(36), ForeignKey("workout_plans.id"))
    name:               Mapped[str]   = mapped_column(String(200))
    description:        Mapped[str]   = mapped_column(Text)
    intensity:          Mapped[str]   = mapped_column(String(30))
    duration_minutes:   Mapped[int]   = mapped_column(Integer)
    estimated_calories: Mapped[float] = mapped_column(Float)

    workout_plan: Mapped[WorkoutPlan]    = relationship("WorkoutPlan", back_populates="workouts")
    exercises:    Mapped[list[Exercise]] = relationship("Exercise",    back_populates="workout", cascade="all, delete-orphan",
                                                        order_by="Exercise.position")


class Exercise(Base):
    __tablename__ = "exercises"

    id:                 Mapped[str]         = mapped_column(String(36), primary_key=True, default=_uuid)
    workout_id:         Mapped[str]         = mapped_column(String(36), ForeignKey("workouts.id"))
    position:           Mapped[int]         = mapped_column(Integer, default=0)
    name:               Mapped[str]         = mapped_column(String(200))
    reps:               Mapped[str]         = mapped_column(String(50))
    body_part:          Mapped[str|None]    = mapped_column(String(50), nullable=True)
    description:        Mapped[str|None]    = mapped_column(Text, nullable=True)
    duration_minutes:   Mapped[int|None]    = mapped_column(Integer, nullable=True)
    estimated_calories: Mapped[float|None]  = mapped_column(Float, nullable=True)

    workout: Mapped[Workout] = relationship("Workout", back_populates="exercises")


# ═══════════════════════════════════════════════════════════════
# TRACKING
# ═══════════════════════════════════════════════════════════════

class MealLog(Base):
    """Meals actually eaten. One row per user, day and meal type."""
    __tablename__ = "meal_logs"

    id:        Mapped[str]      = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id:   Mapped[str]      = mapped_column(String(36), ForeignKey("users.id"))
    date:      Mapped[datetime] = mapped_column(DateTime)    # UTC midnight
    meal_type: Mapped[str]      = mapped_column(String(15))
    calories:  Mapped[float]    = mapped_column(Float)
    protein:   Mapped[float]    = mapped_column(Float)
    carbs:     Mapped[float]    = mapped_column(Float)
    fat:       Mapped[float]    = mapped_column(Float)
    logged_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped[User] = relationship("User", back_populates="meal_logs")

    __table_args__ = (
        UniqueConstraint("user_id", "date", "meal_type", name="uq_meal_logs_user_date_type"),
    )


class UserWeightEntry(Base):
    __tablename__ = "user_weight_entries"

    id:         Mapped[str]      = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id:    Mapped[str]      = mapped_column(String(36), ForeignKey("users.id"))
    entry_date: Mapped[date]     = mapped_column(Date)
    weight_kg:  Mapped[float]    = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user: Mapped[User] = relationship("User", back_populates="weight_entries")

    __table_args__ = (
        Index("ix_weight_entries_user_date", "user_id", "entry_date"),
    )
